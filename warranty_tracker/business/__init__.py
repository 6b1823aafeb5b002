"""
Business layer: domain rules for equipment, customers and maintenance orders.
"""
