"""
Equipment inventory domain: warranty status, SKU allocation, the quantity
ledger and the registration workflow.
"""
