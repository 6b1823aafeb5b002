"""
Data layer: SQLAlchemy models for the warranty tracker
"""
