"""
Catalog package: record models and the MongoDB connection for the library API.

This package contains:
- Author and book record schemas
- MongoDB connection lifecycle management
"""

__version__ = "1.0.0"
