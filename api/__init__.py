"""
FastAPI RESTful API for the Library Catalog.

This module provides a small REST API for:
- Listing and creating authors
- Listing, reading, creating, updating and deleting books
- Populating a book's author reference on single-book reads
"""
