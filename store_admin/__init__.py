"""
E-Commerce Store Admin API

Backend for the store admin dashboard: catalog, orders, customers and
analytics over the managed store database.
"""

__version__ = "1.0.0"
