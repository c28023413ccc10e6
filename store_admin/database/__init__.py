"""
Database Module
"""
from .connection import init_database, close_database, get_db, get_db_dependency
from .models import Base, Order, OrderItem, OrderStatus, Product, UserProfile

__all__ = [
    "init_database",
    "close_database",
    "get_db",
    "get_db_dependency",
    "Base",
    "Order",
    "OrderItem",
    "OrderStatus",
    "Product",
    "UserProfile",
]
