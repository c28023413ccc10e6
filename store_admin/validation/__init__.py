"""
Input Validation Module
"""
from .product_form import ProductFormResult, ProductPayload, validate_product_form

__all__ = [
    "ProductFormResult",
    "ProductPayload",
    "validate_product_form",
]
