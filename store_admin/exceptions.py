"""
Store Admin exceptions.

Raised by the data layer and mapped to HTTP responses by the handlers
registered in ``store_admin.main``.
"""

from typing import Dict, Optional


class StoreAdminError(Exception):
    """Base class for all store admin errors."""

    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFoundError(StoreAdminError):
    """A requested row does not exist."""

    status_code = 404

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} not found", {"id": identifier})
        self.resource = resource
        self.identifier = identifier


class ProductValidationError(StoreAdminError):
    """
    Product form submission rejected.

    ``details`` maps each offending field to its message.
    """

    status_code = 422

    def __init__(self, errors: Dict[str, str]):
        super().__init__("Product form is invalid", errors)
