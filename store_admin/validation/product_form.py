"""
Product Form Validation

Checks a product editor submission and coerces its numeric strings
before anything is persisted. Validation never raises: the outcome
carries either the cleaned payload or a message per offending field.
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Mapping, Optional

import structlog
from pydantic import BaseModel, Field, HttpUrl, TypeAdapter, ValidationError, field_validator

logger = structlog.get_logger(__name__)

_url_adapter = TypeAdapter(HttpUrl)

# Column limits: price is NUMERIC(12, 2), stock_quantity a 32-bit INTEGER
MAX_PRICE = Decimal("9999999999.99")
MAX_STOCK_QUANTITY = 2_147_483_647


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    return str(value)


class ProductForm(BaseModel):
    """Raw product editor fields, as typed by the user"""
    name: str = Field(default="", validate_default=True)
    price: str = Field(default="", validate_default=True)
    stock_quantity: str = Field(default="", validate_default=True)
    category: Optional[str] = None
    brand: Optional[str] = None
    image_url: Optional[str] = None
    description: Optional[str] = None
    is_active: bool = True

    @field_validator("name", "price", "stock_quantity", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return _as_text(v)

    @field_validator("is_active", mode="before")
    @classmethod
    def _active(cls, v: Any) -> Any:
        return True if v is None else v

    @field_validator("name")
    @classmethod
    def _name_required(cls, v: str) -> str:
        if not v:
            raise ValueError("Product name is required")
        return v

    @field_validator("price")
    @classmethod
    def _price_number(cls, v: str) -> str:
        if not v:
            raise ValueError("Price is required")
        try:
            amount = Decimal(v)
        except InvalidOperation:
            raise ValueError("Price must be a number")
        if not amount.is_finite() or amount < 0:
            raise ValueError("Price must be a non-negative number")
        if amount > MAX_PRICE:
            raise ValueError("Price must be at most 9,999,999,999.99")
        return v

    @field_validator("stock_quantity")
    @classmethod
    def _stock_number(cls, v: str) -> str:
        if not v:
            raise ValueError("Stock quantity is required")
        try:
            amount = Decimal(v)
        except InvalidOperation:
            raise ValueError("Stock quantity must be a whole number")
        if not amount.is_finite() or amount != amount.to_integral_value() or amount < 0:
            raise ValueError("Stock quantity must be a whole number")
        if amount > MAX_STOCK_QUANTITY:
            raise ValueError("Stock quantity is too large")
        return v

    @field_validator("image_url")
    @classmethod
    def _image_url(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return v
        try:
            _url_adapter.validate_python(v)
        except ValidationError:
            raise ValueError("Image URL must be a valid URL")
        return v


class ProductPayload(BaseModel):
    """Validated values handed to the database"""
    name: str
    price: Decimal
    stock_quantity: int
    category: Optional[str] = None
    brand: Optional[str] = None
    image_url: Optional[str] = None
    description: Optional[str] = None
    is_active: bool = True


@dataclass
class ProductFormResult:
    """Outcome of validating one submission"""
    payload: Optional[ProductPayload] = None
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return self.payload is not None and not self.errors


def _error_message(error: Dict[str, Any]) -> str:
    ctx_error = error.get("ctx", {}).get("error")
    if error.get("type") == "value_error" and ctx_error is not None:
        return str(ctx_error)
    return error.get("msg", "Invalid value")


def validate_product_form(data: Mapping[str, Any]) -> ProductFormResult:
    """
    Validate a product submission.

    Args:
        data: Field values keyed by form field name

    Returns:
        ProductFormResult with the parsed payload, or per-field errors
    """
    try:
        form = ProductForm.model_validate(dict(data))
    except ValidationError as e:
        errors: Dict[str, str] = {}
        for error in e.errors():
            field_name = str(error["loc"][0]) if error.get("loc") else "__all__"
            errors.setdefault(field_name, _error_message(error))
        logger.info("Product form rejected", fields=sorted(errors))
        return ProductFormResult(errors=errors)

    payload = ProductPayload(
        name=form.name,
        price=Decimal(form.price),
        stock_quantity=int(Decimal(form.stock_quantity)),
        category=form.category or None,
        brand=form.brand or None,
        image_url=form.image_url,
        description=form.description,
        is_active=form.is_active,
    )
    return ProductFormResult(payload=payload)
