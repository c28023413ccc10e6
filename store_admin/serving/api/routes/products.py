"""
Products API Endpoints

Catalog listing and the product editor's create/update/delete.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Response
from pydantic import BaseModel, ConfigDict
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from store_admin.analytics.schemas import Money
from store_admin.database.connection import get_db_dependency
from store_admin.database.models import Product
from store_admin.exceptions import NotFoundError, ProductValidationError
from store_admin.serving.cache import (
    analytics_cache,
    dashboard_cache,
    invalidate,
    products_cache,
)
from store_admin.validation import ProductPayload, validate_product_form

router = APIRouter()
logger = structlog.get_logger(__name__)


class ProductOut(BaseModel):
    """Product response"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str]
    price: Money
    category: Optional[str]
    brand: Optional[str]
    image_url: Optional[str]
    stock_quantity: int
    is_active: bool
    created_at: Optional[datetime]
    updated_at: Optional[datetime]


async def _get_product(db: AsyncSession, product_id: str) -> Product:
    product = await db.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product", product_id)
    return product


def _validated(data: Dict[str, Any]) -> ProductPayload:
    result = validate_product_form(data)
    if not result.is_valid:
        raise ProductValidationError(result.errors)
    return result.payload


async def _commit_and_invalidate(db: AsyncSession) -> None:
    # Readers must not re-cache pre-write rows
    await db.commit()
    await invalidate(products_cache, analytics_cache, dashboard_cache)


@router.get("", response_model=List[ProductOut])
async def list_products(
    search: Optional[str] = None,
    category: Optional[str] = None,
    db: AsyncSession = Depends(get_db_dependency),
) -> List[ProductOut]:
    """
    List products, newest first.

    ``search`` matches name, description or brand; ``category`` must match exactly.
    """
    query = select(Product)
    if search:
        pattern = f"%{search}%"
        query = query.where(
            or_(
                Product.name.ilike(pattern),
                Product.description.ilike(pattern),
                Product.brand.ilike(pattern),
            )
        )
    if category:
        query = query.where(Product.category == category)

    result = await db.execute(query.order_by(Product.created_at.desc(), Product.name))
    return [ProductOut.model_validate(p) for p in result.scalars().all()]


@router.get("/categories", response_model=List[str])
async def list_categories(
    db: AsyncSession = Depends(get_db_dependency),
) -> List[str]:
    """Distinct non-empty categories in use."""

    async def load() -> List[str]:
        result = await db.execute(
            select(Product.category)
            .where(Product.category.is_not(None), Product.category != "")
            .distinct()
            .order_by(Product.category)
        )
        return list(result.scalars().all())

    return await products_cache.get_or_set("categories", load)


@router.get("/{product_id}", response_model=ProductOut)
async def get_product(
    product_id: str,
    db: AsyncSession = Depends(get_db_dependency),
) -> ProductOut:
    return ProductOut.model_validate(await _get_product(db, product_id))


@router.post("", response_model=ProductOut, status_code=201)
async def create_product(
    data: Dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db_dependency),
) -> ProductOut:
    """Create a product from a product editor submission."""
    payload = _validated(data)

    product = Product(**payload.model_dump())
    db.add(product)
    await db.flush()
    await db.refresh(product)

    await _commit_and_invalidate(db)
    logger.info("Product created", product_id=product.id, name=product.name)
    return ProductOut.model_validate(product)


@router.put("/{product_id}", response_model=ProductOut)
async def update_product(
    product_id: str,
    data: Dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db_dependency),
) -> ProductOut:
    """Replace a product's editable fields from a product editor submission."""
    product = await _get_product(db, product_id)
    payload = _validated(data)

    for field_name, value in payload.model_dump().items():
        setattr(product, field_name, value)
    await db.flush()
    await db.refresh(product)

    await _commit_and_invalidate(db)
    logger.info("Product updated", product_id=product_id)
    return ProductOut.model_validate(product)


@router.delete("/{product_id}", status_code=204)
async def delete_product(
    product_id: str,
    db: AsyncSession = Depends(get_db_dependency),
) -> Response:
    product = await _get_product(db, product_id)
    await db.delete(product)
    await db.flush()

    await _commit_and_invalidate(db)
    logger.info("Product deleted", product_id=product_id)
    return Response(status_code=204)
