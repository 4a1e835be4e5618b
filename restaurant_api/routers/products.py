"""
Product Routes

Route prefix: /api/products

Reads are public; create, update, delete and supply need an admin session.
"""

import logging

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_api.core.exceptions import InvalidRequestError
from restaurant_api.database import get_db
from restaurant_api.models import ProductCategory
from restaurant_api.schemas import (
    ErrorResponse,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
    SupplyRequest,
)
from restaurant_api.services.auth import SessionClaims, require_admin
from restaurant_api.services.catalog import CatalogService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/products", tags=["Products"])

ADMIN_RESPONSES = {
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


def get_catalog(request: Request, db: AsyncSession = Depends(get_db)) -> CatalogService:
    return CatalogService(db, request.app.state.settings.default_low_stock_threshold)


# =============================================================================
# PUBLIC
# =============================================================================

@router.get("", response_model=list[ProductResponse])
async def list_products(catalog: CatalogService = Depends(get_catalog)) -> list[ProductResponse]:
    products = await catalog.list_products()
    return [ProductResponse.model_validate(p) for p in products]


@router.get(
    "/category/{category}",
    response_model=list[ProductResponse],
    responses={400: {"model": ErrorResponse}},
)
async def list_products_by_category(
    category: str,
    catalog: CatalogService = Depends(get_catalog),
) -> list[ProductResponse]:
    try:
        wanted = ProductCategory(category.lower())
    except ValueError:
        valid = [c.value for c in ProductCategory]
        raise InvalidRequestError(f"Invalid category. Options: {valid}")

    products = await catalog.list_products(wanted)
    return [ProductResponse.model_validate(p) for p in products]


@router.get("/{product_id}", response_model=ProductResponse, responses={404: {"model": ErrorResponse}})
async def get_product(
    product_id: int,
    catalog: CatalogService = Depends(get_catalog),
) -> ProductResponse:
    return ProductResponse.model_validate(await catalog.get_product(product_id))


# =============================================================================
# ADMIN
# =============================================================================

@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ADMIN_RESPONSES,
)
async def create_product(
    data: ProductCreate,
    claims: SessionClaims = Depends(require_admin),
    catalog: CatalogService = Depends(get_catalog),
) -> ProductResponse:
    product = await catalog.create_product(data)
    logger.info(f"Admin #{claims.user_id} created product #{product.id}")
    return ProductResponse.model_validate(product)


@router.put("/{product_id}", response_model=ProductResponse, responses=ADMIN_RESPONSES)
async def update_product(
    product_id: int,
    data: ProductUpdate,
    claims: SessionClaims = Depends(require_admin),
    catalog: CatalogService = Depends(get_catalog),
) -> ProductResponse:
    """Replace a product's details; stock levels change only when sent."""
    return ProductResponse.model_validate(await catalog.update_product(product_id, data))


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**ADMIN_RESPONSES, 409: {"model": ErrorResponse}},
)
async def delete_product(
    product_id: int,
    claims: SessionClaims = Depends(require_admin),
    catalog: CatalogService = Depends(get_catalog),
) -> Response:
    await catalog.delete_product(product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{product_id}/supply", response_model=ProductResponse, responses=ADMIN_RESPONSES)
async def supply_product(
    product_id: int,
    data: SupplyRequest,
    claims: SessionClaims = Depends(require_admin),
    catalog: CatalogService = Depends(get_catalog),
) -> ProductResponse:
    """Add stock to a product."""
    return ProductResponse.model_validate(await catalog.supply(product_id, data.quantity))
