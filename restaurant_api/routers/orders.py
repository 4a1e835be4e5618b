"""
Order Routes

Route prefix: /api/orders

Every route needs a session token. The order owner always comes from the
verified claims, never from the request body. Customers see their own
orders; admins see everyone's.
"""

import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_api.core.exceptions import AuthorizationError
from restaurant_api.database import get_db
from restaurant_api.schemas import ErrorResponse, OrderCreate, OrderResponse
from restaurant_api.services.auth import SessionClaims, authenticate
from restaurant_api.services.orders import Customization, LineItem, OrderReader, OrderWriter

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/orders",
    tags=["Orders"],
    responses={401: {"model": ErrorResponse}},
)


def get_order_writer(request: Request) -> OrderWriter:
    return request.app.state.order_writer


def _ensure_can_view(claims: SessionClaims, owner_id: int) -> None:
    if claims.user_id != owner_id and not claims.is_admin:
        logger.info(f"User #{claims.user_id} denied access to orders of user #{owner_id}")
        raise AuthorizationError("orders belong to another user")


@router.post(
    "",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Place an order",
)
async def create_order(
    data: OrderCreate,
    claims: SessionClaims = Depends(authenticate),
    writer: OrderWriter = Depends(get_order_writer),
) -> OrderResponse:
    """
    Place a pending order for the caller.

    The header and every line item are written in one transaction; on any
    failure nothing is stored.
    """
    items = [
        LineItem(
            product_id=item.product_id,
            quantity=item.quantity,
            portion_size=item.portion_size,
            customizations=[
                Customization(id=c.id, name=c.name, price=c.price)
                for c in item.customizations
            ],
        )
        for item in data.items
    ]
    order = await writer.place(claims, items, data.total_price)
    return OrderResponse.model_validate(order)


@router.get(
    "/user/{user_id}",
    response_model=list[OrderResponse],
    responses={403: {"model": ErrorResponse}},
)
async def list_user_orders(
    user_id: int,
    claims: SessionClaims = Depends(authenticate),
    db: AsyncSession = Depends(get_db),
) -> list[OrderResponse]:
    """Orders of one user, newest first."""
    _ensure_can_view(claims, user_id)
    orders = await OrderReader(db).list_for_user(user_id)
    return [OrderResponse.model_validate(o) for o in orders]


@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_order(
    order_id: int,
    claims: SessionClaims = Depends(authenticate),
    db: AsyncSession = Depends(get_db),
) -> OrderResponse:
    order = await OrderReader(db).get_or_404(order_id)
    _ensure_can_view(claims, order.user_id)
    return OrderResponse.model_validate(order)
