"""
Order Service

Order Writer: persists an order header and all of its line items as one
atomic unit. Each placement opens its own session and a single
``session.begin()`` scope spanning product lookup, header insert and every
item insert. Any database failure rolls the whole scope back, so readers
see either the complete order or nothing.

Policies:
    - empty item lists are rejected (EmptyOrderError)
    - every productId must exist in the catalog (UnknownProductError)
    - the owner is always the authenticated caller, never the request body
    - the client total is stored as sent unless enforce_catalog_pricing is
      on, in which case the catalog total is stored and a different client
      total is rejected (PriceMismatchError)
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from restaurant_api.core.exceptions import (
    EmptyOrderError,
    NotFoundError,
    OrderPersistenceError,
    PriceMismatchError,
    UnknownProductError,
)
from restaurant_api.models import Order, OrderItem, OrderStatus, Product
from restaurant_api.services.auth import SessionClaims

logger = logging.getLogger(__name__)

PRICE_TOLERANCE = 0.01


@dataclass
class Customization:
    id: str
    name: str
    price: float = 0.0


@dataclass
class LineItem:
    """Order line as requested by the client."""
    product_id: int
    quantity: int
    portion_size: str = "Medium"
    customizations: list[Customization] = field(default_factory=list)

    @property
    def customizations_cost(self) -> float:
        return sum(c.price for c in self.customizations)


def catalog_total(items: Sequence[LineItem], prices: dict[int, float]) -> float:
    """(product price + customizations) * quantity, summed over all lines."""
    total = sum(
        (prices[item.product_id] + item.customizations_cost) * item.quantity
        for item in items
    )
    return round(total, 2)


class OrderWriter:
    """
    All-or-nothing persistence of orders.

    Attributes:
        enforce_catalog_pricing: Store catalog totals instead of client totals
    """

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        enforce_catalog_pricing: bool = False,
    ):
        self._session_maker = session_maker
        self.enforce_catalog_pricing = enforce_catalog_pricing

    async def place(
        self,
        claims: SessionClaims,
        items: Sequence[LineItem],
        total_price: float,
    ) -> Order:
        """
        Write a pending order owned by ``claims.user_id``.

        Raises:
            EmptyOrderError / UnknownProductError / PriceMismatchError: Nothing written
            OrderPersistenceError: A write failed; everything was rolled back
        """
        if not items:
            raise EmptyOrderError()

        try:
            async with self._session_maker() as session:
                async with session.begin():
                    prices = await self._load_prices(session, items)
                    stored_total = self._resolve_total(items, prices, total_price)

                    order = Order(
                        user_id=claims.user_id,
                        total_price=stored_total,
                        status=OrderStatus.PENDING,
                        items=[],
                    )
                    session.add(order)
                    await session.flush()

                    for item in items:
                        await self._insert_item(session, order, item)
        except SQLAlchemyError as exc:
            logger.exception(f"Order for user #{claims.user_id} rolled back")
            raise OrderPersistenceError(str(exc)) from exc

        logger.info(
            f"Order #{order.id} created for user #{claims.user_id} "
            f"({len(items)} items, ${order.total_price:.2f})"
        )
        return order

    async def _load_prices(
        self,
        session: AsyncSession,
        items: Sequence[LineItem],
    ) -> dict[int, float]:
        wanted = {item.product_id for item in items}
        result = await session.execute(
            select(Product.id, Product.price).where(Product.id.in_(wanted))
        )
        prices = {row.id: row.price for row in result}

        missing = wanted - prices.keys()
        if missing:
            raise UnknownProductError(list(missing))
        return prices

    def _resolve_total(
        self,
        items: Sequence[LineItem],
        prices: dict[int, float],
        supplied: float,
    ) -> float:
        expected = catalog_total(items, prices)
        if self.enforce_catalog_pricing:
            if abs(expected - supplied) > PRICE_TOLERANCE:
                raise PriceMismatchError(supplied, expected)
            return expected

        if abs(expected - supplied) <= PRICE_TOLERANCE:
            return supplied

        # TODO: make enforce_catalog_pricing the default once clients send catalog totals
        logger.warning(
            f"Client total ${supplied:.2f} differs from catalog total ${expected:.2f}; "
            "storing client total"
        )
        return supplied

    async def _insert_item(self, session: AsyncSession, order: Order, item: LineItem) -> None:
        order.items.append(
            OrderItem(
                product_id=item.product_id,
                quantity=item.quantity,
                portion_size=item.portion_size,
                customizations=[
                    {"id": c.id, "name": c.name, "price": c.price}
                    for c in item.customizations
                ],
            )
        )
        await session.flush()


class OrderReader:
    """Read side for orders; items are eager-loaded with each order."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_for_user(self, user_id: int) -> list[Order]:
        result = await self.session.execute(
            select(Order)
            .where(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
        )
        return list(result.scalars().all())

    async def get(self, order_id: int) -> Optional[Order]:
        return await self.session.get(Order, order_id)

    async def get_or_404(self, order_id: int) -> Order:
        order = await self.get(order_id)
        if order is None:
            raise NotFoundError(f"Order #{order_id} not found")
        return order
