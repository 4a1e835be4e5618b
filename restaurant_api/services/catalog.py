"""
Catalog Service

Products, their reviews, stock levels and customer feedback. Plain CRUD over
the request's session; each write commits before returning.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_api.core.exceptions import InvalidRequestError, NotFoundError, ProductInUseError
from restaurant_api.models import Feedback, OrderItem, Product, ProductCategory, Review
from restaurant_api.schemas import FeedbackCreate, ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)


class CatalogService:
    """
    Product catalog operations.

    Attributes:
        default_low_stock_threshold: Used when a product is created without one
    """

    def __init__(self, session: AsyncSession, default_low_stock_threshold: int = 5):
        self.session = session
        self.default_low_stock_threshold = default_low_stock_threshold

    async def list_products(self, category: Optional[ProductCategory] = None) -> list[Product]:
        query = select(Product).order_by(Product.id)
        if category is not None:
            query = query.where(Product.category == category)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_product(self, product_id: int) -> Product:
        product = await self.session.get(Product, product_id)
        if product is None:
            raise NotFoundError("Product not found")
        return product

    async def create_product(self, data: ProductCreate) -> Product:
        fields = data.model_dump(exclude={"reviews", "low_stock_threshold"})
        threshold = data.low_stock_threshold
        product = Product(
            **fields,
            low_stock_threshold=(
                self.default_low_stock_threshold if threshold is None else threshold
            ),
            reviews=[
                Review(**review.model_dump(exclude={"id"})) for review in data.reviews
            ],
        )
        self.session.add(product)
        await self.session.commit()
        logger.info(f"Product #{product.id} created: {product.name}")
        return product

    async def update_product(self, product_id: int, data: ProductUpdate) -> Product:
        product = await self.get_product(product_id)
        # PUT replaces the descriptive fields; stock levels only when sent
        for key, value in data.model_dump(exclude={"stock_quantity", "low_stock_threshold"}).items():
            setattr(product, key, value)
        if data.stock_quantity is not None:
            product.stock_quantity = data.stock_quantity
        if data.low_stock_threshold is not None:
            product.low_stock_threshold = data.low_stock_threshold
        await self.session.commit()
        logger.info(f"Product #{product.id} updated")
        return product

    async def delete_product(self, product_id: int) -> None:
        """
        Delete a product together with its reviews.

        Raises:
            ProductInUseError: Order lines still reference the product
        """
        product = await self.get_product(product_id)
        referenced = await self.session.scalar(
            select(OrderItem.id).where(OrderItem.product_id == product_id).limit(1)
        )
        if referenced is not None:
            raise ProductInUseError(f"Product #{product_id} has order lines")

        await self.session.delete(product)
        try:
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            raise ProductInUseError(f"Product #{product_id} has order lines") from exc
        logger.info(f"Product #{product_id} deleted")

    async def supply(self, product_id: int, quantity: int) -> Product:
        """Add ``quantity`` units to a product's stock."""
        product = await self.get_product(product_id)
        product.stock_quantity += quantity
        await self.session.commit()
        logger.info(
            f"Product #{product_id} restocked by {quantity} "
            f"(now {product.stock_quantity})"
        )
        return product


class FeedbackService:
    """Customer feedback submission and listing."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def submit(self, data: FeedbackCreate) -> Feedback:
        if await self.session.get(Product, data.product_id) is None:
            raise InvalidRequestError(f"Unknown product id: {data.product_id}")

        feedback = Feedback(**data.model_dump())
        self.session.add(feedback)
        await self.session.commit()
        logger.info(f"Feedback #{feedback.id} received for product #{feedback.product_id}")
        return feedback

    async def list_all(self) -> list[Feedback]:
        result = await self.session.execute(
            select(Feedback).order_by(Feedback.date.desc(), Feedback.id.desc())
        )
        return list(result.scalars().all())
