"""
Catalog Seeding

One-shot data migrations tracked in the ``migrations`` table. A seed upserts
products (by id when one is given) and adds their reviews, then records its
migration row, all in one transaction. Running the same migration again is a
logged no-op.
"""

import logging
from typing import Sequence

from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from restaurant_api.models import Migration, Product, Review
from restaurant_api.schemas import ProductSeed

logger = logging.getLogger(__name__)

INITIAL_MIGRATION_ID = 1
INITIAL_MIGRATION_NAME = "initial_seed_v1"


def _review_key(user_name, comment, date) -> tuple:
    return (user_name, comment or None, date or None)


async def _upsert_product(session: AsyncSession, seed: ProductSeed, default_threshold: int) -> Product:
    fields = seed.model_dump(exclude={"id", "reviews", "low_stock_threshold"})
    threshold = seed.low_stock_threshold

    product = await session.get(Product, seed.id) if seed.id is not None else None
    if product is None:
        product = Product(
            id=seed.id,
            **fields,
            low_stock_threshold=default_threshold if threshold is None else threshold,
            reviews=[],
        )
        session.add(product)
    else:
        for key, value in fields.items():
            setattr(product, key, value)
        if threshold is not None:
            product.low_stock_threshold = threshold

    known = {_review_key(r.user_name, r.comment, r.date) for r in product.reviews}
    for review in seed.reviews:
        key = _review_key(review.user_name, review.comment, review.date)
        if key in known:
            continue
        product.reviews.append(Review(**review.model_dump(exclude={"id"})))
        known.add(key)

    return product


async def _sync_product_sequence(session: AsyncSession) -> None:
    """Move the PostgreSQL id sequence past explicitly seeded ids."""
    if session.get_bind().dialect.name != "postgresql":
        return
    await session.execute(
        text(
            "SELECT setval(pg_get_serial_sequence('products', 'id'), "
            "COALESCE((SELECT MAX(id) FROM products), 1))"
        )
    )


async def seed_products(
    session_maker: async_sessionmaker[AsyncSession],
    products: Sequence[ProductSeed],
    migration_id: int = INITIAL_MIGRATION_ID,
    name: str = INITIAL_MIGRATION_NAME,
    default_low_stock_threshold: int = 5,
) -> bool:
    """
    Run a catalog seed once.

    Returns:
        True if the seed ran, False if the migration was already recorded
    """
    async with session_maker() as session:
        async with session.begin():
            done = await session.scalar(
                select(Migration.id).where(
                    (Migration.id == migration_id) | (Migration.name == name)
                )
            )
            if done is not None:
                logger.info(f"Migration already performed: #{migration_id} {name}")
                return False

            logger.info(f"Executing migration #{migration_id} {name} ({len(products)} products)")
            for seed in products:
                await _upsert_product(session, seed, default_low_stock_threshold)
            await session.flush()
            await _sync_product_sequence(session)

            session.add(Migration(id=migration_id, name=name))

    logger.info(f"Migration #{migration_id} {name} successful")
    return True
