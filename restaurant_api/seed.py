"""
Catalog Seed Command

Loads products (with their reviews) from a JSON file into the configured
database. The file holds a list of products in the API's camelCase shape.

Run from project root:
    python -m restaurant_api.seed --file products.json
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from restaurant_api.core.config import get_settings, setup_logging
from restaurant_api.database import build_engine, build_session_maker, init_db
from restaurant_api.schemas import ProductSeed
from restaurant_api.services.seeding import (
    INITIAL_MIGRATION_ID,
    INITIAL_MIGRATION_NAME,
    seed_products,
)

logger = logging.getLogger(__name__)

_products_adapter = TypeAdapter(list[ProductSeed])


def load_products(path: Path) -> list[ProductSeed]:
    with path.open(encoding="utf-8") as fh:
        return _products_adapter.validate_python(json.load(fh))


async def run_seed(path: Path, migration_id: int, name: str) -> bool:
    settings = get_settings()
    products = load_products(path)

    engine = build_engine(settings)
    try:
        await init_db(engine)
        return await seed_products(
            build_session_maker(engine),
            products,
            migration_id=migration_id,
            name=name,
            default_low_stock_threshold=settings.default_low_stock_threshold,
        )
    finally:
        await engine.dispose()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Seed the product catalog")
    parser.add_argument("--file", required=True, type=Path, help="JSON file with a list of products")
    parser.add_argument("--migration-id", type=int, default=INITIAL_MIGRATION_ID, help="Migration id to record")
    parser.add_argument("--name", default=INITIAL_MIGRATION_NAME, help="Migration name to record")
    args = parser.parse_args(argv)

    setup_logging()

    try:
        ran = asyncio.run(run_seed(args.file, args.migration_id, args.name))
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        logger.error(f"Cannot load {args.file}: {e}")
        return 1

    print("✅ Seed applied" if ran else "ℹ️ Seed already applied, nothing to do")
    return 0


if __name__ == "__main__":
    sys.exit(main())
