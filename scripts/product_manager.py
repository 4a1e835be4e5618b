"""
Product Manager Script

Manages the catalog through the HTTP API.

    add      create one product (admin)
    delete   delete a product by id (admin)
    list     print products, optionally for one category
    import   create every product from a JSON file (admin)
    export   write products to a JSON file

Admin commands send ``Authorization: Bearer <token>`` taken from --token or
the RESTAURANT_API_TOKEN environment variable.

Run from project root: python scripts/product_manager.py list --category eastern
"""

import argparse
import json
import os
import sys
from typing import Any, Optional

import httpx

API_BASE_URL = os.getenv("RESTAURANT_API_URL", "http://localhost:8080")
CATEGORIES = ["eastern", "western"]


def _client(base_url: str, token: Optional[str] = None) -> httpx.Client:
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    return httpx.Client(base_url=f"{base_url}/api", headers=headers, timeout=30.0)


def _require_token(token: Optional[str]) -> str:
    if not token:
        print("❌ This command needs an admin token (--token or RESTAURANT_API_TOKEN)")
        sys.exit(1)
    return token


def fetch_products(client: httpx.Client, category: Optional[str]) -> list[dict[str, Any]]:
    path = f"/products/category/{category}" if category else "/products"
    response = client.get(path)
    response.raise_for_status()
    return response.json()


# =============================================================================
# COMMANDS
# =============================================================================

def cmd_add(args) -> int:
    payload = {
        "name": args.name,
        "price": args.price,
        "description": args.desc,
        "category": args.category,
        "image": args.image,
        "detailedDescription": args.detailed,
        "stockQuantity": args.stock,
    }
    with _client(args.url, _require_token(args.token)) as client:
        response = client.post("/products", json=payload)

    if response.status_code != 201:
        print(f"❌ Error ({response.status_code}): {response.text}")
        return 1

    created = response.json()
    print(f"✅ Created product: ID={created['id']}, Name={created['name']}")
    return 0


def cmd_delete(args) -> int:
    with _client(args.url, _require_token(args.token)) as client:
        response = client.delete(f"/products/{args.id}")

    if response.status_code != 204:
        print(f"❌ Error ({response.status_code}): {response.text}")
        return 1

    print(f"✅ Deleted product ID={args.id}")
    return 0


def cmd_list(args) -> int:
    with _client(args.url) as client:
        products = fetch_products(client, args.category)

    print(f"Found {len(products)} products:\n")
    for p in products:
        print(f"ID: {p['id']} | {p['name']} | ${p['price']:.2f} | {p['category']} | stock {p['stockQuantity']}")
    return 0


def cmd_import(args) -> int:
    try:
        with open(args.file, encoding="utf-8") as fh:
            products = json.load(fh)
    except (OSError, json.JSONDecodeError) as e:
        print(f"❌ Error reading {args.file}: {e}")
        return 1

    print(f"Importing {len(products)} products...")
    failed = 0
    with _client(args.url, _require_token(args.token)) as client:
        for product in products:
            product.pop("id", None)
            response = client.post("/products", json=product)
            if response.status_code == 201:
                print(f"   Added: {product.get('name')}")
            else:
                failed += 1
                print(f"   Failed: {product.get('name')} (status {response.status_code})")

    return 1 if failed else 0


def cmd_export(args) -> int:
    with _client(args.url) as client:
        products = fetch_products(client, args.category)

    with open(args.file, "w", encoding="utf-8") as fh:
        json.dump(products, fh, indent=2, ensure_ascii=False)

    print(f"✅ Exported {len(products)} products to {args.file}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage restaurant products")
    parser.add_argument("--url", default=API_BASE_URL, help="API base URL")
    parser.add_argument("--token", default=os.getenv("RESTAURANT_API_TOKEN"), help="Admin session token")
    commands = parser.add_subparsers(dest="command", required=True)

    add = commands.add_parser("add", help="Add a product")
    add.add_argument("--name", required=True, help="Product name")
    add.add_argument("--price", type=float, required=True, help="Product price")
    add.add_argument("--desc", default="", help="Product description")
    add.add_argument("--category", required=True, choices=CATEGORIES, help="Product category")
    add.add_argument("--image", default="", help="Product image URL")
    add.add_argument("--detailed", default="", help="Detailed description")
    add.add_argument("--stock", type=int, default=0, help="Initial stock quantity")
    add.set_defaults(func=cmd_add)

    delete = commands.add_parser("delete", help="Delete a product")
    delete.add_argument("--id", type=int, required=True, help="Product ID")
    delete.set_defaults(func=cmd_delete)

    list_cmd = commands.add_parser("list", help="List products")
    list_cmd.add_argument("--category", choices=CATEGORIES, help="Filter by category")
    list_cmd.set_defaults(func=cmd_list)

    import_cmd = commands.add_parser("import", help="Import products from JSON")
    import_cmd.add_argument("--file", required=True, help="JSON file to import")
    import_cmd.set_defaults(func=cmd_import)

    export = commands.add_parser("export", help="Export products to JSON")
    export.add_argument("--file", default="products.json", help="Output JSON file")
    export.add_argument("--category", choices=CATEGORIES, help="Filter by category")
    export.set_defaults(func=cmd_export)

    return parser


if __name__ == "__main__":
    args = build_parser().parse_args()
    try:
        sys.exit(args.func(args))
    except httpx.HTTPError as e:
        print(f"❌ Error: {e}")
        sys.exit(1)
