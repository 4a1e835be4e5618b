"""
Admin Account Script

Registers an account through the HTTP API. The first account ever
registered becomes the admin; run this once against a fresh database.

Run from project root: python scripts/create_admin.py --email admin@restaurant.com
"""

import argparse
import os
import sys

import httpx

API_BASE_URL = os.getenv("RESTAURANT_API_URL", "http://localhost:8080")


def create_account(base_url: str, email: str, password: str, name: str) -> int:
    try:
        response = httpx.post(
            f"{base_url}/api/auth/register",
            json={"email": email, "password": password, "name": name},
            timeout=30.0,
        )
    except httpx.HTTPError as e:
        print(f"❌ Error: {e}")
        return 1

    if response.status_code != 201:
        print(f"❌ Failed to create user ({response.status_code}): {response.text}")
        return 1

    data = response.json()
    user = data["user"]
    print("✅ User created successfully!")
    print(f"   ID: {user['id']}")
    print(f"   Email: {user['email']}")
    print(f"   Name: {user['name']}")
    print(f"   Role: {user['role']}")
    if user["role"] != "admin":
        print("\n⚠️ Another account already holds the admin role; this one is a customer.")
    print(f"\nToken: {data['token']}")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Register the admin account")
    parser.add_argument("--email", default="admin@restaurant.com", help="Admin email")
    parser.add_argument("--password", required=True, help="Admin password")
    parser.add_argument("--name", default="Admin", help="Admin name")
    parser.add_argument("--url", default=API_BASE_URL, help="API base URL")
    args = parser.parse_args()

    sys.exit(create_account(args.url, args.email, args.password, args.name))
