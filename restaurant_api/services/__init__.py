"""
Service Layer

    - auth: password hashing, session tokens, the auth gate
    - accounts: registration, login and role bootstrap
    - orders: atomic order placement and order reads
    - catalog: products, stock and feedback
    - reports: dashboard and sales aggregation
    - seeding: one-shot catalog migrations
"""
