"""
HTTP Routers

    - auth: /api/auth (register, login, me)
    - products: /api/products (public reads, admin writes)
    - feedback: /api/feedback
    - orders: /api/orders (authenticated)
    - admin: /api/dashboard, /api/reports (admin only)
"""

from restaurant_api.routers import admin, auth, feedback, orders, products

all_routers = [
    auth.router,
    products.router,
    feedback.router,
    orders.router,
    admin.router,
]

__all__ = ["all_routers"]
