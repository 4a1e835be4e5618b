"""
                Restaurant Ordering API

HTTP backend for a restaurant ordering platform: product catalog,
customer feedback, authenticated order placement and an admin dashboard.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
