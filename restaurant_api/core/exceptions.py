"""
Application Exception Hierarchy

Every error the API can answer with is a RestaurantAPIError carrying its
HTTP status and a client-safe detail. The internal ``reason`` is for logs
only: clients see one generic message per category so responses never
reveal whether an email exists or why a token was rejected.
"""

from typing import Optional


class RestaurantAPIError(Exception):
    """Base class for all application errors."""

    status_code: int = 500
    public_detail: str = "An unexpected error occurred"

    def __init__(self, reason: Optional[str] = None):
        self.reason = reason or self.public_detail
        super().__init__(self.reason)


class ConfigurationError(RestaurantAPIError):
    """Startup configuration is missing or unsafe."""


# =============================================================================
# AUTHENTICATION (401)
# =============================================================================

class AuthenticationError(RestaurantAPIError):
    status_code = 401
    public_detail = "Invalid or missing credentials"


class MissingCredentialsError(AuthenticationError):
    """No Authorization header on the request."""


class MalformedAuthHeaderError(AuthenticationError):
    """Authorization header is not exactly ``Bearer <token>``."""


class InvalidCredentialsError(AuthenticationError):
    """Unknown email or wrong password (deliberately indistinguishable)."""

    public_detail = "Invalid credentials"


class TokenError(AuthenticationError):
    """A presented session token failed validation."""


class MalformedTokenError(TokenError):
    pass


class InvalidSignatureError(TokenError):
    pass


class TokenExpiredError(TokenError):
    pass


class UnsupportedAlgorithmError(TokenError):
    pass


# =============================================================================
# AUTHORIZATION (403)
# =============================================================================

class AuthorizationError(RestaurantAPIError):
    status_code = 403
    public_detail = "Forbidden"


# =============================================================================
# ACCOUNTS
# =============================================================================

class MalformedHashError(RestaurantAPIError):
    """Stored password digest cannot be parsed. Never a wrong password."""

    public_detail = "Internal server error"


class EmailAlreadyRegisteredError(RestaurantAPIError):
    status_code = 409
    public_detail = "Email already registered"


class InvalidRequestError(RestaurantAPIError):
    status_code = 400
    public_detail = "Invalid request"

    def __init__(self, reason: Optional[str] = None):
        super().__init__(reason)
        # Validation messages are safe to echo back
        self.public_detail = self.reason


class NotFoundError(RestaurantAPIError):
    status_code = 404
    public_detail = "Not found"

    def __init__(self, reason: Optional[str] = None):
        super().__init__(reason)
        self.public_detail = self.reason


# =============================================================================
# ORDERS
# =============================================================================

class OrderValidationError(InvalidRequestError):
    """Order input rejected before anything was written."""


class EmptyOrderError(OrderValidationError):
    def __init__(self):
        super().__init__("Order must contain at least one item")


class UnknownProductError(OrderValidationError):
    def __init__(self, product_ids: list[int]):
        self.product_ids = sorted(set(product_ids))
        super().__init__(f"Unknown product id(s): {self.product_ids}")


class PriceMismatchError(OrderValidationError):
    def __init__(self, supplied: float, expected: float):
        self.supplied = supplied
        self.expected = expected
        super().__init__(
            f"Total price {supplied:.2f} does not match catalog total {expected:.2f}"
        )


class OrderPersistenceError(RestaurantAPIError):
    """The order transaction failed and was rolled back."""

    public_detail = "Failed to create order"


# =============================================================================
# CATALOG
# =============================================================================

class ProductInUseError(RestaurantAPIError):
    """Product still referenced by order lines."""

    status_code = 409
    public_detail = "Product is referenced by existing orders"
