"""
SQLAlchemy Database Models

Tables:
- users / role_bootstrap: identities and the one-row admin bootstrap claim
- products / reviews: the menu catalog
- feedback: customer feedback about products
- orders / order_items: an order header and its line items
- migrations: one-shot data seeds that already ran
"""

import enum
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from restaurant_api.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserRole(str, enum.Enum):
    """Authorization roles."""
    CUSTOMER = "customer"
    ADMIN = "admin"


class OrderStatus(str, enum.Enum):
    """Order status workflow."""
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ProductCategory(str, enum.Enum):
    """Menu sections."""
    EASTERN = "eastern"
    WESTERN = "western"


# =============================================================================
# IDENTITIES
# =============================================================================

class User(Base):
    """
    A registered identity.

    ``email`` is globally unique. ``password_hash`` is a self-describing
    bcrypt digest and never leaves the server.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(100), nullable=False)
    role = Column(Enum(UserRole), default=UserRole.CUSTOMER, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    orders = relationship("Order", back_populates="user")

    def __repr__(self):
        return f"<User #{self.id} - {self.email} - {self.role.value}>"


class RoleBootstrap(Base):
    """
    Single-row claim on the "first registered user becomes admin" rule.

    The primary key is pinned to 1, so at most one registration can ever
    insert this row; the loser of a concurrent race gets an IntegrityError.
    """
    __tablename__ = "role_bootstrap"
    __table_args__ = (CheckConstraint("id = 1", name="ck_role_bootstrap_single_row"),)

    id = Column(Integer, primary_key=True, autoincrement=False, default=1)
    email = Column(String(255), nullable=False)
    claimed_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)


# =============================================================================
# CATALOG
# =============================================================================

class Product(Base):
    """A menu item with its stock levels."""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    price = Column(Float, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(Enum(ProductCategory), nullable=False, index=True)
    image = Column(String(500), nullable=True)
    image_attribution = Column(JSON, nullable=True)  # photographer, source, url
    detailed_description = Column(Text, nullable=True)
    stock_quantity = Column(Integer, nullable=False, default=0)
    low_stock_threshold = Column(Integer, nullable=False, default=5)

    reviews = relationship(
        "Review",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="Review.id",
        lazy="selectin",
    )

    @property
    def is_low_stock(self) -> bool:
        return self.stock_quantity <= self.low_stock_threshold

    def __repr__(self):
        return f"<Product #{self.id} - {self.name} - {self.category.value}>"


class Review(Base):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    user_name = Column(String(100), nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    date = Column(String(50), nullable=True)

    product = relationship("Product", back_populates="reviews")


class Feedback(Base):
    """Customer feedback about a product."""
    __tablename__ = "feedback"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=False)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True)
    product_name = Column(String(200), nullable=True)
    date = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)


# =============================================================================
# ORDERS
# =============================================================================

class Order(Base):
    """
    Order header. Written together with every OrderItem in one transaction.
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    total_price = Column(Float, nullable=False)
    status = Column(
        Enum(OrderStatus),
        default=OrderStatus.PENDING,
        nullable=False,
        index=True
    )
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    user = relationship("User", back_populates="orders")
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
        lazy="selectin",
    )

    def __repr__(self):
        return f"<Order #{self.id} - user {self.user_id} - {self.status.value}>"


class OrderItem(Base):
    """Line item; has no lifecycle of its own outside its order."""
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    portion_size = Column(String(50), nullable=False)
    customizations = Column(JSON, nullable=False, default=list)  # [{id, name, price}]

    order = relationship("Order", back_populates="items")


# =============================================================================
# SEEDING
# =============================================================================

class Migration(Base):
    """Records data seeds that already ran."""
    __tablename__ = "migrations"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(100), unique=True, nullable=False)
    executed_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
