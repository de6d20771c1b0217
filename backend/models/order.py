# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261018v1
# ---------------------------------------------------------------------------
"""
Order ORM models.

Orders are read-only from this service's point of view – they are written
by the checkout flow.  The catalogue tables exist so that order history can
resolve every line item to what was actually bought.
"""

from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from database import Base


class Courier(Base):
    __tablename__ = "couriers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    phone = Column(String(32), nullable=True)


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    price = Column(Numeric(12, 2), nullable=False)


class Hamper(Base):
    __tablename__ = "hampers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    price = Column(Numeric(12, 2), nullable=False)


class ConsignmentProduct(Base):
    """A product sold on behalf of a third-party consignor."""

    __tablename__ = "consignment_products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    consignor = Column(String(255), nullable=True)
    price = Column(Numeric(12, 2), nullable=False)


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    courier_id = Column(
        Integer,
        ForeignKey("couriers.id", ondelete="SET NULL"),
        nullable=True,
    )
    invoice_number = Column(String(64), nullable=False, unique=True)
    status = Column(String(32), nullable=False, server_default="pending")
    delivery_method = Column(String(32), nullable=False, server_default="pickup")
    shipping_cost = Column(Numeric(12, 2), nullable=False, server_default="0")
    total = Column(Numeric(12, 2), nullable=False)
    ordered_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    user = relationship("User", back_populates="orders")
    courier = relationship("Courier")
    details = relationship(
        "OrderDetail",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderDetail.id",
    )


class OrderDetail(Base):
    """One line of an order; exactly one of the three item FKs is set."""

    __tablename__ = "order_details"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(
        Integer,
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id = Column(Integer, ForeignKey("products.id"), nullable=True)
    hamper_id = Column(Integer, ForeignKey("hampers.id"), nullable=True)
    consignment_product_id = Column(Integer, ForeignKey("consignment_products.id"), nullable=True)
    quantity = Column(Integer, nullable=False)
    subtotal = Column(Numeric(12, 2), nullable=False)

    order = relationship("Order", back_populates="details")
    product = relationship("Product")
    hamper = relationship("Hamper")
    consignment_product = relationship("ConsignmentProduct")
