# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261018v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the account endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, field_validator


# -- Requests --------------------------------------------------------------


class UpdateProfileRequest(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def _required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("The name field is required")
        return v


# -- Responses -------------------------------------------------------------


class CourierRow(BaseModel):
    id: int
    name: str
    phone: Optional[str] = None

    model_config = {"from_attributes": True}


class ItemRow(BaseModel):
    """A product, hamper or consignment product referenced by an order line."""

    id: int
    name: str
    price: Decimal

    model_config = {"from_attributes": True}


class OrderDetailRow(BaseModel):
    id: int
    quantity: int
    subtotal: Decimal
    product: Optional[ItemRow] = None
    hamper: Optional[ItemRow] = None
    consignment_product: Optional[ItemRow] = None

    model_config = {"from_attributes": True}


class OrderRow(BaseModel):
    id: int
    user_id: int
    invoice_number: str
    status: str
    delivery_method: str
    shipping_cost: Decimal
    total: Decimal
    ordered_at: datetime
    courier: Optional[CourierRow] = None
    details: List[OrderDetailRow] = []

    model_config = {"from_attributes": True}
