# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261018v1
# ---------------------------------------------------------------------------
"""
Account endpoints – own profile, customer listing and order history.

Access rules
------------
* /profile acts on the caller's own row only.
* /customers is admin-only (``require_admin``).
* /history/{user_id} is allowed for the owner of *user_id* or an admin;
  anyone else gets 403 before the orders are read.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, joinedload, selectinload

from database import get_db
from core.errors import AuthorizationError, NotFoundError
from core.responses import Envelope
from core.security import get_current_user, require_admin
from models.order import Order, OrderDetail
from models.user import ROLE_CUSTOMER, User
from auth.schemas import UserInfo
from account.schemas import OrderRow, UpdateProfileRequest

router = APIRouter(tags=["account"])


def _can_view_orders(requester: User, owner_id: int) -> bool:
    return requester.is_admin or requester.id == owner_id


# ---------------------------------------------------------------------------
# GET /profile
# ---------------------------------------------------------------------------


@router.get("/profile", response_model=Envelope[UserInfo])
def profile(current_user: User = Depends(get_current_user)):
    """Return the authenticated user's public profile (no secrets)."""
    return Envelope(message="Profile retrieved", data=UserInfo.model_validate(current_user))


# ---------------------------------------------------------------------------
# PUT /profile
# ---------------------------------------------------------------------------


@router.put("/profile", response_model=Envelope[UserInfo])
def update_profile(
    body: UpdateProfileRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update the authenticated user's display name."""
    current_user.name = body.name
    db.commit()
    db.refresh(current_user)
    return Envelope(message="Profile updated", data=UserInfo.model_validate(current_user))


# ---------------------------------------------------------------------------
# GET /customers
# ---------------------------------------------------------------------------


@router.get("/customers", response_model=Envelope[List[UserInfo]])
def list_customers(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Every customer account, oldest first."""
    customers = db.query(User).filter(User.role == ROLE_CUSTOMER).order_by(User.id).all()
    return Envelope(
        message="Customers retrieved",
        data=[UserInfo.model_validate(c) for c in customers],
    )


# ---------------------------------------------------------------------------
# GET /history/{user_id}
# ---------------------------------------------------------------------------


@router.get("/history/{user_id}", response_model=Envelope[List[OrderRow]])
def order_history(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    All orders of *user_id*, newest first, with courier and every line
    item resolved to its product, hamper or consignment product.
    """
    if not _can_view_orders(current_user, user_id):
        raise AuthorizationError("You are not allowed to view this order history")

    if not db.get(User, user_id):
        raise NotFoundError("User not found")

    orders = (
        db.query(Order)
        .options(
            joinedload(Order.courier),
            selectinload(Order.details).joinedload(OrderDetail.product),
            selectinload(Order.details).joinedload(OrderDetail.hamper),
            selectinload(Order.details).joinedload(OrderDetail.consignment_product),
        )
        .filter(Order.user_id == user_id)
        .order_by(Order.ordered_at.desc(), Order.id.desc())
        .all()
    )
    return Envelope(
        message="Order history retrieved",
        data=[OrderRow.model_validate(o) for o in orders],
    )
