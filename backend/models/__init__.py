"""Import every ORM model so relationship() string targets resolve."""

from models.user import User  # noqa: F401
from models.access_token import AccessToken  # noqa: F401
from models.password_reset import PasswordResetToken  # noqa: F401
from models.audit_log import AuditLog  # noqa: F401
from models.order import (  # noqa: F401
    ConsignmentProduct,
    Courier,
    Hamper,
    Order,
    OrderDetail,
    Product,
)
