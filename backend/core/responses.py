# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261018v1
# ---------------------------------------------------------------------------
"""The response envelope every JSON endpoint returns."""

from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    message: str
    data: Optional[T] = None


def error_body(message: str, data: Any = None) -> dict:
    body = {"success": False, "message": message}
    if data is not None:
        body["data"] = data
    return body
