# storefront/auth.py
import hmac
from typing import Optional

from .errors import Unauthorized


def check_password(candidate: Optional[str], admin_password: Optional[str]) -> None:
    if not admin_password:
        raise Unauthorized("admin access is not configured")
    if not candidate or not hmac.compare_digest(candidate.encode(), admin_password.encode()):
        raise Unauthorized("incorrect password")


def check_bearer(authorization: Optional[str], admin_password: Optional[str]) -> None:
    if not authorization:
        raise Unauthorized("not authorized")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise Unauthorized("not authorized")
    check_password(token.strip(), admin_password)
