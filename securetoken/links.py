from typing import Union
from urllib.parse import urlencode

from core.config_loader import settings
from .models import TokenPurpose

_UNLOCK_PATHS = {
    TokenPurpose.ATTACHMENT_UNLOCK: "/unlock/attachments",
    TokenPurpose.INVOICE_UNLOCK: "/unlock/invoices",
}


def _site() -> str:
    return settings.SITE_BASE_URL.rstrip("/")


def invitation_link(email: str, secret: str) -> str:
    return f"{_site()}/auth/signup?{urlencode({'token': secret, 'email': email})}"


def password_reset_link(email: str, secret: str) -> str:
    return f"{_site()}/auth/reset-password?{urlencode({'token': secret, 'email': email})}"


def unlock_link(purpose: TokenPurpose, resource_id: Union[int, str], secret: str) -> str:
    path = _UNLOCK_PATHS.get(TokenPurpose(purpose))
    if path is None:
        raise ValueError(f"{purpose} is not an unlock purpose")
    return f"{_site()}{path}/{resource_id}?{urlencode({'token': secret})}"
