from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from .models import TokenPurpose

UNLOCK_PURPOSES = (TokenPurpose.ATTACHMENT_UNLOCK, TokenPurpose.INVOICE_UNLOCK)


class UnlockLinkRequest(BaseModel):
    purpose: TokenPurpose
    resource_id: int
    model_config = ConfigDict(extra="forbid")

    @field_validator("purpose")
    @classmethod
    def _unlock_only(cls, v: TokenPurpose) -> TokenPurpose:
        if v not in UNLOCK_PURPOSES:
            raise ValueError("purpose must be ATTACHMENT_UNLOCK or INVOICE_UNLOCK")
        return v


class UnlockRedeem(UnlockLinkRequest):
    token: str


class UnlockLinkSchema(BaseModel):
    url: str
    expires_at: datetime


class UnlockedInvoiceItem(BaseModel):
    description: str
    amount: Decimal
    model_config = ConfigDict(from_attributes=True)


class UnlockedInvoice(BaseModel):
    id: int
    employee_id: int
    title: str
    status: str
    total: Decimal
    items: List[UnlockedInvoiceItem] = []
    model_config = ConfigDict(from_attributes=True)


class UnlockedResource(BaseModel):
    purpose: TokenPurpose
    resource_id: int
    # set for ATTACHMENT_UNLOCK
    attachment_url: Optional[str] = None
    # set for INVOICE_UNLOCK
    invoice: Optional[UnlockedInvoice] = None
