from __future__ import annotations
from datetime import datetime
from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import DateTime, Enum, Index, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from core.database import Base


class TokenPurpose(str, PyEnum):
    INVITATION = "INVITATION"
    PASSWORD_RESET = "PASSWORD_RESET"
    ATTACHMENT_UNLOCK = "ATTACHMENT_UNLOCK"
    INVOICE_UNLOCK = "INVOICE_UNLOCK"


class SecureToken(Base):
    """Hash of a one-time secret. The plaintext is never stored."""

    __tablename__ = "secure_tokens"
    __table_args__ = (Index("ix_secure_tokens_subject_purpose", "subject_id", "purpose"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    # identity id for invitations and resets, resource id for unlock links
    subject_id: Mapped[str] = mapped_column(String(64), nullable=False)
    purpose: Mapped[TokenPurpose] = mapped_column(
        Enum(TokenPurpose, name="token_purpose", native_enum=False, length=32), nullable=False
    )
    token_hash: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    used_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
