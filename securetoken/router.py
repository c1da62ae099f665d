from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from core.database import get_db
from authz.deps import require_compensation_manager
from .schema import UnlockedResource, UnlockLinkRequest, UnlockLinkSchema, UnlockRedeem
from . import unlock

unlock_router = APIRouter(prefix="/unlock-links", tags=["Unlock links"])

# Issue a one-time unlock link
@unlock_router.post("", response_model=UnlockLinkSchema, status_code=status.HTTP_201_CREATED)
def unlock_link_post(payload: UnlockLinkRequest, db: Session = Depends(get_db), user=Depends(require_compensation_manager)):
    return unlock.create_unlock_link(db, user.org_id, payload.purpose, payload.resource_id)

# Redeem an unlock link
@unlock_router.post("/redeem", response_model=UnlockedResource)
def unlock_link_redeem(payload: UnlockRedeem, db: Session = Depends(get_db)):
    return unlock.redeem_unlock_link(db, payload.purpose, payload.resource_id, payload.token)
