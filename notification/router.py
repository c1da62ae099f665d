from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.database import get_db
from auth.services.auth_service import get_current_active_user
from .schema import NotificationSchema
from . import service

notification_router = APIRouter(prefix="/notifications", tags=["Notifications"])


@notification_router.get("", response_model=list[NotificationSchema])
def my_notifications(db: Session = Depends(get_db), user=Depends(get_current_active_user)):
    return service.list_for_user(db, user)
