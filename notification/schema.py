from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .models import NotificationAudience, NotificationType


class NotificationSchema(BaseModel):
    id: int
    title: str
    body: str
    type: NotificationType
    audience: NotificationAudience
    action_url: Optional[str] = None
    metadata: Optional[dict] = Field(default=None, validation_alias="meta")
    sent_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)
