# connectlist/models/notification.py
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


class Notification(BaseModel):
    PartitionKey: str      # recipient userId
    RowKey: str            # id único
    type: str
    actorId: Optional[str] = None
    targetId: Optional[str] = None
    title: str
    message: str
    read: bool = False
    createdAt: str
    data: Optional[Any] = None


class NotificationUser(BaseModel):
    id: Optional[str] = None
    name: str = "Unknown User"
    username: str = ""
    avatar: Optional[str] = None


class NotificationView(BaseModel):
    id: str
    type: str
    user: NotificationUser
    message: str
    time: str = ""
    isNew: bool = True
    data: Dict[str, Any] = Field(default_factory=dict)
    listImage: Optional[str] = None
    actionButton: Optional[str] = None


class TypeStats(BaseModel):
    total: int = 0
    unread: int = 0


class NotificationStats(BaseModel):
    total: int = 0
    unread: int = 0
    byType: Dict[str, TypeStats] = Field(default_factory=dict)
