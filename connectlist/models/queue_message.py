# connectlist/models/queue_message.py
from typing import Any, Dict, Optional
from pydantic import BaseModel


class QueueMessage(BaseModel):
    type: str
    userId: str                    # destinatario
    actorId: Optional[str] = None
    targetId: Optional[str] = None
    data: Optional[Dict[str, Any]] = None
