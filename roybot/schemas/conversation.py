from pydantic import BaseModel
from datetime import datetime
from typing import Optional

class ConversationFields(BaseModel):
    title: Optional[str] = None

    model_config = {"extra": "forbid"}

class ConversationChanges(BaseModel):
    """Only the title of a conversation can change."""
    title: Optional[str] = None

    model_config = {"extra": "forbid"}

class ConversationRecord(ConversationFields):
    id: int
    user_id: int
    created_at: datetime

    model_config = {"from_attributes": True}
