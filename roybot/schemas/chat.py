from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Literal, Optional

class ChatRequest(BaseModel):
    message: str

    @field_validator('message')
    @classmethod
    def validate_message(cls, v: str) -> str:
        if not v.strip():
            raise ValueError('Message is required')
        if len(v) > 4000:
            raise ValueError('Message is too long')
        return v.strip()

class ApiChatRequest(ChatRequest):
    uid: Optional[int] = None
    user_name: Optional[str] = Field(default=None, alias="userName")

    model_config = {"populate_by_name": True}

class ChatResponse(BaseModel):
    response: str
    status: Literal["success", "error"]

class ExerciseRequest(BaseModel):
    context: str
    user_name: Optional[str] = Field(default=None, alias="userName")

    model_config = {"populate_by_name": True}

    @field_validator('context')
    @classmethod
    def validate_context(cls, v: str) -> str:
        if not v.strip():
            raise ValueError('Context is required for exercise suggestion')
        return v.strip()

class ExerciseSuggestion(BaseModel):
    exercise: str

class SaveConversationRequest(BaseModel):
    user_name: str = Field(alias="userName")
    message: str
    response: str

    model_config = {"populate_by_name": True}

    @field_validator('user_name', 'message', 'response')
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError('User name, message and response are required')
        return v.strip()

class ChatMessageRead(BaseModel):
    id: int
    message: str
    created_at: datetime

    model_config = {"from_attributes": True}
