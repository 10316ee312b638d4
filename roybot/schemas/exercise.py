from pydantic import BaseModel, field_validator
from datetime import datetime
from typing import Optional

class ExerciseFields(BaseModel):
    exercise_type: str
    duration: Optional[float] = None
    intensity: Optional[str] = None

    model_config = {"extra": "forbid"}

class ExerciseChanges(BaseModel):
    exercise_type: Optional[str] = None
    duration: Optional[float] = None
    intensity: Optional[str] = None

    model_config = {"extra": "forbid"}

    # Omitting the field leaves it alone; an explicit null would break NOT NULL
    @field_validator('exercise_type')
    @classmethod
    def validate_exercise_type(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError('exercise_type cannot be null')
        return v

class ExerciseRecord(ExerciseFields):
    id: int
    user_id: int
    created_at: datetime

    model_config = {"from_attributes": True}
