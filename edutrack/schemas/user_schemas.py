# edutrack/schemas/user_schemas.py
from datetime import datetime
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, field_validator


class Role(str, Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    PARENT = "parent"


class UserCreate(BaseModel):
    email: str
    full_name: str
    role: Role

    @field_validator("email", "full_name")
    def not_blank(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("email")
    def looks_like_email(cls, v):
        if "@" not in v:
            raise ValueError("invalid email address")
        return v.lower()


class UserProfile(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    full_name: str
    role: Role
    created_at: datetime
    updated_at: datetime


class FeedbackCreate(BaseModel):
    teacher_id: str
    student_id: str
    feedback_text: str

    @field_validator("feedback_text")
    def text_required(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("feedback text is required")
        return v


class TeacherSummary(BaseModel):
    id: str
    full_name: str
    email: str


class FeedbackItem(BaseModel):
    feedback_id: int
    student_id: str
    teacher_id: str
    feedback_text: str
    acknowledged: bool
    created_at: datetime
    teacher: Optional[TeacherSummary] = None


class FeedbackList(BaseModel):
    student_id: str
    feedback: List[FeedbackItem]
