from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from navaspurthi.models.registration import VALID_STATUSES


class StatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def validate_status(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in VALID_STATUSES:
            raise ValueError(f"Status must be one of {VALID_STATUSES}")
        return value


class ChatMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = ""
    session_id: Optional[str] = Field(default=None, alias="sessionId")


class ChatbotResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    response: str
    type: str
    model: Optional[str] = None
    session_id: Optional[str] = Field(default=None, alias="sessionId")


class SuggestionsResponse(BaseModel):
    success: bool = True
    suggestions: List[str]


class EventPolicyResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    event_class: str = Field(alias="class")
    min_size: int
    max_size: int
    aliases: List[str] = []
    summary: str = ""
    schedule: Optional[Dict[str, str]] = None


class StatsResponse(BaseModel):
    total: int
    total_participants: int
    by_status: Dict[str, int]
    by_event: Dict[str, int]
