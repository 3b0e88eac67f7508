# schema.py
import logging
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

logger = logging.getLogger(__name__)


class SuggestionType(str, Enum):
    RESTAURANT = "Restaurant"
    MOVIE = "Movie"
    HANGOUT_SPOT = "Hangout Spot"
    OTHER = "Other"


PLACE_TYPES = (SuggestionType.RESTAURANT, SuggestionType.HANGOUT_SPOT)


class Suggestion(BaseModel):
    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    name: str
    type: SuggestionType
    rating: float = Field(allow_inf_nan=False)
    reason: str
    address: Optional[str] = None
    poster_url: Optional[str] = Field(default=None, alias="posterUrl")

    @field_validator("type", mode="before")
    @classmethod
    def accept_compact_type(cls, v):
        if v == "HangoutSpot":
            return SuggestionType.HANGOUT_SPOT.value
        return v

    @field_validator("rating")
    @classmethod
    def clamp_rating(cls, v: float) -> float:
        return min(max(v, 0.0), 5.0)

    @model_validator(mode="after")
    def drop_misplaced_fields(self):
        """Movies carry no address and places carry no poster; drop rather than reject."""
        if self.type == SuggestionType.MOVIE and self.address is not None:
            logger.warning("Dropping address from movie suggestion %r", self.name)
            self.address = None
        if self.type in PLACE_TYPES and self.poster_url is not None:
            logger.warning("Dropping posterUrl from %s suggestion %r", self.type, self.name)
            self.poster_url = None
        return self


class ChatMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    sender: Literal["user", "bot"]
    text: Optional[str] = None
    suggestions: Optional[List[Suggestion]] = None
    is_loading: Optional[bool] = Field(default=None, alias="isLoading")


class Outcome(str, Enum):
    SUGGESTIONS = "suggestions"
    TEXT = "text"
    FALLBACK = "fallback"


class AssistantResult(BaseModel):
    outcome: Outcome
    message: ChatMessage


class Location(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class ChatRequest(BaseModel):
    message: str = Field(min_length=1)
    location: Optional[Location] = None
    session_id: Optional[str] = None

    @field_validator("message")
    @classmethod
    def strip_message(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("message must not be blank")
        return v


class ChatResponse(BaseModel):
    session_id: str
    outcome: Outcome
    message: ChatMessage
