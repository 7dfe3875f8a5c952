"""Pydantic models for the chat session, its messages and login credentials."""

from datetime import datetime
from email.utils import parsedate_to_datetime
from enum import Enum
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

UserId = Union[int, str]

TIME_OF_DAY_FORMAT = "%H:%M:%S"


class Sender(str, Enum):
    """Who wrote a chat message. Values match the backend's `type` field."""
    USER = "user"
    BOT = "bot"


def format_time_of_day(moment: Optional[datetime] = None) -> str:
    """Render a moment (default: now) as local time of day."""
    if moment is None:
        moment = datetime.now()
    elif moment.tzinfo is not None:
        moment = moment.astimezone()
    return moment.strftime(TIME_OF_DAY_FORMAT)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a backend timestamp.

    Accepts ISO-8601 strings (with or without offset) and HTTP dates
    such as Flask emits for datetime columns.

    Returns:
        Parsed datetime or None if the value is not recognised
    """
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        pass
    try:
        return parsedate_to_datetime(text)
    except (TypeError, ValueError):
        return None


class HistoryEntry(BaseModel):
    """One item of the backend's chat history, checked before it is displayed."""
    type: Sender = Field(..., description="Who wrote the message")
    content: Optional[str] = Field(None, description="Message body")
    timestamp: Any = Field(None, description="ISO-8601 or HTTP date")


class Message(BaseModel):
    """Single chat message as displayed in the log."""
    sender: Sender = Field(..., description="Message author")
    text: str = Field(..., description="Message body")
    timestamp: str = Field(default_factory=format_time_of_day, description="Local time of day")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_history(cls, entry: Any) -> "Message":
        """
        Map one chat-history entry `{type, content, timestamp}` to a Message.

        Raises:
            pydantic.ValidationError: the entry is not a dict of that shape
        """
        record = HistoryEntry.model_validate(entry)
        parsed = parse_timestamp(record.timestamp)
        if parsed is not None:
            timestamp = format_time_of_day(parsed)
        else:
            timestamp = str(record.timestamp) if record.timestamp is not None else ""
        return cls(sender=record.type, text=record.content or "", timestamp=timestamp)


class Credentials(BaseModel):
    """Form values for one login or registration submit."""
    username: str
    password: str = Field(..., repr=False)


class Session(BaseModel):
    """UI-visible state of one chat widget mount."""
    authenticated: bool = False
    user_id: Optional[UserId] = None
    username: str = ""
    loading: bool = False
    error: Optional[str] = None
    notice: Optional[str] = None
    registering: bool = False
    messages: List[Message] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_auth_invariants(self):
        if self.authenticated != (self.user_id is not None):
            raise ValueError("authenticated must be True exactly when user_id is set")
        if not self.authenticated and self.messages:
            raise ValueError("an anonymous session cannot hold messages")
        return self

    def evolve(self, **changes: Any) -> "Session":
        """Return a validated copy with `changes` applied."""
        data = {name: getattr(self, name) for name in type(self).model_fields}
        data.update(changes)
        return type(self)(**data)
