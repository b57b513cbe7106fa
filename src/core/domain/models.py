"""Domain models (Pydantic v2).

Why Pydantic in the domain:
- Strict validation and self-documenting fields (Field) without coupling the
  core to any I/O library.
- The API answers in camelCase JSON; aliases keep the Python side snake_case.

Note:
- These models describe *what* the data is, not *how* it is fetched.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from core.domain.enums import ProjectStatus


class _ApiModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class TokenPair(_ApiModel):
    """Credentials of an authenticated session.

    Immutable: the session swaps whole pairs, never single fields.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    access_token: str = Field(
        ...,
        alias="accessToken",
        description="Short-lived token sent with every authenticated request.",
    )
    renew_token: str = Field(
        default="",
        alias="renewToken",
        description="Token used to obtain a new access token.",
    )
    expiry: datetime | None = Field(
        default=None,
        description="Expiry of the access token, when the server provides it.",
    )

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expiry is None:
            return False
        now = now or datetime.now(timezone.utc)
        expiry = self.expiry
        if expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=timezone.utc)
        return expiry <= now


class User(_ApiModel):
    id: int = Field(..., description="User identifier.")
    username: str = Field(default="", description="Login name.")
    firstname: str = Field(default="", description="First name.")
    lastname: str = Field(default="", description="Last name.")
    email: str | None = Field(default=None, description="Contact e-mail.")


class HumanResource(_ApiModel):
    id: int = Field(..., description="Human resource identifier.")
    firstname: str = Field(default="", description="First name.")
    lastname: str = Field(default="", description="Last name.")
    role: str | None = Field(default=None, description="Role inside the organisation.")
    description: str | None = Field(default=None)

    @property
    def full_name(self) -> str:
        return f"{self.firstname} {self.lastname}".strip()


class Project(_ApiModel):
    id: int = Field(..., description="Project identifier.")
    name: str = Field(..., min_length=1, description="Project name.")
    description: str = Field(default="", description="Free-text description.")
    deadline: datetime | None = Field(default=None, description="Deadline, if any.")
    status: ProjectStatus = Field(default=ProjectStatus.ON_GOING)


class Task(_ApiModel):
    id: int = Field(..., description="Task identifier.")
    name: str = Field(..., min_length=1, description="Task name.")
    description: str = Field(default="")
    project: int | None = Field(default=None, description="Owning project identifier.")
    date_begin: datetime | None = Field(default=None, alias="dateBegin")
    date_end: datetime | None = Field(default=None, alias="dateEnd")


class TimeSlot(_ApiModel):
    id: int = Field(..., description="Time slot identifier.")
    start: datetime = Field(..., description="Start of the slot.")
    end: datetime = Field(..., description="End of the slot.")
    task: int | None = Field(default=None, description="Task worked on during the slot.")
    room: int | None = Field(default=None, description="Room booked for the slot.")


class Message(_ApiModel):
    id: int = Field(..., description="Message identifier.")
    content: str = Field(default="", description="Message body.")
    author: HumanResource | str | None = Field(
        default=None,
        alias="src",
        description="Sender, as sent by the API (a human resource, or a bare name).",
    )
    date: datetime | None = Field(default=None, description="Send date.")

    @property
    def author_name(self) -> str:
        if isinstance(self.author, HumanResource):
            return self.author.full_name
        return self.author or ""


class MessageList(_ApiModel):
    """One page of a conversation, in the order the server returned it."""

    origin: str = Field(default="", description="Conversation kind (project or user).")
    resource_id: int = Field(default=0, alias="id", description="Project or user id of the conversation.")
    page: int = Field(default=0, ge=0)
    messages: list[Message] = Field(default_factory=list)
