"""Pydantic models for voice API requests."""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class VoiceRequest(BaseModel):
    """Transcript submitted by a client."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    transcript: str = Field(max_length=4000)
    language_hint: str | None = None
    today: date | None = None


class VoiceCommandRequest(VoiceRequest):
    """Transcript to parse and apply for one user's stores."""

    user_id: str | None = None
