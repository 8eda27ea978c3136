"""Agent webhook payloads, decoded once into a tagged union."""

from typing import Any, List, Literal, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from ..database.models import Exercise


class WebhookResponseError(ValueError):
    """The webhook answered with something that is not a known payload."""


class AgentOutput(BaseModel):
    """The agent's interpretation of a chat message."""
    message: str = Field(
        default="",
        description="Reply text to show in the chat"
    )
    workout_logged: bool = Field(
        default=False,
        description="Whether the message contained a workout worth logging"
    )
    parsed_exercises: List[Exercise] = Field(
        default_factory=list,
        description="Exercises extracted from the message"
    )
    suggestions: List[str] = Field(
        default_factory=list,
        description="Follow-up suggestions for the user"
    )
    next_workout_recommendation: str = Field(
        default="",
        description="What to do next time"
    )

    @field_validator("message", "next_workout_recommendation", mode="before")
    @classmethod
    def _empty_text_if_missing(cls, value):
        return "" if value is None else value

    @field_validator("parsed_exercises", "suggestions", mode="before")
    @classmethod
    def _empty_list_if_missing(cls, value):
        return [] if value is None else value

    @field_validator("workout_logged", mode="before")
    @classmethod
    def _false_if_missing(cls, value):
        return False if value is None else value


class AgentReply(BaseModel):
    """Regular chat reply, identified by the ``output`` field."""
    kind: Literal["agent_reply"] = "agent_reply"
    output: AgentOutput


class VoiceTranscription(BaseModel):
    """Result of sending a voice note, identified by ``text_transcribed``."""
    kind: Literal["voice_transcription"] = "voice_transcription"
    text_transcribed: str


class PhotoRecognition(BaseModel):
    """Result of sending a photo, identified by ``photo_text``."""
    kind: Literal["photo_recognition"] = "photo_recognition"
    photo_text: str


WebhookPayload = Union[AgentReply, VoiceTranscription, PhotoRecognition]

# Field whose presence identifies each payload type, checked in order.
_DISCRIMINATORS: tuple[tuple[str, type[BaseModel]], ...] = (
    ("output", AgentReply),
    ("text_transcribed", VoiceTranscription),
    ("photo_text", PhotoRecognition),
)


def decode_webhook_payload(data: Any) -> WebhookPayload:
    """Decode a raw webhook JSON body.

    The agent answers either with an object or with an array whose first
    element is that object.
    """
    if isinstance(data, list):
        if not data:
            raise WebhookResponseError("Webhook returned an empty array")
        data = data[0]
    if not isinstance(data, dict):
        raise WebhookResponseError("Invalid webhook response structure")

    for field, payload_type in _DISCRIMINATORS:
        if data.get(field) is None:
            continue
        try:
            return payload_type.model_validate(data)
        except ValidationError as e:
            raise WebhookResponseError(f"Malformed {field} payload: {e}") from e

    raise WebhookResponseError("Invalid webhook response structure")


def fallback_reply() -> AgentReply:
    """Apology shown when the agent cannot be reached."""
    return AgentReply(
        output=AgentOutput(
            message="Извини, сервер временно недоступен. Попробуй позже! 🤖",
            suggestions=[
                "Попробуй переформулировать вопрос",
                "Проверь подключение к интернету",
            ],
        )
    )
