"""Client and payload types for the external agent webhook."""

from .client import WebhookClient, WebhookError, webhook_client
from .schemas import (
    AgentOutput,
    AgentReply,
    PhotoRecognition,
    VoiceTranscription,
    WebhookPayload,
    WebhookResponseError,
    decode_webhook_payload,
    fallback_reply,
)

__all__ = [
    "AgentOutput",
    "AgentReply",
    "PhotoRecognition",
    "VoiceTranscription",
    "WebhookClient",
    "WebhookError",
    "WebhookPayload",
    "WebhookResponseError",
    "decode_webhook_payload",
    "fallback_reply",
    "webhook_client",
]
