"""Data models and configuration for the voicemail converter."""

from .config import (
    TranscribeConfig,
    AudioConfig,
    WorkspaceConfig,
    MailSinkConfig,
    OutboundSMTPConfig,
    LoggingConfig,
    AppConfig,
)
from .messages import (
    MessageSegments,
    AttachmentParts,
    RecognitionResponse,
    ConversionResult,
)

__all__ = [
    "TranscribeConfig",
    "AudioConfig",
    "WorkspaceConfig",
    "MailSinkConfig",
    "OutboundSMTPConfig",
    "LoggingConfig",
    "AppConfig",
    "MessageSegments",
    "AttachmentParts",
    "RecognitionResponse",
    "ConversionResult",
]
