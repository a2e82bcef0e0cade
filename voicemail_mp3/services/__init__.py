"""Services for transcoding, transcription, delivery and scratch storage."""

from .workspace import Workspace
from .audio import AudioPipeline
from .transcription import TranscriptionService
from .mail_sink import MailSink
from .pipeline import VoicemailConverter

__all__ = [
    "Workspace",
    "AudioPipeline",
    "TranscriptionService",
    "MailSink",
    "VoicemailConverter",
]
