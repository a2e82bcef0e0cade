"""Conversion of one voicemail message from WAV to MP3."""

import time
from typing import Optional

from ..mime import (
    assemble_message,
    decode_attachment,
    extract_attachment,
    find_boundary,
    has_audio_attachment,
    rewrite_attachment_head,
    split_segments,
)
from ..models.config import AppConfig
from ..models.messages import ConversionResult, MessageSegments
from ..utils.correlation import get_correlation_id
from ..utils.logging import LoggerMixin
from .audio import AudioPipeline
from .transcription import TranscriptionService
from .workspace import Workspace


class VoicemailConverter(LoggerMixin):
    """Runs the split, decode, transcode, transcribe and reassemble steps."""

    def __init__(
        self,
        config: AppConfig,
        audio: Optional[AudioPipeline] = None,
        transcriber: Optional[TranscriptionService] = None,
    ):
        self.config = config
        self.audio = audio or AudioPipeline(config.audio)
        self.transcriber = transcriber or TranscriptionService(config.transcribe)

    async def convert(self, raw: bytes, workspace: Workspace) -> ConversionResult:
        """
        Convert a raw voicemail message.

        Args:
            raw: The message exactly as read from stdin
            workspace: Scratch space for the codec files

        Returns:
            ConversionResult holding the message to deliver

        Raises:
            StructuralError, DecodeError, AudioFormatError, CodecError
        """
        start_time = time.time()
        correlation_id = get_correlation_id() or "unknown"

        boundary = find_boundary(raw)
        segments = MessageSegments(split_segments(raw, boundary))

        self.log_debug(
            f"Split message into {len(segments)} segments",
            boundary=boundary,
            message_bytes=len(raw),
        )

        if not has_audio_attachment(segments):
            self.log_info("No audio attachment, passing message through unchanged")
            return ConversionResult(
                correlation_id=correlation_id,
                message=raw,
                processing_time_ms=int((time.time() - start_time) * 1000),
            )

        # Step 1: Isolate and decode the attachment
        parts = extract_attachment(segments)
        wav = decode_attachment(parts)

        # Step 2: Transcode
        pcm = await self.audio.normalize(wav, workspace)
        mp3 = await self.audio.encode_mp3(pcm, workspace)

        # Step 3: Transcribe (best effort)
        transcript = ""
        if self.config.transcribe.enabled:
            transcript = await self.transcriber.transcribe(pcm)

        # Step 4: Reassemble
        head = rewrite_attachment_head(parts.head)
        message = assemble_message(
            segments,
            head,
            mp3,
            transcript=transcript,
            placement=self.config.transcribe.placement,
        )

        processing_time = int((time.time() - start_time) * 1000)

        self.log_info(
            f"Converted voicemail attachment: {len(wav)} bytes WAV -> {len(mp3)} bytes MP3 ({processing_time}ms)",
            transcribed=bool(transcript),
        )

        return ConversionResult(
            correlation_id=correlation_id,
            message=message,
            converted=True,
            transcribed=bool(transcript),
            wav_bytes=len(wav),
            mp3_bytes=len(mp3),
            processing_time_ms=processing_time,
        )
