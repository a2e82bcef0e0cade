"""Speech-to-text transcription over HTTP."""

import asyncio
import time
from typing import AsyncIterator, Union

import aiohttp
from pydantic import ValidationError

from ..errors import TranscriptionError
from ..models.config import TranscribeConfig
from ..models.messages import RecognitionResponse
from ..utils.logging import LoggerMixin

# The service authenticates API keys as the password of this fixed user.
API_KEY_USERNAME = "apikey"


class TranscriptionService(LoggerMixin):
    """Best-effort transcription of voicemail audio.

    Failures of any kind are logged and turned into an empty transcript; the
    message is delivered either way.
    """

    def __init__(self, config: TranscribeConfig):
        self.config = config

    async def transcribe(self, wav: bytes) -> str:
        """
        Transcribe a linear PCM WAV recording.

        Args:
            wav: WAV bytes to send as the request body

        Returns:
            The transcript, or an empty string if none could be obtained
        """
        if not self.config.apikey:
            self.log_warning("Transcription is enabled but no API key is configured")
            return ""

        start_time = time.time()

        try:
            response = await self._recognize(wav)
        except TranscriptionError as e:
            self.log_warning(
                f"Transcription failed, delivering without transcript: {e}",
                endpoint=self.config.url,
            )
            return ""

        transcript = response.transcript
        processing_time = int((time.time() - start_time) * 1000)

        if not transcript:
            self.log_warning(
                "Speech service returned no transcript",
                results_count=len(response.results),
                processing_time_ms=processing_time,
            )
            return ""

        self.log_info(
            f"Transcription completed ({len(transcript)} chars, {processing_time}ms)",
            model=self.config.model,
        )
        return transcript

    async def _recognize(self, wav: bytes) -> RecognitionResponse:
        """Perform the recognize call and validate the JSON response."""
        params = {"continuous": "true", "model": self.config.model}
        headers = {"Content-Type": "audio/wav"}
        auth = aiohttp.BasicAuth(API_KEY_USERNAME, self.config.apikey)

        self.log_debug(
            f"Sending {len(wav)} bytes to speech service",
            rate_limit=self.config.rate_limit,
        )

        try:
            async with aiohttp.ClientSession(auth=auth) as session:
                async with session.post(
                    self.config.url,
                    params=params,
                    headers=headers,
                    data=self._request_body(wav),
                ) as response:
                    if not 200 <= response.status < 300:
                        detail = (await response.text(errors="replace"))[:200]
                        raise TranscriptionError(
                            f"Speech service returned HTTP {response.status}: {detail}"
                        )
                    payload = await response.json(content_type=None)

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TranscriptionError(
                f"Speech service request failed: {e} (type: {type(e).__name__})"
            ) from e
        except ValueError as e:
            raise TranscriptionError(f"Speech service response is not JSON: {e}") from e

        try:
            return RecognitionResponse.model_validate(payload)
        except ValidationError as e:
            raise TranscriptionError(f"Unexpected speech service response: {e}") from e

    def _request_body(self, wav: bytes) -> Union[bytes, AsyncIterator[bytes]]:
        if not self.config.rate_limit or len(wav) <= self.config.rate_limit:
            return wav
        return self._throttled(wav)

    async def _throttled(self, wav: bytes) -> AsyncIterator[bytes]:
        """Stream ``wav`` at no more than ``rate_limit`` bytes per second."""
        step = self.config.rate_limit
        for offset in range(0, len(wav), step):
            if offset:
                await asyncio.sleep(1)
            yield wav[offset : offset + step]
