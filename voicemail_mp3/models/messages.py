"""Message, recognition and result data models."""

from typing import List

from pydantic import BaseModel, Field, field_validator

from ..errors import StructuralError
from ..utils.lines import iter_lines

# Lines in an attachment's own header block: boundary delimiter,
# Content-Type, Content-Transfer-Encoding, Content-Description,
# Content-Disposition and the blank line closing the block.
ATTACHMENT_HEAD_LINES = 6


class MessageSegments:
    """Positional view over the segments produced by the MIME splitter.

    Splitting a voicemail on its boundary token yields a fixed layout: the
    top-level headers, the multipart header (which carries the
    ``boundary=`` parameter and the preamble), the text body part, the audio
    attachment part and the closing delimiter. The index knowledge lives
    here and nowhere else.
    """

    MESSAGE_HEADER = 0
    MULTIPART_HEADER = 1
    BODY_PART = 2
    ATTACHMENT_PART = 3
    TRAILER = 4

    def __init__(self, segments: List[bytes]):
        self._segments = list(segments)

    def __len__(self) -> int:
        return len(self._segments)

    def __iter__(self):
        return iter(self._segments)

    def _get(self, index: int, name: str) -> bytes:
        if index >= len(self._segments):
            raise StructuralError(
                f"Message has {len(self._segments)} segments, no {name} segment at index {index}"
            )
        return self._segments[index]

    @property
    def message_header(self) -> bytes:
        return self._get(self.MESSAGE_HEADER, "message header")

    @property
    def multipart_header(self) -> bytes:
        return self._get(self.MULTIPART_HEADER, "multipart header")

    @property
    def body_part(self) -> bytes:
        return self._get(self.BODY_PART, "body")

    @property
    def attachment_part(self) -> bytes:
        return self._get(self.ATTACHMENT_PART, "attachment")

    @property
    def trailer(self) -> bytes:
        """Segment 4 plus anything after it, so no bytes are dropped."""
        self._get(self.TRAILER, "trailer")
        return b"".join(self._segments[self.TRAILER :])

    def require_complete(self) -> None:
        """Raise StructuralError unless every positional segment exists."""
        self._get(self.TRAILER, "trailer")


class AttachmentParts(BaseModel):
    """An attachment segment split into its header block and base64 body."""

    head: bytes = Field(..., description="Attachment header block, LF or CRLF lines")
    body: bytes = Field(..., description="Base64 payload lines")

    @field_validator("head")
    @classmethod
    def validate_head(cls, v):
        """Ensure the head is exactly the attachment header block."""
        lines = list(iter_lines(v))
        if len(lines) != ATTACHMENT_HEAD_LINES:
            raise ValueError(
                f"Attachment head must be {ATTACHMENT_HEAD_LINES} lines, got {len(lines)}"
            )
        return v

    @property
    def head_lines(self) -> List[bytes]:
        return list(iter_lines(self.head))


class RecognitionAlternative(BaseModel):
    """One hypothesis returned by the speech service."""

    transcript: str = Field(default="", description="Recognized text")
    confidence: float = Field(default=0.0, description="Confidence score (0.0-1.0)")


class RecognitionResult(BaseModel):
    """One recognized utterance; continuous mode returns several."""

    alternatives: List[RecognitionAlternative] = Field(default_factory=list)
    final: bool = Field(default=True)


class RecognitionResponse(BaseModel):
    """JSON body returned by the recognize endpoint."""

    results: List[RecognitionResult] = Field(default_factory=list)
    result_index: int = Field(default=0)

    model_config = {"extra": "ignore"}

    @property
    def transcript(self) -> str:
        """Best transcript of every result, one per line, unmodified."""
        return "\n".join(
            result.alternatives[0].transcript
            for result in self.results
            if result.alternatives and result.alternatives[0].transcript
        )


class ConversionResult(BaseModel):
    """Result of converting one voicemail message."""

    correlation_id: str = Field(..., description="Correlation ID of the invocation")
    message: bytes = Field(..., description="Message to hand to the mail sink")
    converted: bool = Field(
        default=False, description="False when the message passed through untouched"
    )
    transcribed: bool = Field(
        default=False, description="Whether a transcript was inserted"
    )
    wav_bytes: int = Field(default=0, description="Size of the decoded WAV attachment")
    mp3_bytes: int = Field(default=0, description="Size of the encoded MP3 attachment")
    processing_time_ms: int = Field(
        default=0, description="Total processing time in milliseconds"
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "correlation_id": "vm_1a2b3c4d5e6f",
                "converted": True,
                "transcribed": False,
                "wav_bytes": 96044,
                "mp3_bytes": 18144,
                "processing_time_ms": 420,
            }
        }
    }
