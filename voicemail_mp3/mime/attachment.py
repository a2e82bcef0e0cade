"""Locating and decoding the audio attachment part."""

import base64
import binascii

from pydantic import ValidationError

from ..errors import DecodeError, StructuralError
from ..models.messages import ATTACHMENT_HEAD_LINES, AttachmentParts, MessageSegments
from .splitter import iter_lines

PLAIN_MARKER = b"plain"


def has_audio_attachment(segments: MessageSegments) -> bool:
    """Decide whether the message carries an attachment to convert.

    The segment opened by the boundary header is checked for a ``plain``
    content type, which marks a notification sent without audio.

    Raises:
        StructuralError: The message was not split on a boundary, so there
            is no segment 1 to inspect.
    """
    return PLAIN_MARKER not in segments.multipart_header.lower()


def extract_attachment(segments: MessageSegments) -> AttachmentParts:
    """Split the attachment segment into its 6-line head and base64 body.

    Raises:
        StructuralError: Segments are missing or the head is not exactly
            six lines ending with the blank separator.
    """
    segments.require_complete()

    lines = list(iter_lines(segments.attachment_part))
    if len(lines) < ATTACHMENT_HEAD_LINES:
        raise StructuralError(
            f"Attachment part has {len(lines)} lines, expected at least {ATTACHMENT_HEAD_LINES}"
        )

    head_lines = lines[:ATTACHMENT_HEAD_LINES]
    if head_lines[-1].strip():
        raise StructuralError(
            f"Attachment header block is not {ATTACHMENT_HEAD_LINES} lines long"
        )

    try:
        return AttachmentParts(
            head=b"".join(head_lines),
            body=b"".join(lines[ATTACHMENT_HEAD_LINES:]),
        )
    except ValidationError as e:
        raise StructuralError(f"Malformed attachment header block: {e}") from e


def decode_attachment(parts: AttachmentParts) -> bytes:
    """Decode the base64 body to raw audio bytes.

    Raises:
        DecodeError: The payload is empty or not valid base64.
    """
    text = parts.body.replace(b"\r\n", b"\n")
    payload = b"".join(line.strip() for line in text.split(b"\n"))

    if not payload:
        raise DecodeError("Attachment has no base64 payload")

    try:
        return base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise DecodeError(f"Invalid base64 attachment payload: {e}") from e
