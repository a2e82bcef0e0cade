"""Reassembling the outgoing message from its segments.

Text sections (headers, body part, attachment head, banner, trailer) are
written with LF line endings. The base64 payload is the one section written
with CRLF.
"""

import base64

from ..models.messages import MessageSegments

TRANSCRIPT_BANNER = b"--- Automated transcription result ---\n"
PAYLOAD_TERMINATOR = b"\n\n"
PLACEMENTS = ("attachment", "body")


def to_lf(data: bytes) -> bytes:
    return data.replace(b"\r\n", b"\n")


def to_crlf(data: bytes) -> bytes:
    return to_lf(data).replace(b"\n", b"\r\n")


def encode_payload(audio: bytes) -> bytes:
    """Base64 in 76-character CRLF-terminated lines."""
    return to_crlf(base64.encodebytes(audio))


def transcript_banner(transcript: str) -> bytes:
    """Separator line plus transcript, or nothing for an empty transcript."""
    if not transcript:
        return b""

    text = to_lf(transcript.encode("utf-8"))
    if not text.endswith(b"\n"):
        text += b"\n"
    return TRANSCRIPT_BANNER + text


def assemble_message(
    segments: MessageSegments,
    head: bytes,
    audio: bytes,
    transcript: str = "",
    placement: str = "attachment",
) -> bytes:
    """Build the outgoing message around the re-encoded attachment.

    Args:
        segments: Segments of the original message
        head: Rewritten attachment header block
        audio: Encoded MP3 bytes
        transcript: Transcript text, empty to leave the banner out
        placement: ``attachment`` puts the banner between the attachment
            head and its payload, ``body`` appends it to the text body part

    Returns:
        The complete message as bytes
    """
    if placement not in PLACEMENTS:
        raise ValueError(f"Unknown transcript placement: {placement}")

    banner = transcript_banner(transcript)
    body = to_lf(segments.body_part)
    if placement == "body":
        body += banner
        banner = b""

    return b"".join(
        [
            to_lf(segments.message_header),
            to_lf(segments.multipart_header),
            body,
            to_lf(head),
            banner,
            encode_payload(audio),
            PAYLOAD_TERMINATOR,
            to_lf(segments.trailer),
        ]
    )
