"""Byte-level MIME handling: splitting, extraction, rewriting and assembly."""

from .splitter import find_boundary, split_segments, iter_lines
from .attachment import has_audio_attachment, extract_attachment, decode_attachment
from .headers import rewrite_attachment_head
from .assembler import assemble_message, encode_payload, transcript_banner

__all__ = [
    "find_boundary",
    "split_segments",
    "iter_lines",
    "has_audio_attachment",
    "extract_attachment",
    "decode_attachment",
    "rewrite_attachment_head",
    "assemble_message",
    "encode_payload",
    "transcript_banner",
]
