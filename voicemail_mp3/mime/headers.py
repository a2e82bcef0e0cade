"""Rewriting the attachment header block for the MP3 payload."""

import re

from .splitter import iter_lines

_X_WAV_RE = re.compile(rb"x-wav", re.IGNORECASE)
_AUDIO_WAV_RE = re.compile(rb"audio/wav\b", re.IGNORECASE)
_WAV_SUFFIX_RE = re.compile(rb"\.wav\b", re.IGNORECASE)


def rewrite_attachment_head(head: bytes) -> bytes:
    """Declare ``audio/mpeg`` and a ``.mp3`` filename in the attachment head.

    Delimiter lines are copied as-is; every other line only has its WAV
    content type and filename suffix replaced. Already rewritten heads come
    back unchanged.
    """
    rewritten = []
    for line in iter_lines(head):
        if line.startswith(b"--"):
            rewritten.append(line)
            continue

        line = _X_WAV_RE.sub(b"mpeg", line)
        line = _AUDIO_WAV_RE.sub(b"audio/mpeg", line)
        line = _WAV_SUFFIX_RE.sub(b".mp3", line)
        rewritten.append(line)

    return b"".join(rewritten)
