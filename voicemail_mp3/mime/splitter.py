"""Boundary discovery and line-oriented splitting of raw messages.

The message is never decoded as text. Lines are scanned on ``\\n`` over the
raw bytes, so a CR before the LF stays attached to its line and joining
the segments back together gives the exact input.
"""

import re
from typing import List, Optional

from ..errors import StructuralError
from ..utils.lines import iter_lines

_HEADER_END_RE = re.compile(rb"\r?\n\r?\n")
_BOUNDARY_RE = re.compile(
    rb'boundary\s*=\s*(?:"([^"\r\n]*)"|([^\s;"]*))', re.IGNORECASE
)
_BOUNDARY_PARAM = b"boundary="


def header_block(raw: bytes) -> bytes:
    """Top-level header lines, up to the first empty line."""
    match = _HEADER_END_RE.search(raw)
    return raw[: match.start()] if match else raw


def find_boundary(raw: bytes) -> Optional[str]:
    """Return the multipart boundary token, or None if the message has none.

    Raises:
        StructuralError: The ``boundary=`` parameter is present but empty.
    """
    match = _BOUNDARY_RE.search(header_block(raw))
    if not match:
        return None

    token = match.group(1) if match.group(1) is not None else match.group(2)
    if not token:
        raise StructuralError("Content-Type declares an empty multipart boundary")

    return token.decode("latin-1")


def is_boundary_line(line: bytes, token: bytes) -> bool:
    """True for a delimiter line or for the header line declaring the token."""
    if token not in line:
        return False

    stripped = line.rstrip()
    if stripped in (b"--" + token, b"--" + token + b"--"):
        return True

    return _BOUNDARY_PARAM in line.lower().replace(b" ", b"")


def split_segments(raw: bytes, boundary: Optional[str]) -> List[bytes]:
    """Split ``raw`` into segments on lines carrying ``boundary``.

    A matching line opens a new segment and is kept as its first line;
    whatever precedes the first match is segment 0. Without a boundary, or
    when it never occurs, the whole message is a single segment.
    """
    if not boundary:
        return [raw]

    token = boundary.encode("latin-1")
    segments = [bytearray()]

    for line in iter_lines(raw):
        if is_boundary_line(line, token):
            segments.append(bytearray())
        segments[-1].extend(line)

    return [bytes(segment) for segment in segments]
