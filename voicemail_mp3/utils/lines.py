"""Line scanning over raw message bytes."""

from typing import Iterator


def iter_lines(data: bytes) -> Iterator[bytes]:
    """Yield lines split on ``\\n`` with their terminators; the last may be unterminated.

    A CR is ordinary data here, so ``\\r\\n`` lines keep their CR and a lone
    CR never ends a line.
    """
    start = 0
    length = len(data)
    while start < length:
        end = data.find(b"\n", start)
        if end == -1:
            yield data[start:]
            return
        yield data[start : end + 1]
        start = end + 1
