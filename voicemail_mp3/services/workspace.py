"""Per-invocation temporary workspace."""

import shutil
import tempfile
from pathlib import Path
from typing import Optional

from ..models.config import WorkspaceConfig
from ..utils.correlation import get_correlation_id
from ..utils.logging import LoggerMixin


class Workspace(LoggerMixin):
    """Scratch directory owned by one message conversion.

    Used as an async context manager: the directory is created on entry and
    removed with everything in it on exit, whether the block succeeded,
    returned early or raised.
    """

    def __init__(self, config: WorkspaceConfig):
        self.config = config
        self._path: Optional[Path] = None

    @property
    def path(self) -> Path:
        if self._path is None:
            raise RuntimeError("Workspace is not open")
        return self._path

    async def __aenter__(self) -> "Workspace":
        self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    def open(self) -> Path:
        """Create the workspace directory."""
        correlation_id = get_correlation_id() or "anon"
        self._path = Path(
            tempfile.mkdtemp(
                prefix=f"vmail-{correlation_id}-",
                dir=str(self.config.temp_dir) if self.config.temp_dir else None,
            )
        )

        self.log_debug("Created workspace", workspace=str(self._path))
        return self._path

    def close(self) -> None:
        """Remove the workspace directory and its contents."""
        if self._path is None:
            return

        path, self._path = self._path, None
        shutil.rmtree(path, ignore_errors=True)

        if path.exists():
            self.log_error("Failed to remove workspace", workspace=str(path))
        else:
            self.log_debug("Removed workspace", workspace=str(path))

    def write(self, name: str, data: bytes) -> Path:
        """Write ``data`` to ``name`` inside the workspace."""
        file_path = self.path / name
        with open(file_path, "wb") as f:
            f.write(data)

        # Verify file was written correctly
        if file_path.stat().st_size != len(data):
            raise OSError(f"File size mismatch after writing {file_path}")

        return file_path

    def read(self, name: str) -> bytes:
        """Read ``name`` back, empty bytes if it was never created."""
        file_path = self.path / name
        if not file_path.exists():
            return b""
        with open(file_path, "rb") as f:
            return f.read()

    def file(self, name: str) -> Path:
        return self.path / name
