"""Audio transcoding through external codec tools."""

import asyncio
from typing import List

from ..errors import AudioFormatError, CodecError
from ..models.config import AudioConfig
from ..utils.logging import LoggerMixin
from .workspace import Workspace

SOURCE_WAV = "attachment.wav"
PCM_WAV = "attachment-pcm.wav"
ENCODED_MP3 = "attachment.mp3"


def is_wav_container(data: bytes) -> bool:
    """Check for the RIFF/WAVE magic at the start of ``data``."""
    return len(data) >= 12 and data[:4] == b"RIFF" and data[8:12] == b"WAVE"


class AudioPipeline(LoggerMixin):
    """WAV to linear PCM (sox) and PCM to CBR mono MP3 (lame).

    Encoding is constant bit rate at a fixed low bitrate, trading some
    quality per byte for playback on older handsets and mail clients.
    """

    def __init__(self, config: AudioConfig):
        self.config = config

    async def normalize(self, wav: bytes, workspace: Workspace) -> bytes:
        """
        Convert any WAV encoding (GSM, mu-law, ...) to linear PCM.

        Args:
            wav: Decoded attachment bytes
            workspace: Workspace to hold the intermediate files

        Returns:
            Linear PCM WAV bytes

        Raises:
            AudioFormatError: Input is not a WAV container
            CodecError: sox failed or produced nothing
        """
        if not is_wav_container(wav):
            raise AudioFormatError(
                f"Attachment is not a RIFF/WAVE container (starts with {wav[:12]!r})"
            )

        source = workspace.write(SOURCE_WAV, wav)
        target = workspace.file(PCM_WAV)

        await self._run_tool(
            [self.config.sox_path, str(source), "-e", "signed-integer", str(target)]
        )

        pcm = workspace.read(PCM_WAV)
        if not pcm:
            raise CodecError("sox produced no output")

        self.log_debug(
            "Normalized attachment to linear PCM", wav_bytes=len(wav), pcm_bytes=len(pcm)
        )
        return pcm

    async def encode_mp3(self, pcm: bytes, workspace: Workspace) -> bytes:
        """
        Encode linear PCM WAV to mono constant bit rate MP3.

        Args:
            pcm: Linear PCM WAV bytes
            workspace: Workspace to hold the intermediate files

        Returns:
            MP3 bytes

        Raises:
            CodecError: lame failed or produced nothing
        """
        source = workspace.write(PCM_WAV, pcm)
        target = workspace.file(ENCODED_MP3)

        await self._run_tool(
            [
                self.config.lame_path,
                "--quiet",
                "-m",
                "m",
                "-b",
                str(self.config.bitrate_kbps),
                "--cbr",
                str(source),
                str(target),
            ]
        )

        mp3 = workspace.read(ENCODED_MP3)
        if not mp3:
            raise CodecError("lame produced no output")

        self.log_debug(
            "Encoded MP3",
            pcm_bytes=len(pcm),
            mp3_bytes=len(mp3),
            bitrate_kbps=self.config.bitrate_kbps,
        )
        return mp3

    async def _run_tool(self, args: List[str]) -> None:
        """Run a codec to completion, raising CodecError on any failure."""
        self.log_debug(f"Running {' '.join(args)}")

        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise CodecError(f"{args[0]} not found - is it installed?") from e
        except PermissionError as e:
            raise CodecError(f"{args[0]} is not executable") from e

        _, stderr = await process.communicate()

        if process.returncode != 0:
            raise CodecError(
                f"{args[0]} exited with status {process.returncode}: "
                f"{stderr.decode(errors='replace').strip()}"
            )
