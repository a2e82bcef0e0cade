"""Command line entry point: one voicemail in on stdin, one message out to the MTA."""

import argparse
import asyncio
import sys
import time
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from . import __version__
from .errors import StructuralError, VoicemailError
from .models.config import AppConfig
from .services.mail_sink import MailSink
from .services.pipeline import VoicemailConverter
from .services.workspace import Workspace
from .utils.correlation import generate_correlation_id, set_correlation_id
from .utils.logging import LoggerMixin, get_logger, setup_logging

EXIT_OK = 0
EXIT_FAILURE = 1


class Dispatcher(LoggerMixin):
    """Runs one message through the converter and hands it to the mail sink."""

    def __init__(
        self,
        config: AppConfig,
        converter: Optional[VoicemailConverter] = None,
        sink: Optional[MailSink] = None,
    ):
        self.config = config
        self.converter = converter or VoicemailConverter(config)
        self.sink = sink or MailSink(config.mail_sink, config.outbound_smtp)

    async def run(self, raw: bytes) -> int:
        """
        Process one raw message.

        Args:
            raw: Complete message read from stdin

        Returns:
            Process exit status: 0 once the sink accepted the message
        """
        set_correlation_id(generate_correlation_id())
        start_time = time.time()

        self.log_info(f"Processing voicemail message ({len(raw)} bytes)")

        try:
            if not raw:
                raise StructuralError("No message on standard input")

            async with Workspace(self.config.workspace) as workspace:
                result = await self.converter.convert(raw, workspace)
                await self.sink.deliver(result.message)

        except VoicemailError as e:
            self.log_error(
                f"Voicemail processing failed, nothing was delivered: {e}",
                error_type=type(e).__name__,
            )
            return EXIT_FAILURE

        except Exception:
            self.logger.exception("Unexpected error while processing voicemail")
            return EXIT_FAILURE

        self.log_info(
            f"Voicemail processing completed: converted={result.converted}, "
            f"transcribed={result.transcribed}, time={int((time.time() - start_time) * 1000)}ms"
        )
        return EXIT_OK


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="voicemail-mp3",
        description="Convert the WAV attachment of a voicemail email read from "
        "stdin to MP3 and pass the message on to the MTA.",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging (same as DEBUG=true)"
    )
    parser.add_argument(
        "--env-file", type=Path, default=None, help="Read settings from this env file"
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    # MTA-style flags (e.g. -t, -oi) may be passed through by the caller.
    args, ignored = parser.parse_known_args(argv)
    args.ignored = ignored
    return args


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    args = parse_args(argv)
    logger = get_logger(__name__)

    try:
        config = AppConfig.load(args.env_file)
    except ValidationError as e:
        setup_logging()
        logger.error(f"Invalid configuration: {e}")
        sys.exit(EXIT_FAILURE)

    if args.debug:
        config.debug = True

    setup_logging(
        level=config.log_level,
        format_type=config.logging.format,
        syslog=config.logging.syslog,
    )

    if args.ignored:
        logger.debug(f"Ignoring arguments: {' '.join(args.ignored)}")

    raw = sys.stdin.buffer.read()
    sys.exit(asyncio.run(Dispatcher(config).run(raw)))


if __name__ == "__main__":
    main()
