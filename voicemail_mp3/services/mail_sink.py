"""Handing the converted message to the mail transfer agent."""

import asyncio
import re
import shlex
import smtplib
import ssl
from email.parser import BytesHeaderParser
from email.policy import compat32
from email.utils import getaddresses, parseaddr
from typing import List, Tuple

from ..errors import SinkError
from ..models.config import MailSinkConfig, OutboundSMTPConfig
from ..utils.lines import iter_lines
from ..utils.logging import LoggerMixin

_HEADER_END_RE = re.compile(rb"\r?\n(?=\r?\n)")
_BARE_LF_RE = re.compile(rb"(?<!\r)\n")
_CONTINUATION = (b" ", b"\t")


def smtp_wire_format(message: bytes) -> bytes:
    """Prepare ``message`` for the DATA command.

    Bcc header fields are removed, as ``sendmail -t`` would, and every line
    ends in CRLF. Nothing else is touched.
    """
    match = _HEADER_END_RE.search(message)
    cut = match.end() if match else len(message)

    headers = []
    in_bcc = False
    for line in iter_lines(message[:cut]):
        if in_bcc and line.startswith(_CONTINUATION):
            continue
        in_bcc = line[:4].lower() == b"bcc:"
        if not in_bcc:
            headers.append(line)

    return _BARE_LF_RE.sub(b"\r\n", b"".join(headers) + message[cut:])


class MailSink(LoggerMixin):
    """Delivers a finished message to the configured MTA.

    The sendmail command gets the bytes unchanged; the SMTP relay gets them
    in wire format (see :func:`smtp_wire_format`).
    """

    def __init__(self, config: MailSinkConfig, smtp_config: OutboundSMTPConfig):
        self.config = config
        self.smtp_config = smtp_config

    async def deliver(self, message: bytes) -> None:
        """
        Deliver ``message``.

        Raises:
            SinkError: The MTA could not be reached or refused the message
        """
        if self.config.method == "smtp":
            await asyncio.get_running_loop().run_in_executor(
                None, self._send_smtp_sync, message
            )
        else:
            await self._send_command(message)

        self.log_info(
            f"Message handed to mail sink ({len(message)} bytes)",
            method=self.config.method,
        )

    async def _send_command(self, message: bytes) -> None:
        """Pipe the message into a sendmail-compatible command."""
        args = shlex.split(self.config.command)
        if not args:
            raise SinkError("Mail sink command is empty")

        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise SinkError(f"Cannot run mail sink command {args[0]}: {e}") from e

        _, stderr = await process.communicate(message)

        if process.returncode != 0:
            raise SinkError(
                f"{args[0]} exited with status {process.returncode}: "
                f"{stderr.decode(errors='replace').strip()}"
            )

    def _send_smtp_sync(self, message: bytes) -> None:
        """Relay the message over SMTP without re-serializing it."""
        sender, recipients = self._envelope(message)

        smtp_client = None
        try:
            smtp_client = self._create_smtp_client_sync()
            refused = smtp_client.sendmail(sender, recipients, smtp_wire_format(message))
            if refused:
                self.log_warning(
                    f"Some recipients were refused: {', '.join(refused)}",
                    refused_count=len(refused),
                )
        except (smtplib.SMTPException, OSError) as e:
            raise SinkError(
                f"SMTP delivery failed: {e} (host: {self.smtp_config.host}:{self.smtp_config.port}, type: {type(e).__name__})"
            ) from e
        finally:
            if smtp_client:
                try:
                    smtp_client.quit()
                except (smtplib.SMTPException, OSError):
                    pass  # Connection already gone

    def _envelope(self, message: bytes) -> Tuple[str, List[str]]:
        """Envelope sender and recipients from the message headers."""
        headers = BytesHeaderParser(policy=compat32).parsebytes(message)

        sender = parseaddr(headers.get("From", ""))[1]
        recipients = [
            address
            for _, address in getaddresses(
                headers.get_all("To", []) + headers.get_all("Cc", []) + headers.get_all("Bcc", [])
            )
            if address
        ]

        if not recipients:
            raise SinkError("Message has no recipients in To, Cc or Bcc")

        return sender, recipients

    def _create_smtp_client_sync(self) -> smtplib.SMTP:
        """Create and configure SMTP client synchronously."""
        config = self.smtp_config

        if config.use_ssl:
            context = ssl.create_default_context()
            smtp_client = smtplib.SMTP_SSL(
                config.host, config.port, context=context, timeout=config.timeout
            )
        else:
            smtp_client = smtplib.SMTP(config.host, config.port, timeout=config.timeout)

            if config.use_tls:
                context = ssl.create_default_context()
                smtp_client.starttls(context=context)

        if config.user and config.password:
            smtp_client.login(config.user, config.password)
            self.log_debug(f"SMTP authentication successful for {config.user}@{config.host}")

        return smtp_client
