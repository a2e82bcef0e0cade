#!/usr/bin/env python3
"""
Build a sample voicemail notification email for feeding to voicemail-mp3.

The layout mirrors what Asterisk's app_voicemail sends: a text/plain body
part followed by a base64 audio/x-wav attachment with a 6-line header block.
"""

import argparse
import base64
import io
import math
import struct
import sys
import wave
from datetime import datetime
from email.utils import format_datetime, make_msgid
from pathlib import Path

BOUNDARY = "----voicemail_123420260101120000"


def create_sample_wav_data(duration=2.0, rate=8000, frequency=440.0):
    """Create a mono 16-bit PCM WAV holding a sine tone."""
    frames = int(duration * rate)
    samples = b"".join(
        struct.pack("<h", int(8000 * math.sin(2 * math.pi * frequency * i / rate)))
        for i in range(frames)
    )

    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(rate)
        wav.writeframes(samples)
    return buffer.getvalue()


def build_voicemail(
    from_email, to_email, wav_data, filename="msg0001.WAV", attach=True
):
    """Return the complete message as bytes."""
    now = datetime.now().astimezone()
    headers = [
        f"Date: {format_datetime(now)}",
        f"From: \"Voicemail\" <{from_email}>",
        f"To: \"Mailbox 1234\" <{to_email}>",
        "Subject: New voicemail in mailbox 1234",
        f"Message-ID: {make_msgid('voicemail')}",
        "MIME-Version: 1.0",
    ]

    body = (
        "Dear Mailbox 1234:\n\n"
        "\tjust wanted to let you know you were just left a 0:02 long message "
        "(number 1)\nin mailbox 1234 from John Doe <5551234>.\n\n"
        "--Asterisk\n\n"
    )

    if not attach:
        headers.append("Content-Type: text/plain; charset=ISO-8859-1")
        headers.append("Content-Transfer-Encoding: 8bit")
        return ("\n".join(headers) + "\n\n" + body).encode("latin-1")

    headers.append(f'Content-Type: multipart/mixed; boundary="{BOUNDARY}"')
    payload = base64.encodebytes(wav_data).decode("ascii")

    lines = [
        *headers,
        "",
        "This is a multi-part message in MIME format.",
        "",
        f"--{BOUNDARY}",
        "Content-Type: text/plain; charset=ISO-8859-1",
        "Content-Transfer-Encoding: 8bit",
        "",
        body,
        f"--{BOUNDARY}",
        f'Content-Type: audio/x-wav; name="{filename}"',
        "Content-Transfer-Encoding: base64",
        "Content-Description: Voicemail sound attachment.",
        f'Content-Disposition: attachment; filename="{filename}"',
        "",
        payload,
        "",
        f"--{BOUNDARY}--",
        "",
    ]
    return "\n".join(lines).encode("latin-1")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Write a sample voicemail email to stdout or a file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Generated tone, piped straight into the converter
  python make_test_voicemail.py | MAIL_SINK_COMMAND=cat voicemail-mp3

  # Attach a real recording
  python make_test_voicemail.py --wav-file msg0001.wav --output msg0001.eml

  # Notification without audio (passes through unchanged)
  python make_test_voicemail.py --no-attachment
        """,
    )
    parser.add_argument(
        "--from",
        dest="from_email",
        default="asterisk@pbx.example.com",
        help="From email address (default: asterisk@pbx.example.com)",
    )
    parser.add_argument(
        "--to",
        dest="to_email",
        default="user@example.com",
        help="To email address (default: user@example.com)",
    )
    parser.add_argument(
        "--wav-file", type=Path, help="WAV file to attach instead of a generated tone"
    )
    parser.add_argument(
        "--duration", type=float, default=2.0, help="Generated tone length in seconds"
    )
    parser.add_argument(
        "--no-attachment", action="store_true", help="Build a text-only notification"
    )
    parser.add_argument("--output", type=Path, help="Write to this file instead of stdout")

    args = parser.parse_args()

    if args.wav_file:
        if not args.wav_file.exists():
            print(f"WAV file not found: {args.wav_file}", file=sys.stderr)
            sys.exit(1)
        wav_data = args.wav_file.read_bytes()
        filename = args.wav_file.name
    else:
        wav_data = create_sample_wav_data(duration=args.duration)
        filename = "msg0001.WAV"

    message = build_voicemail(
        args.from_email,
        args.to_email,
        wav_data,
        filename=filename,
        attach=not args.no_attachment,
    )

    if args.output:
        args.output.write_bytes(message)
        print(f"Wrote {len(message)} bytes to {args.output}", file=sys.stderr)
    else:
        sys.stdout.buffer.write(message)
