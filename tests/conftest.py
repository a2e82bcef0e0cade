"""Pytest configuration and fixtures."""

import base64
import io
import os
import shutil
import struct
import tempfile
import wave
from pathlib import Path

import pytest

from voicemail_mp3.errors import SinkError
from voicemail_mp3.models.config import (
    AppConfig,
    AudioConfig,
    LoggingConfig,
    MailSinkConfig,
    TranscribeConfig,
    WorkspaceConfig,
)
from voicemail_mp3.services.audio import AudioPipeline

FAKE_MP3_HEADER = b"ID3\x04\x00\x00\x00\x00\x00\x00\xff\xfb\x30\xc4"

_ENV_PREFIXES = (
    "VM_TRANSCRIBE_",
    "AUDIO_",
    "WORKSPACE_",
    "MAIL_SINK_",
    "OUTBOUND_SMTP_",
    "LOG_",
)
_ENV_NAMES = ("ENABLE_VM_TRANSCRIBE", "VM_TRANSCRIPT_PLACEMENT", "DEBUG")


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep stray settings and .env files out of every test."""
    for name in list(os.environ):
        if name.startswith(_ENV_PREFIXES) or name in _ENV_NAMES:
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def work_dir(temp_dir):
    """Parent directory for workspaces created during a test."""
    path = temp_dir / "work"
    path.mkdir()
    return path


@pytest.fixture
def test_config(work_dir):
    """Create test configuration."""
    return AppConfig(
        transcribe=TranscribeConfig(enabled=False, apikey=None, rate_limit=0),
        audio=AudioConfig(),
        workspace=WorkspaceConfig(temp_dir=work_dir),
        mail_sink=MailSinkConfig(method="sendmail", command="cat"),
        logging=LoggingConfig(level="DEBUG", format="text"),
    )


@pytest.fixture
def sample_wav_data():
    """A short 8 kHz mono 16-bit PCM WAV file."""
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(8000)
        wav.writeframes(b"".join(struct.pack("<h", (i * 37) % 2000 - 1000) for i in range(1600)))
    return buffer.getvalue()


def build_voicemail(wav_data, boundary="XYZ", filename="msg1234.WAV", newline="\n"):
    """Asterisk-style voicemail notification with a base64 WAV attachment."""
    payload = base64.encodebytes(wav_data).decode("ascii").rstrip("\n").split("\n")
    lines = [
        "Date: Fri, 16 Oct 2026 10:00:00 +0000",
        'From: "Voicemail" <asterisk@pbx.example.com>',
        'To: "Mailbox 1234" <user@example.com>',
        "Subject: New voicemail in mailbox 1234",
        "MIME-Version: 1.0",
        f'Content-Type: multipart/mixed; boundary="{boundary}"',
        "",
        "This is a multi-part message in MIME format.",
        "",
        f"--{boundary}",
        "Content-Type: text/plain; charset=ISO-8859-1",
        "Content-Transfer-Encoding: 8bit",
        "",
        "You have a new voicemail from John Doe <5551234>.",
        "",
        f"--{boundary}",
        f'Content-Type: audio/x-wav; name="{filename}"',
        "Content-Transfer-Encoding: base64",
        "Content-Description: Voicemail sound attachment.",
        f'Content-Disposition: attachment; filename="{filename}"',
        "",
        *payload,
        "",
        "",
        f"--{boundary}--",
        "",
    ]
    return newline.join(lines).encode("latin-1")


@pytest.fixture
def voicemail_factory():
    """Expose the message builder to tests."""
    return build_voicemail


@pytest.fixture
def voicemail_message(sample_wav_data):
    """The canonical voicemail: boundary XYZ, attachment msg1234.WAV."""
    return build_voicemail(sample_wav_data)


@pytest.fixture
def plain_message():
    """A notification sent without audio: not multipart at all."""
    return (
        b"Date: Fri, 16 Oct 2026 10:00:00 +0000\n"
        b"From: asterisk@pbx.example.com\n"
        b"To: user@example.com\n"
        b"Subject: New voicemail in mailbox 1234\n"
        b"MIME-Version: 1.0\n"
        b"Content-Type: text/plain; charset=ISO-8859-1\n"
        b"Content-Transfer-Encoding: 8bit\n"
        b"\n"
        b"You have a new voicemail from John Doe <5551234>.\r\n"
    )


@pytest.fixture
def plain_multipart_message():
    """A multipart notification whose header segment declares plain text."""
    return (
        b"From: asterisk@pbx.example.com\n"
        b"To: user@example.com\n"
        b'Content-Type: multipart/mixed; boundary="XYZ"\n'
        b"Content-Description: plain text notification\n"
        b"\n"
        b"--XYZ\n"
        b"Content-Type: text/plain\n"
        b"\n"
        b"No recording was left.\n"
        b"--XYZ--\n"
    )


class FakeToolAudioPipeline(AudioPipeline):
    """AudioPipeline whose codec runs are simulated in-process."""

    def __init__(self, config):
        super().__init__(config)
        self.calls = []

    async def _run_tool(self, args):
        self.calls.append(args)
        target = Path(args[-1])
        if args[0] == self.config.lame_path:
            # lame [options] <in> <out>
            source = Path(args[-2])
            target.write_bytes(FAKE_MP3_HEADER + source.read_bytes()[-64:])
        else:
            # sox <in> [options] <out>
            source = Path(args[1])
            target.write_bytes(source.read_bytes())


class FakeTranscriber:
    """Returns a canned transcript and remembers what it was sent."""

    def __init__(self, transcript="Hello, this is a test voicemail message."):
        self.transcript = transcript
        self.received = []

    async def transcribe(self, wav):
        self.received.append(wav)
        return self.transcript


class RecordingSink:
    """Mail sink that keeps delivered messages in memory."""

    def __init__(self, fail=False):
        self.fail = fail
        self.messages = []

    async def deliver(self, message):
        if self.fail:
            raise SinkError("sendmail exited with status 75")
        self.messages.append(message)


@pytest.fixture
def fake_audio(test_config):
    return FakeToolAudioPipeline(test_config.audio)


@pytest.fixture
def fake_transcriber():
    return FakeTranscriber()


@pytest.fixture
def recording_sink():
    return RecordingSink()


@pytest.fixture
def mock_smtp_server(monkeypatch):
    """Mock SMTP server for testing relay delivery."""

    class MockSMTP:
        def __init__(self, host, port, timeout=None, context=None):
            self.host = host
            self.port = port
            self.messages_sent = []
            self.logged_in = None
            self.started_tls = False

        def starttls(self, context=None):
            self.started_tls = True

        def login(self, user, password):
            self.logged_in = (user, password)

        def sendmail(self, from_addr, to_addrs, msg):
            self.messages_sent.append(
                {"from": from_addr, "to_addrs": list(to_addrs), "message": msg}
            )
            return {}

        def quit(self):
            pass

    mock_instances = []

    def mock_smtp(*args, **kwargs):
        instance = MockSMTP(*args, **kwargs)
        mock_instances.append(instance)
        return instance

    monkeypatch.setattr("smtplib.SMTP", mock_smtp)
    monkeypatch.setattr("smtplib.SMTP_SSL", mock_smtp)

    return mock_instances
