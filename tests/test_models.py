"""Tests for data models."""

import pytest
from pydantic import ValidationError

from voicemail_mp3.errors import StructuralError
from voicemail_mp3.models.config import (
    AppConfig,
    AudioConfig,
    MailSinkConfig,
    TranscribeConfig,
    WorkspaceConfig,
)
from voicemail_mp3.models.messages import (
    AttachmentParts,
    ConversionResult,
    MessageSegments,
    RecognitionResponse,
)


class TestTranscribeConfig:
    """Test speech-to-text configuration."""

    def test_defaults(self):
        """Transcription is off unless switched on."""
        config = TranscribeConfig()

        assert config.enabled is False
        assert config.apikey is None
        assert config.model == "en-US_NarrowbandModel"
        assert config.url.endswith("/speech-to-text/api/v1/recognize")
        assert config.rate_limit == 40000
        assert config.placement == "attachment"

    def test_environment_variables(self, monkeypatch):
        """Test reading the deployment's variable names."""
        monkeypatch.setenv("ENABLE_VM_TRANSCRIBE", "true")
        monkeypatch.setenv("VM_TRANSCRIBE_APIKEY", "secret")
        monkeypatch.setenv("VM_TRANSCRIBE_MODEL", "en-GB_NarrowbandModel")
        monkeypatch.setenv("VM_TRANSCRIBE_URL", "http://stt.internal/recognize")
        monkeypatch.setenv("VM_TRANSCRIPT_PLACEMENT", "body")

        config = TranscribeConfig()

        assert config.enabled is True
        assert config.apikey == "secret"
        assert config.model == "en-GB_NarrowbandModel"
        assert config.url == "http://stt.internal/recognize"
        assert config.placement == "body"

    def test_negative_rate_limit(self):
        with pytest.raises(ValidationError, match="Rate limit cannot be negative"):
            TranscribeConfig(rate_limit=-1)

    def test_unknown_placement(self):
        with pytest.raises(ValidationError):
            TranscribeConfig(placement="subject")


class TestAudioConfig:
    """Test codec configuration."""

    def test_defaults(self):
        config = AudioConfig()

        assert config.sox_path == "sox"
        assert config.lame_path == "lame"
        assert config.bitrate_kbps == 24

    def test_bitrate_must_be_positive(self):
        """Test bitrate validation."""
        with pytest.raises(ValidationError, match="Bitrate must be positive"):
            AudioConfig(bitrate_kbps=0)


class TestWorkspaceConfig:
    """Test workspace configuration."""

    def test_temp_dir_is_created(self, temp_dir):
        """Test that a configured parent directory is created."""
        target = temp_dir / "nested" / "work"

        config = WorkspaceConfig(temp_dir=str(target))

        assert config.temp_dir == target
        assert target.is_dir()

    def test_system_default(self):
        assert WorkspaceConfig().temp_dir is None


class TestMailSinkConfig:
    """Test mail sink configuration."""

    def test_defaults(self):
        config = MailSinkConfig()

        assert config.method == "sendmail"
        assert config.command == "/usr/sbin/sendmail -oi -t"

    def test_invalid_method(self):
        with pytest.raises(ValidationError):
            MailSinkConfig(method="pigeon")


class TestAppConfig:
    """Test application configuration."""

    def test_default_sections(self):
        """Test that every section is built from the environment."""
        config = AppConfig()

        assert config.transcribe.enabled is False
        assert config.audio.bitrate_kbps == 24
        assert config.mail_sink.method == "sendmail"
        assert config.outbound_smtp.port == 25
        assert config.logging.level == "INFO"
        assert config.debug is False

    def test_nested_environment_variables(self, monkeypatch):
        monkeypatch.setenv("AUDIO_BITRATE_KBPS", "32")
        monkeypatch.setenv("MAIL_SINK_METHOD", "smtp")
        monkeypatch.setenv("OUTBOUND_SMTP_HOST", "relay.example.com")
        monkeypatch.setenv("LOG_FORMAT", "json")

        config = AppConfig()

        assert config.audio.bitrate_kbps == 32
        assert config.mail_sink.method == "smtp"
        assert config.outbound_smtp.host == "relay.example.com"
        assert config.logging.format == "json"

    def test_load_from_env_file(self, temp_dir):
        """Test reading every section from an explicit env file."""
        env_file = temp_dir / "voicemail.env"
        env_file.write_text(
            "ENABLE_VM_TRANSCRIBE=true\n"
            "VM_TRANSCRIBE_APIKEY=secret\n"
            "AUDIO_LAME_PATH=/opt/lame/bin/lame\n"
            "MAIL_SINK_COMMAND=/usr/lib/sendmail -t\n"
            "LOG_LEVEL=WARNING\n"
            "DEBUG=true\n"
        )

        config = AppConfig.load(env_file)

        assert config.transcribe.enabled is True
        assert config.transcribe.apikey == "secret"
        assert config.audio.lame_path == "/opt/lame/bin/lame"
        assert config.mail_sink.command == "/usr/lib/sendmail -t"
        assert config.logging.level == "WARNING"
        assert config.debug is True

    def test_dotenv_in_working_directory(self, tmp_path):
        (tmp_path / ".env").write_text("VM_TRANSCRIBE_MODEL=fr-FR_NarrowbandModel\n")

        assert AppConfig.load().transcribe.model == "fr-FR_NarrowbandModel"

    def test_log_level(self):
        """Test that debug overrides the configured level."""
        config = AppConfig()
        assert config.log_level == "INFO"

        config.debug = True
        assert config.log_level == "DEBUG"


class TestMessageSegments:
    """Test the positional segment view."""

    SEGMENTS = [b"headers\n", b"multipart\n", b"--B\nbody\n", b"--B\naudio\n", b"--B--\n"]

    def test_accessors(self):
        segments = MessageSegments(self.SEGMENTS)

        assert len(segments) == 5
        assert segments.message_header == b"headers\n"
        assert segments.multipart_header == b"multipart\n"
        assert segments.body_part == b"--B\nbody\n"
        assert segments.attachment_part == b"--B\naudio\n"
        assert segments.trailer == b"--B--\n"
        assert list(segments) == self.SEGMENTS

    def test_trailer_keeps_extra_segments(self):
        """Test that nothing after the attachment is dropped."""
        segments = MessageSegments(self.SEGMENTS + [b"epilogue\n"])
        assert segments.trailer == b"--B--\nepilogue\n"

    def test_missing_segment(self):
        segments = MessageSegments(self.SEGMENTS[:3])

        assert segments.body_part == b"--B\nbody\n"
        with pytest.raises(StructuralError, match="no attachment segment"):
            segments.attachment_part
        with pytest.raises(StructuralError):
            segments.require_complete()


class TestAttachmentParts:
    """Test AttachmentParts model."""

    def test_six_line_head(self):
        parts = AttachmentParts(head=b"--B\r\na\r\nb\r\nc\r\nd\r\n\r\n", body=b"UklGRg==\r\n")

        assert len(parts.head_lines) == 6
        assert parts.head_lines[-1] == b"\r\n"

    def test_carriage_return_inside_a_line(self):
        """Test that only LF ends a head line."""
        head = b"--B\na\rb\nc\nd\ne\n\n"
        parts = AttachmentParts(head=head, body=b"")

        assert len(parts.head_lines) == 6
        assert parts.head_lines[1] == b"a\rb\n"

    def test_wrong_head_length(self):
        """Test validation of the header block size."""
        with pytest.raises(ValidationError, match="Attachment head must be 6 lines"):
            AttachmentParts(head=b"--B\na\n\n", body=b"")


class TestRecognitionResponse:
    """Test parsing the recognize endpoint's JSON."""

    def test_transcript_joins_results(self):
        """Test that each result contributes its first alternative."""
        response = RecognitionResponse.model_validate(
            {
                "result_index": 0,
                "results": [
                    {
                        "alternatives": [
                            {"transcript": "hi this is Bob ", "confidence": 0.91},
                            {"transcript": "hi this is Rob "},
                        ],
                        "final": True,
                    },
                    {"alternatives": [{"transcript": "call me back "}], "final": True},
                ],
            }
        )

        assert response.transcript == "hi this is Bob \ncall me back "

    def test_empty_results(self):
        assert RecognitionResponse.model_validate({"results": []}).transcript == ""
        assert RecognitionResponse.model_validate({}).transcript == ""

    def test_results_without_alternatives(self):
        response = RecognitionResponse.model_validate(
            {"results": [{"alternatives": []}, {"alternatives": [{"transcript": ""}]}]}
        )
        assert response.transcript == ""

    def test_unknown_fields_ignored(self):
        response = RecognitionResponse.model_validate(
            {"results": [], "warnings": ["Unknown arguments: foo"]}
        )
        assert response.results == []


class TestConversionResult:
    """Test ConversionResult model."""

    def test_passthrough_defaults(self):
        result = ConversionResult(correlation_id="vm_000000000000", message=b"x")

        assert result.converted is False
        assert result.transcribed is False
        assert result.wav_bytes == 0
        assert result.mp3_bytes == 0
