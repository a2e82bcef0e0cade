"""Configuration models using Pydantic for environment-based settings."""

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class TranscribeConfig(BaseSettings):
    """Speech-to-text service configuration."""

    enabled: bool = Field(
        default=False,
        validation_alias="ENABLE_VM_TRANSCRIBE",
        description="Send voicemail audio to the speech-to-text service",
    )
    apikey: Optional[str] = Field(
        default=None, description="API key used as the basic auth password"
    )
    model: str = Field(
        default="en-US_NarrowbandModel", description="Speech recognition model"
    )
    url: str = Field(
        default="https://stream.watsonplatform.net/speech-to-text/api/v1/recognize",
        description="Recognition endpoint",
    )
    rate_limit: int = Field(
        default=40000, description="Upload ceiling in bytes per second (0 = none)"
    )
    placement: Literal["attachment", "body"] = Field(
        default="attachment",
        validation_alias="VM_TRANSCRIPT_PLACEMENT",
        description="Where the transcript banner is inserted",
    )

    model_config = {
        "env_prefix": "VM_TRANSCRIBE_",
        "extra": "ignore",
        "populate_by_name": True,
        "env_file": ".env",
    }

    @field_validator("rate_limit")
    @classmethod
    def validate_rate_limit(cls, v):
        if v < 0:
            raise ValueError("Rate limit cannot be negative")
        return v


class AudioConfig(BaseSettings):
    """External codec configuration."""

    sox_path: str = Field(default="sox", description="sox executable")
    lame_path: str = Field(default="lame", description="lame executable")
    bitrate_kbps: int = Field(default=24, description="Constant MP3 bitrate in kbps")

    model_config = {"env_prefix": "AUDIO_", "extra": "ignore", "env_file": ".env"}

    @field_validator("bitrate_kbps")
    @classmethod
    def validate_bitrate(cls, v):
        if v <= 0:
            raise ValueError("Bitrate must be positive")
        return v


class WorkspaceConfig(BaseSettings):
    """Temporary workspace configuration."""

    temp_dir: Optional[Path] = Field(
        default=None, description="Parent directory for per-message workspaces"
    )

    model_config = {"env_prefix": "WORKSPACE_", "extra": "ignore", "env_file": ".env"}

    @field_validator("temp_dir", mode="before")
    @classmethod
    def ensure_directory_exists(cls, v):
        if v:
            path = Path(v)
            path.mkdir(parents=True, exist_ok=True)
            return path
        return None


class MailSinkConfig(BaseSettings):
    """Where the converted message is handed off."""

    method: Literal["sendmail", "smtp"] = Field(
        default="sendmail", description="Delivery method"
    )
    command: str = Field(
        default="/usr/sbin/sendmail -oi -t",
        description="Command that reads the message on stdin",
    )

    model_config = {"env_prefix": "MAIL_SINK_", "extra": "ignore", "env_file": ".env"}


class OutboundSMTPConfig(BaseSettings):
    """Outbound SMTP relay used when the sink method is ``smtp``."""

    host: str = Field(default="localhost", description="Outbound SMTP server hostname")
    port: int = Field(default=25, description="Outbound SMTP server port")
    user: Optional[str] = Field(default=None, description="SMTP authentication username")
    password: Optional[str] = Field(
        default=None, description="SMTP authentication password"
    )
    use_tls: bool = Field(default=False, description="Use STARTTLS")
    use_ssl: bool = Field(default=False, description="Use implicit SSL")
    timeout: int = Field(default=30, description="Connection timeout in seconds")

    model_config = {"env_prefix": "OUTBOUND_SMTP_", "extra": "ignore", "env_file": ".env"}


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="text", description="Log format (json or text)")
    syslog: bool = Field(default=False, description="Also log to the mail syslog facility")

    model_config = {"env_prefix": "LOG_", "extra": "ignore", "env_file": ".env"}


class AppConfig(BaseSettings):
    """Main application configuration."""

    # Component configurations
    transcribe: TranscribeConfig = Field(default_factory=TranscribeConfig)
    audio: AudioConfig = Field(default_factory=AudioConfig)
    workspace: WorkspaceConfig = Field(default_factory=WorkspaceConfig)
    mail_sink: MailSinkConfig = Field(default_factory=MailSinkConfig)
    outbound_smtp: OutboundSMTPConfig = Field(default_factory=OutboundSMTPConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    # Global settings
    debug: bool = Field(default=False, description="Enable debug output")

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @classmethod
    def load(cls, env_file: Optional[Path] = None) -> "AppConfig":
        """Build the configuration, reading every section from ``env_file`` if given."""
        if env_file is None:
            return cls()

        return cls(
            transcribe=TranscribeConfig(_env_file=env_file),
            audio=AudioConfig(_env_file=env_file),
            workspace=WorkspaceConfig(_env_file=env_file),
            mail_sink=MailSinkConfig(_env_file=env_file),
            outbound_smtp=OutboundSMTPConfig(_env_file=env_file),
            logging=LoggingConfig(_env_file=env_file),
            _env_file=env_file,
        )

    @property
    def log_level(self) -> str:
        """Effective log level; the debug flag wins over ``LOG_LEVEL``."""
        return "DEBUG" if self.debug else self.logging.level
