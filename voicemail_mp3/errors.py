"""Error taxonomy for the voicemail conversion pipeline."""


class VoicemailError(Exception):
    """Base class for all conversion failures."""


class StructuralError(VoicemailError):
    """The message does not have the multipart layout we expect."""


class DecodeError(VoicemailError):
    """The attachment payload is not valid base64."""


class AudioFormatError(VoicemailError):
    """The decoded attachment is not a WAV container."""


class CodecError(VoicemailError):
    """An external codec exited abnormally or produced no output."""


class TranscriptionError(VoicemailError):
    """The speech-to-text call failed. Never fatal to the pipeline."""


class SinkError(VoicemailError):
    """The mail sink did not accept the final message."""
