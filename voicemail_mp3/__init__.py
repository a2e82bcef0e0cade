"""
Voicemail MP3 Converter

A sendmail-compatible filter that rewrites voicemail notification emails,
replacing the WAV attachment with a compact MP3 and optionally adding a
speech-to-text transcription before handing the message to the MTA.
"""

__version__ = "1.0.0"
__author__ = "Voicemail MP3 Team"
__description__ = "Voicemail WAV to MP3 mail filter with optional transcription"
