"""Chunked, resumable transcription of long audio recordings."""

__version__ = "0.1.0"
