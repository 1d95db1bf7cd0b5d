"""
Voice-memo transcription pipeline.

Converts voice memos with ffmpeg, transcribes them with whisper.cpp,
optionally polishes the transcript with a language model, publishes it to
Notion and archives the files by date.
"""

__version__ = "0.1.0"
