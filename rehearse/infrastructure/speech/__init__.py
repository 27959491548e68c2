"""Speech-to-text and text-to-speech modules."""

from .tts import (
    SpeechSynthesizer, NullSynthesizer, GoogleCloudSynthesizer,
    ElevenLabsSynthesizer, create_synthesizer
)
from .stt import GoogleSpeechTranscriber

__all__ = [
    "SpeechSynthesizer", "NullSynthesizer", "GoogleCloudSynthesizer",
    "ElevenLabsSynthesizer", "create_synthesizer", "GoogleSpeechTranscriber"
]
