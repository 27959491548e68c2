"""
Text-to-speech backends.

Every backend renders one utterance to audio bytes. The null backend is used
when no speech provider is configured so callers never branch on presence.
"""
import logging
import re
from abc import ABC, abstractmethod
from typing import Optional

import requests
import google.auth.exceptions
from google.api_core import exceptions as google_exceptions
from google.cloud import texttospeech

from ...config import (
    TTS_TIMEOUT, TTS_STABILITY, TTS_SIMILARITY_BOOST,
    ELEVENLABS_BASE_URL, ELEVENLABS_MODEL_ID, GOOGLE_TTS_LANGUAGE, STT_SAMPLE_RATE,
)
from ...interview.errors import SynthesisFailed

logger = logging.getLogger("speech_tts")


class SpeechSynthesizer(ABC):
    """Renders text to audio in a given voice."""

    @abstractmethod
    def synthesize(self,
                   text: str,
                   voice_id: Optional[str],
                   stability: float = TTS_STABILITY,
                   similarity_boost: float = TTS_SIMILARITY_BOOST) -> Optional[bytes]:
        """Return audio bytes, None when nothing is rendered, or raise SynthesisFailed."""


class NullSynthesizer(SpeechSynthesizer):
    """Text-only sessions."""

    def synthesize(self, text, voice_id, stability=TTS_STABILITY, similarity_boost=TTS_SIMILARITY_BOOST):
        return None


class GoogleCloudSynthesizer(SpeechSynthesizer):
    """
    High-quality Google Cloud Text-to-Speech.

    Persona voice ids that look like Google voice names (en-US-Neural2-F) are
    used as-is; anything else falls back to the default voice. Google voices
    have no stability or similarity settings, so those are ignored.
    """

    GOOGLE_VOICE_NAME = re.compile(r"^[a-z]{2,3}-[A-Z]{2}-")

    def __init__(self,
                 default_voice: str = "en-US-Neural2-F",
                 language_code: str = GOOGLE_TTS_LANGUAGE,
                 sample_rate: int = STT_SAMPLE_RATE,
                 timeout: int = TTS_TIMEOUT,
                 client: Optional[texttospeech.TextToSpeechClient] = None):
        self.default_voice = default_voice
        self.language_code = language_code
        self.sample_rate = sample_rate
        self.timeout = timeout
        self._client = client

    @property
    def client(self) -> texttospeech.TextToSpeechClient:
        if self._client is None:
            self._client = texttospeech.TextToSpeechClient()
        return self._client

    def _voice_name(self, voice_id: Optional[str]) -> str:
        if voice_id and self.GOOGLE_VOICE_NAME.match(voice_id):
            return voice_id
        return self.default_voice

    def synthesize(self, text, voice_id, stability=TTS_STABILITY, similarity_boost=TTS_SIMILARITY_BOOST):
        if not text.strip():
            return None

        synthesis_input = texttospeech.SynthesisInput(text=text)
        voice_params = texttospeech.VoiceSelectionParams(
            language_code=self.language_code,
            name=self._voice_name(voice_id),
        )
        audio_config = texttospeech.AudioConfig(
            audio_encoding=texttospeech.AudioEncoding.LINEAR16,
            sample_rate_hertz=self.sample_rate,
        )

        try:
            response = self.client.synthesize_speech(
                input=synthesis_input, voice=voice_params, audio_config=audio_config,
                timeout=self.timeout,
            )
        except (google_exceptions.GoogleAPIError, google.auth.exceptions.GoogleAuthError) as e:
            raise SynthesisFailed(f"Google TTS failed: {e}") from e

        return response.audio_content


class ElevenLabsSynthesizer(SpeechSynthesizer):
    """ElevenLabs REST text-to-speech, returning MP3 bytes."""

    def __init__(self,
                 api_key: str,
                 base_url: str = ELEVENLABS_BASE_URL,
                 model_id: str = ELEVENLABS_MODEL_ID,
                 timeout: int = TTS_TIMEOUT):
        if not api_key:
            raise ValueError("ElevenLabs synthesis needs an API key")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model_id = model_id
        self.timeout = timeout

    def synthesize(self, text, voice_id, stability=TTS_STABILITY, similarity_boost=TTS_SIMILARITY_BOOST):
        if not text.strip() or not voice_id:
            return None

        url = f"{self.base_url}/text-to-speech/{voice_id}"
        headers = {
            "Accept": "audio/mpeg",
            "Content-Type": "application/json",
            "xi-api-key": self.api_key,
        }
        body = {
            "text": text,
            "model_id": self.model_id,
            "voice_settings": {
                "stability": stability,
                "similarity_boost": similarity_boost,
                "style": 0,
                "use_speaker_boost": True,
            },
        }

        try:
            resp = requests.post(url, headers=headers, json=body, timeout=self.timeout)
        except requests.RequestException as e:
            raise SynthesisFailed(f"ElevenLabs request failed: {e}") from e

        if resp.status_code >= 400:
            raise SynthesisFailed(f"ElevenLabs API error: {resp.status_code} - {resp.text}")

        logger.debug(f"Synthesized {len(text)} characters with voice {voice_id}")
        return resp.content


def create_synthesizer(provider: str, elevenlabs_api_key: Optional[str] = None,
                       timeout: int = TTS_TIMEOUT) -> SpeechSynthesizer:
    """Build the synthesizer named by the REHEARSE_TTS_PROVIDER setting."""
    provider = (provider or "none").lower()
    if provider == "none":
        return NullSynthesizer()
    if provider == "google":
        return GoogleCloudSynthesizer(timeout=timeout)
    if provider == "elevenlabs":
        return ElevenLabsSynthesizer(elevenlabs_api_key or "", timeout=timeout)
    raise ValueError(f"Unknown TTS provider: {provider!r} (expected none, google or elevenlabs)")
