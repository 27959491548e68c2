"""
Speech-to-text functionality using Google Cloud Speech.
"""
import logging
from typing import Optional

import google.auth.exceptions
from google.api_core import exceptions as google_exceptions
from google.cloud import speech

from ...config import LANGUAGE_CODE, STT_SAMPLE_RATE, STT_TIMEOUT
from ...interview.errors import TranscriptionFailed
from ...interview.models import Transcription

logger = logging.getLogger("speech_stt")


class GoogleSpeechTranscriber:
    """Synchronous Google Cloud Speech-to-Text recognition of LINEAR16 audio."""

    def __init__(self,
                 language_code: str = LANGUAGE_CODE,
                 sample_rate: int = STT_SAMPLE_RATE,
                 timeout: int = STT_TIMEOUT,
                 client: Optional[speech.SpeechClient] = None):
        self.language_code = language_code
        self.sample_rate = sample_rate
        self.timeout = timeout
        self._client = client

    @property
    def client(self) -> speech.SpeechClient:
        if self._client is None:
            self._client = speech.SpeechClient()
        return self._client

    def transcribe(self, pcm16_bytes: bytes) -> Transcription:
        """
        Transcribe one recording.

        Returns an empty transcription when no speech is detected.
        """
        audio = speech.RecognitionAudio(content=pcm16_bytes)
        config = speech.RecognitionConfig(
            encoding=speech.RecognitionConfig.AudioEncoding.LINEAR16,
            sample_rate_hertz=self.sample_rate,
            language_code=self.language_code,
            enable_automatic_punctuation=True,
            max_alternatives=3,
        )

        try:
            resp = self.client.recognize(config=config, audio=audio, timeout=self.timeout)
        except (google_exceptions.GoogleAPIError, google.auth.exceptions.GoogleAuthError) as e:
            logger.error("Speech recognition failed: %s", e)
            raise TranscriptionFailed(f"Speech recognition failed: {e}") from e

        results = [r for r in resp.results if r.alternatives]
        if not results:
            return Transcription(text="", language_code=self.language_code)

        text = " ".join(r.alternatives[0].transcript.strip() for r in results).strip()
        confidence = sum(r.alternatives[0].confidence for r in results) / len(results)
        language = getattr(results[0], "language_code", "") or self.language_code
        alternatives = [alt.transcript for alt in results[0].alternatives[1:]]

        return Transcription(text=text, language_code=language, confidence=confidence, alternatives=alternatives)
