"""Infrastructure components for the Rehearse system.

This module contains low-level technical components that provide
foundational capabilities for the interview system.
"""

# LLM infrastructure
from .llm import TextGenerationClient, VertexRestClient

# Speech infrastructure
from .speech import (
    SpeechSynthesizer, NullSynthesizer, GoogleCloudSynthesizer,
    ElevenLabsSynthesizer, create_synthesizer, GoogleSpeechTranscriber
)

__all__ = [
    # LLM client
    "TextGenerationClient", "VertexRestClient",

    # Speech services
    "SpeechSynthesizer", "NullSynthesizer", "GoogleCloudSynthesizer",
    "ElevenLabsSynthesizer", "create_synthesizer", "GoogleSpeechTranscriber",
]
