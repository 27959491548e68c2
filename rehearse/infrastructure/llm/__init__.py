"""LLM client infrastructure."""

from .client import TextGenerationClient, VertexRestClient

__all__ = ["TextGenerationClient", "VertexRestClient"]
