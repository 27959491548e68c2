"""
Vertex AI REST client for LLM interactions.
"""
import json
import logging
from abc import ABC, abstractmethod
from typing import Optional, Dict, Any, List

import requests
import google.auth
import google.auth.exceptions
import google.auth.transport.requests
from google.oauth2 import service_account

from ...config import VERTEX_LOCATION, MODEL_NAME, LLM_TIMEOUT, MAX_OUTPUT_TOKENS
from ...interview.errors import TextGenerationUnavailable

logger = logging.getLogger("llm_client")


class TextGenerationClient(ABC):
    """Anything that turns a system and user prompt into text."""

    @abstractmethod
    def generate(self,
                 system_prompt: str,
                 user_prompt: str,
                 max_tokens: int = MAX_OUTPUT_TOKENS,
                 temperature: float = 0.7) -> str:
        """Return generated text or raise TextGenerationUnavailable."""


class VertexRestClient(TextGenerationClient):
    """REST-based client for Vertex AI Gemini models."""

    def __init__(self,
                 project: str,
                 location: str = VERTEX_LOCATION,
                 model: str = MODEL_NAME,
                 credentials_json: Optional[str] = None,
                 timeout: int = LLM_TIMEOUT):
        self.project = project
        self.location = location
        self.model = model
        self.credentials_json = credentials_json
        self.base_url = f"https://{self.location}-aiplatform.googleapis.com/v1"
        self.model_resource = f"projects/{self.project}/locations/{self.location}/publishers/google/models/{self.model}"
        self._token = None
        self.timeout = timeout

    def _refresh_token(self):
        """Refresh the OAuth token for API calls."""
        if self.credentials_json:
            creds = service_account.Credentials.from_service_account_file(
                self.credentials_json,
                scopes=["https://www.googleapis.com/auth/cloud-platform"],
            )
        else:
            creds, _ = google.auth.default(scopes=["https://www.googleapis.com/auth/cloud-platform"])

        auth_req = google.auth.transport.requests.Request()
        creds.refresh(auth_req)
        self._token = creds.token

    def _ensure_token(self):
        """Ensure we have a valid token, refreshing if needed."""
        if not self._token:
            try:
                self._refresh_token()
            except (google.auth.exceptions.GoogleAuthError, OSError) as e:
                raise TextGenerationUnavailable(f"Could not obtain Vertex credentials: {e}") from e

    def generate(self,
                 system_prompt: str,
                 user_prompt: str,
                 max_tokens: int = MAX_OUTPUT_TOKENS,
                 temperature: float = 0.7) -> str:
        return self.generate_content(
            user_prompt,
            temperature=temperature,
            max_output_tokens=max_tokens,
            system_instruction=system_prompt,
        )

    def generate_content(
        self,
        prompt_text: str,
        temperature: float = 0.0,
        max_output_tokens: int = MAX_OUTPUT_TOKENS,
        system_instruction: Optional[str] = None,
        top_p: Optional[float] = None,
        stop_sequences: Optional[List[str]] = None,
    ) -> str:
        """Generate content using the Vertex AI REST API."""
        self._ensure_token()
        url = f"{self.base_url}/{self.model_resource}:generateContent"

        body: Dict[str, Any] = {
            "contents": [
                {
                    "role": "user",
                    "parts": [{"text": prompt_text}],
                }
            ],
            "generationConfig": {
                "temperature": float(temperature),
                "maxOutputTokens": int(max_output_tokens),
            },
        }

        if system_instruction:
            body["systemInstruction"] = {"parts": [{"text": system_instruction}]}
        if top_p is not None:
            body["generationConfig"]["topP"] = float(top_p)
        if stop_sequences:
            body["generationConfig"]["stopSequences"] = list(stop_sequences)

        headers = {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/json",
        }

        try:
            resp = requests.post(url, headers=headers, json=body, timeout=self.timeout)
        except requests.Timeout as e:
            raise TextGenerationUnavailable(f"Vertex request timed out after {self.timeout}s") from e
        except requests.RequestException as e:
            raise TextGenerationUnavailable(f"Vertex request failed: {e}") from e

        if resp.status_code == 401:
            # Token expired; next call refreshes it
            self._token = None
        if resp.status_code >= 400:
            raise TextGenerationUnavailable(f"Vertex REST error {resp.status_code}: {resp.text}")

        try:
            payload = resp.json()
        except ValueError as e:
            raise TextGenerationUnavailable(f"Vertex returned a non-JSON body: {e}") from e

        text = self._parse_response_text(payload)
        if text is None or not text.strip():
            raise TextGenerationUnavailable(f"Vertex returned no text: {json.dumps(payload, separators=(',', ':'))}")
        return text

    def _parse_response_text(self, resp_json: Dict[str, Any]) -> Optional[str]:
        """
        Parse response JSON to extract text content.
        Tries Vertex schema first, then falls back to alternatives.
        """
        # Vertex schema: candidates[0].content.parts[*].text
        cands = resp_json.get("candidates") or []
        if cands and isinstance(cands[0], dict):
            content = cands[0].get("content") or {}
            parts = content.get("parts") or []
            texts = [p["text"] for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str)]
            if texts:
                return "".join(texts)
            # Some responses put text directly in content
            if isinstance(content.get("text"), str):
                return content["text"]

        if isinstance(resp_json.get("text"), str):
            return resp_json["text"]

        return None
