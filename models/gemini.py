from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Protocol

import google.generativeai as genai

log = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-1.5-flash"


@dataclass
class DiagnosisRequestPayload:
    prompt: str
    data: str  # base64-encoded image bytes
    mime_type: str

    def to_contents(self) -> List[Dict[str, Any]]:
        """Single user turn: the instruction text followed by the inline image."""
        return [
            {
                "role": "user",
                "parts": [
                    {"text": self.prompt},
                    {
                        "inline_data": {
                            "mime_type": self.mime_type,
                            "data": self.data,
                        }
                    },
                ],
            }
        ]


def build_payload(image_bytes: bytes, mime_type: str, prompt: str) -> DiagnosisRequestPayload:
    return DiagnosisRequestPayload(
        prompt=prompt,
        data=base64.b64encode(image_bytes).decode("ascii"),
        mime_type=mime_type,
    )


class DiagnosisClient(Protocol):
    """Anything that can turn a payload into the model's text answer."""

    def generate(self, payload: DiagnosisRequestPayload) -> str:
        ...


class GeminiDiagnosisClient:
    """
    Thin wrapper around a Gemini vision model.

    One blocking `generate_content` call per request. Errors raised by the
    SDK (network, auth, quota) propagate unchanged; there is no retry.
    """

    def __init__(self, api_key: str, model_name: str = DEFAULT_MODEL):
        genai.configure(api_key=api_key)
        self.model_name = model_name
        self._model = genai.GenerativeModel(model_name)
        log.info("[GEMINI] client ready, model=%s", model_name)

    def generate(self, payload: DiagnosisRequestPayload) -> str:
        log.info("[GEMINI] sending %s image (%d b64 chars)", payload.mime_type, len(payload.data))
        response = self._model.generate_content(contents=payload.to_contents())
        text = response.text
        log.info("[GEMINI] received %d chars", len(text))
        return text
