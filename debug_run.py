from __future__ import annotations

import logging
import mimetypes
import sys

from api.config import Settings
from models.gemini import GeminiDiagnosisClient
from pipeline.graph import pipeline

logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


def main(image_path: str = "test.jpg") -> None:
    """
    Run one diagnosis against a local image with the real Gemini client.

    Needs GOOGLE_API_KEY in the environment or a `.env` file.
    """
    settings = Settings.from_env()
    client = GeminiDiagnosisClient(settings.google_api_key, settings.gemini_model)

    initial_state = {
        "image_path": image_path,
        "mime_type": mimetypes.guess_type(image_path)[0] or "image/jpeg",
        "prompt": None,
        "response_text": None,
        "data": None,
        "strategy": None,
        "error": None,
    }

    # Stream: see each node's state delta live
    config = {"configurable": {"client": client}}
    for step in pipeline.stream(initial_state, config=config):
        node = list(step.keys())[0]
        print("\n" + "=" * 40)
        print(f"NODE: {node}")
        print(f"DELTA: {step[node]}")


if __name__ == "__main__":
    main(*sys.argv[1:2])
