from __future__ import annotations

import logging
from typing import Any, Dict

from langchain_core.runnables import RunnableConfig

from models.gemini import build_payload
from pipeline.extract import extract_diagnosis
from pipeline.prompts import build_diagnosis_prompt
from pipeline.state import DiagnosisState

log = logging.getLogger(__name__)


def get_client(config: RunnableConfig):
    """Fetch the diagnosis client injected for this invocation."""
    client = (config or {}).get("configurable", {}).get("client")
    if client is None:
        raise RuntimeError("No diagnosis client configured for this run")
    return client


def node_prompt(state: DiagnosisState) -> Dict[str, Any]:
    return {"prompt": build_diagnosis_prompt()}


def node_diagnose(state: DiagnosisState, config: RunnableConfig) -> Dict[str, Any]:
    """Send the stored image and prompt to the upstream model."""
    image_path = state["image_path"]
    mime_type = state["mime_type"]
    log.info("[DIAGNOSE] image_path='%s', mime_type='%s'", image_path, mime_type)

    try:
        client = get_client(config)
        with open(image_path, "rb") as f:
            image_bytes = f.read()

        payload = build_payload(image_bytes, mime_type, state.get("prompt") or build_diagnosis_prompt())
        text = client.generate(payload)
        return {"response_text": text, "error": None}
    except Exception as e:
        log.error("[DIAGNOSE] %s", e)
        return {"response_text": None, "error": str(e)}


def node_extract(state: DiagnosisState) -> Dict[str, Any]:
    """Turn the model's free text into a diagnosis mapping."""
    result = extract_diagnosis(state.get("response_text") or "")
    return {
        "data": result.data,
        "strategy": result.strategy.value if result.parsed else None,
    }
