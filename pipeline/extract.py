from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

log = logging.getLogger(__name__)

PARSING_ERROR = "Could not parse structured data from AI response"


def _reject_constant(name: str):
    # NaN and Infinity are not JSON and cannot be sent back to the caller.
    raise ValueError(f"non-standard JSON constant {name}")


class ExtractionStrategy(str, Enum):
    """
    Ways of locating a JSON document inside free-form model output.

    Declaration order is priority order.
    """

    FENCED_JSON = "fenced-json"
    FENCED_GENERIC = "fenced-generic"
    FIRST_BRACE_SPAN = "first-brace-span"
    WHOLE_TEXT = "whole-text"


_PATTERNS = {
    ExtractionStrategy.FENCED_JSON: re.compile(r"```json\s*([\s\S]*?)\s*```"),
    ExtractionStrategy.FENCED_GENERIC: re.compile(r"```\s*([\s\S]*?)\s*```"),
    # Greedy: runs from the first "{" to the last "}" in the text.
    ExtractionStrategy.FIRST_BRACE_SPAN: re.compile(r"(\{[\s\S]*\})"),
}


@dataclass
class ExtractionResult:
    data: Any
    strategy: Optional[ExtractionStrategy] = None

    @property
    def parsed(self) -> bool:
        return self.strategy is not None


def find_candidate(strategy: ExtractionStrategy, text: str) -> Optional[str]:
    """
    Return the substring of `text` that `strategy` would try to parse,
    or None if the strategy does not apply.
    """
    if strategy is ExtractionStrategy.WHOLE_TEXT:
        return text

    match = _PATTERNS[strategy].search(text)
    if match is None:
        return None
    return match.group(1)


def extract_diagnosis(text: str) -> ExtractionResult:
    """
    Pull a JSON payload out of a model response.

    Strategies are tried in priority order and the first candidate that
    parses wins. When nothing parses, the raw text is returned together
    with a parsing error so callers can still answer successfully.
    """
    for strategy in ExtractionStrategy:
        candidate = find_candidate(strategy, text)
        if candidate is None:
            continue

        try:
            data = json.loads(candidate, parse_constant=_reject_constant)
        except ValueError:
            log.debug("[EXTRACT] %s candidate is not valid JSON", strategy.value)
            continue

        log.info("[EXTRACT] parsed response via %s", strategy.value)
        return ExtractionResult(data=data, strategy=strategy)

    log.warning("[EXTRACT] no parsable JSON in %d chars of model output", len(text))
    return ExtractionResult(
        data={"rawResponse": text, "parsingError": PARSING_ERROR},
    )
