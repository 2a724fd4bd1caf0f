from typing import Any, Optional, TypedDict


class DiagnosisState(TypedDict, total=False):
    """
    Shared state passed between LangGraph nodes for one diagnosis request.
    """

    image_path: str
    mime_type: str  # "image/jpeg"

    # Fixed instruction sent alongside the image
    prompt: Optional[str]

    # Full text returned by the upstream model
    response_text: Optional[str]

    # Parsed diagnosis, or the rawResponse/parsingError fallback
    data: Optional[Any]
    strategy: Optional[str]  # extraction strategy that matched, if any

    # Upstream failure message, passed through verbatim
    error: Optional[str]
