from __future__ import annotations

import logging
import os
import sys
from typing import Union

import uvicorn
from fastapi import FastAPI, File, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.config import ConfigError, Settings
from api.schemas import ApiResponse, HealthResponse
from api.uploads import stored_upload
from models.gemini import DiagnosisClient, GeminiDiagnosisClient
from pipeline.graph import pipeline
from pipeline.state import DiagnosisState

log = logging.getLogger(__name__)

HEALTH_MESSAGE = "Pest diagnosis API is running"


def _respond(status_code: int, body: ApiResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_unset=True))


def create_app(client: DiagnosisClient, upload_dir: str = "uploads") -> FastAPI:
    """
    Build the FastAPI application around an already constructed client.

    The client is handed to the pipeline per request, so tests can pass a fake.
    """
    app = FastAPI(
        title="Pest Diagnosis API",
        version="1.0.0",
        description="Plant pest and disease diagnosis backed by a Gemini vision model.",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    os.makedirs(upload_dir, exist_ok=True)
    log.info("Uploads directory ready at %s", upload_dir)

    @app.get("/api/health", response_model=HealthResponse)
    def health():
        """
        Basic health check.
        """
        log.info("Received health check request")
        return HealthResponse(status="ok", message=HEALTH_MESSAGE)

    @app.post("/api/diagnose-pest", response_model=ApiResponse)
    async def diagnose_pest(image: Union[UploadFile, str, None] = File(None)):
        """
        Diagnose pests or diseases in an uploaded plant image.

        A missing file, a text value in the `image` field, a non-image file
        and a file over 10 MiB all produce the same 400 response.
        """
        log.info("Received request to diagnose pest")

        try:
            with stored_upload(image, upload_dir) as upload:
                if upload is None:
                    return _respond(400, ApiResponse(success=False, error="No image uploaded"))

                state: DiagnosisState = {
                    "image_path": upload.path,
                    "mime_type": upload.mime_type,
                    "prompt": None,
                    "response_text": None,
                    "data": None,
                    "strategy": None,
                    "error": None,
                }
                result = await pipeline.ainvoke(state, config={"configurable": {"client": client}})
        except Exception as e:
            log.exception("Error processing image")
            return _respond(
                500,
                ApiResponse(success=False, error="Failed to analyze image", message=str(e)),
            )

        if result.get("error"):
            return _respond(
                500,
                ApiResponse(success=False, error="Failed to analyze image", message=result["error"]),
            )

        return _respond(200, ApiResponse(success=True, data=result.get("data")))

    return app


def main() -> None:
    """
    Start the service: read settings, build the Gemini client, serve.

    Exits with status 1 when GOOGLE_API_KEY is not configured.
    """
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        settings = Settings.from_env()
    except ConfigError as e:
        log.critical("ERROR: %s", e)
        sys.exit(1)

    logging.getLogger().setLevel(settings.log_level)

    client = GeminiDiagnosisClient(settings.google_api_key, settings.gemini_model)
    app = create_app(client, upload_dir=settings.upload_dir)

    log.info("Pest diagnosis API running at http://localhost:%d", settings.port)
    log.info("Test API health at: http://localhost:%d/api/health", settings.port)
    log.info("Send POST requests to: http://localhost:%d/api/diagnose-pest", settings.port)

    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
