"""
Upstream model clients for the pest diagnosis service.

- `gemini` : `GeminiDiagnosisClient` plus the request payload it sends.
"""
