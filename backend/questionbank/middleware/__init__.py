"""
Questions Unlimited Backend: Middleware Package
================================================

Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    Request ID runs first so every log line (access log, service logs,
    exception handlers) carries the same correlation id.
"""
