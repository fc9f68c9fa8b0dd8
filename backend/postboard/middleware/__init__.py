# Middleware package init
"""
Postboard Backend — Middleware Package
========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Raw Body] → [Request ID] → [Logging] → [CORS] → Route Handler

    Why this order:
    1. Raw Body FIRST: Oversized bodies are rejected before any processing,
       and the captured bytes are available to every later stage
    2. Request ID: Generate correlation ID for logging and error bodies
    3. Logging: Log request details with the generated request ID
    4. CORS: Applied by FastAPI's CORSMiddleware (handles preflight)
"""
