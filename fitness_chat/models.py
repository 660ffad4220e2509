"""
DATA MODELS MODULE
==================

Pydantic models for the API request and response bodies. FastAPI uses these to
parse incoming JSON and to serialize responses.

MODELS:
  ChatRequest   - Body of POST /api/chat ({"message": "..."}).
  ChatResponse  - Successful reply from POST /api/chat.
  ErrorResponse - Any error body ({"error": "...", optional "details"}).
  ConnectionTestResponse - Body of GET /api/test.
"""

from pydantic import BaseModel
from typing import Any, Optional

# ==============================================================================
# REQUEST/RESPONSE MODELS
# ==============================================================================

class ChatRequest(BaseModel):
    """
    Request body for POST /api/chat.

    - message: The user's question. Optional at the schema level so that a missing
      or empty message gets our own 400 "Message is required" instead of a 422.
    """
    message: Optional[str] = None

class ChatResponse(BaseModel):
    """Response body for POST /api/chat: the coach's reply text."""
    message: str

class ErrorResponse(BaseModel):
    """
    Error body for every failure.

    - details: Only set in development mode (raw upstream error or exception text).
    """
    error: str
    details: Optional[Any] = None

class ConnectionTestResponse(BaseModel):
    """Response body for GET /api/test. availableKeys is the number of configured keys."""
    message: str
    availableKeys: int
