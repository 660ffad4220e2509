"""
SERVICES PACKAGE
=================

Business logic lives here. The API layer (fitness_chat.main) calls these
services; they don't handle HTTP routing, only key rotation and the LLM call.

MODULES:
    key_pool           - KeyPool: ordered API keys handed out round-robin.
    completion_service - CompletionService: OpenRouter call with key rotation on rate limits.
"""
