"""
FITNESS CHAT APPLICATION PACKAGE
================================

Main Python package for the Fitness Chat backend.

FILE STRUCTURE:
  fitness_chat/
    __init__.py   - This file; marks 'fitness_chat' as a package.
    main.py       - FastAPI app factory and HTTP endpoints (/api/chat, /api/test).
    models.py     - Pydantic models for API requests and responses.
    errors.py     - Exceptions raised by the key pool and completion service.
    services/     - Key pool (round-robin API keys) and the OpenRouter completion service.
    utils/        - Helpers: rotate-and-retry state machine, API key masking for logs.
"""
