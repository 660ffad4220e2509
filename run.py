"""
RUN SCRIPT - Start the Fitness Chat server
==========================================

PURPOSE:
  Single entry point to start the backend.

WHAT IT DOES:
  - Loads settings (PORT, NODE_ENV, API keys) from the environment / .env.
  - Runs fitness_chat.main:app with uvicorn on host 0.0.0.0 and the configured port.
  - reload is on in development mode only.

USAGE:
  python run.py

  The frontend talks to http://localhost:<PORT>/api/chat.

NOTE:
  Before running, set OPENROUTER_API_KEY_1 (and optionally _2 .. _5) in .env.
"""

import uvicorn

from config import load_settings


def main():
    settings = load_settings()
    uvicorn.run(
        "fitness_chat.main:app",          # String path to the FastAPI app instance (module:variable).
        host="0.0.0.0",                   # Listen on all network interfaces.
        port=settings.port,
        reload=not settings.is_production,
    )


# ------------------------------------------------------------------------------
# ENTRY POINT
# ------------------------------------------------------------------------------
if __name__ == "__main__":
    main()
