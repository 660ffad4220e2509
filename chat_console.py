"""
FITNESS CHAT CONSOLE
====================

PURPOSE:
Command-line client for trying the Fitness Chat backend without the frontend.
Each line you type is sent to POST /api/chat and the coach's reply is printed.
There is no conversation memory: every message is answered on its own.

USAGE:
    python chat_console.py

    Make sure the server is running first: python run.py

COMMANDS:
    /status - Call GET /api/test (backend reachable? how many API keys?)
    /quit or /exit - Exit
"""

import os

import requests


# -----------------------------------------------------------------------------
# CONFIGURATION
# -----------------------------------------------------------------------------
# API base URL; change with FITNESS_CHAT_URL if the server runs elsewhere.
BASE_URL = os.getenv("FITNESS_CHAT_URL", "http://localhost:5000")
COACH_NAME = "Coach"


# -----------------------------------------------------------------------------
# UI HELPERS
# -----------------------------------------------------------------------------

def print_header():
    print("\n" + "="*60)
    print("🏋️ Fitness Chat")
    print("="*60)
    print("\nCommands:")
    print("  /status - Check backend connection")
    print("  /quit - Exit")
    print("="*60 + "\n")


def get_user_input():
    """Get user's input, or None on Ctrl+C / Ctrl+D."""
    try:
        return input("\nYou: ").strip()
    except (KeyboardInterrupt, EOFError):
        return None


# -----------------------------------------------------------------------------
# API CALLS
# -----------------------------------------------------------------------------

def send_message(message, base_url=BASE_URL):
    """
    Send a message to POST /api/chat and return the reply text.

    Errors come back as a printable string rather than an exception: the server's
    "error" field (plus "details" in development mode), or a connection message.
    """
    try:
        response = requests.post(
            f"{base_url}/api/chat",
            json={"message": message},
            timeout=60,
        )

        if response.status_code == 200:
            return response.json().get("message", "No response")

        try:
            err = response.json()
        except ValueError:
            return f"❌ Error: {response.status_code} - {response.text}"
        text = f"❌ {err.get('error', response.status_code)}"
        if err.get("details") is not None:
            text += f" ({err['details']})"
        return text

    except requests.exceptions.ConnectionError:
        return "❌ Cannot connect to backend. Start it with: python run.py"
    except requests.exceptions.Timeout:
        return "❌ Request timed out. Please try again."


def get_status(base_url=BASE_URL):
    """Call GET /api/test and describe the result in one line."""
    try:
        response = requests.get(f"{base_url}/api/test", timeout=10)
        if response.status_code != 200:
            return f"❌ Backend returned {response.status_code}"
        data = response.json()
        return f"✅ {data.get('message')} ({data.get('availableKeys', 0)} API keys configured)"
    except requests.exceptions.RequestException as e:
        return f"❌ Backend not reachable: {e}"


# -----------------------------------------------------------------------------
# MAIN LOOP
# -----------------------------------------------------------------------------

def main():
    """Read messages until /quit or /exit and print the coach's replies."""
    print_header()
    print(get_status())

    while True:
        user_input = get_user_input()
        if user_input is None or user_input in ["/quit", "/exit"]:
            print("\n👋 Goodbye!")
            break

        if not user_input:
            continue

        if user_input == "/status":
            print(get_status())
            continue

        if user_input.startswith("/"):
            print(f"❌ Unknown command: {user_input}")
            continue

        print(f"🤖 {COACH_NAME}: ", end="", flush=True)
        print(send_message(user_input))


# Run the interactive loop when this file is executed (python chat_console.py).
if __name__ == "__main__":
    main()
