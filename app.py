import argparse
import os
import threading
import webbrowser

from dotenv import load_dotenv

# Load .env file from project root
load_dotenv(os.path.join(os.path.dirname(__file__), ".env"))

from gateway.config import has_api_key
from web.server import start_server


def _open_browser_later(url: str, delay: float = 1.0):
    """Open the UI once the server has had a moment to bind."""
    timer = threading.Timer(delay, webbrowser.open, args=(url,))
    timer.daemon = True
    timer.start()


def run():
    """Launch the MindSpark web interface."""
    parser = argparse.ArgumentParser(
        description="MindSpark — AI-generated student personality assessment"
    )
    parser.add_argument("--host", default="127.0.0.1", help="Interface to bind (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=5000, help="Port to listen on (default: 5000)")
    parser.add_argument(
        "--no-browser",
        action="store_true",
        help="Do not open a browser window on startup",
    )
    args = parser.parse_args()

    if has_api_key():
        print("  Gemini API key configured")
    else:
        print("  WARNING: GEMINI_API_KEY is not set. Quiz generation will fail until it is.")

    if not args.no_browser:
        _open_browser_later(f"http://localhost:{args.port}")

    start_server(host=args.host, port=args.port)


if __name__ == "__main__":
    run()
