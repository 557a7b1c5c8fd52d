"""StoryForge — launcher. Plays a story in the terminal or serves the stub backend."""

import argparse
import asyncio
import logging
import os
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).parent
load_dotenv(ROOT / ".env")

HOST = os.getenv("HOST", "127.0.0.1")
STUB_PORT = int(os.getenv("STUB_PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")


def play(backend_url: str | None) -> None:
    from storyforge.client import HttpBackend
    from storyforge.config import load_settings
    from storyforge.session import SessionController
    from storyforge.terminal import TerminalApp, TerminalPresenter

    settings = load_settings()
    backend = HttpBackend(backend_url or settings.backend_url, timeout=settings.timeout)
    presenter = TerminalPresenter()
    controller = SessionController(backend, presenter=presenter)
    print(f"Backend: {backend.base_url}")
    try:
        asyncio.run(TerminalApp(controller, presenter).run())
    except KeyboardInterrupt:
        print("\nBye.")


def serve_stub(max_steps: int) -> None:
    import uvicorn

    from storyforge.stub_backend import create_app

    print(f"Starting stub backend on http://{HOST}:{STUB_PORT} ...")
    uvicorn.run(create_app(max_steps=max_steps), host=HOST, port=STUB_PORT, log_level=LOG_LEVEL.lower())


def main():
    parser = argparse.ArgumentParser(description="StoryForge launcher")
    sub = parser.add_subparsers(dest="command")

    play_parser = sub.add_parser("play", help="Play in the terminal (default)")
    play_parser.add_argument("--backend-url", default=None,
                             help="Story backend base URL (default: STORYFORGE_BACKEND_URL)")

    stub_parser = sub.add_parser("stub", help="Serve the in-memory stub backend")
    stub_parser.add_argument("--max-steps", type=int, default=3,
                             help="Choices before a stub story completes (default: 3)")

    args = parser.parse_args()
    logging.basicConfig(
        level=LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "stub":
        serve_stub(args.max_steps)
    else:
        play(getattr(args, "backend_url", None))


if __name__ == "__main__":
    main()
