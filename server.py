#!/usr/bin/env python3
import logging, os, sys, webbrowser

from dotenv import load_dotenv
load_dotenv()
import uvicorn

PORT = int(os.getenv("PORT", "3456"))
HOST = os.getenv("HOST", "0.0.0.0")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
OPEN_BROWSER = os.getenv("HANDOFF_OPEN_BROWSER", "0").strip().lower() in {"1", "true", "yes", "on"}


def setup_logging(level: str = LOG_LEVEL) -> None:
    """Configure the root logger once, before the app starts logging."""
    root = logging.getLogger()
    root.setLevel(level)
    for h in list(root.handlers):
        root.removeHandler(h)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    root.addHandler(handler)


def main():
    setup_logging()
    from app import app

    url = f"http://localhost:{PORT}"
    logging.getLogger("server").info("Handoff running at %s", url)
    if OPEN_BROWSER:
        webbrowser.open(url)
    # log_config=None keeps uvicorn on the root handler configured above.
    uvicorn.run(app, host=HOST, port=PORT, log_config=None)


if __name__ == "__main__":
    main()
