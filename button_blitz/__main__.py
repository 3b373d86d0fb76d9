from __future__ import annotations

import logging

from .app import run
from .config import load_config


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main() -> int:
    """Entry point for running Button Blitz from the command line."""
    config = load_config()
    configure_logging(config.log_level)
    return run(config=config)


if __name__ == "__main__":
    raise SystemExit(main())
