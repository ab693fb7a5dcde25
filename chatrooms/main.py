# chatrooms/main.py

from __future__ import annotations

import argparse
import asyncio
from typing import List, Optional

from chatrooms.cli.console import ChatConsole
from chatrooms.core.config import settings
from chatrooms.core.logging import setup_logging, get_logger
from chatrooms.core.state import build_state
from chatrooms.services.protocols import Protocol

logger = get_logger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="chatrooms",
        description="In-process dynamic chat rooms driven from the console.",
    )
    parser.add_argument(
        "--protocol",
        choices=[p.value for p in Protocol],
        default=None,
        help=f"skip the protocol prompt (env default: {settings.DEFAULT_PROTOCOL})",
    )
    parser.add_argument(
        "--use-default-protocol",
        action="store_true",
        help="announce DEFAULT_PROTOCOL instead of prompting",
    )
    parser.add_argument("--log-level", default=None, help="override LOG_LEVEL")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    # Configure logging first
    setup_logging(args.log_level)

    protocol = None
    if args.protocol:
        protocol = Protocol(args.protocol)
    elif args.use_default_protocol:
        protocol = Protocol(settings.DEFAULT_PROTOCOL)

    state = build_state(settings)
    logger.info("🚀 Chat application starting - %d rooms ready", len(state.registry))

    console = ChatConsole(state.chat)
    try:
        asyncio.run(console.run(protocol))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
