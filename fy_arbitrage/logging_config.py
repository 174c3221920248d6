"""
Process-level logging setup for the FY arbitrage runner.

Usage:
    from fy_arbitrage import logging_config
    logging_config.setup()
"""

import logging
import sys

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def setup(level=logging.INFO):
    """
    Configure root logging for the strategy process.

    - Short timestamp format (HH:MM:SS)
    - Silences per-request logs from the web3 HTTP stack
    """
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root.addHandler(console)

    # Suppress noisy loggers
    logging.getLogger("web3").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    logging.getLogger("fy_arbitrage").setLevel(level)


def setup_minimal():
    """
    Only warnings and errors.
    Suited to unattended live runs.
    """
    setup(level=logging.WARNING)


def setup_debug():
    """
    Verbose logging for debugging, including RPC traffic.
    """
    setup(level=logging.DEBUG)
    logging.getLogger("web3").setLevel(logging.DEBUG)


def setup_from_name(name: str):
    """Configure from a level name such as ``"INFO"``."""
    name = name.upper()
    if name == "DEBUG":
        setup_debug()
    elif name not in LEVELS:
        raise ValueError(f"Unknown log level: {name}")
    else:
        setup(level=LEVELS[name])
