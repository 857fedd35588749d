"""Logging setup for command-line use."""

from __future__ import annotations

import logging

_LOG_FORMAT = "%(levelname)s %(name)s %(message)s"


def configure_logging(*, verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=_LOG_FORMAT,
    )
