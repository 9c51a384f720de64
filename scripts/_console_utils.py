"""
Rich console helpers shared by the operator scripts.
"""

from __future__ import annotations

import sys
from functools import lru_cache
from typing import NoReturn

from rich.console import Console
from rich.text import Text


@lru_cache(maxsize=1)
def get_console() -> Console:
    return Console()


@lru_cache(maxsize=1)
def get_err_console() -> Console:
    return Console(stderr=True)


def status_label(label: str, style: str) -> Text:
    """Return ``[label]`` styled for the start of a result line."""
    text = Text(f"[{label}]")
    text.stylize(style)
    return text


def exit_with_error(message: str, code: int = 1) -> NoReturn:
    """Print ``[ERROR] message`` to stderr and exit."""
    get_err_console().print(status_label("ERROR", "bold red"), Text(message, style="red"))
    sys.exit(code)
