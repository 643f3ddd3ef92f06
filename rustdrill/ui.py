"""Terminal styling and the warning/success message helpers."""

from __future__ import annotations

import os
import sys

_RESET = "\x1b[0m"
_BOLD = "1"
_RED = "31"
_GREEN = "32"


def no_emoji() -> bool:
    """Return True when the NO_EMOJI environment variable is set."""
    return "NO_EMOJI" in os.environ


def _colors_enabled() -> bool:
    forced = os.environ.get("CLICOLOR_FORCE")
    if forced is not None and forced != "0":
        return True
    if os.environ.get("CLICOLOR") == "0":
        return False
    isatty = getattr(sys.stdout, "isatty", None)
    return bool(isatty and isatty())


def _paint(text: object, code: str) -> str:
    text = str(text)
    if not _colors_enabled():
        return text
    return f"\x1b[{code}m{text}{_RESET}"


def bold(text: object) -> str:
    """Render *text* in bold when colours are enabled."""
    return _paint(text, _BOLD)


def red(text: object) -> str:
    return _paint(text, _RED)


def green(text: object) -> str:
    return _paint(text, _GREEN)


def blue_bold(text: object) -> str:
    return _paint(text, "1;34")


def blue(text: object) -> str:
    return _paint(text, "34")


def warn(message: str) -> None:
    """Print a red warning line."""
    symbol = "!" if no_emoji() else "⚠️ "
    print(f"{red(symbol)} {red(message)}")


def success(message: str) -> None:
    """Print a green success line."""
    symbol = "✓" if no_emoji() else "✅"
    print(f"{green(symbol)} {green(message)}")