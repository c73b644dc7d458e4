"""Terminal capability detection and ANSI escape constants."""
from __future__ import annotations

import os
import re
import sys
from enum import Enum
from typing import Mapping, Optional

# CSI sequences (SGR, cursor movement), OSC sequences (hyperlinks, titles) and
# two-byte escapes. Used wherever escapes must be treated as zero-width text.
ANSI_ESCAPE_RE = re.compile(
    r"\x1b\[[0-?]*[ -/]*[@-~]"
    r"|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)"
    r"|\x1b[@-Z\\-_]"
)
SGR_RE = re.compile(r"\x1b\[[0-9;]*m")
ANSI_RESET = "\x1b[0m"

_FALSEY_FLAGS = {"0", "false", "no", "off"}


class ColorCapability(str, Enum):
    """Colour depth a terminal is expected to honour."""

    NONE = "none"
    ANSI16 = "16"
    ANSI256 = "256"
    TRUECOLOR = "truecolor"


def is_truthy_flag(raw_value: Optional[str]) -> bool:
    """Return True when an environment-style flag requests enabling behavior."""

    normalized = (raw_value or "").strip().lower()
    return bool(normalized) and normalized not in _FALSEY_FLAGS


def color_disabled(environ: Optional[Mapping[str, str]] = None) -> bool:
    """Return True when the ``NO_COLOR`` convention asks for plain output."""

    env = os.environ if environ is None else environ
    return bool(env.get("NO_COLOR"))


def stdout_is_terminal() -> bool:
    """Return True when stdout is attached to an interactive terminal."""

    isatty = getattr(sys.stdout, "isatty", None)
    if not callable(isatty):
        return False
    try:
        return bool(isatty())
    except ValueError:
        # closed stream
        return False


def _is_modern_windows_terminal(environ: Mapping[str, str]) -> bool:
    """Return True if heuristics indicate a VT-capable Windows console."""

    if os.name != "nt":
        return False
    if environ.get("WT_SESSION"):
        return True
    if environ.get("TERM_PROGRAM", "").lower() == "windows_terminal":
        return True
    get_windows_version = getattr(sys, "getwindowsversion", None)
    if callable(get_windows_version):
        try:  # pragma: no cover - platform dependent
            version = get_windows_version()
        except OSError:
            return False
        major = getattr(version, "major", 0)
        build = getattr(version, "build", 0)
        return major > 10 or (major == 10 and build >= 10586)
    return False


def enable_windows_vt_mode() -> None:
    """
    Enable ANSI VT processing on Windows consoles so escape sequences are interpreted.

    This is a no-op on other platforms. When the console API refuses the mode
    change the escapes are simply shown verbatim, so the failure is not raised.
    """
    if os.name != "nt":
        return
    try:  # pragma: no cover - platform dependent
        import ctypes

        kernel32 = ctypes.windll.kernel32  # type: ignore[attr-defined]
        handle = kernel32.GetStdHandle(-11)
        mode = ctypes.c_uint()
        if kernel32.GetConsoleMode(handle, ctypes.byref(mode)):
            kernel32.SetConsoleMode(handle, mode.value | 0x0004)
    except (AttributeError, OSError):  # pragma: no cover - platform dependent
        return


def detect_capability(
    *,
    no_color: bool = False,
    environ: Optional[Mapping[str, str]] = None,
) -> ColorCapability:
    """
    Determine the terminal colour capability from environment variables.

    Parameters:
        no_color (bool): Force-disable colour regardless of the environment.
        environ (Mapping[str, str] | None): Environment to inspect; defaults to ``os.environ``.

    Returns:
        ColorCapability: ``NONE`` when colour is disabled, ``TRUECOLOR`` when
        ``COLORTERM`` advertises 24-bit support, ``ANSI256`` for 256-colour
        terminals and modern Windows consoles, ``ANSI16`` otherwise.
    """
    env = os.environ if environ is None else environ
    if no_color or color_disabled(env):
        return ColorCapability.NONE

    colorterm = env.get("COLORTERM", "").lower()
    if any(token in colorterm for token in ("truecolor", "24bit")):
        return ColorCapability.TRUECOLOR
    if is_truthy_flag(env.get("STANDOUT_FORCE_256_COLOR")):
        return ColorCapability.ANSI256
    term = env.get("TERM", "").lower()
    if "truecolor" in term or "direct" in term:
        return ColorCapability.TRUECOLOR
    if "256color" in term:
        return ColorCapability.ANSI256
    if _is_modern_windows_terminal(env):
        return ColorCapability.ANSI256
    return ColorCapability.ANSI16


def background_is_light(environ: Optional[Mapping[str, str]] = None) -> Optional[bool]:
    """
    Guess whether the terminal background is light from ``COLORFGBG``.

    Returns:
        Optional[bool]: True for a light background, False for dark, None when
        the variable is missing or unparseable.
    """
    env = os.environ if environ is None else environ
    raw = env.get("COLORFGBG", "").strip()
    if not raw:
        return None
    background = raw.split(";")[-1]
    try:
        index = int(background)
    except ValueError:
        return None
    # xterm convention: 7 and 9-15 are light backgrounds, 0-6 and 8 are dark.
    return index == 7 or 9 <= index <= 15
