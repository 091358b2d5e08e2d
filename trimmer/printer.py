# trimmer/printer.py
# Centralized CLI output formatter, including a text waveform view.

import os
import sys
from typing import Optional

import numpy as np

from trimmer.waveform import column_heights


class OutputPrinter:
    """
    Output formatter for the audio trimmer CLI.

    Results go to stdout, errors always to stderr. Color is optional and
    disabled by --no-color or the NO_COLOR environment variable; quiet
    mode silences everything except errors.
    """

    SYMBOLS : dict[str, str] = {
        "success" : "✅",
        "error"   : "❌",
        "warning" : "⚠️ ",
        "info"    : "ℹ️ ",
        "hint"    : "→",
    }

    COLORS : dict[str, str] = {
        "green"  : "32",
        "red"    : "31",
        "yellow" : "33",
        "cyan"   : "36",
        "dim"    : "90",
    }

    # Eighth-block glyphs, index = column height in eighths
    BARS : str = " ▁▂▃▄▅▆▇█"
    MARKER : str = "│"

    COL_WIDTH : int = 10  # Column alignment for detail blocks

    def __init__(self, quiet : bool = False, no_color : bool = False) -> None:
        self.quiet    : bool = quiet
        self.no_color : bool = no_color or bool(os.environ.get("NO_COLOR", ""))

    # ── Internal ─────────────────────────────────────────────────

    def _colorize(self, text : str, code : str) -> str:
        """Apply ANSI color code if color output is enabled."""
        if self.no_color:
            return text
        return f"\033[{code}m{text}\033[0m"

    # ── Level-1 outputs ──────────────────────────────────────────

    def success(self, title : str, details : Optional[dict[str, str]] = None) -> None:
        """Print a success message with an optional detail block."""
        if self.quiet:
            return
        symbol : str = self._colorize(self.SYMBOLS["success"], self.COLORS["green"])
        label  : str = self._colorize(title, self.COLORS["green"])
        print(f"\n{symbol}  {label}")
        if details:
            for key, value in details.items():
                dim_key : str = self._colorize(f"{key:<{self.COL_WIDTH}}", self.COLORS["dim"])
                print(f"    {dim_key}: {value}")

    def error(self, message : str, hint : Optional[str] = None) -> None:
        """Print an error to stderr with an optional fix hint."""
        symbol : str = self._colorize(self.SYMBOLS["error"], self.COLORS["red"])
        msg    : str = self._colorize(message, self.COLORS["red"])
        print(f"\n{symbol}  {msg}", file=sys.stderr)
        if hint:
            h : str = self._colorize(
                f"{self.SYMBOLS['hint']} {hint}", self.COLORS["cyan"]
            )
            print(f"    {h}", file=sys.stderr)

    def warning(self, message : str, hint : Optional[str] = None) -> None:
        """Print a warning with an optional suggestion."""
        if self.quiet:
            return
        symbol : str = self._colorize(self.SYMBOLS["warning"], self.COLORS["yellow"])
        msg    : str = self._colorize(message, self.COLORS["yellow"])
        print(f"\n{symbol} {msg}")
        if hint:
            h : str = self._colorize(
                f"{self.SYMBOLS['hint']} {hint}", self.COLORS["cyan"]
            )
            print(f"    {h}")

    def info(self, message : str) -> None:
        """Print an informational message."""
        if self.quiet:
            return
        symbol : str = self._colorize(self.SYMBOLS["info"], self.COLORS["cyan"])
        print(f"{symbol} {message}")

    # ── Waveform ─────────────────────────────────────────────────

    def render_waveform(
        self,
        buckets : np.ndarray,
        markers : Optional[tuple[float, float]] = None,
    ) -> str:
        """
        Render peak buckets as one line of block glyphs.

        markers are (start_x, end_x) column offsets; the columns they fall
        on are drawn as a bar, the selection in between is highlighted.
        """
        levels : np.ndarray = column_heights(buckets, len(self.BARS) - 1, fill=1.0)
        chars  : list[str] = [self.BARS[int(level)] for level in levels]

        if markers is None:
            return "".join(chars)

        last     : int = len(chars) - 1
        start_col: int = min(int(markers[0]), last)
        end_col  : int = min(int(markers[1]), last)

        out : list[str] = []
        for col, ch in enumerate(chars):
            if col in (start_col, end_col):
                color = self.COLORS["green"] if col == start_col else self.COLORS["red"]
                out.append(self._colorize(self.MARKER, color))
            elif start_col < col < end_col:
                out.append(self._colorize(ch, self.COLORS["cyan"]))
            else:
                out.append(self._colorize(ch, self.COLORS["dim"]))
        return "".join(out)

    def waveform(
        self,
        buckets : np.ndarray,
        markers : Optional[tuple[float, float]] = None,
    ) -> None:
        """Print a waveform line (suppressed in quiet mode)."""
        if self.quiet:
            return
        print(self.render_waveform(buckets, markers))
