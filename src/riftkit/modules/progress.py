"""
Console reporter used by the installer and the port killer.

Every message is also sent to this module's logger so a file handler on the
``riftkit`` logger (the install log) receives the same text without colors.
"""

import logging
import sys
from enum import Enum
from typing import NamedTuple

import click

logger = logging.getLogger(__name__)


class Glyph(NamedTuple):
    unicode: str
    ascii: str
    color: str


class ProgressStage(Enum):
    """Message kinds and how each is marked on the console."""

    IN_PROGRESS = Glyph("==>", "==>", "blue")
    COMPLETED = Glyph("✓", "OK", "green")
    FAILED = Glyph("✗", "FAIL", "red")
    WARNING = Glyph("⚠", "WARN", "yellow")
    INFO = Glyph("ℹ", "INFO", "cyan")

    @property
    def label(self) -> str:
        return self.name.lower()


class ProgressDisplay:
    """Print stage-tagged messages, section headers and a text progress bar.

    Args:
        use_unicode: Use Unicode glyphs (True) or ASCII words (False)
        output_file: Where to print (default: sys.stdout)
    """

    def __init__(self, use_unicode: bool = True, output_file=None):
        self.use_unicode = use_unicode
        self.output_file = output_file or sys.stdout
        self.history: list[tuple[ProgressStage, str]] = []
        self._bar_open = False

    def update(self, message: str, stage: ProgressStage = ProgressStage.IN_PROGRESS) -> None:
        self.history.append((stage, message))
        logger.info(f"[{stage.label}] {message}")

        glyph = stage.value
        mark = glyph.unicode if self.use_unicode else glyph.ascii
        self._print(f"{click.style(mark, fg=glyph.color)} {message}")

    def status(self, message: str) -> None:
        self.update(message, ProgressStage.IN_PROGRESS)

    def success(self, message: str) -> None:
        self.update(message, ProgressStage.COMPLETED)

    def warning(self, message: str) -> None:
        self.update(message, ProgressStage.WARNING)

    def error(self, message: str) -> None:
        self.update(message, ProgressStage.FAILED)

    def info(self, message: str) -> None:
        self.update(message, ProgressStage.INFO)

    def header(self, title: str) -> None:
        """Blank line, then ``=== title ===``."""
        logger.info(f"=== {title} ===")
        self._print("")
        self._print(click.style(f"=== {title} ===", fg="magenta", bold=True))

    def dim(self, message: str) -> None:
        logger.info(message)
        self._print(click.style(message, dim=True))

    def plain(self, message: str = "") -> None:
        if message:
            logger.info(message)
        self._print(message)

    def progress_bar(self, current: int, total: int, task: str, bar_length: int = 20) -> str:
        """
        Render a one-line progress bar, e.g. ``[==========          ] 50% - core``.

        The line is rewritten in place until current == total or another
        message is printed, which first ends the bar line.
        """
        percent = current * 100 // total if total else 100
        filled = percent * bar_length // 100
        line = f"[{'=' * filled}{' ' * (bar_length - filled)}] {percent}% - {task}"
        self._bar_open = current < total
        styled = click.style(line, fg="blue")
        click.echo("\r" + styled, nl=not self._bar_open, file=self.output_file)
        return line

    def _print(self, message: str) -> None:
        if self._bar_open:
            click.echo(file=self.output_file)
            self._bar_open = False
        click.echo(message, file=self.output_file)


__all__ = ["ProgressDisplay", "ProgressStage"]
