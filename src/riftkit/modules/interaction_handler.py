"""Yes/no questions for interactive runs, ``-y`` runs and tests.

The installer and the port killer ask every question through an
InteractionHandler, so the same code runs at a terminal, unattended, or under
test with scripted answers.

Example:
    >>> handler = NonInteractiveHandler()
    >>> handler.confirm("Kill processes on port 3000?", default=True)
    True
    >>> handler.confirm("Install modern CLI tools?", default=False)
    False
"""

from typing import Protocol, runtime_checkable

import click


@runtime_checkable
class InteractionHandler(Protocol):
    def confirm(self, message: str, default: bool = False) -> bool:
        """True for yes; ``default`` is the answer to a bare Enter."""
        ...


class CLIInteractionHandler:
    """Terminal prompt showing ``(Y/n)`` or ``(y/N)``; Ctrl+C means no."""

    def confirm(self, message: str, default: bool = False) -> bool:
        try:
            return click.confirm(click.style(message, fg="cyan"), default=default)
        except click.Abort:
            click.echo()
            return False


class NonInteractiveHandler:
    """Takes the default answer to every question."""

    def confirm(self, message: str, default: bool = False) -> bool:
        return default


class MockInteractionHandler:
    """Replays scripted answers and records each question asked.

    Raises IndexError when asked more questions than it has answers.
    """

    def __init__(self, confirm_responses: list[bool] | None = None):
        self._answers = iter(confirm_responses or [])
        self._scripted = len(confirm_responses or [])
        self.interactions: list[dict] = []

    def confirm(self, message: str, default: bool = False) -> bool:
        try:
            response = next(self._answers)
        except StopIteration:
            raise IndexError(
                f"Unscripted question {message!r}: only {self._scripted} answer(s) provided"
            ) from None
        self.interactions.append({"message": message, "default": default, "response": response})
        return response


def get_handler(non_interactive: bool) -> InteractionHandler:
    """Handler for a ``-y``/``--non-interactive`` flag value."""
    return NonInteractiveHandler() if non_interactive else CLIInteractionHandler()


__all__ = [
    "CLIInteractionHandler",
    "InteractionHandler",
    "MockInteractionHandler",
    "NonInteractiveHandler",
    "get_handler",
]
