"""Interactive yes/no and multiple-choice prompts."""

from __future__ import annotations

import sys
from collections.abc import Callable, Sequence
from typing import Protocol, TextIO

YES_NO = ("yes", "y", "no", "n")


class Prompter(Protocol):
    def confirm(self, question: str) -> bool:
        """Ask a yes/no question; an empty answer means no."""

    def choose(self, question: str, choices: Sequence[str]) -> str | None:
        """Return one of *choices*, or ``None`` on an empty answer."""


class ConsolePrompter:
    def __init__(
        self,
        *,
        input_fn: Callable[[], str] = input,
        stream: TextIO | None = None,
    ) -> None:
        self.input_fn = input_fn
        self.stream = stream if stream is not None else sys.stdout

    def confirm(self, question: str) -> bool:
        response = self.choose(f"{question} (y/n)?: ", YES_NO)
        return response in ("yes", "y")

    def choose(self, question: str, choices: Sequence[str]) -> str | None:
        self._write(f"> {question}")
        while True:
            try:
                response = self.input_fn()
            except EOFError:
                return None
            if response in choices:
                return response
            if response == "":
                return None
            self._write(f'Invalid response "{response}". Enter input again: ')

    def _write(self, text: str) -> None:
        self.stream.write(text)
        self.stream.flush()
