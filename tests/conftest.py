from typing import Iterable, List

import pytest

from console_support import ConsoleIO


class ScriptedIO(ConsoleIO):
    """Feeds canned answers to prompts and records everything printed"""

    def __init__(self, answers: Iterable[str] = ()):
        self._answers = list(answers)
        self.prompts: List[str] = []
        self.lines: List[str] = []
        super().__init__(read_line=self._next_answer, write=self.lines.append)

    def _next_answer(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self._answers:
            raise EOFError
        return self._answers.pop(0)

    def feed(self, *answers: str) -> None:
        self._answers.extend(answers)

    @property
    def output(self) -> str:
        return "\n".join(self.lines)


@pytest.fixture
def scripted_io():
    return ScriptedIO()
