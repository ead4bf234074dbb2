"""This module contains the message classes for the TUI."""

from typing import Optional

from textual.message import Message

from ..results import ResultSet
from ..utils import RunUpdate


class RunProgress(Message):
    """A message to update the TUI with orchestrator progress."""

    def __init__(self, update: RunUpdate) -> None:
        self.update = update
        super().__init__()


class SessionFinished(Message):
    """Posted once by the worker when the session ends, successfully or not."""

    def __init__(self, result_set: Optional[ResultSet] = None, error: Optional[BaseException] = None) -> None:
        self.result_set = result_set
        self.error = error
        super().__init__()
