"""
User Interaction Module

The interaction port consumed by the menu engine and the session:
text prompts, alerts and yes/no confirmations. Ships a console adapter
and a scripted adapter for tests and demos.
"""

from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from typing import Iterable, List, Optional


class InteractionPort(ABC):
    """Abstract interface for talking to the user"""

    @abstractmethod
    def prompt_text(self, message: str, default: Optional[str] = None) -> Optional[str]:
        """Ask for a line of text; None means the user cancelled"""
        pass

    @abstractmethod
    def alert(self, message: str) -> None:
        """Show a message"""
        pass

    @abstractmethod
    def confirm(self, message: str) -> bool:
        """Ask a yes/no question"""
        pass


class ConsoleInteraction(InteractionPort):
    """Console adapter using input() and print()

    EOFError and KeyboardInterrupt from input() are not caught here; the
    application entry point treats them as the end of the session.
    """

    YES = {"y", "yes"}

    def __init__(self, input_func=input, output_func=print):
        self._input = input_func
        self._output = output_func

    def prompt_text(self, message: str, default: Optional[str] = None) -> Optional[str]:
        self._output(message)
        suffix = f" [{default}]" if default is not None else ""
        answer = self._input(f"{suffix}> ")
        if answer == "" and default is not None:
            return default
        return answer

    def alert(self, message: str) -> None:
        self._output(message)

    def confirm(self, message: str) -> bool:
        answer = self._input(f"{message} [y/N] ")
        return answer.strip().lower() in self.YES


@dataclass
class Exchange:
    """One recorded interaction"""
    kind: str  # "prompt", "alert" or "confirm"
    message: str
    default: Optional[str] = None


@dataclass
class ScriptedInteraction(InteractionPort):
    """
    Deterministic adapter fed from lists of answers.

    Every prompt, alert and confirmation is recorded in ``transcript``.
    Running out of scripted answers raises EOFError, the same way the
    console adapter ends.
    """
    responses: Iterable[Optional[str]] = field(default_factory=list)
    confirmations: Iterable[bool] = field(default_factory=list)
    transcript: List[Exchange] = field(default_factory=list)

    def __post_init__(self):
        self._responses = deque(self.responses)
        self._confirmations = deque(self.confirmations)

    def prompt_text(self, message: str, default: Optional[str] = None) -> Optional[str]:
        self.transcript.append(Exchange("prompt", message, default))
        if not self._responses:
            raise EOFError("No scripted responses left")
        return self._responses.popleft()

    def alert(self, message: str) -> None:
        self.transcript.append(Exchange("alert", message))

    def confirm(self, message: str) -> bool:
        self.transcript.append(Exchange("confirm", message))
        if not self._confirmations:
            raise EOFError("No scripted confirmations left")
        return self._confirmations.popleft()

    @property
    def prompts(self) -> List[Exchange]:
        return [e for e in self.transcript if e.kind == "prompt"]

    @property
    def alerts(self) -> List[str]:
        return [e.message for e in self.transcript if e.kind == "alert"]

    @property
    def remaining_responses(self) -> int:
        return len(self._responses)
