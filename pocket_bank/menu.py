"""
Menu Engine Module

Renders a numbered list of actions, reads the user's choice through the
interaction port, retries silently until the choice is valid, runs the
chosen action and hands its return value back to the caller.

The engine never decides when to stop showing a menu. Callers use
repeat_menu, which keeps re-running the menu until an action returns
the agreed sentinel value.
"""

from dataclasses import dataclass
from enum import Enum
import re
from typing import Any, Callable, Optional, Sequence, Union

from .interaction import InteractionPort

EXIT = "exit"

# ASCII digits, optionally followed by a zero fraction ("2" or "2.0")
CHOICE_PATTERN = re.compile(r"([0-9]+)(?:\.0*)?")


class MenuState(Enum):
    """States of a single menu run"""
    PROMPTING = "prompting"
    DISPATCHING = "dispatching"
    DONE = "done"


@dataclass(frozen=True)
class MenuOption:
    """One labeled action in a menu"""
    label: str
    action: Callable[[], Any]


@dataclass(frozen=True)
class MenuResult:
    """Outcome of a menu run: the 1-based choice and the action's return value"""
    choice: int
    value: Any


Options = Union[Sequence[MenuOption], Callable[[], Sequence[MenuOption]]]
Intro = Union[str, Callable[[], str]]


def render_menu(options: Sequence[MenuOption], intro: str = "") -> str:
    """Build the menu text shown to the user"""
    lines = [f"{intro}Choose one of the following:"]
    for index, option in enumerate(options, start=1):
        lines.append(f"{index}) {option.label}")
    return "\n".join(lines)


def parse_choice(raw: Optional[str], option_count: int) -> Optional[int]:
    """Return the chosen 1-based index, or None if the input is not a valid choice"""
    if raw is None:
        return None
    match = CHOICE_PATTERN.fullmatch(raw.strip())
    if match is None:
        return None
    choice = int(match.group(1))
    if 1 <= choice <= option_count:
        return choice
    return None


def run_menu(options: Sequence[MenuOption], intro: str, io: InteractionPort) -> MenuResult:
    """
    Show a menu once and run the chosen action

    Args:
        options: Ordered menu options
        intro: Text shown above the options
        io: Interaction port used to read the choice

    Returns:
        MenuResult with the choice and the action's return value
    """
    if not options:
        raise ValueError("A menu needs at least one option")

    message = render_menu(options, intro)
    state = MenuState.PROMPTING
    choice = None
    value = None

    while state is not MenuState.DONE:
        if state is MenuState.PROMPTING:
            choice = parse_choice(io.prompt_text(message), len(options))
            if choice is not None:
                state = MenuState.DISPATCHING
        elif state is MenuState.DISPATCHING:
            value = options[choice - 1].action()
            state = MenuState.DONE

    return MenuResult(choice=choice, value=value)


def repeat_menu(options: Options, intro: Intro, io: InteractionPort,
                sentinel: Any = EXIT) -> MenuResult:
    """
    Run a menu again and again until an action returns the sentinel

    ``options`` and ``intro`` may be callables; they are evaluated again
    before every display so the menu can reflect the current state.

    Returns:
        The MenuResult whose value matched the sentinel
    """
    while True:
        current_options = options() if callable(options) else options
        current_intro = intro() if callable(intro) else intro
        result = run_menu(current_options, current_intro, io)
        if result.value == sentinel:
            return result
