"""Inline interactive version selector.

The selector is a small finite-state machine: ``reduce`` maps a state and a
key event to the next state and never touches the terminal. ``VersionSelector``
runs a single-line ``prompt_toolkit`` application whose key bindings only
translate key presses into events, redraw after every event, and finish the
session on commit or interrupt. ``prompt_toolkit`` owns raw terminal mode for
the lifetime of the session and restores it on every exit path.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, List, Optional, Sequence, Tuple

from prompt_toolkit.application import Application
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.key_binding.key_processor import KeyPressEvent
from prompt_toolkit.keys import Keys
from prompt_toolkit.layout import Layout
from prompt_toolkit.layout.containers import Window
from prompt_toolkit.layout.controls import FormattedTextControl

from constants import Constants

logger = logging.getLogger(__name__)


class EventKind(Enum):
    """Logical key events understood by the selector."""
    CHARACTER = "character"
    BACKSPACE = "backspace"
    CLEAR = "clear"
    NEXT = "next"
    PREVIOUS = "previous"
    COMMIT = "commit"
    INTERRUPT = "interrupt"


@dataclass(frozen=True)
class KeyEvent:
    kind: EventKind
    char: str = ""


@dataclass(frozen=True)
class SelectorState:
    """Immutable selector state; ``matches`` is always derived from the query."""
    options: Tuple[str, ...]
    matches: Tuple[str, ...]
    query: str = ""
    selected_index: int = 0
    committed: Optional[str] = None
    interrupted: bool = False

    @property
    def done(self) -> bool:
        return self.committed is not None or self.interrupted

    @property
    def selected(self) -> Optional[str]:
        if 0 <= self.selected_index < len(self.matches):
            return self.matches[self.selected_index]
        return None


def is_query_char(char: str) -> bool:
    """Printable ASCII except space."""
    return len(char) == 1 and " " < char <= "~"


def fuzzy_match(candidate: str, query: str) -> bool:
    """True when the characters of ``query`` appear in order in ``candidate``.

    Comparison is case-insensitive and the characters need not be adjacent.
    """
    if not query:
        return True
    needle = query.lower()
    i = 0
    for ch in candidate.lower():
        if ch == needle[i]:
            i += 1
            if i == len(needle):
                return True
    return False


def fuzzy_filter(options: Sequence[str], query: str) -> List[str]:
    return [option for option in options if fuzzy_match(option, query)]


def _refilter(state: SelectorState, query: str, index: int) -> SelectorState:
    matches = tuple(fuzzy_filter(state.options, query))
    if not 0 <= index < len(matches):
        index = 0
    return replace(state, query=query, matches=matches, selected_index=index)


def initial_state(options: Sequence[str], first_selection: Optional[str] = None) -> SelectorState:
    """Start with every option shown and ``first_selection`` highlighted."""
    opts = tuple(options)
    index = opts.index(first_selection) if first_selection in opts else 0
    return _refilter(SelectorState(options=opts, matches=opts), "", index)


def reduce(state: SelectorState, event: KeyEvent) -> SelectorState:
    """Apply one key event. Finished states are returned unchanged."""
    if state.done:
        return state
    kind = event.kind
    if kind is EventKind.INTERRUPT:
        return replace(state, interrupted=True)
    if kind is EventKind.COMMIT:
        if state.selected is None:
            return state
        return replace(state, committed=state.selected)
    if kind is EventKind.NEXT:
        if not state.matches:
            return state
        index = min(len(state.matches) - 1, state.selected_index + 1)
        return _refilter(state, state.query, index)
    if kind is EventKind.PREVIOUS:
        if not state.matches:
            return state
        return _refilter(state, state.query, max(0, state.selected_index - 1))
    if kind is EventKind.CLEAR:
        if not state.query:
            return state
        return _refilter(state, "", state.selected_index)
    if kind is EventKind.BACKSPACE:
        if not state.query:
            return state
        return _refilter(state, state.query[:-1], state.selected_index)
    if kind is EventKind.CHARACTER and is_query_char(event.char):
        return _refilter(state, state.query + event.char, state.selected_index)
    return state


def inline_window(matches: Sequence[str], index: int, size: int = Constants.SELECTOR_WINDOW) -> str:
    """Up to ``size`` matches centred on ``index``, the selected one in ``<>``."""
    if not matches:
        return ""
    count = min(size, len(matches))
    start = max(0, index - count // 2)
    start = min(start, len(matches) - count)
    shown = []
    for offset, version in enumerate(matches[start:start + count]):
        shown.append(f"<{version}>" if start + offset == index else version)
    return ", ".join(shown)


def render(prompt: str, state: SelectorState) -> str:
    return f"{prompt} [{inline_window(state.matches, state.selected_index)}]: {state.query}"


class VersionSelector:
    """Runs one selector session at a time on the controlling terminal.

    ``input`` and ``output`` are passed to ``prompt_toolkit`` and default to
    the process terminal.
    """

    def __init__(self, input: Any = None, output: Any = None):  # pylint: disable=redefined-builtin
        self._input = input
        self._output = output
        self.state: Optional[SelectorState] = None

    def _key_bindings(self) -> KeyBindings:
        bindings = KeyBindings()

        def dispatch(event: KeyPressEvent, key_event: KeyEvent) -> None:
            if self.state.done:
                return
            self.state = reduce(self.state, key_event)
            if self.state.interrupted:
                event.app.exit(exception=KeyboardInterrupt())
            elif self.state.committed is not None:
                event.app.exit(result=self.state.committed)
            else:
                event.app.invalidate()

        @bindings.add("c-c")
        def _(event: KeyPressEvent) -> None:
            dispatch(event, KeyEvent(EventKind.INTERRUPT))

        @bindings.add("enter")
        def _(event: KeyPressEvent) -> None:
            dispatch(event, KeyEvent(EventKind.COMMIT))

        @bindings.add("up")
        @bindings.add("right")
        def _(event: KeyPressEvent) -> None:
            dispatch(event, KeyEvent(EventKind.NEXT))

        @bindings.add("down")
        @bindings.add("left")
        def _(event: KeyPressEvent) -> None:
            dispatch(event, KeyEvent(EventKind.PREVIOUS))

        @bindings.add("backspace")
        def _(event: KeyPressEvent) -> None:
            dispatch(event, KeyEvent(EventKind.BACKSPACE))

        @bindings.add("c-w")
        def _(event: KeyPressEvent) -> None:
            dispatch(event, KeyEvent(EventKind.CLEAR))

        @bindings.add(Keys.Any)
        def _(event: KeyPressEvent) -> None:
            if is_query_char(event.data):
                dispatch(event, KeyEvent(EventKind.CHARACTER, event.data))

        return bindings

    def select(self, prompt: str, options: Sequence[str], first_selection: Optional[str] = None) -> str:
        """Let the operator pick one of ``options``.

        Returns:
            The committed version.

        Raises:
            KeyboardInterrupt: When the operator presses Ctrl-C; the terminal
                is back in normal mode when this propagates.
        """
        self.state = initial_state(options, first_selection)
        control = FormattedTextControl(text=lambda: render(prompt, self.state), show_cursor=True)
        app: Application[str] = Application(
            layout=Layout(Window(content=control, height=1, dont_extend_height=True)),
            key_bindings=self._key_bindings(),
            full_screen=False,
            erase_when_done=True,
            input=self._input,
            output=self._output,
        )
        logger.debug("Selector opened for %d options", len(self.state.options))
        return app.run()
