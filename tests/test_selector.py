"""Tests for the interactive version selector."""

import pytest
from prompt_toolkit.input import create_pipe_input
from prompt_toolkit.output import DummyOutput

from selector import (
    EventKind,
    KeyEvent,
    VersionSelector,
    fuzzy_filter,
    fuzzy_match,
    initial_state,
    inline_window,
    reduce,
    render,
)

OPTIONS = ["1.0.0", "1.2.x-beta", "2.0.0", "2.1.0", "3.0.0"]


def feed(state, *events):
    for event in events:
        state = reduce(state, event)
    return state


def chars(text):
    return [KeyEvent(EventKind.CHARACTER, c) for c in text]


class TestFuzzyFilter:
    """Test case-insensitive in-order subsequence matching."""

    def test_subsequence(self):
        assert fuzzy_match("1.2.x-beta", "1x") is True
        assert fuzzy_match("2.1.0", "1x") is False

    def test_case_insensitive(self):
        assert fuzzy_match("1.0.0-RC.1", "rc") is True

    def test_empty_query_keeps_order(self):
        assert fuzzy_filter(OPTIONS, "") == OPTIONS

    def test_filter(self):
        assert fuzzy_filter(OPTIONS, "1x") == ["1.2.x-beta"]
        assert fuzzy_filter(OPTIONS, "21") == ["2.1.0"]


class TestReducer:
    """Test the selector state machine."""

    def test_initial_selection(self):
        state = initial_state(OPTIONS, "2.0.0")
        assert state.selected == "2.0.0"
        assert state.matches == tuple(OPTIONS)

    def test_initial_selection_missing(self):
        assert initial_state(OPTIONS, "9.9.9").selected_index == 0

    def test_next_and_previous_clamp(self):
        state = initial_state(OPTIONS, "3.0.0")
        state = feed(state, KeyEvent(EventKind.NEXT))
        assert state.selected == "3.0.0"
        state = feed(state, *[KeyEvent(EventKind.PREVIOUS)] * 10)
        assert state.selected_index == 0

    def test_typing_filters_and_resets_out_of_range_index(self):
        state = initial_state(OPTIONS, "3.0.0")
        state = feed(state, *chars("1x"))
        assert state.query == "1x"
        assert state.matches == ("1.2.x-beta",)
        assert state.selected_index == 0

    def test_typing_keeps_index_in_range(self):
        state = initial_state(OPTIONS, "1.2.x-beta")
        state = feed(state, *chars("1"))
        assert state.selected_index == 1

    def test_space_is_ignored(self):
        state = feed(initial_state(OPTIONS), KeyEvent(EventKind.CHARACTER, " "))
        assert state.query == ""

    def test_backspace_and_clear(self):
        state = feed(initial_state(OPTIONS), *chars("2.1"))
        state = feed(state, KeyEvent(EventKind.BACKSPACE))
        assert state.query == "2."
        state = feed(state, KeyEvent(EventKind.CLEAR))
        assert state.query == ""
        assert state.matches == tuple(OPTIONS)

    def test_commit(self):
        state = feed(initial_state(OPTIONS, "2.0.0"), KeyEvent(EventKind.NEXT),
                     KeyEvent(EventKind.COMMIT))
        assert state.committed == "2.1.0"
        assert state.done

    def test_commit_without_matches_is_ignored(self):
        state = feed(initial_state(OPTIONS), *chars("zzz"), KeyEvent(EventKind.COMMIT))
        assert state.matches == ()
        assert state.committed is None
        assert not state.done

    def test_interrupt(self):
        state = feed(initial_state(OPTIONS), KeyEvent(EventKind.INTERRUPT))
        assert state.interrupted
        assert state.done

    def test_finished_state_is_final(self):
        state = feed(initial_state(OPTIONS), KeyEvent(EventKind.COMMIT))
        assert feed(state, KeyEvent(EventKind.NEXT)) == state


class TestRendering:
    """Test the inline window and prompt line."""

    def test_window_centred(self):
        assert inline_window(OPTIONS, 2) == "1.2.x-beta, <2.0.0>, 2.1.0"

    def test_window_at_edges(self):
        assert inline_window(OPTIONS, 0) == "<1.0.0>, 1.2.x-beta, 2.0.0"
        assert inline_window(OPTIONS, 4) == "2.0.0, 2.1.0, <3.0.0>"

    def test_window_short_list(self):
        assert inline_window(["1.0.0"], 0) == "<1.0.0>"
        assert inline_window([], 0) == ""

    def test_render(self):
        state = feed(initial_state(OPTIONS), *chars("3"))
        assert render("Select foo version", state) == "Select foo version [<3.0.0>]: 3"


class TestVersionSelector:
    """Drive the prompt_toolkit application with piped key presses."""

    def _run(self, keys, first="2.0.0"):
        with create_pipe_input() as pipe:
            pipe.send_text(keys)
            selector = VersionSelector(input=pipe, output=DummyOutput())
            return selector.select("Select foo version", OPTIONS, first)

    def test_enter_commits_initial(self):
        assert self._run("\r") == "2.0.0"

    def test_arrow_keys(self):
        assert self._run("\x1b[A\x1b[A\r") == "3.0.0"
        assert self._run("\x1b[B\r") == "1.2.x-beta"

    def test_typed_query(self):
        assert self._run("1x\r") == "1.2.x-beta"

    def test_ctrl_c_interrupts(self):
        with pytest.raises(KeyboardInterrupt):
            self._run("\x03")
