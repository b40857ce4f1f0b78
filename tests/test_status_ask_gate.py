"""Tests for status classification and the ask gate table."""

import pytest

from versioning.models import AskScope, Decision, FailureReason, Status
from versioning.status import classify_status, should_ask


class TestClassifyStatus:
    """Test bucketing of decisions relative to the declared version."""

    def test_failed(self):
        decision = Decision(wanted=None, newest=None, failed=True,
                            reason=FailureReason.CATALOG_QUERY_FAILED)
        assert classify_status("1.0.0", decision) is Status.FAILED

    def test_unchanged_at_latest(self):
        decision = Decision(wanted="2.0.0", newest="2.0.0", failed=False, latest="2.0.0")
        assert classify_status("2.0.0", decision) is Status.UNCHANGED

    def test_blocked_below_latest(self):
        decision = Decision(wanted="1.0.0", newest="2.0.0", failed=False, latest="2.0.0")
        assert classify_status("1.0.0", decision) is Status.BLOCKED

    def test_latest(self):
        decision = Decision(wanted="2.0.0", newest="2.0.0", failed=False, latest="2.0.0")
        assert classify_status("1.0.0", decision) is Status.LATEST

    def test_semi(self):
        decision = Decision(wanted="5.9.0", newest="5.9.0", failed=False, latest="6.1.0")
        assert classify_status("5.4.0", decision) is Status.SEMI


ALL_STATUSES = [Status.UNCHANGED, Status.BLOCKED, Status.SEMI, Status.LATEST, Status.FAILED]

ASK_TABLE = {
    AskScope.ALL: {Status.UNCHANGED, Status.BLOCKED, Status.SEMI, Status.LATEST},
    AskScope.BLOCKED: {Status.BLOCKED},
    AskScope.SEMI: {Status.SEMI},
    AskScope.LATEST: {Status.LATEST},
    AskScope.NONLATEST: {Status.BLOCKED, Status.SEMI},
    AskScope.CHANGED: {Status.SEMI, Status.LATEST},
    AskScope.NONE: set(),
}


@pytest.mark.parametrize("scope", list(AskScope))
@pytest.mark.parametrize("status", ALL_STATUSES)
def test_ask_gate_table(scope, status):
    assert should_ask(scope, status) is (status in ASK_TABLE[scope])


@pytest.mark.parametrize("scope", list(AskScope))
def test_failed_never_prompts(scope):
    assert should_ask(scope, Status.FAILED) is False
