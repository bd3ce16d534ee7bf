"""MessageReconciler 테스트"""

import threading
import time
from datetime import datetime, timedelta
from unittest.mock import MagicMock

from bugbridge.bugzilla import Bug, BugzillaError
from bugbridge.reporter.reconciler import MessageReconciler
from bugbridge.reporter.registry import MessageRegistry
from bugbridge.reporter.types import TrackedMessage

BASE_URL = "https://bz.example.com"
NOW = datetime(2026, 10, 18, 12, 0)


def _message(bug_id, age_days=1):
    return TrackedMessage(
        bug_id=bug_id,
        created_at=NOW - timedelta(days=age_days),
        channel_id="C1",
        message_ts=f"{bug_id}.000",
    )


def _make_reconciler(bugs=None, **overrides):
    """bugs: bug_id -> Bug 또는 Exception"""
    bugs = bugs or {}
    bugzilla = overrides.pop("bugzilla", MagicMock())

    def get_bug(bug_id):
        result = bugs[bug_id]
        if isinstance(result, Exception):
            raise result
        return result

    bugzilla.get_bug.side_effect = get_bug
    registry = overrides.pop("registry", MessageRegistry())
    return MessageReconciler(
        bugzilla=bugzilla,
        slack_client=overrides.pop("slack_client", MagicMock()),
        registry=registry,
        base_url=BASE_URL,
        interval=overrides.pop("interval", 3600),
        name="Networking",
    )


def _ids(registry):
    return [m.bug_id for m in registry.snapshot()]


class TestRunOnce:
    """재조정 패스"""

    def test_new_bug_kept_without_edit(self):
        reconciler = _make_reconciler({1: Bug(id=1, status="NEW")})
        reconciler.registry.add(_message(1))

        reconciler.run_once(NOW)

        assert _ids(reconciler.registry) == [1]
        reconciler.slack_client.chat_update.assert_not_called()

    def test_changed_bug_edited_and_removed(self):
        reconciler = _make_reconciler({
            1: Bug(id=1, status="CLOSED", assigned_to="dev@example.com", summary="crash"),
        })
        reconciler.registry.add(_message(1))

        reconciler.run_once(NOW)

        assert _ids(reconciler.registry) == []
        kwargs = reconciler.slack_client.chat_update.call_args.kwargs
        assert kwargs["channel"] == "C1"
        assert kwargs["ts"] == "1.000"
        assert "CLOSED, assigned to dev@example.com" in kwargs["text"]
        # 갱신된 알림에는 버튼이 없다
        assert [b["type"] for b in kwargs["blocks"]] == ["section"]

    def test_edit_failure_still_removes(self):
        slack_client = MagicMock()
        slack_client.chat_update.side_effect = Exception("message_not_found")
        reconciler = _make_reconciler(
            {1: Bug(id=1, status="ASSIGNED")}, slack_client=slack_client
        )
        reconciler.registry.add(_message(1))

        reconciler.run_once(NOW)

        assert _ids(reconciler.registry) == []

    def test_fetch_failure_keeps_and_counts(self):
        reconciler = _make_reconciler({1: BugzillaError("timeout")})
        reconciler.registry.add(_message(1))

        reconciler.run_once(NOW)
        reconciler.run_once(NOW)

        assert _ids(reconciler.registry) == [1]
        assert reconciler.fetch_failures == {1: 2}

    def test_fetch_failure_counter_cleared_on_success(self):
        bugs = {1: BugzillaError("timeout")}
        reconciler = _make_reconciler(bugs)
        reconciler.registry.add(_message(1))

        reconciler.run_once(NOW)
        bugs[1] = Bug(id=1, status="NEW")
        reconciler.run_once(NOW)

        assert reconciler.fetch_failures == {}

    def test_expired_dropped_without_fetch(self):
        reconciler = _make_reconciler({2: Bug(id=2, status="NEW")})
        reconciler.registry.add(_message(1, age_days=31))
        reconciler.registry.add(_message(2, age_days=29))

        reconciler.run_once(NOW)

        assert _ids(reconciler.registry) == [2]
        reconciler.bugzilla.get_bug.assert_called_once_with(2)

    def test_mixed(self):
        reconciler = _make_reconciler({
            1: Bug(id=1, status="NEW"),
            2: Bug(id=2, status="CLOSED"),
            3: BugzillaError("down"),
            4: Bug(id=4, status="POST"),
        })
        for bug_id in (1, 2, 3, 4):
            reconciler.registry.add(_message(bug_id))

        reconciler.run_once(NOW)

        assert _ids(reconciler.registry) == [1, 3]
        assert reconciler.slack_client.chat_update.call_count == 2

    def test_unexpected_fault_keeps_unprocessed_entries(self):
        reconciler = _make_reconciler({
            1: Bug(id=1, status="CLOSED"),
            2: RuntimeError("boom"),
            3: Bug(id=3, status="CLOSED"),
        })
        for bug_id in (1, 2, 3):
            reconciler.registry.add(_message(bug_id))

        try:
            reconciler.run_once(NOW)
        except RuntimeError:
            pass

        assert _ids(reconciler.registry) == [2, 3]

    def test_records_last_pass(self):
        reconciler = _make_reconciler()
        reconciler.run_once(NOW)
        assert reconciler.last_pass_at == NOW


class TestLoop:
    """루프 수명 주기"""

    def test_survives_pass_fault(self):
        reconciler = _make_reconciler(interval=0.01)
        calls = []
        done = threading.Event()

        def flaky_pass():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("boom")
            done.set()

        reconciler.run_once = flaky_pass
        reconciler.start()
        try:
            assert done.wait(timeout=2)
            assert reconciler.is_running
        finally:
            reconciler.stop()

        assert not reconciler.is_running

    def test_stop_interrupts_wait(self):
        reconciler = _make_reconciler(interval=3600)
        reconciler.start()

        started = time.monotonic()
        reconciler.stop()

        assert time.monotonic() - started < 2
        assert not reconciler.is_running

    def test_ensure_running_restarts_dead_thread(self):
        reconciler = _make_reconciler(interval=3600)
        dead = threading.Thread(target=lambda: None)
        dead.start()
        dead.join()
        reconciler._thread = dead

        assert reconciler.ensure_running() is True
        try:
            assert reconciler.is_running
        finally:
            reconciler.stop()

    def test_ensure_running_noop_after_stop(self):
        reconciler = _make_reconciler(interval=3600)
        reconciler.start()
        reconciler.stop()

        assert reconciler.ensure_running() is False
        assert not reconciler.is_running
