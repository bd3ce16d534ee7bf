"""MessageRegistry 테스트"""

import threading
from datetime import datetime, timedelta

from bugbridge.reporter.registry import MessageRegistry
from bugbridge.reporter.types import TrackedMessage


def _message(bug_id, created_at=None):
    return TrackedMessage(
        bug_id=bug_id,
        created_at=created_at or datetime.now(),
        channel_id="C1",
        message_ts=f"{bug_id}.000",
    )


class TestMessageRegistry:
    def test_add_and_snapshot(self):
        registry = MessageRegistry()
        registry.add(_message(1))
        registry.add(_message(2))

        assert [m.bug_id for m in registry.snapshot()] == [1, 2]
        assert len(registry) == 2

    def test_snapshot_is_copy(self):
        registry = MessageRegistry()
        registry.add(_message(1))

        registry.snapshot().clear()

        assert len(registry) == 1

    def test_exclusive_allows_in_place_edit(self):
        registry = MessageRegistry()
        registry.add(_message(1))
        registry.add(_message(2))

        with registry.exclusive() as messages:
            messages[:] = [m for m in messages if m.bug_id != 1]

        assert [m.bug_id for m in registry.snapshot()] == [2]

    def test_exclusive_blocks_other_threads(self):
        registry = MessageRegistry()
        entered = threading.Event()
        added = threading.Event()

        def add_later():
            entered.wait()
            registry.add(_message(2))
            added.set()

        worker = threading.Thread(target=add_later)
        worker.start()

        with registry.exclusive() as messages:
            entered.set()
            # 락을 쥐고 있는 동안에는 다른 스레드가 등록할 수 없다
            assert not added.wait(timeout=0.2)
            messages.append(_message(1))

        worker.join(timeout=2)
        assert [m.bug_id for m in registry.snapshot()] == [1, 2]

    def test_is_expired(self):
        registry = MessageRegistry(retention=timedelta(days=30))
        now = datetime(2026, 10, 18, 12, 0)

        assert registry.is_expired(_message(1, now - timedelta(days=31)), now)
        assert not registry.is_expired(_message(2, now - timedelta(days=29)), now)
