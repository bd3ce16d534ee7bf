"""동기화 주기 스케줄러

interval_sec 간격으로 리포터의 동기화 주기를 실행합니다.
실패는 로그로 남기고 다음 주기는 항상 예약합니다.
"""

import logging
import threading
from typing import Optional

from bugbridge.reporter.new_bugs import NewBugReporter
from bugbridge.reporter.reconciler import MessageReconciler

logger = logging.getLogger(__name__)


class SyncScheduler:
    """리포터 하나의 동기화 주기를 주기적으로 실행하는 스케줄러

    threading.Timer를 사용합니다. 매 주기마다 재조정 루프가 살아 있는지도 확인합니다.
    """

    def __init__(
        self,
        *,
        reporter: NewBugReporter,
        reconciler: Optional[MessageReconciler] = None,
        interval_sec: int = 900,
    ):
        self.reporter = reporter
        self.reconciler = reconciler
        self.interval_sec = interval_sec

        self.last_error: Optional[Exception] = None
        self._timer: threading.Timer | None = None
        self._running = False
        self._tick_lock = threading.Lock()

    def start(self, run_immediately: bool = True) -> None:
        """스케줄러를 시작합니다."""
        if self._running:
            return
        self._running = True
        if run_immediately:
            self._schedule(0)
        else:
            self._schedule(self.interval_sec)
        logger.info(f"새 버그 동기화 시작 ({self.reporter.name}): {self.interval_sec}초 간격")

    def stop(self) -> None:
        """스케줄러를 중지합니다."""
        self._running = False
        if self._timer:
            self._timer.cancel()
            self._timer = None
        logger.info(f"새 버그 동기화 중지 ({self.reporter.name})")

    @property
    def is_running(self) -> bool:
        return self._running

    def _schedule(self, delay: float) -> None:
        """다음 실행을 예약합니다."""
        if not self._running:
            return
        self._timer = threading.Timer(delay, self._tick)
        self._timer.daemon = True
        self._timer.start()

    def _tick(self) -> None:
        """주기적 실행"""
        try:
            self.run_once()
        finally:
            self._schedule(self.interval_sec)

    def run_once(self) -> bool:
        """동기화 주기 1회. 성공하면 True.

        이전 주기가 아직 끝나지 않았으면 건너뜁니다.
        """
        if not self._tick_lock.acquire(blocking=False):
            logger.warning(f"이전 동기화가 아직 진행 중이라 건너뜁니다 ({self.reporter.name})")
            return False

        try:
            if self.reconciler is not None:
                self.reconciler.ensure_running()
            self.reporter.sync()
            self.last_error = None
            return True
        except Exception as e:
            self.last_error = e
            logger.error(f"새 버그 동기화 실패 ({self.reporter.name}): {e}")
            return False
        finally:
            self._tick_lock.release()
