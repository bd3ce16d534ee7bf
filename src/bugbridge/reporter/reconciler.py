"""알림 메시지 재조정 루프

레지스트리에 등록된 알림의 버그 상태를 주기적으로 다시 조회해서,
NEW 상태를 벗어난 버그의 알림을 갱신하고 감시 목록에서 뺍니다.
"""

import logging
import threading
from datetime import datetime
from typing import Optional

from bugbridge.bugzilla import BugzillaClient, BugzillaError, format_assigned_message
from bugbridge.reporter.registry import MessageRegistry
from bugbridge.reporter.types import INITIAL_STATUS, TrackedMessage
from bugbridge.slack.formatting import update_message

logger = logging.getLogger(__name__)


class MessageReconciler:
    """알림 메시지 재조정 루프

    백그라운드 스레드에서 interval 간격으로 패스를 실행합니다.
    패스 하나에서 발생한 오류는 로그만 남기고 다음 패스로 넘어갑니다.
    스레드가 죽으면 ensure_running()이 다시 띄웁니다.
    """

    def __init__(
        self,
        *,
        bugzilla: BugzillaClient,
        slack_client,
        registry: MessageRegistry,
        base_url: str,
        interval: int = 3600,  # 1시간
        name: str = "",
    ):
        """
        Args:
            bugzilla: Bugzilla 클라이언트
            slack_client: Slack WebClient
            registry: 알림 메시지 레지스트리 (리포터와 공유)
            base_url: 버그 링크용 Bugzilla 주소
            interval: 패스 간격 (초)
            name: 로그 표시용 이름
        """
        self.bugzilla = bugzilla
        self.slack_client = slack_client
        self.registry = registry
        self.base_url = base_url
        self.interval = interval
        self.name = name

        # 조회 실패 누적 횟수 (bug_id -> 횟수)
        self.fetch_failures: dict[int, int] = {}
        self.last_pass_at: Optional[datetime] = None

        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    def start(self):
        """루프 시작 (백그라운드 스레드)"""
        if self.is_running:
            logger.warning(f"재조정 루프가 이미 실행 중입니다 ({self.name})")
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, name=f"reconciler-{self.name}", daemon=True
        )
        self._thread.start()
        logger.info(f"재조정 루프 시작 ({self.name}): {self.interval}초 간격")

    def stop(self, timeout: float = 5):
        """루프 중지 (진행 중인 패스가 끝날 때까지 최대 timeout초 대기)"""
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=timeout)
            logger.info(f"재조정 루프 중지 ({self.name})")

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def ensure_running(self) -> bool:
        """스레드가 죽었으면 다시 시작. 재시작했으면 True."""
        if self._stop_event.is_set() or self.is_running:
            return False
        if self._thread is not None:
            logger.warning(f"재조정 루프 스레드가 종료되어 재시작합니다 ({self.name})")
        self.start()
        return True

    def _run(self):
        """루프 본체: 패스 실행 후 다음 간격까지 대기 (중간에 stop 가능)"""
        while not self._stop_event.is_set():
            try:
                self.run_once()
            except Exception as e:
                logger.exception(f"재조정 패스 오류 ({self.name}): {e}")

            self._stop_event.wait(timeout=self.interval)

    def run_once(self, now: Optional[datetime] = None) -> None:
        """재조정 패스 1회

        1. 보관 기간이 지난 메시지 제거
        2. 남은 메시지마다 버그 조회
           - 조회 실패: 유지, 다음 패스에 재시도
           - 여전히 NEW: 유지
           - 그 외: 알림 갱신 후 제거 (갱신 실패해도 제거)

        패스 도중 예상치 못한 오류가 나면 아직 처리하지 않은 메시지는 유지됩니다.
        """
        now = now or datetime.now()

        with self.registry.exclusive() as messages:
            fresh = [m for m in messages if not self.registry.is_expired(m, now)]
            if len(fresh) != len(messages):
                logger.info(f"보관 기간이 지난 알림 {len(messages) - len(fresh)}건 감시 중단 ({self.name})")
            messages[:] = fresh

            index = 0
            try:
                while index < len(fresh):
                    if not self._reconcile(fresh[index]):
                        del fresh[index]
                    else:
                        index += 1
            finally:
                messages[:] = fresh

            watched = {m.bug_id for m in messages}
            for bug_id in list(self.fetch_failures):
                if bug_id not in watched:
                    del self.fetch_failures[bug_id]

        self.last_pass_at = now

    def _reconcile(self, message: TrackedMessage) -> bool:
        """메시지 하나 재조정. 계속 감시하면 True."""
        try:
            bug = self.bugzilla.get_bug(message.bug_id)
        except BugzillaError as e:
            failures = self.fetch_failures.get(message.bug_id, 0) + 1
            self.fetch_failures[message.bug_id] = failures
            logger.error(f"버그 #{message.bug_id} 조회 실패 ({failures}회째): {e}")
            return True

        self.fetch_failures.pop(message.bug_id, None)

        if bug.status == INITIAL_STATUS:
            return True

        text = format_assigned_message(bug, self.base_url)
        logger.info(f"알림 갱신: {text}")
        try:
            update_message(self.slack_client, message.channel_id, message.message_ts, text)
        except Exception as e:
            logger.error(f"알림 갱신 실패 (#{bug.id}): {e}")
        return False
