"""알림 메시지 레지스트리

상태 변경을 기다리는 알림 메시지 목록. 동기화 주기와 재조정 루프가 공유하는
유일한 가변 상태이며, 단일 락으로 보호됩니다.

접근 규칙:
- 모든 읽기/쓰기는 exclusive() 블록 안에서만 합니다.
- 락은 등록 배치 전체, 또는 재조정 패스 전체 동안 유지합니다.
  (사람 손으로 발생하는 이벤트라 경합이 거의 없음)
- 클레임 핸들러는 레지스트리를 건드리지 않습니다.
"""

import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Iterator

from bugbridge.reporter.types import TrackedMessage

logger = logging.getLogger(__name__)

DEFAULT_RETENTION = timedelta(days=30)


class MessageRegistry:
    """감시 중인 알림 메시지 레지스트리"""

    def __init__(self, retention: timedelta = DEFAULT_RETENTION):
        self.retention = retention
        self._lock = threading.Lock()
        self._messages: list[TrackedMessage] = []

    @contextmanager
    def exclusive(self) -> Iterator[list[TrackedMessage]]:
        """레지스트리를 독점 점유하고 메시지 리스트를 넘겨줍니다.

        yield된 리스트는 블록 안에서 직접 수정합니다 (append, 슬라이스 대입).
        """
        with self._lock:
            logger.debug("레지스트리 락 획득")
            try:
                yield self._messages
            finally:
                logger.debug("레지스트리 락 해제")

    def add(self, message: TrackedMessage) -> None:
        """메시지 하나 등록"""
        with self.exclusive() as messages:
            messages.append(message)

    def snapshot(self) -> list[TrackedMessage]:
        """현재 메시지 목록 복사본"""
        with self.exclusive() as messages:
            return list(messages)

    def is_expired(self, message: TrackedMessage, now: datetime) -> bool:
        """보관 기간이 지나 더 이상 감시하지 않는 메시지인지"""
        return message.created_at < now - self.retention

    def __len__(self) -> int:
        with self._lock:
            return len(self._messages)
