"""새 버그 리포터 - 동기화 주기

새로 접수된 버그를 찾아 가져가기 버튼이 달린 알림을 게시하고,
커서를 전진시켜 저장한 뒤, 게시한 알림을 레지스트리에 등록합니다.
"""

import logging
from datetime import datetime

from bugbridge.bugzilla import BugzillaClient, BugzillaError, format_bug_message
from bugbridge.reporter.registry import MessageRegistry
from bugbridge.reporter.scanner import DEFAULT_LOOKBACK_DAYS, build_report, get_new_bugs
from bugbridge.reporter.state import StateError, StateStore, cursor_key, parse_cursor
from bugbridge.reporter.types import ClaimIntent, SyncError, TrackedMessage
from bugbridge.slack.formatting import build_notification_blocks

logger = logging.getLogger(__name__)


class NewBugReporter:
    """컴포넌트 집합 하나를 담당하는 새 버그 리포터

    동기화 주기(sync)는 외부 스케줄러가 호출합니다.
    """

    def __init__(
        self,
        *,
        bugzilla: BugzillaClient,
        slack_client,
        channel: str,
        components: list[str],
        state_store: StateStore,
        registry: MessageRegistry,
        base_url: str,
        lookback_days: int = DEFAULT_LOOKBACK_DAYS,
    ):
        """
        Args:
            bugzilla: Bugzilla 클라이언트
            slack_client: Slack WebClient
            channel: 알림 채널 ID
            components: 감시할 컴포넌트 목록
            state_store: 커서 저장소
            registry: 알림 메시지 레지스트리 (재조정 루프와 공유)
            base_url: 버그 링크용 Bugzilla 주소
            lookback_days: 첫 실행 시 조회 기간
        """
        self.bugzilla = bugzilla
        self.slack_client = slack_client
        self.channel = channel
        self.components = components
        self.state_store = state_store
        self.registry = registry
        self.base_url = base_url
        self.lookback_days = lookback_days

        self.state_key = cursor_key(components)
        self.action_id = f"new-bugs-reporter/take-{'-'.join(sorted(components))}"

    @property
    def name(self) -> str:
        return ",".join(self.components)

    def load_cursor(self) -> int:
        """저장된 커서 (없거나 해석 불가하면 0)

        Raises:
            StateError: 상태 파일을 읽을 수 없는 경우
        """
        return parse_cursor(self.state_key, self.state_store.get(self.state_key))

    def sync(self) -> None:
        """동기화 주기 1회

        1. 커서 이후의 새 버그 조회 (실패 시 커서를 건드리지 않고 중단)
        2. 버그마다 알림 게시, 성공한 것만 레지스트리에 등록
        3. 조회한 버그 중 최대 ID로 커서 전진 후 저장 (게시 실패와 무관)

        게시에 실패한 버그는 다시 시도하지 않습니다 (커서가 이미 지나감).

        Raises:
            BugzillaError: 새 버그 조회 실패
            StateError: 커서를 읽을 수 없는 경우
            SyncError: 게시 실패 또는 커서 저장 실패
        """
        last_id = self.load_cursor()

        try:
            new_bugs = get_new_bugs(self.bugzilla, self.components, last_id, self.lookback_days)
        except BugzillaError as e:
            logger.error(f"새 버그 조회 실패 ({self.name}): {e}")
            raise

        errors: list[Exception] = []
        next_id = last_id
        posted = 0

        with self.registry.exclusive() as messages:
            for bug in new_bugs:
                next_id = max(next_id, bug.id)

                text = format_bug_message(bug, self.base_url)
                value = ClaimIntent(bug.id, bug.assigned_to).encode()
                try:
                    response = self.slack_client.chat_postMessage(
                        channel=self.channel,
                        text=text,
                        blocks=build_notification_blocks(text, self.action_id, value),
                    )
                    tracked = TrackedMessage(
                        bug_id=bug.id,
                        created_at=datetime.now(),
                        channel_id=response["channel"],
                        message_ts=response["ts"],
                    )
                except Exception as e:
                    logger.error(f"새 버그 알림 전송 실패 (#{bug.id}): {e}")
                    errors.append(e)
                    continue

                messages.append(tracked)
                posted += 1

        if new_bugs:
            logger.info(
                f"새 버그 {len(new_bugs)}건 중 {posted}건 알림 ({self.name}), 커서 {last_id} -> {next_id}"
            )

        try:
            self.state_store.set(self.state_key, str(next_id))
        except StateError as e:
            logger.error(f"커서 저장 실패 ({self.state_key}): {e}")
            errors.append(e)

        if errors:
            raise SyncError(errors)

    def report(self) -> str:
        """최근 새 버그 리포트 문자열"""
        return build_report(self.bugzilla, self.components, self.base_url, self.lookback_days)
