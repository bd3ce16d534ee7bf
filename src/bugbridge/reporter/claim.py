"""가져가기 버튼 핸들러

Slack은 3초 안에 응답(ack)을 받아야 하지만 Bugzilla 호출은 그보다 오래 걸릴 수 있습니다.
리스너는 페이로드만 디코딩하고 작업 스레드에 넘긴 뒤 바로 반환합니다.

Bugzilla에는 조건부 수정이 없으므로, 수정 직전에 상태와 담당자를 다시 확인하는
낙관적 동시성 검사로 경합을 막습니다:
- 상태가 NEW가 아니면 다른 사람이 이미 처리 중
- 담당자가 버튼을 그릴 때와 다르면 다른 사람이 먼저 가져감

어느 단계든 실패하면 누른 사람에게만 보이는 ephemeral 메시지로 알리고 끝냅니다.
자동 재시도는 없습니다.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from bugbridge.bugzilla import (
    Bug,
    BugzillaClient,
    BugzillaError,
    bug_link,
    format_assigned_message,
    format_bug_message,
)
from bugbridge.reporter.types import CLAIMED_STATUS, INITIAL_STATUS, ClaimIntent, ClaimPayloadError
from bugbridge.slack.formatting import update_message
from bugbridge.slack.identity import IdentityError, UserDirectory

logger = logging.getLogger(__name__)


class ClaimOutcome(Enum):
    """가져가기 시도 결과"""
    CLAIMED = "claimed"
    CLAIMED_UNCONFIRMED = "claimed_unconfirmed"  # 가져가기는 성공, 원본 알림 갱신만 실패
    IDENTITY_FAILED = "identity_failed"
    FETCH_FAILED = "fetch_failed"
    STATUS_CHANGED = "status_changed"
    ALREADY_ASSIGNED = "already_assigned"
    UPDATE_FAILED = "update_failed"


@dataclass(frozen=True)
class ClaimRequest:
    """버튼 클릭 한 건"""
    intent: ClaimIntent
    user_id: str
    channel_id: str
    message_ts: str

    @classmethod
    def from_body(cls, body: dict) -> "ClaimRequest":
        """block_actions 페이로드에서 요청 추출

        Raises:
            ClaimPayloadError: 필요한 필드가 없거나 버튼 값이 잘못된 경우
        """
        try:
            action = body["actions"][0]
            user_id = body["user"]["id"]
            channel_id = body["channel"]["id"]
            container = body.get("container") or {}
            message_ts = container.get("message_ts") or body["message"]["ts"]
        except (KeyError, IndexError, TypeError) as e:
            raise ClaimPayloadError(f"액션 페이로드에 필드가 없습니다: {e}") from e

        return cls(
            intent=ClaimIntent.decode(action.get("value")),
            user_id=user_id,
            channel_id=channel_id,
            message_ts=message_ts,
        )


class ClaimHandler:
    """가져가기 버튼 처리기"""

    def __init__(
        self,
        *,
        bugzilla: BugzillaClient,
        slack_client,
        users: UserDirectory,
        base_url: str,
    ):
        self.bugzilla = bugzilla
        self.slack_client = slack_client
        self.users = users
        self.base_url = base_url

    def handle(self, body: dict) -> Optional[threading.Thread]:
        """버튼 클릭 처리 시작

        페이로드가 잘못되었으면 답할 곳이 없으므로 로그만 남깁니다.

        Returns:
            작업 스레드 (페이로드가 잘못되었으면 None)
        """
        try:
            request = ClaimRequest.from_body(body)
        except ClaimPayloadError as e:
            logger.warning(f"가져가기 페이로드 무시: {e}")
            return None

        thread = threading.Thread(
            target=self._run, args=(request,), name=f"claim-{request.intent.bug_id}", daemon=True
        )
        thread.start()
        return thread

    def _run(self, request: ClaimRequest) -> None:
        try:
            outcome = self.claim(request)
            logger.info(f"가져가기 결과 #{request.intent.bug_id} ({request.user_id}): {outcome.value}")
        except Exception as e:
            logger.exception(f"가져가기 처리 오류 #{request.intent.bug_id}: {e}")

    def claim(self, request: ClaimRequest) -> ClaimOutcome:
        """가져가기 프로토콜 (동기)"""
        bug_id = request.intent.bug_id
        link = bug_link(bug_id, self.base_url)

        # 1. 누른 사람의 Bugzilla 계정
        try:
            login = self.users.resolve(self.slack_client, request.user_id)
        except IdentityError as e:
            logger.error(f"사용자 식별 실패: {e}")
            self._reply(request, f"사용자 정보를 확인하지 못했습니다: {e}")
            return ClaimOutcome.IDENTITY_FAILED

        # 2. 현재 상태 조회
        try:
            bug = self.bugzilla.get_bug(bug_id)
        except BugzillaError as e:
            logger.error(f"버그 #{bug_id} 조회 실패: {e}")
            self._reply(request, f"{link} 버그를 가져오지 못했습니다: {e}")
            return ClaimOutcome.FETCH_FAILED

        # 3. 낙관적 동시성 검사
        if bug.status != INITIAL_STATUS:
            logger.info(f"버그 #{bug_id}가 더 이상 {INITIAL_STATUS}가 아님: {bug.status!r}")
            self._reply(request, f"{link} 버그는 이미 {bug.status} 상태로 바뀌었습니다.")
            return ClaimOutcome.STATUS_CHANGED

        if bug.assigned_to and bug.assigned_to != request.intent.expected_assignee:
            logger.info(
                f"버그 #{bug_id} 담당자 변경됨: 예상 {request.intent.expected_assignee!r}, 실제 {bug.assigned_to!r}"
            )
            self._reply(request, f"{link} 버그는 이미 {bug.assigned_to}에게 할당되었습니다.")
            return ClaimOutcome.ALREADY_ASSIGNED

        # 4. 가져가기
        try:
            self.bugzilla.update_bug(bug_id, status=CLAIMED_STATUS, assigned_to=login)
        except BugzillaError as e:
            logger.error(f"버그 #{bug_id}를 {login}에게 할당하지 못함: {e}")
            self._reply(request, f"{link} 버그를 {login}에게 할당하지 못했습니다: {e}")
            return ClaimOutcome.UPDATE_FAILED

        # 5. 수정 후 상태로 원본 알림 갱신
        try:
            updated = self.bugzilla.get_bug(bug_id)
        except BugzillaError as e:
            logger.error(f"할당 후 버그 #{bug_id} 재조회 실패: {e}")
            self._confirm(request, login, bug)
            return ClaimOutcome.CLAIMED_UNCONFIRMED

        text = format_assigned_message(updated, self.base_url, assignee=login)
        logger.info(f"알림 갱신: {text}")
        try:
            update_message(self.slack_client, request.channel_id, request.message_ts, text)
        except Exception as e:
            logger.error(f"알림 갱신 실패 (#{bug_id}): {e}")
            self._confirm(request, login, updated)
            return ClaimOutcome.CLAIMED_UNCONFIRMED

        return ClaimOutcome.CLAIMED

    def _reply(self, request: ClaimRequest, text: str) -> None:
        """누른 사람에게만 보이는 메시지"""
        try:
            self.slack_client.chat_postEphemeral(
                channel=request.channel_id,
                user=request.user_id,
                text=text,
            )
        except Exception as e:
            logger.error(f"ephemeral 메시지 전송 실패 ({request.user_id}): {e}")

    def _confirm(self, request: ClaimRequest, login: str, bug: Bug) -> None:
        """원본 알림을 고치지 못했을 때 채널에 남기는 확인 메시지"""
        try:
            self.slack_client.chat_postMessage(
                channel=request.channel_id,
                text=f"{login} 님이 가져갔습니다: {format_bug_message(bug, self.base_url)}",
            )
        except Exception as e:
            logger.error(f"가져가기 확인 메시지 전송 실패 (#{bug.id}): {e}")
