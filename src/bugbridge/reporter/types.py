"""리포터 공용 타입"""

import json
from dataclasses import dataclass
from datetime import datetime

# 새로 접수된 버그의 상태. 이 상태를 벗어나면 누군가 처리를 시작한 것으로 본다.
INITIAL_STATUS = "NEW"
# 가져가기 버튼으로 버그를 가져갔을 때 설정하는 상태
CLAIMED_STATUS = "ASSIGNED"

CLAIM_PAYLOAD_VERSION = 1


@dataclass
class TrackedMessage:
    """상태 변경을 지켜보는 알림 메시지"""
    bug_id: int
    created_at: datetime
    channel_id: str
    message_ts: str


class ClaimPayloadError(ValueError):
    """가져가기 버튼 페이로드 디코딩 실패"""


@dataclass(frozen=True)
class ClaimIntent:
    """가져가기 버튼에 실리는 페이로드

    expected_assignee는 버튼이 그려질 때의 담당자이며, 클릭 시점에는
    이미 바뀌었을 수 있다.
    """
    bug_id: int
    expected_assignee: str = ""

    def encode(self) -> str:
        """버튼 value 문자열로 직렬화"""
        return json.dumps({
            "v": CLAIM_PAYLOAD_VERSION,
            "id": self.bug_id,
            "oldAssignee": self.expected_assignee,
        })

    @classmethod
    def decode(cls, value: str | None) -> "ClaimIntent":
        """버튼 value 문자열에서 복원

        버전 태그가 없는 페이로드는 버전 1로 간주합니다.

        Raises:
            ClaimPayloadError: JSON이 아니거나 필드 타입이 맞지 않는 경우
        """
        try:
            data = json.loads(value or "")
        except (TypeError, ValueError) as e:
            raise ClaimPayloadError(f"JSON이 아닌 페이로드: {value!r}") from e

        if not isinstance(data, dict):
            raise ClaimPayloadError(f"객체가 아닌 페이로드: {value!r}")

        version = data.get("v", CLAIM_PAYLOAD_VERSION)
        if version != CLAIM_PAYLOAD_VERSION:
            raise ClaimPayloadError(f"지원하지 않는 페이로드 버전: {version!r}")

        bug_id = data.get("id")
        # bool은 int의 하위 클래스이므로 따로 거른다
        if not isinstance(bug_id, int) or isinstance(bug_id, bool) or bug_id <= 0:
            raise ClaimPayloadError(f"잘못된 버그 ID: {bug_id!r}")

        old_assignee = data.get("oldAssignee", "")
        if not isinstance(old_assignee, str):
            raise ClaimPayloadError(f"잘못된 담당자 값: {old_assignee!r}")

        return cls(bug_id=bug_id, expected_assignee=old_assignee)


class SyncError(Exception):
    """동기화 주기에서 발생한 오류 모음"""

    def __init__(self, errors: list[Exception]):
        self.errors = errors
        if len(errors) == 1:
            message = str(errors[0])
        else:
            message = f"[{', '.join(str(e) for e in errors)}]"
        super().__init__(message)
