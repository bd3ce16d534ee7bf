"""슬랙 메시지 포맷팅 헬퍼

알림 블록 생성과 chat_update(channel, ts, text, blocks=[section]) 패턴을 캡슐화합니다.
"""

from typing import Optional

TAKE_BUTTON_TEXT = "이 버그 가져가기"


def build_section_blocks(text: str) -> list[dict]:
    """mrkdwn section block 리스트 생성"""
    return [{
        "type": "section",
        "text": {"type": "mrkdwn", "text": text}
    }]


def build_notification_blocks(text: str, action_id: str, value: str) -> list[dict]:
    """새 버그 알림 블록 생성 (요약 + 가져가기 버튼)

    Args:
        text: 버그 요약 (mrkdwn)
        action_id: 버튼 액션 ID (리포터별로 고유)
        value: 버튼에 실어 보낼 클레임 페이로드
    """
    return build_section_blocks(text) + [{
        "type": "actions",
        "block_id": action_id,
        "elements": [
            {
                "type": "button",
                "text": {"type": "plain_text", "text": TAKE_BUTTON_TEXT, "emoji": True},
                "style": "primary",
                "action_id": action_id,
                "value": value,
            }
        ]
    }]


def update_message(
    client,
    channel: str,
    ts: str,
    text: str,
    *,
    blocks: Optional[list[dict]] = None,
) -> None:
    """슬랙 메시지를 업데이트합니다.

    blocks를 생략하면 text를 mrkdwn section block으로 자동 감싸서 전달합니다.
    버튼 없이 섹션만 남기므로 갱신된 알림에서는 가져가기 버튼이 사라집니다.

    Args:
        client: Slack WebClient
        channel: 채널 ID
        ts: 메시지 타임스탬프
        text: 메시지 텍스트
        blocks: 커스텀 blocks (생략 시 text로 자동 생성)
    """
    if blocks is None:
        blocks = build_section_blocks(text)
    client.chat_update(
        channel=channel,
        ts=ts,
        text=text,
        blocks=blocks,
    )
