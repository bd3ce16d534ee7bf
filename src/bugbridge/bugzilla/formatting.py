"""버그 포맷팅 유틸리티

버그를 슬랙 mrkdwn 한 줄 요약으로 변환하는 순수 함수들을 제공합니다.
"""

from bugbridge.bugzilla.client import Bug

# Bugzilla가 "값 없음"을 표시할 때 쓰는 자리표시자
_UNSET = {"", "---", "unspecified"}


def bug_link(bug_id: int, base_url: str) -> str:
    """버그 링크 (mrkdwn)"""
    return f"<{base_url.rstrip('/')}/show_bug.cgi?id={bug_id}|#{bug_id}>"


def format_bug_message(bug: Bug, base_url: str) -> str:
    """버그를 한 줄 요약으로 포맷

    예: ``<https://.../show_bug.cgi?id=123|#123> [urgent] *Networking*: summary``

    Args:
        bug: 버그
        base_url: Bugzilla 주소

    Returns:
        mrkdwn 문자열
    """
    parts = [bug_link(bug.id, base_url)]

    if bug.severity not in _UNSET:
        parts.append(f"[{bug.severity}]")
    if bug.component:
        parts.append(f"*{bug.component}*:")
    parts.append(bug.summary)

    text = " ".join(parts)
    if bug.target_release not in _UNSET:
        text += f" (→ {bug.target_release})"
    if bug.cust_facing.lower() == "yes":
        text += " :customer:"
    return text


def format_assigned_message(bug: Bug, base_url: str, assignee: str | None = None) -> str:
    """상태가 바뀐 버그의 알림 메시지 (담당자 포함)"""
    assignee = assignee if assignee is not None else bug.assigned_to
    return f"{format_bug_message(bug, base_url)} – {bug.status}, assigned to {assignee or '(없음)'}"
