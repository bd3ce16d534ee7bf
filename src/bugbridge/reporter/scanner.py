"""새 버그 스캐너

커서 이후에 접수된 버그를 조회합니다. 커서가 없으면(첫 실행)
최근 lookback_days 동안 접수된 버그만 조회해 첫 배포 때 알림이 쏟아지지 않게 합니다.
"""

import logging

from bugbridge.bugzilla import Bug, BugzillaClient, format_bug_message
from bugbridge.reporter.types import INITIAL_STATUS

logger = logging.getLogger(__name__)

DEFAULT_LOOKBACK_DAYS = 7
REPORT_MAX_LINES = 21


def new_bugs_condition(last_id: int, lookback_days: int = DEFAULT_LOOKBACK_DAYS) -> tuple[str, str, str]:
    """고급 검색 조건 (field, operator, value)

    - last_id > 0: ID가 last_id보다 큰 버그
    - last_id == 0: 최근 lookback_days 안에 생성된 버그
    """
    if last_id > 0:
        return ("bug_id", "greaterthan", str(last_id))
    return ("creation_ts", "greaterthaneq", f"-{lookback_days * 24}h")


def get_new_bugs(
    client: BugzillaClient,
    components: list[str],
    last_id: int,
    lookback_days: int = DEFAULT_LOOKBACK_DAYS,
) -> list[Bug]:
    """새 버그 목록 (ID 오름차순)

    Raises:
        BugzillaError: 조회 실패 시
    """
    bugs = client.search(
        components=components,
        status=[INITIAL_STATUS],
        advanced=[new_bugs_condition(last_id, lookback_days)],
    )
    # ID는 접수 순서대로 증가하므로 ID 순 정렬이 곧 접수 순서
    bugs.sort(key=lambda b: b.id)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(f"새 버그 조회 {components} (last_id={last_id}): {[b.id for b in bugs]}")
    return bugs


def build_report(
    client: BugzillaClient,
    components: list[str],
    base_url: str,
    lookback_days: int = DEFAULT_LOOKBACK_DAYS,
) -> str:
    """최근 접수된 새 버그 리포트 (아직 NEW 상태인 것만)

    Raises:
        BugzillaError: 조회 실패 시
    """
    bugs = get_new_bugs(client, components, 0, lookback_days)

    lines = [f"최근 {lookback_days}일간 접수된 새 버그 ({', '.join(components)}, 이미 처리 중인 버그 제외):", ""]
    if not bugs:
        lines.append("> 없음")
    for bug in bugs[:REPORT_MAX_LINES]:
        lines.append(f"> {format_bug_message(bug, base_url)}")
    if len(bugs) > REPORT_MAX_LINES:
        lines.append(f" ... 외 {len(bugs) - REPORT_MAX_LINES}건")

    return "\n".join(lines)
