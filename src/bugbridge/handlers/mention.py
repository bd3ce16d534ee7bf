"""@bugbridge 멘션 핸들러"""

import logging
import re
from datetime import datetime

from bugbridge.handlers.commands import handle_help, handle_report, handle_status

logger = logging.getLogger(__name__)


def extract_command(text: str) -> str:
    """멘션에서 명령어 추출"""
    match = re.sub(r"<@[A-Z0-9]+>", "", text).strip()
    return match.lower()


_COMMAND_DISPATCH = {
    "help": handle_help,
    "status": handle_status,
    "report": handle_report,
    "new bugs": handle_report,
    "리포트": handle_report,
}


def try_handle_command(command: str, ts: str, say, dependencies: dict) -> bool:
    """명령어 디스패치. 처리했으면 True."""
    handler = _COMMAND_DISPATCH.get(command)
    if handler is None:
        return False

    handler(
        say=say,
        ts=ts,
        schedulers=dependencies["schedulers"],
        now=datetime.now(),
    )
    return True


def register_mention_handlers(app, dependencies: dict):
    """멘션 핸들러 등록

    Args:
        app: Slack Bolt App 인스턴스
        dependencies: 의존성 딕셔너리
            - schedulers: list[SyncScheduler]
    """

    @app.event("app_mention")
    def handle_mention(event, say):
        """@bugbridge 멘션 처리"""
        text = event.get("text", "")
        ts = event.get("thread_ts") or event["ts"]
        command = extract_command(text)
        logger.info(f"멘션 수신: user={event.get('user')}, command={command!r}")

        if not try_handle_command(command, ts, say, dependencies):
            handle_help(say=say, ts=ts)
