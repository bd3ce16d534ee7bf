"""Slack 이벤트 핸들러 패키지"""

from bugbridge.handlers.actions import register_action_handlers
from bugbridge.handlers.mention import register_mention_handlers


def register_all_handlers(app, dependencies: dict):
    """모든 핸들러를 앱에 등록

    Args:
        app: Slack Bolt App 인스턴스
        dependencies: 핸들러에 필요한 의존성
            - claim_handler: ClaimHandler
            - schedulers: list[SyncScheduler]
    """
    register_mention_handlers(app, dependencies)
    register_action_handlers(app, dependencies)


__all__ = [
    "register_all_handlers",
    "register_mention_handlers",
    "register_action_handlers",
]
