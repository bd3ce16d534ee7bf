"""가져가기 버튼 액션 핸들러"""

import logging

from bugbridge.reporter.claim import ClaimHandler

logger = logging.getLogger(__name__)


def _make_claim_listener(claim_handler: ClaimHandler):
    def handle_take(ack, body):
        """가져가기 버튼 클릭 - 즉시 ack 후 작업 스레드로 넘김"""
        ack()
        claim_handler.handle(body)

    return handle_take


def register_action_handlers(app, dependencies: dict):
    """액션 핸들러 등록

    리포터마다 고유한 action_id로 가져가기 버튼을 구독합니다.

    Args:
        app: Slack Bolt App 인스턴스
        dependencies: 의존성 딕셔너리
            - claim_handler: ClaimHandler
            - schedulers: list[SyncScheduler]
    """
    claim_handler = dependencies["claim_handler"]
    for scheduler in dependencies["schedulers"]:
        action_id = scheduler.reporter.action_id
        app.action(action_id)(_make_claim_listener(claim_handler))
        logger.debug(f"가져가기 액션 등록: {action_id}")
