"""bugbridge 슬랙 봇 메인

앱 초기화와 진입점만 담당합니다.
"""

import signal
import sys
from datetime import timedelta

from slack_bolt import App
from slack_bolt.adapter.socket_mode import SocketModeHandler

from bugbridge.bugzilla import BugzillaClient
from bugbridge.config import Config, ConfigurationError
from bugbridge.handlers import register_all_handlers
from bugbridge.logging_config import setup_logging
from bugbridge.reporter import (
    ClaimHandler,
    MessageReconciler,
    MessageRegistry,
    NewBugReporter,
    StateStore,
    SyncScheduler,
)
from bugbridge.slack.identity import UserDirectory

# 로깅 설정
logger = setup_logging()

# Slack 앱 초기화
app = App(token=Config.slack.bot_token, logger=logger)

# 리포터별 스케줄러 (build_schedulers에서 채움)
schedulers: list[SyncScheduler] = []


def build_schedulers(slack_client, bugzilla: BugzillaClient, state_store: StateStore) -> list[SyncScheduler]:
    """컴포넌트 집합마다 리포터/재조정 루프/스케줄러 조립

    레지스트리는 리포터와 재조정 루프 한 쌍이 공유합니다.
    """
    result = []
    for components in Config.reporter.component_sets:
        registry = MessageRegistry(retention=timedelta(days=Config.reporter.retention_days))
        reporter = NewBugReporter(
            bugzilla=bugzilla,
            slack_client=slack_client,
            channel=Config.slack.notify_channel,
            components=components,
            state_store=state_store,
            registry=registry,
            base_url=Config.bugzilla.url,
            lookback_days=Config.reporter.lookback_days,
        )
        reconciler = MessageReconciler(
            bugzilla=bugzilla,
            slack_client=slack_client,
            registry=registry,
            base_url=Config.bugzilla.url,
            interval=Config.reporter.refresh_interval,
            name=reporter.name,
        )
        result.append(SyncScheduler(
            reporter=reporter,
            reconciler=reconciler,
            interval_sec=Config.reporter.sync_interval,
        ))
    return result


def stop_all():
    """모든 스케줄러와 재조정 루프 중지"""
    for scheduler in schedulers:
        scheduler.stop()
        if scheduler.reconciler is not None:
            scheduler.reconciler.stop()


def _signal_handler(signum, frame):
    """시그널 수신 시 graceful shutdown 수행"""
    sig_name = signal.Signals(signum).name if hasattr(signal, 'Signals') else str(signum)
    logger.info(f"시그널 수신: {sig_name}")
    stop_all()
    sys.exit(0)


def init_bot_user_id():
    """봇 사용자 ID 초기화"""
    try:
        auth_result = app.client.auth_test()
        Config.slack.bot_user_id = auth_result["user_id"]
        logger.info(f"BOT_USER_ID: {Config.slack.bot_user_id}")
    except Exception as e:
        logger.error(f"봇 ID 조회 실패: {e}")


def main():
    """봇 메인 진입점"""
    try:
        Config.validate()
    except ConfigurationError as e:
        logger.error(str(e))
        sys.exit(1)

    logger.info("bugbridge 봇을 시작합니다...")
    logger.info(f"LOG_PATH: {Config.get_log_path()}")
    logger.info(f"DATA_PATH: {Config.get_data_path()}")
    logger.info(f"BUGZILLA_URL: {Config.bugzilla.url}")
    logger.info(f"NEW_BUG_COMPONENTS: {Config.reporter.component_sets}")
    logger.info(f"DEBUG: {Config.debug}")

    bugzilla = BugzillaClient()
    state_store = StateStore(Config.get_data_path())
    users = UserDirectory.load(Config.get_user_map_path())

    schedulers.extend(build_schedulers(app.client, bugzilla, state_store))
    claim_handler = ClaimHandler(
        bugzilla=bugzilla,
        slack_client=app.client,
        users=users,
        base_url=Config.bugzilla.url,
    )
    register_all_handlers(app, {
        "claim_handler": claim_handler,
        "schedulers": schedulers,
    })

    signal.signal(signal.SIGINT, _signal_handler)
    if hasattr(signal, 'SIGTERM'):
        signal.signal(signal.SIGTERM, _signal_handler)

    init_bot_user_id()
    for scheduler in schedulers:
        scheduler.reconciler.start()
        scheduler.start()

    handler = SocketModeHandler(app, Config.slack.app_token)
    handler.start()


if __name__ == "__main__":
    main()
