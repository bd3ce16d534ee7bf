"""멘션 명령어 핸들러

각 핸들러는 키워드 인자만 받습니다 (say, ts, schedulers, ...).
"""

import logging

from bugbridge.bugzilla import BugzillaError

logger = logging.getLogger(__name__)


def format_elapsed(seconds: float) -> str:
    """경과 시간을 사람이 읽기 쉬운 문자열로 변환"""
    if seconds < 60:
        return f"{int(seconds)}초"
    elif seconds < 3600:
        return f"{int(seconds // 60)}분"
    else:
        return f"{int(seconds // 3600)}시간"


def handle_help(*, say, ts, **_):
    """help 명령어 핸들러"""
    say(
        text=(
            "📖 *사용법*\n"
            "• `@bugbridge report` - 최근 접수된 새 버그 리포트\n"
            "• `@bugbridge status` - 감시 상태 확인\n"
            "• `@bugbridge help` - 도움말\n"
            "새 버그 알림의 *이 버그 가져가기* 버튼을 누르면 버그가 나에게 할당됩니다."
        ),
        thread_ts=ts,
    )


def handle_status(*, say, ts, schedulers, now, **_):
    """status 명령어 핸들러 - 리포터별 커서와 루프 상태"""
    lines = ["📊 *상태*"]
    for scheduler in schedulers:
        reporter = scheduler.reporter
        reconciler = scheduler.reconciler
        try:
            cursor = str(reporter.load_cursor())
        except Exception as e:
            cursor = f"(읽기 실패: {e})"

        line = f"• *{reporter.name}*: 커서 {cursor}, 감시 중인 알림 {len(reporter.registry)}건"
        if scheduler.last_error is not None:
            line += f", 마지막 동기화 실패: {scheduler.last_error}"
        if reconciler is not None:
            loop_state = "실행 중" if reconciler.is_running else "중지됨"
            line += f", 재조정 루프 {loop_state}"
            if reconciler.last_pass_at is not None:
                elapsed = (now - reconciler.last_pass_at).total_seconds()
                line += f" (마지막 패스 {format_elapsed(elapsed)} 전)"
        lines.append(line)

    say(text="\n".join(lines), thread_ts=ts)


def handle_report(*, say, ts, schedulers, **_):
    """report 명령어 핸들러 - 리포터별 최근 새 버그 목록"""
    for scheduler in schedulers:
        reporter = scheduler.reporter
        try:
            text = reporter.report()
        except BugzillaError as e:
            logger.error(f"리포트 생성 실패 ({reporter.name}): {e}")
            text = f"*{reporter.name}* 리포트를 만들지 못했습니다: {e}"
        say(text=text, thread_ts=ts)
