"""로깅 설정 모듈

로깅 레벨 가이드라인
==================

logger.exception()
    - 예상치 못한 오류로 스택 트레이스가 필요한 경우
    - 예: 재조정 패스 내부 오류, 클레임 워커 오류

logger.error()
    - 외부 서비스(Slack, Bugzilla) 호출 실패
    - 커서 저장 실패 등 다음 주기에 복구 가능한 오류
    - 예: "버그 조회 실패: {e}", "메시지 업데이트 실패: {e}"

logger.warning()
    - 기능에 영향은 적지만 주의가 필요한 상황
    - 파싱 불가한 커서 값, 잘못된 액션 페이로드

logger.info()
    - 주요 상태 변경: 알림 게시, 메시지 갱신, 클레임 성공/거절

logger.debug()
    - 폴링 상태, 락 획득/해제
"""

import logging
from datetime import datetime
from pathlib import Path

from bugbridge.config import Config


def setup_logging() -> logging.Logger:
    """로깅 설정 및 로거 반환"""
    log_dir = Path(Config.get_log_path())
    log_dir.mkdir(parents=True, exist_ok=True)

    log_file = log_dir / f"bot_{datetime.now().strftime('%Y%m%d')}.log"

    logging.basicConfig(
        level=logging.DEBUG if Config.debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[
            logging.FileHandler(log_file, encoding="utf-8"),
            logging.StreamHandler()
        ]
    )

    # urllib3 HTTP 요청 로그 제어
    # BUGZILLA_POLLING_DEBUG=true일 때만 DEBUG 로그 출력
    if not Config.reporter.polling_debug:
        logging.getLogger("urllib3").setLevel(logging.WARNING)

    return logging.getLogger(__name__)
