"""설정 관리

카테고리별로 구분된 설정을 관리합니다.
- 경로 설정: get_*() 메서드 (cwd 기준 계산 필요)
- 그 외 설정: @dataclass 하위 그룹 (모듈 로드 시 평가)
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from dotenv import load_dotenv

load_dotenv()


class ConfigurationError(Exception):
    """설정 오류 예외

    필수 환경변수 누락 등 설정 관련 오류 시 발생합니다.
    """

    def __init__(self, missing_vars: List[str]):
        self.missing_vars = missing_vars
        message = f"필수 환경변수가 설정되지 않았습니다: {', '.join(missing_vars)}"
        super().__init__(message)


def _get_path(env_var: str, default_subdir: str) -> str:
    """환경변수가 없으면 현재 경로 하위 폴더 반환"""
    env_value = os.getenv(env_var)
    if env_value:
        return env_value
    return str(Path.cwd() / default_subdir)


def _parse_bool(value: str | None, default: bool = False) -> bool:
    """문자열을 bool로 변환"""
    if value is None:
        return default
    return value.lower() == "true"


def _parse_int(value: str | None, default: int) -> int:
    """문자열을 int로 변환"""
    if value is None or value == "":
        return default
    return int(value)


def _parse_float(value: str | None, default: float) -> float:
    """문자열을 float로 변환"""
    if value is None or value == "":
        return default
    return float(value)


def parse_component_sets(value: str | None) -> list[list[str]]:
    """컴포넌트 집합 목록 파싱

    ``;`` 로 집합을, ``,`` 로 집합 안의 컴포넌트를 구분합니다.
    예: "Networking,SDN;Storage" -> [["Networking", "SDN"], ["Storage"]]
    """
    if not value:
        return []

    sets = []
    for chunk in value.split(";"):
        components = [c.strip() for c in chunk.split(",") if c.strip()]
        if components:
            sets.append(components)
    return sets


@dataclass
class SlackConfig:
    """Slack 연결 설정"""

    bot_token: str | None = os.getenv("SLACK_BOT_TOKEN")
    app_token: str | None = os.getenv("SLACK_APP_TOKEN")
    bot_user_id: str | None = None  # 런타임에 auth.test()로 설정
    notify_channel: str = os.getenv("NOTIFY_CHANNEL", "")


@dataclass
class BugzillaConfig:
    """Bugzilla 연결 및 조회 범위 설정"""

    url: str = os.getenv("BUGZILLA_URL", "https://bugzilla.redhat.com")
    api_key: str = os.getenv("BUGZILLA_API_KEY", "")
    classification: str = os.getenv("BUGZILLA_CLASSIFICATION", "Red Hat")
    product: str = os.getenv("BUGZILLA_PRODUCT", "OpenShift Container Platform")
    timeout: float = _parse_float(os.getenv("BUGZILLA_TIMEOUT"), 30.0)


@dataclass
class ReporterConfig:
    """새 버그 리포터 설정"""

    component_sets: list[list[str]] = field(
        default_factory=lambda: parse_component_sets(os.getenv("NEW_BUG_COMPONENTS"))
    )
    sync_interval: int = _parse_int(os.getenv("NEW_BUG_SYNC_INTERVAL"), 900)  # 15분
    refresh_interval: int = _parse_int(os.getenv("NEW_BUG_REFRESH_INTERVAL"), 3600)  # 1시간
    retention_days: int = _parse_int(os.getenv("NEW_BUG_RETENTION_DAYS"), 30)
    lookback_days: int = _parse_int(os.getenv("NEW_BUG_LOOKBACK_DAYS"), 7)
    polling_debug: bool = _parse_bool(os.getenv("BUGZILLA_POLLING_DEBUG"), False)


class Config:
    """애플리케이션 설정

    설정 접근 방식:
    - 경로 관련: get_*() 메서드 (런타임에 cwd 기준 계산)
    - 그 외: 하위 설정 그룹 (모듈 로드 시 평가)
    """

    debug: bool = _parse_bool(os.getenv("DEBUG"), False)

    slack = SlackConfig()
    bugzilla = BugzillaConfig()
    reporter = ReporterConfig()

    # ========================================
    # 경로 설정 (런타임에 cwd 기준 계산)
    # ========================================
    @staticmethod
    def get_log_path() -> str:
        """로그 경로"""
        return _get_path("LOG_PATH", "logs")

    @staticmethod
    def get_data_path() -> str:
        """커서 등 상태 파일 경로"""
        return _get_path("DATA_PATH", "data")

    @staticmethod
    def get_user_map_path() -> str:
        """Slack 이메일 -> Bugzilla 계정 매핑 파일 경로"""
        return _get_path("USER_MAP_PATH", "users.yaml")

    # ========================================
    # 검증
    # ========================================
    @classmethod
    def validate(cls) -> None:
        """필수 환경변수 검증

        필수 환경변수가 누락된 경우 ConfigurationError를 발생시킵니다.

        Raises:
            ConfigurationError: 필수 환경변수 누락 시
        """
        missing = []
        if not cls.slack.bot_token:
            missing.append("SLACK_BOT_TOKEN")
        if not cls.slack.app_token:
            missing.append("SLACK_APP_TOKEN")
        if not cls.slack.notify_channel:
            missing.append("NOTIFY_CHANNEL")
        if not cls.reporter.component_sets:
            missing.append("NEW_BUG_COMPONENTS")

        if missing:
            raise ConfigurationError(missing)
