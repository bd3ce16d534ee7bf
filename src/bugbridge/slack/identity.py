"""Slack 사용자 -> Bugzilla 계정 매핑

users.yaml 구조::

    users:
      - slack: alice@example.com
        bugzilla: alice@redhat.com

매핑이 없는 이메일은 그대로 Bugzilla 로그인으로 사용합니다.
이 모듈은 Config에 의존하지 않습니다. 파일 경로는 호출 시 전달받습니다.
"""

import logging
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)


class IdentityError(Exception):
    """사용자 식별 실패 (프로필 조회 실패, 이메일 없음)"""


class UserDirectory:
    """Slack 이메일 -> Bugzilla 로그인 매핑 테이블"""

    def __init__(self, mapping: dict[str, str] | None = None):
        self._mapping = {k.lower(): v for k, v in (mapping or {}).items()}

    @classmethod
    def load(cls, path: str | Path) -> "UserDirectory":
        """YAML 파일에서 매핑 로드. 파일이 없으면 빈 매핑."""
        path = Path(path)
        if not path.exists():
            logger.info(f"사용자 매핑 파일 없음, 이메일을 그대로 사용합니다: {path}")
            return cls()

        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        mapping = {}
        for entry in data.get("users", []):
            slack_email = entry.get("slack")
            bugzilla_login = entry.get("bugzilla")
            if slack_email and bugzilla_login:
                mapping[slack_email] = bugzilla_login
            else:
                logger.warning(f"불완전한 사용자 매핑 항목 무시: {entry}")

        logger.info(f"사용자 매핑 로드: {len(mapping)}명")
        return cls(mapping)

    def to_bugzilla(self, slack_email: str) -> str:
        """Slack 이메일에 해당하는 Bugzilla 로그인"""
        return self._mapping.get(slack_email.lower(), slack_email)

    def resolve(self, slack_client, user_id: str) -> str:
        """Slack 사용자 ID로 Bugzilla 로그인 조회

        Raises:
            IdentityError: 프로필 조회 실패 또는 이메일이 없는 경우
        """
        try:
            response = slack_client.users_profile_get(user=user_id)
        except Exception as e:
            raise IdentityError(f"{user_id}의 프로필을 가져오지 못했습니다: {e}") from e

        email = (response.get("profile") or {}).get("email", "")
        if not email:
            raise IdentityError(f"{user_id}의 프로필에 이메일이 없습니다")
        return self.to_bugzilla(email)

    def __len__(self) -> int:
        return len(self._mapping)
