"""Bugzilla REST API 클라이언트"""

import logging
from dataclasses import dataclass
from typing import Optional

import requests

from bugbridge.config import Config

logger = logging.getLogger(__name__)

# 새 버그 조회 시 가져오는 필드
BUG_FIELDS = [
    "id",
    "assigned_to",
    "status",
    "severity",
    "priority",
    "component",
    "summary",
    "cf_cust_facing",
    "target_release",
    "last_change_time",
    "reporter",
]


class BugzillaError(Exception):
    """Bugzilla 호출 실패 (네트워크 오류, API 오류 응답 등)"""


@dataclass
class Bug:
    """버그 정보 (Bugzilla 소유, 읽기 전용 뷰)"""
    id: int
    status: str
    assigned_to: str = ""
    summary: str = ""
    component: str = ""
    severity: str = ""
    priority: str = ""
    cust_facing: str = ""
    target_release: str = ""
    last_change_time: str = ""
    reporter: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "Bug":
        return cls(
            id=int(data["id"]),
            status=data.get("status", ""),
            assigned_to=data.get("assigned_to") or "",
            summary=data.get("summary", ""),
            component=_join(data.get("component")),
            severity=data.get("severity", ""),
            priority=data.get("priority", ""),
            cust_facing=data.get("cf_cust_facing") or "",
            target_release=_join(data.get("target_release")),
            last_change_time=data.get("last_change_time", ""),
            reporter=data.get("reporter") or "",
        )


def _join(value) -> str:
    # 일부 Bugzilla 인스턴스는 component, target_release를 리스트로 반환
    if isinstance(value, list):
        return ",".join(str(v) for v in value)
    return value or ""


class BugzillaClient:
    """Bugzilla REST API 클라이언트"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = (base_url or Config.bugzilla.url).rstrip("/")
        self.api_key = api_key if api_key is not None else Config.bugzilla.api_key
        self.timeout = timeout or Config.bugzilla.timeout

        if not self.api_key:
            logger.warning("Bugzilla API 키가 설정되지 않았습니다. 버그 수정이 거부될 수 있습니다.")

    def _request(self, method: str, endpoint: str, **kwargs) -> dict:
        """API 요청

        Raises:
            BugzillaError: 전송 실패 또는 Bugzilla가 오류 응답을 반환한 경우
        """
        url = f"{self.base_url}/rest{endpoint}"
        headers = kwargs.pop("headers", {})
        if self.api_key:
            headers["X-BUGZILLA-API-KEY"] = self.api_key

        try:
            response = requests.request(
                method, url, headers=headers, timeout=self.timeout, **kwargs
            )
        except requests.RequestException as e:
            raise BugzillaError(f"Bugzilla 요청 실패 ({method} {endpoint}): {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise BugzillaError(
                f"Bugzilla 응답 파싱 실패 ({method} {endpoint}, HTTP {response.status_code}): {e}"
            ) from e

        # Bugzilla는 오류를 {"error": true, "message": ..., "code": ...} 로 반환
        if isinstance(data, dict) and data.get("error"):
            raise BugzillaError(
                f"Bugzilla 오류 {data.get('code')}: {data.get('message', '알 수 없는 오류')}"
            )
        if not response.ok:
            raise BugzillaError(f"Bugzilla HTTP {response.status_code} ({method} {endpoint})")
        return data

    def search(
        self,
        *,
        components: list[str],
        status: list[str],
        advanced: list[tuple[str, str, str]] = (),
        include_fields: list[str] = BUG_FIELDS,
        classification: Optional[str] = None,
        product: Optional[str] = None,
    ) -> list[Bug]:
        """버그 검색

        Args:
            components: 컴포넌트 목록
            status: 상태 필터
            advanced: (field, operator, value) 고급 검색 조건 목록
            include_fields: 반환받을 필드
            classification: 분류 (기본값: 설정)
            product: 제품 (기본값: 설정)

        Returns:
            Bugzilla가 반환한 순서의 버그 목록
        """
        params: list[tuple[str, str]] = [
            ("classification", classification or Config.bugzilla.classification),
            ("product", product or Config.bugzilla.product),
            ("include_fields", ",".join(include_fields)),
        ]
        params.extend(("status", s) for s in status)
        params.extend(("component", c) for c in components)
        for i, (field_name, op, value) in enumerate(advanced, start=1):
            params.extend([(f"f{i}", field_name), (f"o{i}", op), (f"v{i}", value)])

        data = self._request("GET", "/bug", params=params)
        return [Bug.from_dict(b) for b in data.get("bugs", [])]

    def get_bug(self, bug_id: int) -> Bug:
        """버그 상세 조회

        Raises:
            BugzillaError: 조회 실패 또는 버그가 없는 경우
        """
        data = self._request(
            "GET", f"/bug/{bug_id}", params={"include_fields": ",".join(BUG_FIELDS)}
        )
        bugs = data.get("bugs", [])
        if not bugs:
            raise BugzillaError(f"버그 #{bug_id}를 찾을 수 없습니다")
        return Bug.from_dict(bugs[0])

    def update_bug(
        self,
        bug_id: int,
        *,
        status: Optional[str] = None,
        assigned_to: Optional[str] = None,
    ) -> None:
        """버그 상태/담당자 변경

        Args:
            bug_id: 버그 ID
            status: 새 상태
            assigned_to: 새 담당자 (Bugzilla 로그인)
        """
        payload = {}
        if status is not None:
            payload["status"] = status
        if assigned_to is not None:
            payload["assigned_to"] = assigned_to
        self._request("PUT", f"/bug/{bug_id}", json=payload)
