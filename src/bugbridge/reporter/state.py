"""영속 상태 저장소

리포터의 커서(마지막으로 처리한 버그 ID)를 키-값으로 보관합니다.

저장 구조:
    data/
    ├── state.json   # {"new-bug-reporter.state-Networking-SDN": "123", ...}
    └── state.lock
"""

import json
import logging
import os
from pathlib import Path

from filelock import FileLock, Timeout

logger = logging.getLogger(__name__)

CURSOR_KEY_PREFIX = "new-bug-reporter.state-"


class StateError(Exception):
    """상태 파일 읽기/쓰기 실패"""


def cursor_key(components: list[str]) -> str:
    """컴포넌트 집합에서 커서 키 생성 (순서 무관)"""
    return CURSOR_KEY_PREFIX + "-".join(sorted(components))


def parse_cursor(key: str, value: str) -> int:
    """저장된 커서 값 파싱. 비어 있거나 해석할 수 없으면 0."""
    if not value:
        return 0
    try:
        return int(value)
    except ValueError:
        logger.warning(f"커서 값을 해석할 수 없습니다 ({key}={value!r}), 0부터 시작합니다")
        return 0


class StateStore:
    """파일 기반 키-값 저장소

    여러 리포터가 같은 파일을 공유하므로 읽기-수정-쓰기를 파일 락으로 보호하고,
    임시 파일에 쓴 뒤 교체하여 중간에 죽어도 파일이 깨지지 않게 합니다.
    """

    def __init__(self, data_dir: str | Path):
        self.data_dir = Path(data_dir)
        self.state_file = self.data_dir / "state.json"
        self.lock_file = self.data_dir / "state.lock"

    def _lock(self) -> FileLock:
        return FileLock(str(self.lock_file), timeout=5)

    def _read(self) -> dict[str, str]:
        if not self.state_file.exists():
            return {}
        data = json.loads(self.state_file.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise StateError(f"상태 파일 형식 오류: {self.state_file}")
        return data

    def get(self, key: str) -> str:
        """값 조회. 없으면 빈 문자열.

        Raises:
            StateError: 파일을 읽을 수 없는 경우
        """
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with self._lock():
                return str(self._read().get(key, ""))
        except (OSError, ValueError, Timeout) as e:
            raise StateError(f"상태 조회 실패 ({key}): {e}") from e

    def set(self, key: str, value: str) -> None:
        """값 저장

        Raises:
            StateError: 파일을 쓸 수 없는 경우
        """
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with self._lock():
                data = self._read()
                data[key] = value
                tmp_file = self.state_file.with_suffix(".json.tmp")
                tmp_file.write_text(
                    json.dumps(data, ensure_ascii=False, indent=2),
                    encoding="utf-8",
                )
                os.replace(tmp_file, self.state_file)
        except (OSError, ValueError, Timeout) as e:
            raise StateError(f"상태 저장 실패 ({key}={value}): {e}") from e
        logger.debug(f"상태 저장: {key}={value}")
