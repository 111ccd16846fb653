"""
core/config.py - 설정 파일 로드

작업 디렉토리의 .wscan.yaml (또는 .wscan.yml)에서 스캔 기본값을 읽습니다.
우선순위: CLI 옵션 > 설정 파일 > 내장 기본값

Usage:
    from core.config import load_file_config

    file_cfg = load_file_config(Path.cwd())
    if file_cfg.regions:
        regions = file_cfg.regions
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = (".wscan.yaml", ".wscan.yml")

_TIMEOUT_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([smh]?)\s*$")
_TIMEOUT_UNITS = {"": 1, "s": 1, "m": 60, "h": 3600}

SAMPLE_CONFIG = """\
# wscan 설정 파일

# AWS 프로파일 (또는 AWS_PROFILE 환경 변수)
# profile: default

# 스캔할 리전 (기본값: 활성화된 모든 리전)
# regions:
#   - us-east-1
#   - ap-northeast-2

# 사용률 메트릭 조회 기간 (일)
idle_days: 7

# 오래된 스냅샷 기준 (일)
stale_days: 90

# 보고할 최소 월 비용 ($)
min_monthly_cost: 1.0

# 출력 형식: text, json, sarif, spectrehub
format: text

# 스캔 타임아웃
timeout: 10m

# 유휴 판단 임계값
# idle_cpu_threshold: 5.0
# high_memory_threshold: 50.0
# stopped_threshold_days: 30
# nat_gw_low_traffic_gb: 1.0

# 스캔에서 제외할 리소스
# exclude:
#   resource_ids:
#     - i-0abc123
#   tags:
#     - "Environment=production"
#     - "wscan:ignore"
"""


def get_version() -> str:
    """version.txt에서 버전 문자열 읽기"""
    version_file = Path(__file__).resolve().parent.parent / "version.txt"
    try:
        return version_file.read_text(encoding="utf-8").strip()
    except OSError as e:
        logger.debug(f"버전 파일 읽기 실패: {e}")
        return "0.0.1"


@dataclass
class FileConfig:
    """설정 파일 내용 (값이 없으면 None / 빈 목록)"""

    regions: list[str] = field(default_factory=list)
    profile: str | None = None
    idle_days: int | None = None
    stale_days: int | None = None
    min_monthly_cost: float | None = None
    idle_cpu_threshold: float | None = None
    high_memory_threshold: float | None = None
    stopped_threshold_days: int | None = None
    nat_gw_low_traffic_gb: float | None = None
    format: str | None = None
    timeout: str | None = None
    exclude_resource_ids: list[str] = field(default_factory=list)
    exclude_tags: list[str] = field(default_factory=list)
    path: Path | None = None

    def timeout_seconds(self) -> float | None:
        if not self.timeout:
            return None
        return parse_timeout(self.timeout)


def parse_timeout(value: str | int | float) -> float:
    """타임아웃 문자열을 초 단위로 변환

    Example:
        parse_timeout("90s")  # 90.0
        parse_timeout("10m")  # 600.0
        parse_timeout("1h")   # 3600.0

    Raises:
        ConfigError: 형식이 잘못된 경우
    """
    if isinstance(value, (int, float)):
        return float(value)
    match = _TIMEOUT_PATTERN.match(value)
    if not match:
        raise ConfigError(f"잘못된 타임아웃 형식: {value!r} (예: 90s, 10m, 1h)")
    amount, unit = match.groups()
    return float(amount) * _TIMEOUT_UNITS[unit]


def _typed(raw: dict[str, Any], key: str, kind: type, path: Path) -> Any:
    value = raw.get(key)
    if value is None:
        return None
    try:
        return kind(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"잘못된 설정 값: {key}={value!r}", config_path=str(path), cause=e) from e


def _string_list(raw: Any, key: str, path: Path) -> list[str]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ConfigError(f"{key}는 목록이어야 합니다", config_path=str(path))
    return [str(item) for item in raw]


def _parse(raw: dict[str, Any], path: Path) -> FileConfig:
    exclude = raw.get("exclude") or {}
    if not isinstance(exclude, dict):
        raise ConfigError("exclude는 매핑이어야 합니다", config_path=str(path))

    timeout = raw.get("timeout")
    cfg = FileConfig(
        regions=_string_list(raw.get("regions"), "regions", path),
        profile=raw.get("profile") or None,
        idle_days=_typed(raw, "idle_days", int, path),
        stale_days=_typed(raw, "stale_days", int, path),
        min_monthly_cost=_typed(raw, "min_monthly_cost", float, path),
        idle_cpu_threshold=_typed(raw, "idle_cpu_threshold", float, path),
        high_memory_threshold=_typed(raw, "high_memory_threshold", float, path),
        stopped_threshold_days=_typed(raw, "stopped_threshold_days", int, path),
        nat_gw_low_traffic_gb=_typed(raw, "nat_gw_low_traffic_gb", float, path),
        format=raw.get("format") or None,
        timeout=str(timeout) if timeout is not None else None,
        exclude_resource_ids=_string_list(exclude.get("resource_ids"), "exclude.resource_ids", path),
        exclude_tags=_string_list(exclude.get("tags"), "exclude.tags", path),
        path=path,
    )
    # 잘못된 타임아웃은 로드 시점에 알림
    cfg.timeout_seconds()
    return cfg


def load_file_config(directory: str | Path) -> FileConfig:
    """디렉토리에서 설정 파일 로드

    Args:
        directory: 설정 파일을 찾을 디렉토리

    Returns:
        FileConfig. 파일이 없으면 빈 설정

    Raises:
        ConfigError: 파일을 읽거나 파싱할 수 없는 경우
    """
    base = Path(directory)
    for name in CONFIG_FILENAMES:
        path = base / name
        if not path.exists():
            continue

        try:
            with path.open(encoding="utf-8") as f:
                raw = yaml.safe_load(f)
        except OSError as e:
            raise ConfigError("설정 파일 읽기 실패", config_path=str(path), cause=e) from e
        except yaml.YAMLError as e:
            raise ConfigError("설정 파일 파싱 실패", config_path=str(path), cause=e) from e

        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ConfigError("설정 파일 최상위는 매핑이어야 합니다", config_path=str(path))

        logger.debug(f"설정 파일 로드: {path}")
        return _parse(raw, path)

    return FileConfig()
