"""
core/parallel/types.py - 병렬 실행 타입 정의

주요 구성 요소:
- ErrorCategory: 예외 분류 (로깅/에러 문자열 생성용)
- UnitOutcome: 병렬 풀에서 완료된 작업 단위 하나의 결과
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")
R = TypeVar("R")


class ErrorCategory(Enum):
    """에러 카테고리"""

    THROTTLING = "throttling"
    ACCESS_DENIED = "access_denied"
    NOT_FOUND = "not_found"
    NETWORK = "network"
    TIMEOUT = "timeout"
    EXPIRED_TOKEN = "expired_token"
    INVALID_REQUEST = "invalid_request"
    SERVICE_ERROR = "service_error"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class UnitOutcome(Generic[T, R]):
    """작업 단위 실행 결과

    Pending → Running → {Completed | Failed} 중 종료 상태를 나타냅니다.
    error가 None이면 Completed, 아니면 Failed입니다.

    Attributes:
        item: 제출된 작업 입력 (리전 이름, 스캐너 인스턴스 등)
        value: 성공 시 반환값
        error: 실패 시 예외
        duration_ms: 실행 시간 (밀리초)
    """

    item: T
    value: R | None = None
    error: BaseException | None = None
    duration_ms: float = 0.0

    @property
    def success(self) -> bool:
        return self.error is None
