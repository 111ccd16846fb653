"""
core/parallel/cancel.py - 스캔 취소 토큰

ScanAll 호출 하나에 대해 전역으로 공유되는 취소/타임아웃 컨텍스트입니다.
개별 스캐너 단위의 취소는 지원하지 않습니다.

Example:
    token = CancelToken.with_timeout(600)

    # 워커 스레드
    token.raise_if_cancelled()

    # 메인 스레드 (Ctrl+C)
    token.cancel("사용자 중단")
"""

from __future__ import annotations

import threading
import time

from core.exceptions import ScanCancelledError


class CancelToken:
    """스레드 안전 취소 토큰

    threading.Event와 선택적 monotonic deadline으로 구성됩니다.
    deadline이 지나면 cancelled가 True가 됩니다.
    """

    def __init__(self, deadline: float | None = None):
        self._event = threading.Event()
        self._deadline = deadline
        self._reason = ""
        self._lock = threading.Lock()

    @classmethod
    def with_timeout(cls, seconds: float | None) -> CancelToken:
        """타임아웃이 설정된 토큰 생성

        Args:
            seconds: 타임아웃 (초). None 또는 0 이하이면 타임아웃 없음
        """
        if seconds is None or seconds <= 0:
            return cls()
        return cls(deadline=time.monotonic() + seconds)

    def cancel(self, reason: str = "스캔이 취소되었습니다") -> None:
        """취소 요청 (여러 번 호출해도 첫 사유만 유지)"""
        with self._lock:
            if not self._event.is_set():
                self._reason = reason
                self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self.cancel(self._timeout_reason())
            return True
        return False

    @property
    def reason(self) -> str:
        with self._lock:
            return self._reason

    def remaining(self) -> float | None:
        """deadline까지 남은 시간 (초). deadline이 없으면 None"""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def wait(self, timeout: float | None = None) -> bool:
        """취소되거나 timeout이 지날 때까지 대기

        Returns:
            취소되었으면 True
        """
        remaining = self.remaining()
        if remaining is not None:
            timeout = remaining if timeout is None else min(timeout, remaining)
        self._event.wait(timeout)
        return self.cancelled

    def raise_if_cancelled(self) -> None:
        """취소 상태이면 ScanCancelledError 발생"""
        if self.cancelled:
            raise ScanCancelledError(self.reason)

    def _timeout_reason(self) -> str:
        return "스캔 타임아웃 초과"
