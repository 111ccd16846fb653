"""
core/scan/accumulator.py - 스레드 안전 결과 누적기

리전/스캐너 워커들이 완료 시점에 결과를 병합하는 유일한 공유 가변 상태입니다.
잠금은 append + 카운터 증가 구간에서만 잡으며, 원격 호출 중에는 잡지 않습니다.

취소 시 seal()로 봉인하면 이후 늦게 도착한 기여는 버려집니다.
"""

from __future__ import annotations

import logging
import threading

from .types import Finding, ScanResult

logger = logging.getLogger(__name__)


class ResultAccumulator:
    """ScanResult 병합 누적기

    병합은 결합/교환 법칙을 만족합니다. 완료 순서는 findings의
    추가 순서에만 영향을 주고 최종 내용에는 영향을 주지 않습니다.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._findings: list[Finding] = []
        self._errors: list[str] = []
        self._resources_scanned = 0
        self._regions_scanned = 0
        self._sealed = False

    def merge(self, result: ScanResult) -> bool:
        """하위 결과 병합

        Returns:
            병합되었으면 True, 봉인 이후라 버려졌으면 False
        """
        with self._lock:
            if self._sealed:
                return False
            self._findings.extend(result.findings)
            self._errors.extend(result.errors)
            self._resources_scanned += result.resources_scanned
            return True

    def add_error(self, message: str) -> bool:
        """에러 문자열 기록"""
        with self._lock:
            if self._sealed:
                return False
            self._errors.append(message)
            return True

    def set_regions_scanned(self, count: int) -> None:
        # 봉인 이후에도 허용 (부분 결과에도 시도한 리전 수를 기록)
        with self._lock:
            self._regions_scanned = count

    def seal(self) -> None:
        """이후 기여를 거부"""
        with self._lock:
            self._sealed = True

    @property
    def sealed(self) -> bool:
        with self._lock:
            return self._sealed

    def snapshot(self) -> ScanResult:
        """현재까지 병합된 결과의 복사본"""
        with self._lock:
            return ScanResult(
                findings=list(self._findings),
                errors=list(self._errors),
                resources_scanned=self._resources_scanned,
                regions_scanned=self._regions_scanned,
            )
