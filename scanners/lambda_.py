"""
scanners/lambda_.py - 호출이 없는 Lambda 함수 탐지

탐지 항목:
    - IDLE_LAMBDA: 조회 기간 동안 Invocations 0

Lambda는 호출 기반 과금이라 직접 비용은 0으로 보고합니다.
ListFunctions 응답에 태그가 없으므로 태그 기반 제외는 적용되지 않습니다.

메트릭 실패 정책 (degrade): Invocations 조회 실패 시 발견 없이 종료
"""

from __future__ import annotations

import logging
from typing import Any

from core.exceptions import MetricsError
from core.scan.types import FindingKind, ResourceType, ScanConfig, ScanResult, Severity

from .base import MetricResourceScanner

logger = logging.getLogger(__name__)


class LambdaScanner(MetricResourceScanner):
    """유휴 Lambda 함수 스캐너"""

    resource_type = ResourceType.LAMBDA
    service_name = "lambda"

    def scan(self, config: ScanConfig) -> ScanResult:
        functions = self._paginate("list_functions", "Functions")
        result = ScanResult(resources_scanned=len(functions))

        targets: dict[str, dict[str, Any]] = {}
        for fn in functions:
            name = fn.get("FunctionName", "")
            if config.exclude.should_exclude(name, None):
                continue
            targets[name] = fn

        if not targets:
            return result

        try:
            invocations = self.metrics.fetch_sum("AWS/Lambda", "Invocations", "FunctionName", list(targets), config.idle_days)
        except MetricsError as e:
            logger.warning(f"{self.region}: Lambda 메트릭 조회 실패: {e}")
            return result

        for name, fn in targets.items():
            if invocations.get(name, 0.0) > 0:
                continue

            metadata: dict[str, Any] = {
                "runtime": fn.get("Runtime", ""),
                "code_size_bytes": fn.get("CodeSize", 0),
                "last_modified": fn.get("LastModified", ""),
            }
            if "MemorySize" in fn:
                metadata["memory_mb"] = fn["MemorySize"]
            if "Timeout" in fn:
                metadata["timeout_sec"] = fn["Timeout"]

            result.findings.append(
                self._finding(
                    FindingKind.IDLE_LAMBDA,
                    Severity.LOW,
                    name,
                    f"{config.idle_days}일간 호출 0건",
                    name=fn.get("FunctionArn", ""),
                    metadata=metadata,
                )
            )

        return result
