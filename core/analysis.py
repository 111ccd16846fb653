"""
core/analysis.py - 스캔 결과 분석

최소 월 비용 미만 발견을 걸러내고 요약 통계를 계산합니다.
에러 문자열은 그대로 전달합니다.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any

from .scan.types import Finding, ScanResult


@dataclass
class Summary:
    """스캔 요약 통계"""

    total_resources_scanned: int = 0
    total_findings: int = 0
    total_monthly_waste: float = 0.0
    by_severity: dict[str, int] = field(default_factory=dict)
    by_resource_type: dict[str, int] = field(default_factory=dict)
    regions_scanned: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_resources_scanned": self.total_resources_scanned,
            "total_findings": self.total_findings,
            "total_monthly_waste": round(self.total_monthly_waste, 2),
            "by_severity": dict(sorted(self.by_severity.items())),
            "by_resource_type": dict(sorted(self.by_resource_type.items())),
            "regions_scanned": self.regions_scanned,
        }


@dataclass
class AnalysisResult:
    findings: list[Finding]
    summary: Summary
    errors: list[str] = field(default_factory=list)


def analyze(result: ScanResult, min_monthly_cost: float) -> AnalysisResult:
    """최소 비용 필터링 및 요약 계산

    Args:
        result: 멀티 리전 스캔 결과
        min_monthly_cost: 이 값 미만의 월 예상 낭비 비용을 가진 발견은 제외

    Returns:
        AnalysisResult
    """
    filtered = [f for f in result.findings if f.estimated_monthly_waste >= min_monthly_cost]

    severity = Counter(f.severity.value for f in filtered)
    resource_type = Counter(f.resource_type.value for f in filtered)

    summary = Summary(
        total_resources_scanned=result.resources_scanned,
        total_findings=len(filtered),
        total_monthly_waste=sum(f.estimated_monthly_waste for f in filtered),
        by_severity=dict(severity),
        by_resource_type=dict(resource_type),
        regions_scanned=result.regions_scanned,
    )

    return AnalysisResult(findings=filtered, summary=summary, errors=list(result.errors))
