"""
shared/io/output/report.py - 스캔 리포트 출력

지원 형식:
    - text: rich 테이블 (발견 목록 다음에 에러 목록)
    - json: 고정 키 순서, ISO-8601 UTC 타임스탬프
    - sarif: SARIF 2.1.0 (발견 유형당 rule 1개)
    - spectrehub: SpectreHub 수집용 JSON envelope ($schema spectrehub/v1)

Usage:
    reporter = get_reporter("json")
    reporter.generate(data, sys.stdout)
"""

from __future__ import annotations

import hashlib
import json
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import IO, Any

from rich.console import Console
from rich.table import Table

from core.analysis import AnalysisResult, Summary
from core.exceptions import ConfigError
from core.scan.types import Finding, FindingKind, Severity

TOOL_NAME = "wscan"
SARIF_SCHEMA = "https://raw.githubusercontent.com/oasis-tcs/sarif-spec/main/sarif-2.1/schema/sarif-schema-2.1.0.json"
SPECTREHUB_SCHEMA = "spectrehub/v1"

REPORT_FORMATS = ("text", "json", "sarif", "spectrehub")

SARIF_LEVELS = {
    Severity.HIGH: "error",
    Severity.MEDIUM: "warning",
    Severity.LOW: "note",
}

# 발견 유형별 (설명, 기본 심각도)
RULES: dict[FindingKind, tuple[str, Severity]] = {
    FindingKind.IDLE_EC2: ("Idle EC2 instance", Severity.HIGH),
    FindingKind.STOPPED_EC2: ("Long-stopped EC2 instance", Severity.MEDIUM),
    FindingKind.DETACHED_EBS: ("Detached EBS volume", Severity.HIGH),
    FindingKind.UNUSED_EIP: ("Unused Elastic IP", Severity.MEDIUM),
    FindingKind.IDLE_ALB: ("Idle Application Load Balancer", Severity.HIGH),
    FindingKind.IDLE_NLB: ("Idle Network Load Balancer", Severity.HIGH),
    FindingKind.IDLE_NAT_GATEWAY: ("Idle NAT Gateway", Severity.HIGH),
    FindingKind.LOW_TRAFFIC_NAT_GATEWAY: ("Low-traffic NAT Gateway", Severity.MEDIUM),
    FindingKind.IDLE_RDS: ("Idle RDS instance", Severity.HIGH),
    FindingKind.STALE_SNAPSHOT: ("Stale EBS snapshot", Severity.MEDIUM),
    FindingKind.UNUSED_SECURITY_GROUP: ("Unused security group", Severity.LOW),
    FindingKind.IDLE_LAMBDA: ("Idle Lambda function", Severity.LOW),
    FindingKind.SQS_IDLE: ("Idle SQS queue", Severity.MEDIUM),
    FindingKind.SQS_NO_CONSUMER: ("SQS queue without consumers", Severity.MEDIUM),
    FindingKind.SQS_DLQ_ORPHANED: ("Orphaned SQS dead-letter queue", Severity.HIGH),
    FindingKind.SNS_NO_SUBSCRIBERS: ("SNS topic without subscribers", Severity.MEDIUM),
    FindingKind.SNS_IDLE: ("Idle SNS topic", Severity.LOW),
    FindingKind.KINESIS_STREAM_IDLE: ("Idle Kinesis stream", Severity.HIGH),
    FindingKind.KINESIS_OVER_PROVISIONED: ("Over-provisioned Kinesis stream", Severity.MEDIUM),
    FindingKind.KINESIS_FIREHOSE_IDLE: ("Idle Firehose delivery stream", Severity.MEDIUM),
}


def compute_target_hash(profile: str | None, regions: Sequence[str]) -> str:
    """스캔 대상(프로파일 + 리전) 식별 해시"""
    raw = f"profile:{profile or ''},regions:{','.join(regions)}"
    return "sha256:" + hashlib.sha256(raw.encode("utf-8")).hexdigest()


@dataclass
class ReportData:
    """리포트 생성 입력"""

    version: str
    regions: list[str]
    idle_days: int
    stale_days: int
    min_monthly_cost: float
    findings: list[Finding]
    summary: Summary
    errors: list[str] = field(default_factory=list)
    target_hash: str = ""
    partial: bool = False
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_analysis(
        cls,
        analysis: AnalysisResult,
        version: str,
        regions: Sequence[str],
        idle_days: int,
        stale_days: int,
        min_monthly_cost: float,
        profile: str | None = None,
        partial: bool = False,
    ) -> ReportData:
        return cls(
            version=version,
            regions=list(regions),
            idle_days=idle_days,
            stale_days=stale_days,
            min_monthly_cost=min_monthly_cost,
            findings=analysis.findings,
            summary=analysis.summary,
            errors=analysis.errors,
            target_hash=compute_target_hash(profile, regions),
            partial=partial,
        )

    def sorted_findings(self) -> list[Finding]:
        """비용 내림차순, 동일하면 리전/리소스 ID 순"""
        return sorted(self.findings, key=lambda f: (-f.estimated_monthly_waste, f.region, f.resource_id))

    def to_dict(self) -> dict[str, Any]:
        timestamp = self.timestamp.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        data: dict[str, Any] = {
            "tool": TOOL_NAME,
            "version": self.version,
            "timestamp": timestamp,
            "target": {"type": "aws-account", "uri_hash": self.target_hash},
            "config": {
                "regions": list(self.regions),
                "idle_days": self.idle_days,
                "stale_days": self.stale_days,
                "min_monthly_cost": self.min_monthly_cost,
            },
            "findings": [f.to_dict() for f in self.sorted_findings()],
            "summary": self.summary.to_dict(),
        }
        if self.errors:
            data["errors"] = list(self.errors)
        if self.partial:
            data["partial"] = True
        return data


class Reporter(ABC):
    """리포트 출력기"""

    @abstractmethod
    def generate(self, data: ReportData, stream: IO[str]) -> None:
        """stream에 리포트 출력"""


class JSONReporter(Reporter):
    def generate(self, data: ReportData, stream: IO[str]) -> None:
        json.dump(data.to_dict(), stream, ensure_ascii=False, indent=2)
        stream.write("\n")


class SARIFReporter(Reporter):
    def generate(self, data: ReportData, stream: IO[str]) -> None:
        json.dump(build_sarif(data), stream, ensure_ascii=False, indent=2)
        stream.write("\n")


class SpectreHubReporter(Reporter):
    def generate(self, data: ReportData, stream: IO[str]) -> None:
        json.dump(build_spectrehub(data), stream, ensure_ascii=False, indent=2)
        stream.write("\n")


class TextReporter(Reporter):
    def generate(self, data: ReportData, stream: IO[str]) -> None:
        console = Console(file=stream, width=160, highlight=False, soft_wrap=False)
        summary = data.summary

        title = f"{TOOL_NAME} v{data.version} - AWS 낭비 리소스 스캔"
        if data.partial:
            title += " (부분 결과)"
        console.print(f"[bold]{title}[/bold]")
        console.print(
            f"리전 {summary.regions_scanned}개, 리소스 {summary.total_resources_scanned}개 검사, "
            f"발견 {summary.total_findings}건, 월 예상 낭비 ${summary.total_monthly_waste:,.2f}"
        )
        console.print()

        if data.findings:
            table = Table(show_header=True, header_style="bold")
            table.add_column("심각도")
            table.add_column("유형")
            table.add_column("리전")
            table.add_column("리소스")
            table.add_column("이름")
            table.add_column("월 비용", justify="right")
            table.add_column("내용")
            for f in data.sorted_findings():
                table.add_row(
                    _severity_markup(f.severity),
                    f.kind.value,
                    f.region,
                    f.resource_id,
                    f.resource_name,
                    f"${f.estimated_monthly_waste:,.2f}",
                    f.message,
                )
            console.print(table)
        else:
            console.print("[green]낭비 리소스가 발견되지 않았습니다.[/green]")

        if summary.by_severity:
            parts = [f"{sev} {summary.by_severity[sev]}" for sev in ("high", "medium", "low") if sev in summary.by_severity]
            console.print(f"심각도별: {', '.join(parts)}")

        if data.errors:
            console.print()
            console.print(f"[yellow]에러 {len(data.errors)}건:[/yellow]")
            for err in data.errors:
                console.print(f"  - {err}", markup=False)


def _severity_markup(severity: Severity) -> str:
    color = {Severity.HIGH: "red", Severity.MEDIUM: "yellow", Severity.LOW: "dim"}[severity]
    return f"[{color}]{severity.value}[/{color}]"


def build_sarif(data: ReportData) -> dict[str, Any]:
    """SARIF 2.1.0 문서 생성"""
    rules = [
        {
            "id": kind.value,
            "shortDescription": {"text": description},
            "defaultConfiguration": {"level": SARIF_LEVELS[severity]},
        }
        for kind, (description, severity) in RULES.items()
    ]

    results = []
    for f in data.sorted_findings():
        properties: dict[str, Any] = {
            "resourceName": f.resource_name,
            "estimatedMonthlyWaste": f.estimated_monthly_waste,
        }
        if f.metadata:
            properties["metadata"] = f.metadata
        results.append(
            {
                "ruleId": f.kind.value,
                "level": SARIF_LEVELS[f.severity],
                "message": {"text": f.message},
                "locations": [
                    {
                        "physicalLocation": {
                            "artifactLocation": {"uri": f"aws://{f.region}/{f.resource_type.value}/{f.resource_id}"}
                        }
                    }
                ],
                "properties": properties,
            }
        )

    return {
        "$schema": SARIF_SCHEMA,
        "version": "2.1.0",
        "runs": [
            {
                "tool": {"driver": {"name": TOOL_NAME, "version": data.version, "rules": rules}},
                "results": results,
            }
        ],
    }



def build_spectrehub(data: ReportData) -> dict[str, Any]:
    """SpectreHub envelope 생성

    JSON 리포트와 같은 필드에 $schema를 앞에 두고, 스캔 설정(config)은 제외합니다.
    """
    report = data.to_dict()
    report.pop("config", None)
    return {"$schema": SPECTREHUB_SCHEMA, **report}


_REPORTERS: dict[str, type[Reporter]] = {
    "text": TextReporter,
    "json": JSONReporter,
    "sarif": SARIFReporter,
    "spectrehub": SpectreHubReporter,
}


def get_reporter(fmt: str) -> Reporter:
    """형식 이름으로 Reporter 생성

    Raises:
        ConfigError: 지원하지 않는 형식
    """
    reporter_cls = _REPORTERS.get(fmt.lower())
    if reporter_cls is None:
        raise ConfigError(f"지원하지 않는 출력 형식: {fmt} ({', '.join(REPORT_FORMATS)} 중 선택)")
    return reporter_cls()
