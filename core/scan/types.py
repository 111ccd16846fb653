"""
core/scan/types.py - 스캔 데이터 모델

스캐너, 리전 오케스트레이터, 멀티 리전 오케스트레이터가 주고받는
값 객체들을 정의합니다.

주요 구성 요소:
- Severity / ResourceType / FindingKind: 닫힌 열거형
- Finding: 탐지된 낭비 리소스 1건 (불변)
- ScanResult: 스캔 경계(스캐너/리전/전체) 하나의 집계 결과
- ExcludeConfig / ScanConfig: 읽기 전용 스캔 설정
- ScanProgress: 진행 상황 알림 이벤트
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any


class Severity(str, Enum):
    """발견 심각도"""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ResourceType(str, Enum):
    """스캔 대상 리소스 유형"""

    EC2 = "ec2"
    EBS = "ebs"
    EIP = "eip"
    ALB = "alb"
    NLB = "nlb"
    NAT_GATEWAY = "nat_gateway"
    RDS = "rds"
    SNAPSHOT = "snapshot"
    SECURITY_GROUP = "security_group"
    LAMBDA = "lambda"
    SQS = "sqs"
    SNS = "sns"
    KINESIS = "kinesis"
    FIREHOSE = "firehose"


class FindingKind(str, Enum):
    """탐지된 낭비 유형"""

    IDLE_EC2 = "IDLE_EC2"
    STOPPED_EC2 = "STOPPED_EC2"
    DETACHED_EBS = "DETACHED_EBS"
    UNUSED_EIP = "UNUSED_EIP"
    IDLE_ALB = "IDLE_ALB"
    IDLE_NLB = "IDLE_NLB"
    IDLE_NAT_GATEWAY = "IDLE_NAT_GATEWAY"
    LOW_TRAFFIC_NAT_GATEWAY = "LOW_TRAFFIC_NAT_GATEWAY"
    IDLE_RDS = "IDLE_RDS"
    STALE_SNAPSHOT = "STALE_SNAPSHOT"
    UNUSED_SECURITY_GROUP = "UNUSED_SECURITY_GROUP"
    IDLE_LAMBDA = "IDLE_LAMBDA"
    SQS_IDLE = "SQS_IDLE"
    SQS_NO_CONSUMER = "SQS_NO_CONSUMER"
    SQS_DLQ_ORPHANED = "SQS_DLQ_ORPHANED"
    SNS_NO_SUBSCRIBERS = "SNS_NO_SUBSCRIBERS"
    SNS_IDLE = "SNS_IDLE"
    KINESIS_STREAM_IDLE = "KINESIS_STREAM_IDLE"
    KINESIS_OVER_PROVISIONED = "KINESIS_OVER_PROVISIONED"
    KINESIS_FIREHOSE_IDLE = "KINESIS_FIREHOSE_IDLE"


@dataclass(frozen=True)
class Finding:
    """탐지된 낭비 리소스 1건

    스캐너만 생성하며 반환 이후에는 변경하지 않습니다.

    Attributes:
        kind: 낭비 유형
        severity: 심각도
        resource_type: 리소스 유형
        resource_id: 리소스 ID (리전+유형 내에서 유일)
        region: 리전
        message: 사람이 읽는 설명
        estimated_monthly_waste: 월 예상 낭비 비용 (USD, 0은 "직접 비용 없음")
        resource_name: 리소스 이름 (선택)
        metadata: 휴리스틱별 근거 (CPU%, 샤드 수 등)
    """

    kind: FindingKind
    severity: Severity
    resource_type: ResourceType
    resource_id: str
    region: str
    message: str
    estimated_monthly_waste: float = 0.0
    resource_name: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.kind.value,
            "severity": self.severity.value,
            "resource_type": self.resource_type.value,
            "resource_id": self.resource_id,
        }
        if self.resource_name:
            data["resource_name"] = self.resource_name
        data["region"] = self.region
        data["message"] = self.message
        data["estimated_monthly_waste"] = self.estimated_monthly_waste
        if self.metadata:
            data["metadata"] = dict(self.metadata)
        return data


@dataclass
class ScanResult:
    """스캔 경계 하나의 집계 결과

    Attributes:
        findings: 발견 목록 (순서 무관)
        errors: 실패한 작업 단위별 에러 문자열
        resources_scanned: 검사한 리소스 수
        regions_scanned: 시도한 리전 수 (최상위 결과에서만 사용)
    """

    findings: list[Finding] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    resources_scanned: int = 0
    regions_scanned: int = 0

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"findings": [f.to_dict() for f in self.findings]}
        if self.errors:
            data["errors"] = list(self.errors)
        data["resources_scanned"] = self.resources_scanned
        data["regions_scanned"] = self.regions_scanned
        return data


def _empty_tags() -> Mapping[str, str | None]:
    return MappingProxyType({})


@dataclass(frozen=True)
class ExcludeConfig:
    """리소스 제외 규칙

    리소스 ID가 ids에 있거나, 태그(알 수 있는 경우)가 tags의 조건 중
    하나라도 만족하면 제외됩니다. tags 값이 None이면 키만 일치해도 제외합니다.

    Attributes:
        ids: 제외할 리소스 ID 집합
        tags: 태그 조건 {키: 값 또는 None}
    """

    ids: frozenset[str] = frozenset()
    tags: Mapping[str, str | None] = field(default_factory=_empty_tags)

    @classmethod
    def from_lists(
        cls,
        resource_ids: Iterable[str] | None = None,
        tags: Iterable[str] | None = None,
    ) -> ExcludeConfig:
        """ID 목록과 "Key=Value" / "Key" 형식 태그 목록으로 생성

        Example:
            ExcludeConfig.from_lists(["i-123"], ["Environment=prod", "KeepAlive"])
        """
        predicates: dict[str, str | None] = {}
        for raw in tags or ():
            key, sep, value = raw.partition("=")
            key = key.strip()
            if not key:
                continue
            predicates[key] = value.strip() if sep else None

        ids = frozenset(i.strip() for i in resource_ids or () if i.strip())
        return cls(ids=ids, tags=MappingProxyType(predicates))

    def should_exclude(self, resource_id: str, tags: Mapping[str, str] | None = None) -> bool:
        """리소스 제외 여부 판단

        Args:
            resource_id: 리소스 ID
            tags: 리소스 태그. None이면 태그 기반 제외는 건너뜁니다.
        """
        if resource_id in self.ids:
            return True
        if tags is None or not self.tags:
            return False

        for key, expected in self.tags.items():
            if key not in tags:
                continue
            if expected is None or tags[key] == expected:
                return True
        return False


@dataclass(frozen=True)
class ScanConfig:
    """스캔 임계값과 제외 규칙 (읽기 전용)

    호출 한 번에 한 번 생성되어 모든 스캐너에 그대로 전달됩니다.
    """

    idle_days: int = 7
    stale_days: int = 90
    min_monthly_cost: float = 1.0
    idle_cpu_threshold: float = 5.0
    high_memory_threshold: float = 50.0
    stopped_threshold_days: int = 30
    nat_gw_low_traffic_gb: float = 1.0
    exclude: ExcludeConfig = field(default_factory=ExcludeConfig)


@dataclass(frozen=True)
class ScanProgress:
    """스캔 진행 이벤트 (관찰용)"""

    region: str
    scanner: str
    message: str
    timestamp: datetime


def tags_to_dict(tags: Iterable[Mapping[str, Any]] | None) -> dict[str, str]:
    """[{"Key": k, "Value": v}, ...] 형식 태그 목록을 딕셔너리로 변환"""
    return {t["Key"]: t.get("Value", "") for t in tags or () if "Key" in t}


def name_from_tags(tags: Iterable[Mapping[str, Any]] | None) -> str:
    """Name 태그 값 (없으면 빈 문자열)"""
    return tags_to_dict(tags).get("Name", "")
