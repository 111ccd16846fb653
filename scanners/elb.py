"""
scanners/elb.py - 유휴 ALB / NLB 탐지

탐지 항목:
    - IDLE_ALB / IDLE_NLB: 정상(healthy) 타깃이 없거나,
      조회 기간 동안 요청 수(ALB: RequestCount, NLB: ActiveFlowCount)가 0인 로드 밸런서

메트릭 실패 정책 (로드 밸런서 단위 생략):
    - 타깃 그룹 조회 실패: 해당 로드 밸런서만 건너뜀
    - 요청 수 메트릭 조회 실패: 정상 타깃이 있는 해당 유형 로드 밸런서 판정 생략
"""

from __future__ import annotations

import logging
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from core.exceptions import MetricsError
from core.scan.types import FindingKind, ResourceType, ScanConfig, ScanResult, Severity
from shared.aws.pricing import monthly_alb_cost, monthly_nlb_cost

from .base import MetricResourceScanner

logger = logging.getLogger(__name__)

# 로드 밸런서 유형별 요청 메트릭 (namespace, metric)
REQUEST_METRICS: dict[str, tuple[str, str]] = {
    "application": ("AWS/ApplicationELB", "RequestCount"),
    "network": ("AWS/NetworkELB", "ActiveFlowCount"),
}


def lb_dimension(arn: str) -> str:
    """ELBv2 ARN에서 CloudWatch LoadBalancer 차원 값 추출

    arn:aws:elasticloadbalancing:us-east-1:123456789012:loadbalancer/app/my-lb/abc123
    -> app/my-lb/abc123
    """
    _, sep, suffix = arn.partition("loadbalancer/")
    return suffix if sep else ""


class ELBScanner(MetricResourceScanner):
    """유휴 ALB/NLB 스캐너 (ALB와 NLB를 함께 처리)"""

    resource_type = ResourceType.ALB
    service_name = "elbv2"

    def scan(self, config: ScanConfig) -> ScanResult:
        load_balancers = self._paginate("describe_load_balancers", "LoadBalancers")
        result = ScanResult(resources_scanned=len(load_balancers))

        idle: list[dict[str, Any]] = []
        healthy_by_type: dict[str, list[dict[str, Any]]] = {}

        for lb in load_balancers:
            arn = lb.get("LoadBalancerArn", "")
            lb_type = lb.get("Type", "")
            if config.exclude.should_exclude(arn):
                continue
            if lb_type not in REQUEST_METRICS:
                continue

            try:
                has_healthy = self._has_healthy_targets(arn)
            except (ClientError, BotoCoreError) as e:
                logger.warning(f"{self.region}: 타깃 상태 확인 실패 ({lb.get('LoadBalancerName', arn)}): {e}")
                continue

            if has_healthy:
                healthy_by_type.setdefault(lb_type, []).append(lb)
            else:
                idle.append(lb)

        for lb_type, lbs in healthy_by_type.items():
            idle.extend(self._idle_by_requests(lb_type, lbs, config.idle_days))

        for lb in idle:
            result.findings.append(self._idle_finding(lb, config.idle_days))

        return result

    def _has_healthy_targets(self, arn: str) -> bool:
        self._check_cancelled()
        target_groups = self.client.describe_target_groups(LoadBalancerArn=arn).get("TargetGroups", [])
        for tg in target_groups:
            tg_arn = tg.get("TargetGroupArn")
            if not tg_arn:
                continue
            self._check_cancelled()
            try:
                health = self.client.describe_target_health(TargetGroupArn=tg_arn)
            except (ClientError, BotoCoreError) as e:
                logger.debug(f"타깃 그룹 상태 조회 실패 ({tg_arn}): {e}")
                continue
            for desc in health.get("TargetHealthDescriptions", []):
                if desc.get("TargetHealth", {}).get("State") == "healthy":
                    return True
        return False

    def _idle_by_requests(self, lb_type: str, lbs: list[dict[str, Any]], idle_days: int) -> list[dict[str, Any]]:
        namespace, metric_name = REQUEST_METRICS[lb_type]
        by_dimension = {lb_dimension(lb.get("LoadBalancerArn", "")): lb for lb in lbs}
        by_dimension.pop("", None)

        try:
            totals = self.metrics.fetch_sum(namespace, metric_name, "LoadBalancer", list(by_dimension), idle_days)
        except MetricsError as e:
            logger.warning(f"{self.region}: {metric_name} 메트릭 조회 실패, {len(by_dimension)}개 로드 밸런서 판정 생략: {e}")
            return []

        # 데이터 없음은 요청 없음으로 간주
        return [lb for dim, lb in by_dimension.items() if totals.get(dim, 0.0) == 0]

    def _idle_finding(self, lb: dict[str, Any], idle_days: int):
        name = lb.get("LoadBalancerName", "")
        if lb.get("Type") == "network":
            kind, resource_type, cost = FindingKind.IDLE_NLB, ResourceType.NLB, monthly_nlb_cost(self.region)
        else:
            kind, resource_type, cost = FindingKind.IDLE_ALB, ResourceType.ALB, monthly_alb_cost(self.region)

        return self._finding(
            kind,
            Severity.HIGH,
            lb.get("LoadBalancerArn", ""),
            f"로드 밸런서 {name!r}: 정상 타깃 없음 또는 {idle_days}일간 요청 0건",
            cost=cost,
            name=name,
            metadata={
                "lb_type": lb.get("Type", ""),
                "scheme": lb.get("Scheme", ""),
                "vpc_id": lb.get("VpcId", ""),
            },
            resource_type=resource_type,
        )
