"""
scanners/nat_gateway.py - 유휴/저트래픽 NAT Gateway 탐지

탐지 항목:
    - IDLE_NAT_GATEWAY: 조회 기간 동안 처리 바이트 0
    - LOW_TRAFFIC_NAT_GATEWAY: 월 환산 처리량이 nat_gw_low_traffic_gb 미만

메트릭 실패 정책 (degrade):
    - BytesOutToDestination 조회 실패: 발견 없이 종료
    - BytesInFromDestination 조회 실패: 수신 바이트를 0으로 간주
"""

from __future__ import annotations

import logging
from typing import Any

from core.exceptions import MetricsError
from core.scan.types import FindingKind, ResourceType, ScanConfig, ScanResult, Severity, name_from_tags, tags_to_dict
from shared.aws.pricing import monthly_nat_gateway_cost, nat_gateway_data_cost_per_gb

from .base import MetricResourceScanner

logger = logging.getLogger(__name__)

_GIB = 1024**3


class NATGatewayScanner(MetricResourceScanner):
    """유휴/저트래픽 NAT Gateway 스캐너"""

    resource_type = ResourceType.NAT_GATEWAY
    service_name = "ec2"

    def scan(self, config: ScanConfig) -> ScanResult:
        gateways = self._paginate(
            "describe_nat_gateways",
            "NatGateways",
            Filter=[{"Name": "state", "Values": ["available"]}],
        )
        result = ScanResult(resources_scanned=len(gateways))

        targets: dict[str, dict[str, Any]] = {}
        for gw in gateways:
            gw_id = gw.get("NatGatewayId", "")
            if config.exclude.should_exclude(gw_id, tags_to_dict(gw.get("Tags"))):
                continue
            targets[gw_id] = gw

        if not targets:
            return result

        ids = list(targets)
        try:
            bytes_out = self.metrics.fetch_sum("AWS/NATGateway", "BytesOutToDestination", "NatGatewayId", ids, config.idle_days)
        except MetricsError as e:
            logger.warning(f"{self.region}: NAT Gateway 송신 메트릭 조회 실패: {e}")
            return result

        try:
            bytes_in = self.metrics.fetch_sum("AWS/NATGateway", "BytesInFromDestination", "NatGatewayId", ids, config.idle_days)
        except MetricsError as e:
            logger.warning(f"{self.region}: NAT Gateway 수신 메트릭 조회 실패: {e}")
            bytes_in = {}

        gateway_cost = monthly_nat_gateway_cost(self.region)

        for gw_id, gw in targets.items():
            total_out = bytes_out.get(gw_id, 0.0)
            total_in = bytes_in.get(gw_id, 0.0)
            total_bytes = total_out + total_in
            name = name_from_tags(gw.get("Tags"))
            metadata: dict[str, Any] = {
                "subnet_id": gw.get("SubnetId", ""),
                "vpc_id": gw.get("VpcId", ""),
                "state": gw.get("State", ""),
            }

            if total_bytes == 0:
                result.findings.append(
                    self._finding(
                        FindingKind.IDLE_NAT_GATEWAY,
                        Severity.HIGH,
                        gw_id,
                        f"{config.idle_days}일간 처리 바이트 0",
                        cost=gateway_cost,
                        name=name,
                        metadata=metadata,
                    )
                )
                continue

            monthly_gb = total_bytes * (30.0 / config.idle_days) / _GIB
            if config.nat_gw_low_traffic_gb <= 0 or monthly_gb >= config.nat_gw_low_traffic_gb:
                continue

            data_cost = round(monthly_gb * nat_gateway_data_cost_per_gb(self.region), 2)
            total_cost = round(gateway_cost + data_cost, 2)
            metadata.update(
                {
                    "bytes_in": total_in,
                    "bytes_out": total_out,
                    "total_bytes": total_bytes,
                    "estimated_monthly_gb": monthly_gb,
                    "gateway_monthly_cost": gateway_cost,
                    "data_processing_cost": data_cost,
                }
            )
            result.findings.append(
                self._finding(
                    FindingKind.LOW_TRAFFIC_NAT_GATEWAY,
                    Severity.MEDIUM,
                    gw_id,
                    f"월 예상 처리량 {monthly_gb:.2f} GB: 게이트웨이 ${gateway_cost:.2f} + 데이터 ${data_cost:.2f} = ${total_cost:.2f}/월",
                    cost=total_cost,
                    name=name,
                    metadata=metadata,
                )
            )

        return result
