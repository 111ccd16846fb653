"""
shared/aws/pricing/network.py - NAT Gateway / 로드 밸런서 월 비용

기본 시간당 요금만 계산합니다. LCU 요금과 데이터 전송 요금은 포함하지 않으며,
NAT Gateway 데이터 처리 비용은 nat_gateway_data_cost_per_gb로 별도 제공합니다.
"""

from __future__ import annotations

from ._lookup import lookup_flat, lookup_typed
from .constants import FLAT_HOURLY, HOURS_PER_MONTH, NAT_GATEWAY_DATA_PER_GB


def _monthly_flat(resource: str, region: str) -> float:
    hourly = lookup_typed(FLAT_HOURLY, region, resource)
    if hourly is None:
        return 0.0
    return round(hourly * HOURS_PER_MONTH, 2)


def monthly_nat_gateway_cost(region: str) -> float:
    """NAT Gateway 기본 월간 비용 (데이터 처리 제외)"""
    return _monthly_flat("nat_gateway", region)


def nat_gateway_data_cost_per_gb(region: str) -> float:
    """NAT Gateway 데이터 처리 GB당 가격"""
    return lookup_flat(NAT_GATEWAY_DATA_PER_GB, region) or 0.0


def monthly_alb_cost(region: str) -> float:
    """ALB 기본 월간 비용 (LCU 제외)"""
    return _monthly_flat("alb", region)


def monthly_nlb_cost(region: str) -> float:
    """NLB 기본 월간 비용 (LCU 제외)"""
    return _monthly_flat("nlb", region)


def monthly_kinesis_shard_cost(shard_count: int, region: str) -> float:
    """Kinesis 프로비저닝 모드 샤드 월간 비용"""
    hourly = lookup_typed(FLAT_HOURLY, region, "kinesis_shard")
    if hourly is None or shard_count <= 0:
        return 0.0
    return round(hourly * HOURS_PER_MONTH * shard_count, 2)
