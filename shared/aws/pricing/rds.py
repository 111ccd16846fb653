"""
shared/aws/pricing/rds.py - RDS 인스턴스 월 비용 및 메모리 크기
"""

from __future__ import annotations

from ._lookup import lookup_typed
from .constants import HOURS_PER_MONTH, RDS_HOURLY, RDS_INSTANCE_MEMORY_GIB

_GIB = 1024**3


def monthly_rds_cost(instance_class: str, region: str, multi_az: bool = False) -> float:
    """RDS 인스턴스 월간 비용

    Args:
        instance_class: 인스턴스 클래스 (예: "db.t3.medium")
        region: AWS 리전
        multi_az: Multi-AZ 배포이면 비용 2배

    Returns:
        월간 USD 비용 (가격표에 없으면 0.0)
    """
    hourly = lookup_typed(RDS_HOURLY, region, instance_class)
    if hourly is None:
        return 0.0
    cost = hourly * HOURS_PER_MONTH
    if multi_az:
        cost *= 2
    return round(cost, 2)


def rds_instance_memory_bytes(instance_class: str) -> int | None:
    """인스턴스 클래스의 총 메모리 (바이트). 알 수 없으면 None"""
    gib = RDS_INSTANCE_MEMORY_GIB.get(instance_class)
    if gib is None:
        return None
    return int(gib * _GIB)
