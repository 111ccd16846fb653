"""
shared/aws/pricing/ec2.py - EC2 / EBS / 스냅샷 / EIP 월 비용

정적 가격표(constants.py) 기반으로 월 예상 비용을 계산합니다.
가격표에 없는 타입은 0.0 ("직접 비용 없음")을 반환합니다.

사용법:
    from shared.aws.pricing import monthly_ec2_cost, monthly_ebs_cost

    monthly = monthly_ec2_cost("t3.medium", "ap-northeast-2")
    volume = monthly_ebs_cost("gp3", 100, "ap-northeast-2")
"""

from __future__ import annotations

from ._lookup import lookup_flat, lookup_typed
from .constants import EBS_GB_MONTHLY, EC2_HOURLY, FLAT_HOURLY, HOURS_PER_MONTH, SNAPSHOT_GB_MONTHLY


def monthly_ec2_cost(instance_type: str, region: str) -> float:
    """EC2 인스턴스 월간 비용 (시간당 가격 * 730)"""
    hourly = lookup_typed(EC2_HOURLY, region, instance_type)
    if hourly is None:
        return 0.0
    return round(hourly * HOURS_PER_MONTH, 2)


def monthly_ebs_cost(volume_type: str, size_gib: int, region: str) -> float:
    """EBS 볼륨 월간 비용 (GB당 월 가격 * 크기)"""
    per_gib = lookup_typed(EBS_GB_MONTHLY, region, volume_type)
    if per_gib is None:
        return 0.0
    return round(per_gib * size_gib, 2)


def monthly_snapshot_cost(size_gib: int, region: str) -> float:
    """EBS 스냅샷 월간 비용

    스냅샷은 증분 저장이지만 원본 볼륨 크기를 기준으로 추정합니다.
    """
    per_gib = lookup_flat(SNAPSHOT_GB_MONTHLY, region)
    if per_gib is None:
        return 0.0
    return round(per_gib * size_gib, 2)


def monthly_eip_cost(region: str) -> float:
    """연결되지 않은 Elastic IP 월간 비용"""
    hourly = lookup_typed(FLAT_HOURLY, region, "eip")
    if hourly is None:
        return 0.0
    return round(hourly * HOURS_PER_MONTH, 2)
