"""AWS 서비스별 정적 가격 조회.

정적 온디맨드 가격표 기반이며, 리전 가격이 없으면 us-east-1 가격을 사용합니다.
가격표에 없는 타입의 비용은 0.0입니다.
"""

from .constants import HOURS_PER_MONTH
from .ec2 import monthly_ebs_cost, monthly_ec2_cost, monthly_eip_cost, monthly_snapshot_cost
from .network import (
    monthly_alb_cost,
    monthly_kinesis_shard_cost,
    monthly_nat_gateway_cost,
    monthly_nlb_cost,
    nat_gateway_data_cost_per_gb,
)
from .rds import monthly_rds_cost, rds_instance_memory_bytes

__all__ = [
    "HOURS_PER_MONTH",
    "monthly_ec2_cost",
    "monthly_ebs_cost",
    "monthly_snapshot_cost",
    "monthly_eip_cost",
    "monthly_nat_gateway_cost",
    "nat_gateway_data_cost_per_gb",
    "monthly_alb_cost",
    "monthly_nlb_cost",
    "monthly_kinesis_shard_cost",
    "monthly_rds_cost",
    "rds_instance_memory_bytes",
]
