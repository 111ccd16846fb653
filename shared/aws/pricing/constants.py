"""
shared/aws/pricing/constants.py - 정적 온디맨드 가격표

스캔 결과의 월 예상 낭비 비용 계산에 사용하는 정적 가격표다.
리전별 표에 없는 항목은 us-east-1 가격으로 대체한다.
모든 가격은 USD, 2025년 온디맨드 기준이다.

상수:
    - ``HOURS_PER_MONTH``: 월간 시간 (730h = 365일 * 24h / 12개월)
    - ``FALLBACK_REGION``: 리전별 가격이 없을 때 사용하는 리전
    - ``EC2_HOURLY`` / ``RDS_HOURLY``: 인스턴스 타입별 시간당 가격
    - ``EBS_GB_MONTHLY``: 볼륨 타입별 GB당 월 가격
    - ``FLAT_HOURLY``: 고정 시간당 요금 리소스 (EIP, NAT, ALB, NLB, Kinesis 샤드)
    - ``RDS_INSTANCE_MEMORY_GIB``: RDS 인스턴스 클래스별 메모리 크기
"""

from __future__ import annotations

# 월간 시간 상수
HOURS_PER_MONTH = 730

FALLBACK_REGION = "us-east-1"

# ============================================================================
# EC2 인스턴스 시간당 가격 {region: {instance_type: price}}
# ============================================================================

EC2_HOURLY: dict[str, dict[str, float]] = {
    "us-east-1": {
        "t2.micro": 0.0116,
        "t2.small": 0.023,
        "t2.medium": 0.0464,
        "t3.nano": 0.0052,
        "t3.micro": 0.0104,
        "t3.small": 0.0208,
        "t3.medium": 0.0416,
        "t3.large": 0.0832,
        "t3.xlarge": 0.1664,
        "t3.2xlarge": 0.3328,
        "t4g.micro": 0.0084,
        "t4g.small": 0.0168,
        "t4g.medium": 0.0336,
        "t4g.large": 0.0672,
        "m5.large": 0.096,
        "m5.xlarge": 0.192,
        "m5.2xlarge": 0.384,
        "m5.4xlarge": 0.768,
        "m6i.large": 0.096,
        "m6i.xlarge": 0.192,
        "m6i.2xlarge": 0.384,
        "m6g.large": 0.077,
        "m6g.xlarge": 0.154,
        "m7g.large": 0.0816,
        "c5.large": 0.085,
        "c5.xlarge": 0.17,
        "c5.2xlarge": 0.34,
        "c6i.large": 0.085,
        "c6i.xlarge": 0.17,
        "r5.large": 0.126,
        "r5.xlarge": 0.252,
        "r5.2xlarge": 0.504,
        "r6i.large": 0.126,
        "r6i.xlarge": 0.252,
    },
    "ap-northeast-2": {
        "t2.micro": 0.0144,
        "t3.nano": 0.0065,
        "t3.micro": 0.013,
        "t3.small": 0.026,
        "t3.medium": 0.052,
        "t3.large": 0.104,
        "t3.xlarge": 0.208,
        "m5.large": 0.118,
        "m5.xlarge": 0.236,
        "m6i.large": 0.118,
        "c5.large": 0.096,
        "r5.large": 0.152,
    },
    "eu-west-1": {
        "t3.micro": 0.0114,
        "t3.small": 0.0228,
        "t3.medium": 0.0456,
        "t3.large": 0.0912,
        "m5.large": 0.107,
        "m5.xlarge": 0.214,
        "c5.large": 0.096,
        "r5.large": 0.141,
    },
}

# ============================================================================
# EBS 볼륨 GB당 월 가격 {region: {volume_type: price}}
# ============================================================================

EBS_GB_MONTHLY: dict[str, dict[str, float]] = {
    "us-east-1": {
        "gp3": 0.08,
        "gp2": 0.10,
        "io1": 0.125,
        "io2": 0.125,
        "st1": 0.045,
        "sc1": 0.015,
        "standard": 0.05,
    },
    "ap-northeast-2": {
        "gp3": 0.0912,
        "gp2": 0.114,
        "io1": 0.1278,
        "io2": 0.1278,
        "st1": 0.051,
        "sc1": 0.029,
    },
    "eu-west-1": {
        "gp3": 0.088,
        "gp2": 0.11,
        "io1": 0.138,
        "st1": 0.05,
        "sc1": 0.0168,
    },
}

# EBS 스냅샷 GB당 월 가격 {region: price}
SNAPSHOT_GB_MONTHLY: dict[str, float] = {
    "us-east-1": 0.05,
    "ap-northeast-2": 0.05,
    "eu-west-1": 0.05,
}

# ============================================================================
# RDS 인스턴스 시간당 가격 (Single-AZ) {region: {instance_class: price}}
# ============================================================================

RDS_HOURLY: dict[str, dict[str, float]] = {
    "us-east-1": {
        "db.t3.micro": 0.017,
        "db.t3.small": 0.034,
        "db.t3.medium": 0.068,
        "db.t3.large": 0.136,
        "db.t4g.micro": 0.016,
        "db.t4g.small": 0.032,
        "db.t4g.medium": 0.065,
        "db.t4g.large": 0.129,
        "db.m5.large": 0.171,
        "db.m5.xlarge": 0.342,
        "db.m5.2xlarge": 0.684,
        "db.m6g.large": 0.152,
        "db.m6g.xlarge": 0.304,
        "db.r5.large": 0.25,
        "db.r5.xlarge": 0.50,
        "db.r6g.large": 0.225,
        "db.r6g.xlarge": 0.45,
    },
    "ap-northeast-2": {
        "db.t3.micro": 0.025,
        "db.t3.small": 0.05,
        "db.t3.medium": 0.1,
        "db.t3.large": 0.2,
        "db.m5.large": 0.236,
        "db.r5.large": 0.31,
    },
}

# RDS 인스턴스 클래스별 메모리 (GiB)
RDS_INSTANCE_MEMORY_GIB: dict[str, float] = {
    "db.t3.micro": 1,
    "db.t3.small": 2,
    "db.t3.medium": 4,
    "db.t3.large": 8,
    "db.t3.xlarge": 16,
    "db.t3.2xlarge": 32,
    "db.t4g.micro": 1,
    "db.t4g.small": 2,
    "db.t4g.medium": 4,
    "db.t4g.large": 8,
    "db.t4g.xlarge": 16,
    "db.t4g.2xlarge": 32,
    "db.m5.large": 8,
    "db.m5.xlarge": 16,
    "db.m5.2xlarge": 32,
    "db.m5.4xlarge": 64,
    "db.m6g.large": 8,
    "db.m6g.xlarge": 16,
    "db.m6g.2xlarge": 32,
    "db.r5.large": 16,
    "db.r5.xlarge": 32,
    "db.r5.2xlarge": 64,
    "db.r6g.large": 16,
    "db.r6g.xlarge": 32,
    "db.r6g.2xlarge": 64,
}

# ============================================================================
# 고정 시간당 요금 {region: {resource: price}}
# ============================================================================

FLAT_HOURLY: dict[str, dict[str, float]] = {
    "us-east-1": {
        "eip": 0.005,
        "nat_gateway": 0.045,
        "alb": 0.0225,
        "nlb": 0.0225,
        "kinesis_shard": 0.015,
    },
    "ap-northeast-2": {
        "eip": 0.005,
        "nat_gateway": 0.059,
        "alb": 0.0225,
        "nlb": 0.0225,
        "kinesis_shard": 0.0185,
    },
    "eu-west-1": {
        "eip": 0.005,
        "nat_gateway": 0.048,
        "alb": 0.0252,
        "nlb": 0.0252,
        "kinesis_shard": 0.015,
    },
}

# NAT Gateway 데이터 처리 GB당 가격 {region: price}
NAT_GATEWAY_DATA_PER_GB: dict[str, float] = {
    "us-east-1": 0.045,
    "ap-northeast-2": 0.059,
    "eu-west-1": 0.048,
}
