"""
tests/shared/aws/pricing/test_pricing.py - 정적 가격표 조회 테스트
"""

import pytest

from shared.aws.pricing import (
    HOURS_PER_MONTH,
    monthly_alb_cost,
    monthly_ebs_cost,
    monthly_ec2_cost,
    monthly_eip_cost,
    monthly_kinesis_shard_cost,
    monthly_nat_gateway_cost,
    monthly_nlb_cost,
    monthly_rds_cost,
    monthly_snapshot_cost,
    nat_gateway_data_cost_per_gb,
    rds_instance_memory_bytes,
)


class TestEC2Pricing:
    """EC2/EBS/스냅샷/EIP 가격 테스트"""

    def test_ec2_known_type(self):
        assert monthly_ec2_cost("t3.medium", "us-east-1") == round(0.0416 * HOURS_PER_MONTH, 2)

    def test_ec2_regional_price(self):
        assert monthly_ec2_cost("t3.medium", "ap-northeast-2") == round(0.052 * HOURS_PER_MONTH, 2)

    def test_ec2_falls_back_to_us_east_1(self):
        """리전 표에 없으면 us-east-1 가격"""
        assert monthly_ec2_cost("m7g.large", "eu-west-1") == monthly_ec2_cost("m7g.large", "us-east-1")
        assert monthly_ec2_cost("t3.micro", "sa-east-1") == monthly_ec2_cost("t3.micro", "us-east-1")

    def test_ec2_unknown_type(self):
        """가격표에 없는 타입은 0.0"""
        assert monthly_ec2_cost("x99.mega", "us-east-1") == 0.0

    def test_ebs(self):
        assert monthly_ebs_cost("gp3", 100, "us-east-1") == 8.0
        assert monthly_ebs_cost("gp2", 50, "us-east-1") == 5.0
        assert monthly_ebs_cost("unknown", 100, "us-east-1") == 0.0

    def test_snapshot(self):
        assert monthly_snapshot_cost(200, "us-east-1") == 10.0
        assert monthly_snapshot_cost(200, "me-south-1") == 10.0

    def test_eip(self):
        assert monthly_eip_cost("us-east-1") == 3.65


class TestNetworkPricing:
    """NAT/로드 밸런서/Kinesis 가격 테스트"""

    def test_nat_gateway(self):
        assert monthly_nat_gateway_cost("us-east-1") == 32.85
        assert nat_gateway_data_cost_per_gb("us-east-1") == 0.045

    def test_load_balancers(self):
        assert monthly_alb_cost("us-east-1") == pytest.approx(16.43, abs=0.01)
        assert monthly_nlb_cost("us-east-1") == monthly_alb_cost("us-east-1")

    def test_kinesis_shards(self):
        assert monthly_kinesis_shard_cost(1, "us-east-1") == 10.95
        assert monthly_kinesis_shard_cost(4, "us-east-1") == 43.8
        assert monthly_kinesis_shard_cost(0, "us-east-1") == 0.0


class TestRDSPricing:
    """RDS 가격/메모리 테스트"""

    def test_single_az(self):
        assert monthly_rds_cost("db.t3.micro", "us-east-1") == round(0.017 * HOURS_PER_MONTH, 2)

    def test_multi_az_doubles(self):
        single = monthly_rds_cost("db.m5.large", "us-east-1")

        assert monthly_rds_cost("db.m5.large", "us-east-1", multi_az=True) == pytest.approx(single * 2, abs=0.01)

    def test_unknown_class(self):
        assert monthly_rds_cost("db.x99.huge", "us-east-1") == 0.0

    def test_memory_bytes(self):
        assert rds_instance_memory_bytes("db.t3.medium") == 4 * 1024**3
        assert rds_instance_memory_bytes("db.unknown") is None
