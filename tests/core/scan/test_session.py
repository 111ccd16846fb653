"""
tests/core/scan/test_session.py - 리전별 client 구성 테스트
"""

from unittest.mock import MagicMock

import pytest
from moto import mock_aws

from core.scan.session import AWSClient, RegionClients


class TestRegionClients:
    """RegionClients 테스트"""

    def test_injected_client_returned(self):
        """주입된 client 반환"""
        ec2 = MagicMock()
        clients = RegionClients("us-east-1", clients={"ec2": ec2})

        assert clients.client("ec2") is ec2

    def test_missing_client_without_session(self):
        """Session 없이 구성되지 않은 서비스는 KeyError"""
        clients = RegionClients("us-east-1", clients={})

        with pytest.raises(KeyError):
            clients.client("rds")

    def test_client_cached(self):
        """같은 서비스 client는 한 번만 생성"""
        session = MagicMock()
        clients = RegionClients("eu-west-1", session=session)

        first = clients.client("sqs")
        second = clients.client("sqs")

        assert first is second
        assert session.client.call_count == 1
        assert session.client.call_args.kwargs["region_name"] == "eu-west-1"


class TestAWSClient:
    """AWSClient 테스트"""

    def test_default_region(self):
        """환경 기본 리전 사용"""
        aws = AWSClient()

        assert aws.default_region == "us-east-1"
        assert aws.profile is None

    def test_for_region_binds_region(self):
        """for_region은 해당 리전의 RegionClients 반환"""
        clients = AWSClient().for_region("ap-northeast-2")

        assert clients.region == "ap-northeast-2"
        assert clients.client("ec2").meta.region_name == "ap-northeast-2"

    @mock_aws
    def test_list_enabled_regions(self):
        """활성화된 리전 목록 (정렬)"""
        regions = AWSClient().list_enabled_regions()

        assert "us-east-1" in regions
        assert regions == sorted(regions)
