"""
tests/conftest.py - pytest 공통 픽스처

AWS 자격 증명 더미 설정과 스캐너 테스트용 헬퍼를 제공합니다.

Usage:
    def test_something(region_clients, metrics_stub):
        clients = region_clients(ec2=MagicMock())
        metrics = metrics_stub({"CPUUtilization": {"i-1": 1.0}})
"""

import os
from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from core.exceptions import MetricsError
from core.scan.session import RegionClients

# =============================================================================
# 환경 설정
# =============================================================================


@pytest.fixture(autouse=True)
def aws_credentials(monkeypatch):
    """실제 AWS 호출 방지용 더미 자격 증명"""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    monkeypatch.delenv("AWS_PROFILE", raising=False)
    yield


# =============================================================================
# 헬퍼
# =============================================================================


def make_client_error(error_code: str, error_message: str = "Test error", operation: str = "TestOperation"):
    """ClientError 생성 헬퍼"""
    return ClientError({"Error": {"Code": error_code, "Message": error_message}}, operation)


def paginator_client(pages_by_operation: dict[str, list[dict[str, Any]]], client: MagicMock | None = None) -> MagicMock:
    """get_paginator(operation).paginate()가 주어진 페이지를 반환하는 MagicMock client"""
    client = client or MagicMock()

    def get_paginator(operation: str):
        paginator = MagicMock()
        pages = pages_by_operation.get(operation, [{}])
        if isinstance(pages, Exception):
            paginator.paginate.side_effect = pages
        else:
            paginator.paginate.return_value = iter(pages)
        return paginator

    client.get_paginator.side_effect = get_paginator
    return client


@pytest.fixture
def client_error() -> Callable[..., ClientError]:
    return make_client_error


@pytest.fixture
def region_clients() -> Callable[..., RegionClients]:
    """서비스 client를 주입한 RegionClients 생성"""

    def factory(region: str = "us-east-1", **clients: Any) -> RegionClients:
        return RegionClients(region, clients=clients)

    return factory


@pytest.fixture
def metrics_stub() -> Callable[[dict[str, Any]], MagicMock]:
    """메트릭 이름별 결과(dict) 또는 예외를 돌려주는 MetricsFetcher 대역

    결과에 없는 메트릭은 빈 dict를 반환합니다.
    """

    def factory(values: dict[str, Any]) -> MagicMock:
        fetcher = MagicMock()

        def fetch(namespace, metric_name, dimension_name, resource_ids, lookback_days):
            value = values.get(metric_name, {})
            if isinstance(value, Exception):
                raise value
            return {rid: v for rid, v in value.items() if rid in resource_ids}

        fetcher.fetch_sum.side_effect = fetch
        fetcher.fetch_average.side_effect = fetch
        return fetcher

    return factory


@pytest.fixture
def metrics_failure() -> Callable[[str], MetricsError]:
    def factory(metric_name: str = "CPUUtilization") -> MetricsError:
        return MetricsError("AWS/Test", metric_name, cause=make_client_error("Throttling"))

    return factory


@pytest.fixture
def paginated_client() -> Callable[..., MagicMock]:
    return paginator_client
