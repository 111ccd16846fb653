"""
core/parallel/client.py - 스캔용 boto3 client 생성

리전 Session에서 만드는 모든 client는 같은 botocore Config를 사용합니다.

- 연결 풀: 리전 내부 동시 스캐너 수보다 크게 잡아 공유 client에서 연결 대기가 없도록 함
- 재시도: botocore standard 모드만 사용 (스캔 엔진 자체는 재시도하지 않음)
- 타임아웃: 응답 없는 엔드포인트가 리전 워커를 오래 붙잡지 않도록 제한

Example:
    ec2 = get_client(session, "ec2", region_name="ap-northeast-2")
"""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING, Any, cast

from botocore.config import Config

if TYPE_CHECKING:
    import boto3

SDK_MAX_ATTEMPTS = 3
CONNECT_TIMEOUT_SECONDS = 10
READ_TIMEOUT_SECONDS = 30
MAX_POOL_CONNECTIONS = 16  # REGION_SCANNER_CONCURRENCY(10) 이상


@lru_cache(maxsize=1)
def scan_client_config() -> Config:
    """스캔 client 공통 botocore Config"""
    return Config(
        retries={"max_attempts": SDK_MAX_ATTEMPTS, "mode": "standard"},
        connect_timeout=CONNECT_TIMEOUT_SECONDS,
        read_timeout=READ_TIMEOUT_SECONDS,
        max_pool_connections=MAX_POOL_CONNECTIONS,
    )


def get_client(session: boto3.Session, service_name: str, region_name: str | None = None) -> Any:
    """공통 Config가 적용된 boto3 client 생성

    Args:
        session: boto3 Session (리전마다 별도)
        service_name: AWS 서비스 이름 (ec2, cloudwatch, sqs 등)
        region_name: 리전 (None이면 세션 기본값)
    """
    return session.client(  # pyright: ignore[reportCallIssue]
        cast(Any, service_name),
        region_name=region_name,
        config=scan_client_config(),
    )
