"""
scanners - 리소스 유형별 낭비 탐지 스캐너

SCANNER_REGISTRY 순서대로 리전마다 스캐너 인스턴스를 생성합니다.
각 스캐너는 리전 전용 client와 CloudWatch MetricsFetcher에 바인딩됩니다.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from shared.aws.metrics import MetricsFetcher

from .base import MetricResourceScanner, ResourceScanner
from .ebs import EBSScanner
from .ec2 import EC2Scanner
from .eip import EIPScanner
from .elb import ELBScanner
from .kinesis import FirehoseScanner, KinesisScanner
from .lambda_ import LambdaScanner
from .nat_gateway import NATGatewayScanner
from .rds import RDSScanner
from .security_group import SecurityGroupScanner
from .snapshot import SnapshotScanner
from .sns import SNSScanner
from .sqs import SQSScanner

if TYPE_CHECKING:
    from core.parallel.cancel import CancelToken
    from core.scan.session import RegionClients

SCANNER_REGISTRY: tuple[type[ResourceScanner], ...] = (
    EC2Scanner,
    EBSScanner,
    EIPScanner,
    SnapshotScanner,
    SecurityGroupScanner,
    ELBScanner,
    NATGatewayScanner,
    RDSScanner,
    LambdaScanner,
    SQSScanner,
    SNSScanner,
    KinesisScanner,
    FirehoseScanner,
)


def build_scanners(clients: RegionClients, token: CancelToken | None = None) -> list[ResourceScanner]:
    """리전 하나에 대한 스캐너 목록 생성

    CloudWatch client와 MetricsFetcher는 해당 리전의 모든 스캐너가 공유합니다.
    취소 토큰은 MetricsFetcher와 모든 스캐너에 전달됩니다.
    """
    metrics = MetricsFetcher(clients.client("cloudwatch"), token=token)
    scanners: list[ResourceScanner] = []
    for scanner_cls in SCANNER_REGISTRY:
        if issubclass(scanner_cls, MetricResourceScanner):
            scanners.append(scanner_cls(clients, metrics, token=token))
        else:
            scanners.append(scanner_cls(clients, token=token))
    return scanners


__all__ = [
    "SCANNER_REGISTRY",
    "build_scanners",
    "ResourceScanner",
    "MetricResourceScanner",
    "EC2Scanner",
    "EBSScanner",
    "EIPScanner",
    "SnapshotScanner",
    "SecurityGroupScanner",
    "ELBScanner",
    "NATGatewayScanner",
    "RDSScanner",
    "LambdaScanner",
    "SQSScanner",
    "SNSScanner",
    "KinesisScanner",
    "FirehoseScanner",
]
