"""
core/scan/region.py - 단일 리전 스캔 오케스트레이터

리전 하나의 모든 스캐너를 내부 풀(최대 REGION_SCANNER_CONCURRENCY개)에서
동시에 실행하고 결과를 하나의 ScanResult로 병합합니다.

실패 격리:
    스캐너 하나의 실패는 "<region>/<resource_type>: <원인>" 에러 문자열로
    기록되고 나머지 스캐너는 계속 실행됩니다.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from core.exceptions import ScanCancelledError
from core.parallel import CancelToken, categorize_error, describe_error, run_bounded

from .accumulator import ResultAccumulator
from .types import ScanConfig, ScanProgress, ScanResult

if TYPE_CHECKING:
    from scanners.base import ResourceScanner

    from .session import AWSClient, RegionClients

logger = logging.getLogger(__name__)

# 리전당 동시 실행 스캐너 수
REGION_SCANNER_CONCURRENCY = 10

ScannerFactory = Callable[["RegionClients", "CancelToken | None"], Sequence["ResourceScanner"]]
ProgressCallback = Callable[[ScanProgress], None]


def emit_progress(
    callback: ProgressCallback | None,
    region: str,
    scanner: str,
    message: str,
) -> None:
    """진행 이벤트 전달 (콜백 예외는 스캔에 영향을 주지 않음)"""
    if callback is None:
        return
    event = ScanProgress(region=region, scanner=scanner, message=message, timestamp=datetime.now(timezone.utc))
    try:
        callback(event)
    except Exception as e:
        logger.warning(f"진행 콜백 오류 무시: {e}")


def _default_factory(clients: RegionClients, token: CancelToken | None) -> Sequence[ResourceScanner]:
    # scanners 패키지가 core.scan을 import하므로 지연 import
    from scanners import build_scanners

    return build_scanners(clients, token)


class RegionScanner:
    """리전 하나의 스캐너 묶음 실행기

    Args:
        client: 리전별 client를 만드는 AWSClient
        config: 스캔 설정
        scanner_factory: (RegionClients, token) -> 스캐너 목록. None이면 기본 레지스트리
        on_progress: 진행 이벤트 콜백
        token: 취소 토큰
    """

    def __init__(
        self,
        client: AWSClient,
        config: ScanConfig,
        scanner_factory: ScannerFactory | None = None,
        on_progress: ProgressCallback | None = None,
        token: CancelToken | None = None,
    ):
        self.client = client
        self.config = config
        self.scanner_factory = scanner_factory or _default_factory
        self.on_progress = on_progress
        self.token = token

    def scan_region(self, region: str) -> ScanResult:
        """리전의 모든 스캐너 실행

        Returns:
            리전 내 모든 스캐너 결과를 병합한 ScanResult (regions_scanned는 0)

        Raises:
            ScanCancelledError: 스캔이 취소된 경우
        """
        logger.info(f"{region}: 스캔 시작")
        if self.token is not None:
            self.token.raise_if_cancelled()

        clients = self.client.for_region(region)
        scanners = list(self.scanner_factory(clients, self.token))
        acc = ResultAccumulator()

        def run_one(scanner: ResourceScanner) -> None:
            resource_type = scanner.resource_type.value
            emit_progress(self.on_progress, region, resource_type, "스캔 중")
            try:
                result = scanner.scan(self.config)
            except ScanCancelledError:
                raise
            except Exception as e:
                logger.warning(f"{region}/{resource_type}: 스캐너 실패 [{categorize_error(e).value}]: {describe_error(e)}")
                acc.add_error(f"{region}/{resource_type}: {describe_error(e)}")
                emit_progress(self.on_progress, region, resource_type, "실패")
                return
            acc.merge(result)
            logger.debug(f"{region}/{resource_type}: 발견 {len(result.findings)}건, 리소스 {result.resources_scanned}개")
            emit_progress(self.on_progress, region, resource_type, f"완료 (발견 {len(result.findings)}건)")

        outcomes = run_bounded(
            scanners,
            run_one,
            max_workers=REGION_SCANNER_CONCURRENCY,
            token=self.token,
            name=f"scan-{region}",
        )

        for outcome in outcomes:
            if isinstance(outcome.error, ScanCancelledError):
                raise outcome.error
        if self.token is not None:
            self.token.raise_if_cancelled()

        result = acc.snapshot()
        logger.info(
            f"{region}: 스캔 완료 (리소스 {result.resources_scanned}개, "
            f"발견 {len(result.findings)}건, 에러 {len(result.errors)}건)"
        )
        return result
