"""
core/scan/orchestrator.py - 멀티 리전 스캔 오케스트레이터

리전마다 RegionScanner를 외부 풀(기본 DEFAULT_REGION_CONCURRENCY개)에서
실행하고 모든 리전 결과를 하나의 ScanResult로 병합합니다.

동시성 구조:
    외부 풀: 리전 단위 (concurrency)
    내부 풀: 리전 내 스캐너 단위 (REGION_SCANNER_CONCURRENCY)
    최대 동시 스캐너 수 = concurrency * REGION_SCANNER_CONCURRENCY

Example:
    aws = AWSClient(profile="dev")
    scanner = MultiRegionScanner(aws, ["us-east-1", "ap-northeast-2"], ScanConfig())
    result = scanner.scan_all()
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from core.exceptions import ScanCancelledError
from core.parallel import CancelToken, categorize_error, describe_error, resolve_concurrency, run_bounded

from .accumulator import ResultAccumulator
from .region import ProgressCallback, RegionScanner, ScannerFactory, emit_progress
from .types import ScanConfig, ScanResult

if TYPE_CHECKING:
    from .session import AWSClient

logger = logging.getLogger(__name__)

# 동시 스캔 리전 수 기본값
DEFAULT_REGION_CONCURRENCY = 4


class MultiRegionScanner:
    """여러 리전 동시 스캔

    Args:
        client: AWSClient
        regions: 스캔할 리전 목록
        config: 스캔 설정
        concurrency: 동시 리전 수 (None 또는 0 이하이면 기본값)
        scanner_factory: 리전별 스캐너 생성 함수 (테스트 주입용)
        on_progress: 진행 이벤트 콜백
        token: 취소 토큰 (None이면 취소 불가 토큰 생성)
        region_scanner: 미리 구성한 RegionScanner (테스트 주입용)
    """

    def __init__(
        self,
        client: AWSClient,
        regions: Sequence[str],
        config: ScanConfig,
        concurrency: int | None = None,
        scanner_factory: ScannerFactory | None = None,
        on_progress: ProgressCallback | None = None,
        token: CancelToken | None = None,
        region_scanner: RegionScanner | None = None,
    ):
        self.regions = list(regions)
        self.config = config
        self.concurrency = resolve_concurrency(concurrency, DEFAULT_REGION_CONCURRENCY)
        self.on_progress = on_progress
        self.token = token or CancelToken()
        self.region_scanner = region_scanner or RegionScanner(
            client,
            config,
            scanner_factory=scanner_factory,
            on_progress=on_progress,
            token=self.token,
        )

    def scan_all(self) -> ScanResult:
        """모든 리전 스캔

        리전 하나의 실패는 "<region>: <원인>" 에러 문자열로 기록되고
        나머지 리전은 계속 스캔됩니다.

        Returns:
            병합된 ScanResult (regions_scanned = 요청한 리전 수)

        Raises:
            ScanCancelledError: 취소/타임아웃. partial_result에 그 시점까지의 결과
        """
        acc = ResultAccumulator()
        if not self.regions:
            return acc.snapshot()

        logger.info(f"{len(self.regions)}개 리전 스캔 시작 (동시 {self.concurrency}개)")

        def run_region(region: str) -> None:
            try:
                result = self.region_scanner.scan_region(region)
            except ScanCancelledError:
                raise
            except Exception as e:
                logger.warning(f"{region}: 리전 스캔 실패 [{categorize_error(e).value}]: {describe_error(e)}")
                acc.add_error(f"{region}: {describe_error(e)}")
                emit_progress(self.on_progress, region, "", "리전 실패")
                return
            acc.merge(result)

        try:
            outcomes = run_bounded(
                self.regions,
                run_region,
                max_workers=self.concurrency,
                token=self.token,
                name="region",
            )
            if any(isinstance(o.error, ScanCancelledError) for o in outcomes):
                self.token.cancel()
            self.token.raise_if_cancelled()
        except ScanCancelledError as e:
            acc.seal()
            acc.set_regions_scanned(len(self.regions))
            partial = acc.snapshot()
            reason = self.token.reason or str(e)
            logger.warning(
                f"스캔 중단: {reason} (부분 결과: 발견 {len(partial.findings)}건, 에러 {len(partial.errors)}건)"
            )
            raise ScanCancelledError(reason, partial_result=partial) from e

        acc.set_regions_scanned(len(self.regions))
        result = acc.snapshot()
        logger.info(
            f"스캔 완료: 리전 {result.regions_scanned}개, 리소스 {result.resources_scanned}개, "
            f"발견 {len(result.findings)}건, 에러 {len(result.errors)}건"
        )
        return result
