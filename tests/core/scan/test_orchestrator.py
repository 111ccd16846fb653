"""
tests/core/scan/test_orchestrator.py - MultiRegionScanner 테스트
"""

import threading
import time
from unittest.mock import MagicMock

import pytest

from core.exceptions import ScanCancelledError
from core.parallel.cancel import CancelToken
from core.scan.orchestrator import DEFAULT_REGION_CONCURRENCY, MultiRegionScanner
from core.scan.types import Finding, FindingKind, ResourceType, ScanConfig, ScanResult, Severity


def _region_result(region: str, findings: int = 1, scanned: int = 2, errors=None) -> ScanResult:
    return ScanResult(
        findings=[
            Finding(
                kind=FindingKind.DETACHED_EBS,
                severity=Severity.HIGH,
                resource_type=ResourceType.EBS,
                resource_id=f"vol-{region}-{i}",
                region=region,
                message="detached",
                estimated_monthly_waste=8.0,
            )
            for i in range(findings)
        ],
        errors=list(errors or []),
        resources_scanned=scanned,
    )


class FakeRegionScanner:
    """리전별 결과/예외를 돌려주는 RegionScanner 대역"""

    def __init__(self, outcomes=None, delay=0.0, on_region=None):
        self.outcomes = outcomes or {}
        self.delay = delay
        self.on_region = on_region
        self.lock = threading.Lock()
        self.active = 0
        self.peak = 0
        self.calls = []

    def scan_region(self, region):
        with self.lock:
            self.calls.append(region)
            self.active += 1
            self.peak = max(self.peak, self.active)
        try:
            if self.on_region:
                self.on_region(region)
            if self.delay:
                time.sleep(self.delay)
            outcome = self.outcomes.get(region)
            if isinstance(outcome, BaseException):
                raise outcome
            return outcome or _region_result(region)
        finally:
            with self.lock:
                self.active -= 1


def _scanner(regions, region_scanner, **kwargs):
    return MultiRegionScanner(MagicMock(), regions, ScanConfig(), region_scanner=region_scanner, **kwargs)


class TestMultiRegionScanner:
    """MultiRegionScanner 테스트"""

    def test_empty_regions(self):
        """리전이 없으면 빈 결과, 에러 없음"""
        result = _scanner([], FakeRegionScanner()).scan_all()

        assert result.findings == []
        assert result.errors == []
        assert result.regions_scanned == 0

    def test_merges_all_regions(self):
        """모든 리전 결과 병합"""
        regions = ["us-east-1", "us-west-2", "eu-west-1"]

        result = _scanner(regions, FakeRegionScanner()).scan_all()

        assert len(result.findings) == 3
        assert result.resources_scanned == 6
        assert result.regions_scanned == 3

    def test_region_failure_recorded(self):
        """리전 실패는 '<region>: <원인>' 에러 1건, 시도한 리전 수는 유지"""
        fake = FakeRegionScanner({"us-west-2": RuntimeError("endpoint unreachable")})

        result = _scanner(["us-west-2"], fake).scan_all()

        assert result.errors == ["us-west-2: endpoint unreachable"]
        assert result.regions_scanned == 1
        assert result.findings == []

    def test_region_failure_log_includes_category(self, caplog):
        """리전 실패 로그에 에러 카테고리 표시"""
        fake = FakeRegionScanner({"us-west-2": ConnectionError("connection reset")})

        with caplog.at_level("WARNING", logger="core.scan.orchestrator"):
            _scanner(["us-west-2"], fake).scan_all()

        assert "us-west-2: 리전 스캔 실패 [network]" in caplog.text

    def test_one_region_failure_others_continue(self):
        """한 리전 실패가 다른 리전에 영향 없음"""
        fake = FakeRegionScanner({"ap-northeast-2": RuntimeError("boom")})

        result = _scanner(["us-east-1", "ap-northeast-2", "eu-west-1"], fake).scan_all()

        assert len(result.findings) == 2
        assert result.errors == ["ap-northeast-2: boom"]
        assert result.regions_scanned == 3

    def test_scanner_errors_pass_through(self):
        """리전 결과의 스캐너 에러 문자열 유지"""
        fake = FakeRegionScanner({"us-east-1": _region_result("us-east-1", errors=["us-east-1/rds: denied"])})

        result = _scanner(["us-east-1"], fake).scan_all()

        assert result.errors == ["us-east-1/rds: denied"]

    @pytest.mark.parametrize("concurrency", [None, 0, -3])
    def test_non_positive_concurrency_uses_default(self, concurrency):
        """0 이하 동시성은 기본값"""
        scanner = _scanner(["us-east-1"], FakeRegionScanner(), concurrency=concurrency)

        assert scanner.concurrency == DEFAULT_REGION_CONCURRENCY
        assert scanner.scan_all().regions_scanned == 1

    def test_outer_concurrency_limit(self):
        """동시 스캔 리전 수가 concurrency 이하"""
        fake = FakeRegionScanner(delay=0.03)
        regions = [f"region-{i}" for i in range(8)]

        _scanner(regions, fake, concurrency=2).scan_all()

        assert 1 <= fake.peak <= 2
        assert sorted(fake.calls) == sorted(regions)

    def test_same_content_regardless_of_completion_order(self):
        """완료 순서와 무관하게 같은 내용"""
        regions = ["a", "b", "c", "d"]

        first = _scanner(regions, FakeRegionScanner(), concurrency=1).scan_all()
        second = _scanner(regions, FakeRegionScanner(), concurrency=4).scan_all()

        assert sorted(f.resource_id for f in first.findings) == sorted(f.resource_id for f in second.findings)
        assert first.resources_scanned == second.resources_scanned

    def test_cancellation_returns_partial_result(self):
        """취소 시 ScanCancelledError와 부분 결과"""
        token = CancelToken()
        release = threading.Event()

        def on_region(region):
            if region == "slow":
                token.cancel("스캔 타임아웃 초과")
                release.wait(1)

        fake = FakeRegionScanner(on_region=on_region)
        scanner = _scanner(["fast", "slow"], fake, concurrency=1, token=token)

        with pytest.raises(ScanCancelledError) as exc_info:
            scanner.scan_all()
        release.set()

        partial = exc_info.value.partial_result
        assert partial is not None
        assert partial.regions_scanned == 2
        assert [f.region for f in partial.findings] == ["fast"]
        assert "타임아웃" in str(exc_info.value)

    def test_timeout_token(self):
        """타임아웃 토큰이 만료되면 부분 결과와 함께 중단"""
        token = CancelToken.with_timeout(0.05)
        fake = FakeRegionScanner(delay=0.5)

        with pytest.raises(ScanCancelledError) as exc_info:
            _scanner(["us-east-1"], fake, token=token).scan_all()

        assert exc_info.value.partial_result.regions_scanned == 1
        assert exc_info.value.partial_result.findings == []
