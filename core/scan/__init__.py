"""
core/scan - 스캔 엔진

리전/스캐너 2단계 제한 동시성 스캔과 결과 병합을 담당합니다.
"""

from .accumulator import ResultAccumulator
from .orchestrator import DEFAULT_REGION_CONCURRENCY, MultiRegionScanner
from .region import REGION_SCANNER_CONCURRENCY, RegionScanner
from .session import AWSClient, RegionClients
from .types import (
    ExcludeConfig,
    Finding,
    FindingKind,
    ResourceType,
    ScanConfig,
    ScanProgress,
    ScanResult,
    Severity,
    name_from_tags,
    tags_to_dict,
)

__all__ = [
    "AWSClient",
    "RegionClients",
    "RegionScanner",
    "MultiRegionScanner",
    "ResultAccumulator",
    "DEFAULT_REGION_CONCURRENCY",
    "REGION_SCANNER_CONCURRENCY",
    "ExcludeConfig",
    "Finding",
    "FindingKind",
    "ResourceType",
    "ScanConfig",
    "ScanProgress",
    "ScanResult",
    "Severity",
    "name_from_tags",
    "tags_to_dict",
]
