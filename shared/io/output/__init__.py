"""
shared/io/output - 스캔 리포트 출력
"""

from .report import (
    REPORT_FORMATS,
    JSONReporter,
    ReportData,
    Reporter,
    SARIFReporter,
    SpectreHubReporter,
    TextReporter,
    build_sarif,
    build_spectrehub,
    compute_target_hash,
    get_reporter,
)

__all__ = [
    "REPORT_FORMATS",
    "ReportData",
    "Reporter",
    "TextReporter",
    "JSONReporter",
    "SARIFReporter",
    "SpectreHubReporter",
    "build_sarif",
    "build_spectrehub",
    "compute_target_hash",
    "get_reporter",
]
