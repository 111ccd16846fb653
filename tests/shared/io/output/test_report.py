"""
tests/shared/io/output/test_report.py - 리포트 출력 테스트
"""

import io
import json
from datetime import datetime, timezone

import pytest

from core.analysis import analyze
from core.exceptions import ConfigError
from core.scan.types import Finding, FindingKind, ResourceType, ScanResult, Severity
from shared.io.output import REPORT_FORMATS, ReportData, compute_target_hash, get_reporter
from shared.io.output.report import RULES


def _finding(resource_id: str, cost: float, region: str = "us-east-1", **kwargs) -> Finding:
    defaults = {
        "kind": FindingKind.DETACHED_EBS,
        "severity": Severity.HIGH,
        "resource_type": ResourceType.EBS,
        "message": "볼륨이 연결되지 않음",
    }
    defaults.update(kwargs)
    return Finding(resource_id=resource_id, region=region, estimated_monthly_waste=cost, **defaults)


@pytest.fixture
def report_data():
    result = ScanResult(
        findings=[
            _finding("vol-small", 2.0),
            _finding("vol-big", 80.0, resource_name="data"),
            _finding(
                "sg-1",
                0.0,
                region="eu-west-1",
                kind=FindingKind.UNUSED_SECURITY_GROUP,
                severity=Severity.LOW,
                resource_type=ResourceType.SECURITY_GROUP,
                message="사용되지 않는 보안 그룹",
                metadata={"group_name": "old"},
            ),
        ],
        errors=["eu-west-1/rds: AccessDenied"],
        resources_scanned=12,
        regions_scanned=2,
    )
    data = ReportData.from_analysis(
        analyze(result, 0.0),
        version="0.1.0",
        regions=["us-east-1", "eu-west-1"],
        idle_days=7,
        stale_days=90,
        min_monthly_cost=0.0,
        profile="dev",
    )
    data.timestamp = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    return data


def _render(fmt: str, data: ReportData) -> str:
    buf = io.StringIO()
    get_reporter(fmt).generate(data, buf)
    return buf.getvalue()


class TestJSONReport:
    """JSON 출력 테스트"""

    def test_structure(self, report_data):
        doc = json.loads(_render("json", report_data))

        assert list(doc)[:7] == ["tool", "version", "timestamp", "target", "config", "findings", "summary"]
        assert doc["tool"] == "wscan"
        assert doc["timestamp"] == "2026-01-02T03:04:05Z"
        assert doc["target"]["uri_hash"] == compute_target_hash("dev", ["us-east-1", "eu-west-1"])
        assert doc["config"]["regions"] == ["us-east-1", "eu-west-1"]
        assert doc["errors"] == ["eu-west-1/rds: AccessDenied"]
        assert "partial" not in doc

    def test_findings_sorted_by_cost(self, report_data):
        doc = json.loads(_render("json", report_data))

        assert [f["resource_id"] for f in doc["findings"]] == ["vol-big", "vol-small", "sg-1"]
        assert doc["findings"][0]["resource_name"] == "data"
        assert doc["findings"][2]["metadata"] == {"group_name": "old"}

    def test_summary(self, report_data):
        summary = json.loads(_render("json", report_data))["summary"]

        assert summary["total_findings"] == 3
        assert summary["total_monthly_waste"] == 82.0
        assert summary["regions_scanned"] == 2

    def test_partial_flag(self, report_data):
        report_data.partial = True

        assert json.loads(_render("json", report_data))["partial"] is True

    def test_no_errors_key_when_clean(self, report_data):
        report_data.errors = []

        assert "errors" not in json.loads(_render("json", report_data))


class TestSARIFReport:
    """SARIF 출력 테스트"""

    def test_structure(self, report_data):
        doc = json.loads(_render("sarif", report_data))

        assert doc["version"] == "2.1.0"
        run = doc["runs"][0]
        assert run["tool"]["driver"]["name"] == "wscan"
        assert len(run["tool"]["driver"]["rules"]) == len(FindingKind)
        assert len(run["results"]) == 3

    def test_result_location_and_level(self, report_data):
        results = json.loads(_render("sarif", report_data))["runs"][0]["results"]

        first = results[0]
        assert first["ruleId"] == "DETACHED_EBS"
        assert first["level"] == "error"
        assert first["locations"][0]["physicalLocation"]["artifactLocation"]["uri"] == "aws://us-east-1/ebs/vol-big"
        assert results[2]["level"] == "note"

    def test_every_kind_has_rule(self):
        assert set(RULES) == set(FindingKind)


class TestSpectreHubReport:
    """SpectreHub envelope 출력 테스트"""

    def test_schema_first(self, report_data):
        doc = json.loads(_render("spectrehub", report_data))

        assert list(doc)[0] == "$schema"
        assert doc["$schema"] == "spectrehub/v1"
        assert doc["tool"] == "wscan"
        assert doc["target"] == {"type": "aws-account", "uri_hash": compute_target_hash("dev", ["us-east-1", "eu-west-1"])}

    def test_findings_and_summary(self, report_data):
        doc = json.loads(_render("spectrehub", report_data))

        assert "config" not in doc
        assert [f["resource_id"] for f in doc["findings"]] == ["vol-big", "vol-small", "sg-1"]
        assert doc["summary"]["total_monthly_waste"] == 82.0
        assert doc["errors"] == ["eu-west-1/rds: AccessDenied"]

    def test_partial_flag(self, report_data):
        report_data.partial = True

        assert json.loads(_render("spectrehub", report_data))["partial"] is True


class TestTextReport:
    """텍스트 출력 테스트"""

    def test_findings_then_errors(self, report_data):
        text = _render("text", report_data)

        assert "vol-big" in text
        assert "$80.00" in text
        assert "에러 1건:" in text
        assert text.index("vol-big") < text.index("eu-west-1/rds: AccessDenied")

    def test_no_findings(self, report_data):
        report_data.findings = []

        assert "낭비 리소스가 발견되지 않았습니다" in _render("text", report_data)

    def test_partial_title(self, report_data):
        report_data.partial = True

        assert "부분 결과" in _render("text", report_data)


class TestGetReporter:
    """get_reporter 테스트"""

    def test_case_insensitive(self):
        assert get_reporter("JSON").__class__.__name__ == "JSONReporter"

    def test_spectrehub_registered(self):
        assert "spectrehub" in REPORT_FORMATS
        assert get_reporter("spectrehub").__class__.__name__ == "SpectreHubReporter"

    def test_unknown_format(self):
        with pytest.raises(ConfigError):
            get_reporter("xml")
