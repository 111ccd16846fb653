"""
tests/cli/test_cli_app.py - CLI 명령 테스트
"""

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import NoCredentialsError, ProfileNotFound
from click.testing import CliRunner

from cli.app import (
    EXIT_CONFIG_ERROR,
    EXIT_TIMEOUT,
    POLICY_FILENAME,
    build_scan_config,
    cli,
    error_hint,
    resolve_regions,
)
from core.config import FileConfig
from core.exceptions import ScanCancelledError
from core.scan.types import Finding, FindingKind, ResourceType, ScanResult, Severity


def _result(regions_scanned: int = 1, errors=None) -> ScanResult:
    return ScanResult(
        findings=[
            Finding(
                kind=FindingKind.UNUSED_EIP,
                severity=Severity.MEDIUM,
                resource_type=ResourceType.EIP,
                resource_id="eipalloc-1",
                region="us-east-1",
                message="unused",
                estimated_monthly_waste=3.65,
            ),
            Finding(
                kind=FindingKind.UNUSED_SECURITY_GROUP,
                severity=Severity.LOW,
                resource_type=ResourceType.SECURITY_GROUP,
                resource_id="sg-1",
                region="us-east-1",
                message="unused",
            ),
        ],
        errors=list(errors or []),
        resources_scanned=5,
        regions_scanned=regions_scanned,
    )


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def fake_aws():
    with patch("cli.app.AWSClient") as aws_cls:
        aws_cls.return_value.list_enabled_regions.return_value = ["eu-west-1", "us-east-1"]
        yield aws_cls


@pytest.fixture
def fake_scanner():
    with patch("cli.app.MultiRegionScanner") as scanner_cls:
        scanner_cls.return_value.scan_all.return_value = _result()
        yield scanner_cls


class TestScanCommand:
    """scan 명령 테스트"""

    def test_json_report(self, runner, fake_aws, fake_scanner):
        """JSON 리포트는 최소 비용 필터 적용 후 저장"""
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["scan", "-r", "us-east-1", "-f", "json", "-o", "out.json", "--no-progress"])
            report = json.loads(Path("out.json").read_text(encoding="utf-8"))

        assert result.exit_code == 0, result.output
        assert [f["resource_id"] for f in report["findings"]] == ["eipalloc-1"]
        assert report["config"]["regions"] == ["us-east-1"]
        assert "partial" not in report
        fake_aws.return_value.list_enabled_regions.assert_not_called()

    def test_cli_overrides_file_config(self, runner, fake_aws, fake_scanner):
        """CLI 옵션이 설정 파일보다 우선, 제외 규칙은 병합"""
        with runner.isolated_filesystem():
            Path(".wscan.yaml").write_text(
                "idle_days: 14\nstale_days: 60\nregions: [ap-northeast-2]\nexclude:\n  resource_ids: [i-file]\n",
                encoding="utf-8",
            )
            result = runner.invoke(
                cli,
                ["scan", "--idle-days", "3", "--exclude-id", "i-cli", "-f", "json", "-o", "out.json", "--no-progress"],
            )
            report = json.loads(Path("out.json").read_text(encoding="utf-8"))

        assert result.exit_code == 0, result.output
        args = fake_scanner.call_args
        regions, config = args.args[1], args.args[2]
        assert regions == ["ap-northeast-2"]
        assert config.idle_days == 3
        assert config.stale_days == 60
        assert config.exclude.ids == frozenset({"i-file", "i-cli"})
        assert report["config"]["idle_days"] == 3

    def test_all_enabled_regions_by_default(self, runner, fake_aws, fake_scanner):
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["scan", "-f", "json", "-o", "out.json", "--no-progress"])

        assert result.exit_code == 0, result.output
        assert fake_scanner.call_args.args[1] == ["eu-west-1", "us-east-1"]

    def test_sarif_report(self, runner, fake_aws, fake_scanner):
        with runner.isolated_filesystem():
            result = runner.invoke(
                cli, ["scan", "-r", "us-east-1", "-f", "sarif", "-o", "out.sarif", "--min-monthly-cost", "0"]
            )
            doc = json.loads(Path("out.sarif").read_text(encoding="utf-8"))

        assert result.exit_code == 0, result.output
        assert len(doc["runs"][0]["results"]) == 2

    def test_spectrehub_report(self, runner, fake_aws, fake_scanner):
        with runner.isolated_filesystem():
            result = runner.invoke(
                cli, ["scan", "-r", "us-east-1", "-f", "spectrehub", "-o", "out.json", "--min-monthly-cost", "0"]
            )
            doc = json.loads(Path("out.json").read_text(encoding="utf-8"))

        assert result.exit_code == 0, result.output
        assert doc["$schema"] == "spectrehub/v1"
        assert len(doc["findings"]) == 2

    def test_timeout_writes_partial_report(self, runner, fake_aws, fake_scanner):
        """타임아웃이면 부분 결과 리포트와 종료 코드 2"""
        fake_scanner.return_value.scan_all.side_effect = ScanCancelledError(
            "스캔 타임아웃 초과", partial_result=_result(regions_scanned=2, errors=["eu-west-1: 중단"])
        )

        with runner.isolated_filesystem():
            result = runner.invoke(
                cli,
                ["scan", "-r", "us-east-1", "-r", "eu-west-1", "-f", "json", "-o", "out.json", "--no-progress"],
            )
            report = json.loads(Path("out.json").read_text(encoding="utf-8"))

        assert result.exit_code == EXIT_TIMEOUT
        assert report["partial"] is True
        assert report["summary"]["regions_scanned"] == 2
        assert report["errors"] == ["eu-west-1: 중단"]

    def test_invalid_config_file(self, runner, fake_aws, fake_scanner):
        with runner.isolated_filesystem():
            Path(".wscan.yaml").write_text("idle_days: many\n", encoding="utf-8")
            result = runner.invoke(cli, ["scan", "--no-progress"])

        assert result.exit_code == EXIT_CONFIG_ERROR
        fake_scanner.assert_not_called()

    def test_invalid_timeout(self, runner, fake_aws, fake_scanner):
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["scan", "--timeout", "soon", "--no-progress"])

        assert result.exit_code == EXIT_CONFIG_ERROR

    def test_unknown_profile(self, runner, fake_scanner):
        with patch("cli.app.AWSClient", side_effect=ProfileNotFound(profile="missing")):
            with runner.isolated_filesystem():
                result = runner.invoke(cli, ["scan", "-p", "missing", "--no-progress"])

        assert result.exit_code == EXIT_CONFIG_ERROR

    def test_region_listing_failure(self, runner, fake_aws, fake_scanner):
        fake_aws.return_value.list_enabled_regions.side_effect = NoCredentialsError()

        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["scan", "--no-progress"])

        assert result.exit_code == EXIT_CONFIG_ERROR

    def test_invalid_format_rejected(self, runner):
        result = runner.invoke(cli, ["scan", "-f", "xml"])

        assert result.exit_code == 2
        assert "xml" in result.output


class TestInitCommand:
    """init 명령 테스트"""

    def test_creates_files(self, runner):
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["init"])
            policy = json.loads(Path(POLICY_FILENAME).read_text(encoding="utf-8"))
            config_exists = Path(".wscan.yaml").exists()

        assert result.exit_code == 0, result.output
        assert config_exists
        actions = policy["Statement"][0]["Action"]
        assert "cloudwatch:GetMetricData" in actions
        assert "ec2:DescribeRegions" in actions

    def test_does_not_overwrite_without_force(self, runner):
        with runner.isolated_filesystem():
            Path(".wscan.yaml").write_text("idle_days: 3\n", encoding="utf-8")
            runner.invoke(cli, ["init"])
            kept = Path(".wscan.yaml").read_text(encoding="utf-8")
            runner.invoke(cli, ["init", "--force"])
            replaced = Path(".wscan.yaml").read_text(encoding="utf-8")

        assert kept == "idle_days: 3\n"
        assert replaced != kept


class TestHelpers:
    """CLI 헬퍼 테스트"""

    def test_build_scan_config_defaults(self):
        config = build_scan_config(FileConfig())

        assert config.idle_days == 7
        assert config.min_monthly_cost == 1.0
        assert config.exclude.ids == frozenset()

    def test_build_scan_config_merges_tags(self):
        config = build_scan_config(FileConfig(exclude_tags=["Team=data"]), exclude_tags=("KeepAlive",))

        assert dict(config.exclude.tags) == {"Team": "data", "KeepAlive": None}

    def test_resolve_regions_dedup(self):
        aws = MagicMock()

        assert resolve_regions(aws, ("us-east-1", "us-east-1", "eu-west-1"), False, FileConfig()) == [
            "us-east-1",
            "eu-west-1",
        ]

    def test_resolve_regions_all_regions_flag_wins(self):
        aws = MagicMock()
        aws.list_enabled_regions.return_value = ["a", "b"]

        assert resolve_regions(aws, ("us-east-1",), True, FileConfig(regions=["c"])) == ["a", "b"]

    @pytest.mark.parametrize(
        "error,expected",
        [
            (NoCredentialsError(), "자격 증명"),
            (RuntimeError("An error occurred (ExpiredToken)"), "만료"),
            (RuntimeError("UnauthorizedOperation"), POLICY_FILENAME),
            (RuntimeError("something else"), None),
        ],
    )
    def test_error_hint(self, error, expected):
        hint = error_hint(error)

        if expected is None:
            assert hint is None
        else:
            assert expected in hint
