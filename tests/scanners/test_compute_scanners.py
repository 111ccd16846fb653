"""
tests/scanners/test_compute_scanners.py - RDS / Lambda 스캐너 테스트
"""

import pytest

from core.exceptions import ScanError
from core.scan.types import ExcludeConfig, FindingKind, ScanConfig, Severity
from scanners.lambda_ import LambdaScanner
from scanners.rds import RDSScanner

_GIB = 1024**3


def _db(db_id, instance_class="db.t3.medium", status="available", multi_az=False):
    return {
        "DBInstanceIdentifier": db_id,
        "DBInstanceClass": instance_class,
        "DBInstanceStatus": status,
        "Engine": "postgres",
        "MultiAZ": multi_az,
    }


class TestRDSScanner:
    """RDSScanner 테스트"""

    def _scanner(self, region_clients, paginated_client, metrics_stub, instances, metrics):
        client = paginated_client({"describe_db_instances": [{"DBInstances": instances}]})
        return RDSScanner(region_clients(rds=client), metrics_stub(metrics))

    def test_low_cpu_idle(self, region_clients, paginated_client, metrics_stub):
        scanner = self._scanner(
            region_clients,
            paginated_client,
            metrics_stub,
            [_db("db-idle"), _db("db-busy")],
            {
                "CPUUtilization": {"db-idle": 1.0, "db-busy": 40.0},
                "DatabaseConnections": {"db-idle": 3.0, "db-busy": 900.0},
            },
        )

        result = scanner.scan(ScanConfig())

        assert [f.resource_id for f in result.findings] == ["db-idle"]
        assert result.findings[0].kind is FindingKind.IDLE_RDS
        assert result.findings[0].severity is Severity.HIGH

    def test_zero_connections_idle(self, region_clients, paginated_client, metrics_stub):
        """CPU가 높아도 연결 0이면 유휴"""
        scanner = self._scanner(
            region_clients,
            paginated_client,
            metrics_stub,
            [_db("db-batch")],
            {"CPUUtilization": {"db-batch": 30.0}},
        )

        result = scanner.scan(ScanConfig())

        assert len(result.findings) == 1
        assert result.findings[0].metadata["total_connections"] == 0.0

    def test_multi_az_cost_doubled(self, region_clients, paginated_client, metrics_stub):
        scanner = self._scanner(
            region_clients,
            paginated_client,
            metrics_stub,
            [_db("db-single"), _db("db-multi", multi_az=True)],
            {"CPUUtilization": {"db-single": 1.0, "db-multi": 1.0}},
        )

        costs = {f.resource_id: f.estimated_monthly_waste for f in scanner.scan(ScanConfig()).findings}

        assert costs["db-multi"] == pytest.approx(costs["db-single"] * 2, abs=0.01)

    def test_high_memory_not_idle(self, region_clients, paginated_client, metrics_stub):
        """db.t3.medium(4 GiB)에서 여유 메모리 1 GiB면 사용률 75%"""
        scanner = self._scanner(
            region_clients,
            paginated_client,
            metrics_stub,
            [_db("db-cache")],
            {"CPUUtilization": {"db-cache": 1.0}, "FreeableMemory": {"db-cache": 1.0 * _GIB}},
        )

        assert scanner.scan(ScanConfig()).findings == []

    def test_not_available_skipped(self, region_clients, paginated_client, metrics_stub):
        scanner = self._scanner(
            region_clients, paginated_client, metrics_stub, [_db("db-stopped", status="stopped")], {}
        )

        result = scanner.scan(ScanConfig())

        assert result.findings == []
        assert result.resources_scanned == 1

    def test_cpu_failure_no_findings(self, region_clients, paginated_client, metrics_stub, metrics_failure):
        scanner = self._scanner(
            region_clients,
            paginated_client,
            metrics_stub,
            [_db("db-1")],
            {"CPUUtilization": metrics_failure("CPUUtilization")},
        )

        assert scanner.scan(ScanConfig()).findings == []

    def test_connections_failure_uses_cpu_only(self, region_clients, paginated_client, metrics_stub, metrics_failure):
        """연결 수 조회 실패 시 CPU 기준만 적용"""
        scanner = self._scanner(
            region_clients,
            paginated_client,
            metrics_stub,
            [_db("db-low"), _db("db-high")],
            {
                "CPUUtilization": {"db-low": 1.0, "db-high": 50.0},
                "DatabaseConnections": metrics_failure("DatabaseConnections"),
            },
        )

        assert [f.resource_id for f in scanner.scan(ScanConfig()).findings] == ["db-low"]

    def test_excluded_by_tag(self, region_clients, paginated_client, metrics_stub):
        db = _db("db-prod")
        db["TagList"] = [{"Key": "Environment", "Value": "prod"}]
        scanner = self._scanner(region_clients, paginated_client, metrics_stub, [db], {"CPUUtilization": {"db-prod": 0.1}})
        config = ScanConfig(exclude=ExcludeConfig.from_lists(tags=["Environment=prod"]))

        assert scanner.scan(config).findings == []


class TestLambdaScanner:
    """LambdaScanner 테스트"""

    def _scanner(self, region_clients, paginated_client, metrics_stub, functions, metrics):
        client = paginated_client({"list_functions": [{"Functions": functions}]})
        return LambdaScanner(region_clients(**{"lambda": client}), metrics_stub(metrics))

    def test_no_invocations(self, region_clients, paginated_client, metrics_stub):
        functions = [
            {"FunctionName": "unused", "FunctionArn": "arn:fn:unused", "Runtime": "python3.12", "MemorySize": 128},
            {"FunctionName": "used", "FunctionArn": "arn:fn:used"},
        ]
        scanner = self._scanner(region_clients, paginated_client, metrics_stub, functions, {"Invocations": {"used": 42.0}})

        result = scanner.scan(ScanConfig())

        assert result.resources_scanned == 2
        assert [f.resource_id for f in result.findings] == ["unused"]
        finding = result.findings[0]
        assert finding.kind is FindingKind.IDLE_LAMBDA
        assert finding.severity is Severity.LOW
        assert finding.estimated_monthly_waste == 0.0
        assert finding.metadata["memory_mb"] == 128

    def test_metrics_failure_no_findings(self, region_clients, paginated_client, metrics_stub, metrics_failure):
        scanner = self._scanner(
            region_clients,
            paginated_client,
            metrics_stub,
            [{"FunctionName": "fn"}],
            {"Invocations": metrics_failure("Invocations")},
        )

        assert scanner.scan(ScanConfig()).findings == []

    def test_excluded_by_name(self, region_clients, paginated_client, metrics_stub):
        scanner = self._scanner(region_clients, paginated_client, metrics_stub, [{"FunctionName": "keep"}], {})
        config = ScanConfig(exclude=ExcludeConfig.from_lists(["keep"]))

        assert scanner.scan(config).findings == []

    def test_listing_failure(self, region_clients, paginated_client, metrics_stub, client_error):
        client = paginated_client({"list_functions": client_error("AccessDeniedException")})
        scanner = LambdaScanner(region_clients(**{"lambda": client}), metrics_stub({}))

        with pytest.raises(ScanError):
            scanner.scan(ScanConfig())
