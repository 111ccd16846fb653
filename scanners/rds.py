"""
scanners/rds.py - 유휴 RDS 인스턴스 탐지

탐지 항목:
    - IDLE_RDS: available 상태이며 평균 CPU가 임계값 미만이거나 연결 수가 0인 인스턴스
      (FreeableMemory로 계산한 메모리 사용률이 높으면 유휴로 보지 않음)

메트릭 실패 정책 (degrade):
    - CPUUtilization 조회 실패: 발견 없이 종료
    - DatabaseConnections 조회 실패: 연결 수 기준을 적용하지 않고 CPU로만 판단
    - FreeableMemory 조회 실패: 메모리 없이 판단
"""

from __future__ import annotations

import logging
from typing import Any

from core.exceptions import MetricsError
from core.scan.types import FindingKind, ResourceType, ScanConfig, ScanResult, Severity, tags_to_dict
from shared.aws.pricing import monthly_rds_cost, rds_instance_memory_bytes

from .base import MetricResourceScanner

logger = logging.getLogger(__name__)

_DIMENSION = "DBInstanceIdentifier"


def _idle_message(avg_cpu: float, mem_pct: float | None, connections: float | None, idle_days: int) -> str:
    mem_suffix = f", 메모리 {mem_pct:.1f}%" if mem_pct is not None else ""
    if connections == 0:
        return f"{idle_days}일간 연결 0건, CPU {avg_cpu:.1f}%{mem_suffix}"
    return f"{idle_days}일간 CPU {avg_cpu:.1f}%{mem_suffix}"


class RDSScanner(MetricResourceScanner):
    """유휴 RDS 인스턴스 스캐너"""

    resource_type = ResourceType.RDS
    service_name = "rds"

    def scan(self, config: ScanConfig) -> ScanResult:
        instances = self._paginate("describe_db_instances", "DBInstances")
        result = ScanResult(resources_scanned=len(instances))

        targets: dict[str, dict[str, Any]] = {}
        for inst in instances:
            db_id = inst.get("DBInstanceIdentifier", "")
            if config.exclude.should_exclude(db_id, tags_to_dict(inst.get("TagList"))):
                continue
            if inst.get("DBInstanceStatus") != "available":
                continue
            targets[db_id] = inst

        if not targets:
            return result

        ids = list(targets)
        try:
            cpu = self.metrics.fetch_average("AWS/RDS", "CPUUtilization", _DIMENSION, ids, config.idle_days)
        except MetricsError as e:
            logger.warning(f"{self.region}: RDS CPU 메트릭 조회 실패: {e}")
            return result

        connections: dict[str, float] | None
        try:
            connections = self.metrics.fetch_sum("AWS/RDS", "DatabaseConnections", _DIMENSION, ids, config.idle_days)
        except MetricsError as e:
            logger.warning(f"{self.region}: RDS 연결 수 메트릭 조회 실패, CPU 기준만 적용: {e}")
            connections = None

        try:
            freeable = self.metrics.fetch_average("AWS/RDS", "FreeableMemory", _DIMENSION, ids, config.idle_days)
        except MetricsError as e:
            logger.warning(f"{self.region}: RDS 메모리 메트릭 조회 실패: {e}")
            freeable = {}

        for db_id, inst in targets.items():
            avg_cpu = cpu.get(db_id)
            total_conns = connections.get(db_id, 0.0) if connections is not None else None

            low_cpu = avg_cpu is not None and avg_cpu < config.idle_cpu_threshold
            if not (low_cpu or total_conns == 0):
                continue

            instance_class = inst.get("DBInstanceClass", "")
            mem_pct = None
            free_bytes = freeable.get(db_id)
            total_bytes = rds_instance_memory_bytes(instance_class)
            if free_bytes is not None and total_bytes:
                mem_pct = (1 - free_bytes / total_bytes) * 100
                if mem_pct >= config.high_memory_threshold:
                    logger.debug(f"{db_id}: 메모리 사용률 {mem_pct:.1f}% - 유휴 아님")
                    continue

            multi_az = bool(inst.get("MultiAZ"))
            result.findings.append(
                self._finding(
                    FindingKind.IDLE_RDS,
                    Severity.HIGH,
                    db_id,
                    _idle_message(avg_cpu or 0.0, mem_pct, total_conns, config.idle_days),
                    cost=monthly_rds_cost(instance_class, self.region, multi_az),
                    name=db_id,
                    metadata={
                        "instance_class": instance_class,
                        "engine": inst.get("Engine", ""),
                        "multi_az": multi_az,
                        "avg_cpu_percent": avg_cpu,
                        "total_connections": total_conns,
                        "avg_mem_percent": mem_pct,
                        "freeable_memory_bytes": free_bytes,
                        "has_mem_metrics": mem_pct is not None,
                    },
                )
            )

        return result
