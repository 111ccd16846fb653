"""
scanners/ec2.py - 유휴/장기 중지 EC2 인스턴스 탐지

탐지 항목:
    - IDLE_EC2: 실행 중이며 평균 CPU가 임계값 미만
      (CloudWatch Agent 메모리 사용률이 높으면 유휴로 보지 않음)
    - STOPPED_EC2: N일 이상 중지 상태. 비용은 연결된 EBS 볼륨 요금

메트릭 실패 정책 (degrade):
    - CPU 조회 실패: 유휴 검사 생략, 중지 인스턴스 검사는 계속
    - 메모리 조회 실패: 메모리 없이 CPU만으로 판단
    - 연결 볼륨 조회 실패: 중지 인스턴스 비용을 0으로 보고
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from core.exceptions import MetricsError
from core.scan.types import FindingKind, ResourceType, ScanConfig, ScanResult, Severity, name_from_tags, tags_to_dict
from shared.aws.pricing import monthly_ebs_cost, monthly_ec2_cost

from .base import MetricResourceScanner, days_since, utcnow

logger = logging.getLogger(__name__)

# "User initiated (2024-01-15 09:30:00 GMT)"
_TRANSITION_TIME = re.compile(r"\((\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}) GMT\)")


def stopped_since(instance: dict[str, Any]) -> datetime | None:
    """인스턴스가 중지된 시각 추정

    StateTransitionReason의 시각을 우선 사용하고, 없으면 LaunchTime으로 대체합니다.
    """
    reason = instance.get("StateTransitionReason") or ""
    match = _TRANSITION_TIME.search(reason)
    if match:
        return datetime.strptime(match.group(1), "%Y-%m-%d %H:%M:%S").replace(tzinfo=timezone.utc)
    launch_time: datetime | None = instance.get("LaunchTime")
    return launch_time


def _idle_message(avg_cpu: float, avg_mem: float | None, idle_days: int) -> str:
    if avg_mem is not None:
        return f"{idle_days}일간 CPU {avg_cpu:.1f}%, 메모리 {avg_mem:.1f}%"
    return f"{idle_days}일간 CPU {avg_cpu:.1f}%"


class EC2Scanner(MetricResourceScanner):
    """유휴/장기 중지 EC2 인스턴스 스캐너"""

    resource_type = ResourceType.EC2
    service_name = "ec2"

    def scan(self, config: ScanConfig) -> ScanResult:
        reservations = self._paginate(
            "describe_instances",
            "Reservations",
            Filters=[{"Name": "instance-state-name", "Values": ["running", "stopped"]}],
        )
        instances = [inst for res in reservations for inst in res.get("Instances", [])]

        result = ScanResult(resources_scanned=len(instances))
        if not instances:
            return result

        now = utcnow()
        running: dict[str, dict[str, Any]] = {}
        stopped: list[tuple[dict[str, Any], int]] = []

        for inst in instances:
            instance_id = inst.get("InstanceId", "")
            if config.exclude.should_exclude(instance_id, tags_to_dict(inst.get("Tags"))):
                continue

            state = inst.get("State", {}).get("Name")
            if state == "stopped":
                days = days_since(stopped_since(inst), now)
                if days is not None and days >= config.stopped_threshold_days:
                    stopped.append((inst, days))
            elif state == "running":
                running[instance_id] = inst

        if stopped:
            self._report_stopped(result, stopped)
        if running:
            self._report_idle(result, running, config)

        return result

    def _report_stopped(self, result: ScanResult, stopped: list[tuple[dict[str, Any], int]]) -> None:
        volume_ids = [
            bdm["Ebs"]["VolumeId"]
            for inst, _ in stopped
            for bdm in inst.get("BlockDeviceMappings", [])
            if bdm.get("Ebs", {}).get("VolumeId")
        ]
        volumes = self._describe_volumes(volume_ids) if volume_ids else {}

        for inst, days in stopped:
            instance_id = inst.get("InstanceId", "")
            attached = []
            ebs_cost = 0.0
            for bdm in inst.get("BlockDeviceMappings", []):
                volume = volumes.get(bdm.get("Ebs", {}).get("VolumeId", ""))
                if volume is None:
                    continue
                cost = monthly_ebs_cost(volume["VolumeType"], volume["Size"], self.region)
                ebs_cost += cost
                attached.append(
                    {
                        "volume_id": volume["VolumeId"],
                        "volume_type": volume["VolumeType"],
                        "size_gib": volume["Size"],
                        "monthly_cost": cost,
                    }
                )

            message = f"{days}일간 중지 상태"
            if ebs_cost > 0:
                message = f"{days}일간 중지 상태, 연결된 볼륨 {len(attached)}개 (EBS ${ebs_cost:.2f}/월)"

            result.findings.append(
                self._finding(
                    FindingKind.STOPPED_EC2,
                    Severity.MEDIUM,
                    instance_id,
                    message,
                    cost=round(ebs_cost, 2),
                    name=name_from_tags(inst.get("Tags")),
                    metadata={
                        "instance_type": inst.get("InstanceType", ""),
                        "days_stopped": days,
                        "state": "stopped",
                        "ebs_monthly_cost": round(ebs_cost, 2),
                        "attached_volumes": attached,
                    },
                )
            )

    def _describe_volumes(self, volume_ids: list[str]) -> dict[str, dict[str, Any]]:
        self._check_cancelled()
        try:
            paginator = self.client.get_paginator("describe_volumes")
            volumes = {}
            for page in paginator.paginate(VolumeIds=volume_ids):
                self._check_cancelled()
                for vol in page.get("Volumes", []):
                    volumes[vol["VolumeId"]] = {
                        "VolumeId": vol["VolumeId"],
                        "VolumeType": vol.get("VolumeType", ""),
                        "Size": vol.get("Size", 0),
                    }
            return volumes
        except (ClientError, BotoCoreError) as e:
            logger.warning(f"{self.region}: 중지 인스턴스의 EBS 볼륨 조회 실패: {e}")
            return {}

    def _report_idle(self, result: ScanResult, running: dict[str, dict[str, Any]], config: ScanConfig) -> None:
        ids = list(running)
        try:
            cpu = self.metrics.fetch_average("AWS/EC2", "CPUUtilization", "InstanceId", ids, config.idle_days)
        except MetricsError as e:
            logger.warning(f"{self.region}: EC2 CPU 메트릭 조회 실패, 유휴 검사 생략: {e}")
            return

        try:
            memory = self.metrics.fetch_average("CWAgent", "mem_used_percent", "InstanceId", ids, config.idle_days)
        except MetricsError as e:
            logger.warning(f"{self.region}: EC2 메모리 메트릭 조회 실패: {e}")
            memory = {}

        for instance_id in ids:
            avg_cpu = cpu.get(instance_id)
            if avg_cpu is None or avg_cpu >= config.idle_cpu_threshold:
                continue

            avg_mem = memory.get(instance_id)
            if avg_mem is not None and avg_mem >= config.high_memory_threshold:
                logger.debug(f"{instance_id}: CPU {avg_cpu:.1f}%지만 메모리 {avg_mem:.1f}% - 유휴 아님")
                continue

            inst = running[instance_id]
            instance_type = inst.get("InstanceType", "")
            result.findings.append(
                self._finding(
                    FindingKind.IDLE_EC2,
                    Severity.HIGH,
                    instance_id,
                    _idle_message(avg_cpu, avg_mem, config.idle_days),
                    cost=monthly_ec2_cost(instance_type, self.region),
                    name=name_from_tags(inst.get("Tags")),
                    metadata={
                        "instance_type": instance_type,
                        "avg_cpu_percent": avg_cpu,
                        "avg_mem_percent": avg_mem,
                        "has_mem_metrics": avg_mem is not None,
                        "state": "running",
                    },
                )
            )
