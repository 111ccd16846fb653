"""
scanners/snapshot.py - 오래된 EBS 스냅샷 탐지

탐지 항목:
    - STALE_SNAPSHOT: 본인 소유, stale_days 이상 경과, AMI가 참조하지 않는 스냅샷

AMI 참조 조회가 실패하면 AMI 필터 없이 계속 진행합니다.
메트릭은 사용하지 않습니다.
"""

from __future__ import annotations

import logging

from core.exceptions import ScanError
from core.scan.types import FindingKind, ResourceType, ScanConfig, ScanResult, Severity, tags_to_dict
from shared.aws.pricing import monthly_snapshot_cost

from .base import ResourceScanner, days_since, utcnow

logger = logging.getLogger(__name__)


class SnapshotScanner(ResourceScanner):
    """오래된 스냅샷 스캐너"""

    resource_type = ResourceType.SNAPSHOT
    service_name = "ec2"

    def scan(self, config: ScanConfig) -> ScanResult:
        snapshots = self._paginate("describe_snapshots", "Snapshots", OwnerIds=["self"])
        result = ScanResult(resources_scanned=len(snapshots))
        if not snapshots:
            return result

        ami_snapshots = self._ami_referenced_snapshots()
        now = utcnow()

        for snap in snapshots:
            snapshot_id = snap.get("SnapshotId", "")
            tags = tags_to_dict(snap.get("Tags"))
            if config.exclude.should_exclude(snapshot_id, tags):
                continue

            age_days = days_since(snap.get("StartTime"), now)
            if age_days is None or age_days < config.stale_days:
                continue
            if snapshot_id in ami_snapshots:
                continue

            size_gib = snap.get("VolumeSize", 0)
            result.findings.append(
                self._finding(
                    FindingKind.STALE_SNAPSHOT,
                    Severity.MEDIUM,
                    snapshot_id,
                    f"생성 후 {age_days}일 경과, {size_gib} GiB, AMI 참조 없음",
                    cost=monthly_snapshot_cost(size_gib, self.region),
                    name=tags.get("Name") or snap.get("Description", ""),
                    metadata={
                        "age_days": age_days,
                        "size_gib": size_gib,
                        "volume_id": snap.get("VolumeId", ""),
                    },
                )
            )

        return result

    def _ami_referenced_snapshots(self) -> set[str]:
        try:
            images = self._call(
                "describe_images",
                Owners=["self"],
                Filters=[{"Name": "state", "Values": ["available"]}],
            ).get("Images", [])
        except ScanError as e:
            logger.warning(f"{self.region}: AMI 조회 실패, AMI 참조 필터 없이 진행: {e}")
            return set()

        return {
            mapping["Ebs"]["SnapshotId"]
            for image in images
            for mapping in image.get("BlockDeviceMappings", [])
            if mapping.get("Ebs", {}).get("SnapshotId")
        }
