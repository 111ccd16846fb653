"""
scanners/ebs.py - 분리된(available) EBS 볼륨 탐지

탐지 항목:
    - DETACHED_EBS: available 상태로 7일 이상 경과한 볼륨

분리 시각을 API로 알 수 없으므로 CreateTime을 대용으로 사용합니다.
메트릭은 사용하지 않습니다.
"""

from __future__ import annotations

from core.scan.types import FindingKind, ResourceType, ScanConfig, ScanResult, Severity, name_from_tags, tags_to_dict
from shared.aws.pricing import monthly_ebs_cost

from .base import ResourceScanner, days_since, utcnow

# 분리 상태로 이 기간 이상 경과해야 보고
DETACHED_THRESHOLD_DAYS = 7


class EBSScanner(ResourceScanner):
    """분리된 EBS 볼륨 스캐너"""

    resource_type = ResourceType.EBS
    service_name = "ec2"

    def scan(self, config: ScanConfig) -> ScanResult:
        volumes = self._paginate(
            "describe_volumes",
            "Volumes",
            Filters=[{"Name": "status", "Values": ["available"]}],
        )
        result = ScanResult(resources_scanned=len(volumes))
        now = utcnow()

        for vol in volumes:
            volume_id = vol.get("VolumeId", "")
            if config.exclude.should_exclude(volume_id, tags_to_dict(vol.get("Tags"))):
                continue

            days = days_since(vol.get("CreateTime"), now)
            if days is None or days < DETACHED_THRESHOLD_DAYS:
                continue

            volume_type = vol.get("VolumeType", "")
            size_gib = vol.get("Size", 0)
            result.findings.append(
                self._finding(
                    FindingKind.DETACHED_EBS,
                    Severity.HIGH,
                    volume_id,
                    f"{days}일간 분리 상태, {volume_type} {size_gib} GiB",
                    cost=monthly_ebs_cost(volume_type, size_gib, self.region),
                    name=name_from_tags(vol.get("Tags")),
                    metadata={
                        "volume_type": volume_type,
                        "size_gib": size_gib,
                        "days_detached": days,
                        "availability_zone": vol.get("AvailabilityZone", ""),
                    },
                )
            )

        return result
