"""
scanners/eip.py - 연결되지 않은 Elastic IP 탐지

탐지 항목:
    - UNUSED_EIP: AssociationId가 없는 주소

메트릭은 사용하지 않습니다.
"""

from __future__ import annotations

from core.scan.types import FindingKind, ResourceType, ScanConfig, ScanResult, Severity, name_from_tags, tags_to_dict
from shared.aws.pricing import monthly_eip_cost

from .base import ResourceScanner


class EIPScanner(ResourceScanner):
    """미사용 Elastic IP 스캐너"""

    resource_type = ResourceType.EIP
    service_name = "ec2"

    def scan(self, config: ScanConfig) -> ScanResult:
        # describe_addresses는 페이지네이션을 지원하지 않음
        addresses = self._call("describe_addresses").get("Addresses", [])
        result = ScanResult(resources_scanned=len(addresses))

        for addr in addresses:
            allocation_id = addr.get("AllocationId", "")
            if config.exclude.should_exclude(allocation_id, tags_to_dict(addr.get("Tags"))):
                continue
            if addr.get("AssociationId"):
                continue

            public_ip = addr.get("PublicIp", "")
            result.findings.append(
                self._finding(
                    FindingKind.UNUSED_EIP,
                    Severity.MEDIUM,
                    allocation_id,
                    f"Elastic IP {public_ip}가 어떤 리소스에도 연결되지 않음",
                    cost=monthly_eip_cost(self.region),
                    name=name_from_tags(addr.get("Tags")),
                    metadata={
                        "public_ip": public_ip,
                        "domain": addr.get("Domain", ""),
                    },
                )
            )

        return result
