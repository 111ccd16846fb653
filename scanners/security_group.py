"""
scanners/security_group.py - 미사용 보안 그룹 탐지

탐지 항목:
    - UNUSED_SECURITY_GROUP: 연결된 ENI가 없고 다른 보안 그룹 규칙에서도
      참조되지 않는 그룹 (default 그룹은 삭제할 수 없으므로 제외)

보안 그룹에는 직접 비용이 없으므로 비용은 0입니다.
ENI 목록 조회 실패는 스캐너 실패로 처리합니다.
"""

from __future__ import annotations

from typing import Any

from core.scan.types import FindingKind, ResourceType, ScanConfig, ScanResult, Severity, tags_to_dict

from .base import ResourceScanner


def referenced_groups(groups: list[dict[str, Any]]) -> set[str]:
    """인바운드/아웃바운드 규칙에서 참조되는 보안 그룹 ID"""
    refs: set[str] = set()
    for sg in groups:
        for perm in sg.get("IpPermissions", []) + sg.get("IpPermissionsEgress", []):
            for pair in perm.get("UserIdGroupPairs", []):
                if pair.get("GroupId"):
                    refs.add(pair["GroupId"])
    return refs


class SecurityGroupScanner(ResourceScanner):
    """미사용 보안 그룹 스캐너"""

    resource_type = ResourceType.SECURITY_GROUP
    service_name = "ec2"

    def scan(self, config: ScanConfig) -> ScanResult:
        groups = self._paginate("describe_security_groups", "SecurityGroups")
        result = ScanResult(resources_scanned=len(groups))
        if not groups:
            return result

        used = self._groups_with_enis() | referenced_groups(groups)

        for sg in groups:
            group_id = sg.get("GroupId", "")
            group_name = sg.get("GroupName", "")
            if config.exclude.should_exclude(group_id, tags_to_dict(sg.get("Tags"))):
                continue
            if group_name == "default" or group_id in used:
                continue

            result.findings.append(
                self._finding(
                    FindingKind.UNUSED_SECURITY_GROUP,
                    Severity.LOW,
                    group_id,
                    f"보안 그룹 {group_name!r}에 연결된 ENI 없음",
                    name=group_name,
                    metadata={
                        "group_name": group_name,
                        "vpc_id": sg.get("VpcId", ""),
                    },
                )
            )

        return result

    def _groups_with_enis(self) -> set[str]:
        interfaces = self._paginate("describe_network_interfaces", "NetworkInterfaces")
        return {group["GroupId"] for eni in interfaces for group in eni.get("Groups", []) if group.get("GroupId")}
