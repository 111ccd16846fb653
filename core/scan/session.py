"""
core/scan/session.py - 리전별 AWS client 구성

boto3 Session은 스레드 안전하지 않으므로 리전마다 별도 Session을 만들고,
해당 리전의 모든 스캐너는 그 Session에서 만든 client를 공유합니다.
client 자체는 스레드 안전합니다.

주요 구성 요소:
- AWSClient: 프로파일/기본 리전 보관, 리전별 RegionClients 생성
- RegionClients: 한 리전의 서비스 client 캐시

Example:
    aws = AWSClient(profile="dev")
    regions = aws.list_enabled_regions()

    clients = aws.for_region("ap-northeast-2")
    ec2 = clients.client("ec2")
"""

from __future__ import annotations

import logging
import threading
from typing import Any

import boto3

from core.parallel.client import get_client

logger = logging.getLogger(__name__)

# describe_regions 호출에 사용할 리전 (세션 기본 리전이 없을 때)
FALLBACK_REGION = "us-east-1"


class RegionClients:
    """한 리전의 서비스 client 모음

    Args:
        region: 리전 코드
        session: client 생성에 사용할 boto3 Session
        clients: 미리 만들어 둔 client {서비스명: client} (테스트 주입용)
    """

    def __init__(
        self,
        region: str,
        session: boto3.Session | None = None,
        clients: dict[str, Any] | None = None,
    ):
        self.region = region
        self._session = session
        self._clients: dict[str, Any] = dict(clients or {})
        self._lock = threading.Lock()

    def client(self, service_name: str) -> Any:
        """서비스 client 반환 (최초 호출 시 생성)"""
        with self._lock:
            existing = self._clients.get(service_name)
            if existing is not None:
                return existing
            if self._session is None:
                raise KeyError(f"{self.region}: {service_name} client가 구성되지 않았습니다")
            created = get_client(self._session, service_name, region_name=self.region)
            self._clients[service_name] = created
            return created


class AWSClient:
    """AWS 자격 증명 컨텍스트

    프로파일과 기본 리전만 보관하며, 리전별 Session은 for_region()에서 만듭니다.

    Args:
        profile: AWS 프로파일 이름 (None이면 기본 자격 증명 체인)
        region: 기본 리전 (None이면 환경 설정 값)
    """

    def __init__(self, profile: str | None = None, region: str | None = None):
        self.profile = profile or None
        # 프로파일이 없으면 botocore ProfileNotFound가 여기서 발생
        self._session = boto3.Session(profile_name=self.profile, region_name=region)
        self.default_region = self._session.region_name or FALLBACK_REGION

    def new_session(self, region: str) -> boto3.Session:
        return boto3.Session(profile_name=self.profile, region_name=region)

    def for_region(self, region: str) -> RegionClients:
        """리전 전용 Session을 가진 RegionClients 생성"""
        return RegionClients(region, session=self.new_session(region))

    def list_enabled_regions(self) -> list[str]:
        """계정에서 활성화된 리전 목록

        Raises:
            botocore.exceptions.ClientError: describe_regions 실패
        """
        ec2 = get_client(self._session, "ec2", region_name=self.default_region)
        response = ec2.describe_regions(AllRegions=False)
        regions = [r["RegionName"] for r in response.get("Regions", []) if r.get("RegionName")]
        logger.debug(f"활성화된 리전 {len(regions)}개 발견")
        return sorted(regions)
