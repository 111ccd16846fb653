"""
scanners/base.py - 리소스 스캐너 공통 계약

모든 리소스 유형 스캐너는 ResourceScanner를 상속합니다.

규약:
    - 생성 시 리전 전용 client와 MetricsFetcher에 바인딩됩니다.
    - scan(config)은 같은 client를 공유하는 다른 스캐너와 동시에 실행될 수 있으므로
      인스턴스 간 공유 가변 상태를 두지 않습니다.
    - 나열한 리소스는 제외 여부와 관계없이 resources_scanned에 포함합니다.
    - 목록 조회 실패는 ScanError로 전파합니다 ("발견 0건"이 아니라 "확인 불가").
    - 메트릭 조회 실패(MetricsError) 처리 방식은 스캐너별로 문서화합니다.
    - 모든 API 호출, 페이지, 리소스별 조회 전에 취소 토큰을 확인합니다.
      취소되면 ScanCancelledError가 전파되어 새 호출을 만들지 않습니다.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, ClassVar

from botocore.exceptions import BotoCoreError, ClientError

from core.exceptions import ScanError
from core.scan.types import Finding, FindingKind, ResourceType, ScanConfig, ScanResult, Severity

if TYPE_CHECKING:
    from core.parallel.cancel import CancelToken
    from core.scan.session import RegionClients
    from shared.aws.metrics import MetricsFetcher

logger = logging.getLogger(__name__)


class ResourceScanner(ABC):
    """리소스 유형 하나를 검사하는 스캐너

    Attributes:
        resource_type: 스캐너가 담당하는 리소스 유형
        service_name: 사용하는 boto3 서비스 이름
    """

    resource_type: ClassVar[ResourceType]
    service_name: ClassVar[str]

    def __init__(
        self,
        clients: RegionClients,
        metrics: MetricsFetcher | None = None,
        token: CancelToken | None = None,
    ):
        self.region = clients.region
        self.client = clients.client(self.service_name)
        self.metrics = metrics
        self.token = token

    @abstractmethod
    def scan(self, config: ScanConfig) -> ScanResult:
        """리전의 리소스를 검사하여 발견 목록 반환

        Raises:
            ScanError: 리소스 목록을 조회할 수 없는 경우
            ScanCancelledError: 스캔이 취소된 경우
        """

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(region={self.region!r})"

    # =========================================================================
    # 헬퍼
    # =========================================================================

    def _scan_error(self, action: str, cause: Exception) -> ScanError:
        return ScanError(action, region=self.region, resource_type=self.resource_type.value, cause=cause)

    def _check_cancelled(self) -> None:
        """취소되었으면 ScanCancelledError 발생"""
        if self.token is not None:
            self.token.raise_if_cancelled()

    def _call(self, operation: str, **kwargs: Any) -> dict[str, Any]:
        """단일 API 호출 (실패 시 ScanError)"""
        self._check_cancelled()
        try:
            response: dict[str, Any] = getattr(self.client, operation)(**kwargs)
        except (ClientError, BotoCoreError) as e:
            raise self._scan_error(f"{operation} 실패", e) from e
        return response

    def _paginate(self, operation: str, result_key: str, **kwargs: Any) -> list[Any]:
        """paginator로 전체 목록 조회 (실패 시 ScanError)"""
        items: list[Any] = []
        self._check_cancelled()
        try:
            paginator = self.client.get_paginator(operation)
            for page in paginator.paginate(**kwargs):
                self._check_cancelled()
                items.extend(page.get(result_key, []))
        except (ClientError, BotoCoreError) as e:
            raise self._scan_error(f"{operation} 실패", e) from e
        return items

    def _finding(
        self,
        kind: FindingKind,
        severity: Severity,
        resource_id: str,
        message: str,
        cost: float = 0.0,
        name: str = "",
        metadata: dict[str, Any] | None = None,
        resource_type: ResourceType | None = None,
    ) -> Finding:
        return Finding(
            kind=kind,
            severity=severity,
            resource_type=resource_type or self.resource_type,
            resource_id=resource_id,
            region=self.region,
            message=message,
            estimated_monthly_waste=cost,
            resource_name=name,
            metadata=metadata or {},
        )


class MetricResourceScanner(ResourceScanner):
    """CloudWatch 메트릭을 사용하는 스캐너"""

    def __init__(self, clients: RegionClients, metrics: MetricsFetcher, token: CancelToken | None = None):
        super().__init__(clients, metrics, token)
        self.metrics: MetricsFetcher = metrics


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def days_since(moment: datetime | None, now: datetime) -> int | None:
    """moment부터 now까지 경과 일수 (moment가 없으면 None)"""
    if moment is None:
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int((now - moment).total_seconds() // 86400)
