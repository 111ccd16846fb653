"""
shared/aws/metrics/batch_metrics.py - CloudWatch 배치 메트릭 조회

GetMetricData API로 여러 리소스의 같은 메트릭을 한 번에 조회합니다.
요청당 최대 500개 쿼리 제한에 맞춰 리소스 ID를 연속 배치로 나누고,
배치 내부 위치 기반 ID("m0", "m1", ...)로 결과를 원래 리소스에 되돌립니다.

집계 규칙:
    - sum: 반환된 모든 샘플 값의 합
    - average: 기간별 샘플 값의 산술 평균 (기간 가중치 없음)
    - 샘플이 0개인 리소스는 결과에서 제외 ("데이터 없음"과 0.0은 다름)

에러 정책:
    배치 중 하나라도 실패하면 전체 호출이 MetricsError로 실패합니다.
    부분 결과는 반환하지 않으며, 실패 처리 방식은 호출한 스캐너가 결정합니다.

예시:
    fetcher = MetricsFetcher(cloudwatch_client)
    cpu = fetcher.fetch_average("AWS/EC2", "CPUUtilization", "InstanceId", instance_ids, 7)
    # {"i-0abc...": 2.4, ...}
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from core.exceptions import MetricsError
from core.parallel.cancel import CancelToken

logger = logging.getLogger(__name__)

# GetMetricData 요청당 최대 쿼리 수
MAX_METRIC_DATA_QUERIES = 500
# 집계 주기 (1시간)
METRIC_PERIOD_SECONDS = 3600

_QUERY_ID_PATTERN = re.compile(r"^m(\d+)$")


class Statistic(str, Enum):
    """집계 통계"""

    SUM = "Sum"
    AVERAGE = "Average"


@dataclass(frozen=True)
class MetricQuery:
    """배치 1회 호출 입력

    Attributes:
        namespace: AWS 네임스페이스 (예: "AWS/Lambda")
        metric_name: 메트릭 이름 (예: "Invocations")
        dimension_name: 차원 이름 (예: "FunctionName")
        resource_ids: 배치에 포함된 리소스 ID (최대 MAX_METRIC_DATA_QUERIES개)
        start_time: 조회 시작 시간 (UTC)
        end_time: 조회 종료 시간 (UTC)
        statistic: 집계 통계
    """

    namespace: str
    metric_name: str
    dimension_name: str
    resource_ids: tuple[str, ...]
    start_time: datetime
    end_time: datetime
    statistic: Statistic

    def to_request_queries(self) -> list[dict[str, Any]]:
        """GetMetricData MetricDataQueries 목록 생성 (위치 기반 ID)"""
        return [
            {
                "Id": f"m{idx}",
                "MetricStat": {
                    "Metric": {
                        "Namespace": self.namespace,
                        "MetricName": self.metric_name,
                        "Dimensions": [{"Name": self.dimension_name, "Value": resource_id}],
                    },
                    "Period": METRIC_PERIOD_SECONDS,
                    "Stat": self.statistic.value,
                },
                "ReturnData": True,
            }
            for idx, resource_id in enumerate(self.resource_ids)
        ]


def batch_ids(ids: Sequence[str], batch_size: int = MAX_METRIC_DATA_QUERIES) -> Iterator[tuple[str, ...]]:
    """ID 목록을 batch_size개 이하의 연속 배치로 분할"""
    if batch_size <= 0:
        batch_size = MAX_METRIC_DATA_QUERIES
    for i in range(0, len(ids), batch_size):
        yield tuple(ids[i : i + batch_size])


def parse_query_index(query_id: str, batch_len: int) -> int | None:
    """"m<idx>" 형식 ID를 배치 내 인덱스로 변환 (범위 밖이면 None)"""
    match = _QUERY_ID_PATTERN.match(query_id or "")
    if not match:
        return None
    idx = int(match.group(1))
    if idx >= batch_len:
        return None
    return idx


class MetricsFetcher:
    """CloudWatch 배치 메트릭 조회기

    리전 하나의 CloudWatch client에 묶여 있으며, 같은 리전의 스캐너들이
    동시에 사용해도 안전합니다 (가변 상태 없음).

    Args:
        client: boto3 CloudWatch client
        token: 스캔 전체 취소 토큰 (배치 호출 전마다 확인)
        batch_size: 요청당 최대 쿼리 수
    """

    def __init__(
        self,
        client: Any,
        token: CancelToken | None = None,
        batch_size: int = MAX_METRIC_DATA_QUERIES,
    ):
        self._client = client
        self._token = token
        self._batch_size = batch_size if batch_size > 0 else MAX_METRIC_DATA_QUERIES

    def fetch_sum(
        self,
        namespace: str,
        metric_name: str,
        dimension_name: str,
        resource_ids: Sequence[str],
        lookback_days: int,
    ) -> dict[str, float]:
        """리소스별 메트릭 합계 조회"""
        return self.fetch_aggregate(namespace, metric_name, dimension_name, resource_ids, lookback_days, Statistic.SUM)

    def fetch_average(
        self,
        namespace: str,
        metric_name: str,
        dimension_name: str,
        resource_ids: Sequence[str],
        lookback_days: int,
    ) -> dict[str, float]:
        """리소스별 메트릭 평균 조회"""
        return self.fetch_aggregate(
            namespace, metric_name, dimension_name, resource_ids, lookback_days, Statistic.AVERAGE
        )

    def fetch_aggregate(
        self,
        namespace: str,
        metric_name: str,
        dimension_name: str,
        resource_ids: Sequence[str],
        lookback_days: int,
        statistic: Statistic,
    ) -> dict[str, float]:
        """리소스별 메트릭 집계값 조회

        Args:
            namespace: AWS 네임스페이스
            metric_name: 메트릭 이름
            dimension_name: 리소스 ID를 담을 차원 이름
            resource_ids: 리소스 ID 목록 (비어 있으면 API 호출 없이 빈 결과)
            lookback_days: 조회 기간 (일)
            statistic: 집계 통계

        Returns:
            {resource_id: 집계값}. 샘플이 없는 리소스는 포함되지 않음

        Raises:
            MetricsError: 배치 호출 중 하나라도 실패한 경우
            ScanCancelledError: 배치 호출 전에 스캔이 취소된 경우
        """
        if not resource_ids:
            return {}

        # 모든 배치가 같은 시간 창을 공유
        end_time = datetime.now(timezone.utc)
        start_time = end_time - timedelta(days=lookback_days)

        batches = list(batch_ids(resource_ids, self._batch_size))
        results: dict[str, float] = {}

        for batch_idx, batch in enumerate(batches, 1):
            if self._token is not None:
                self._token.raise_if_cancelled()

            logger.debug(
                f"CloudWatch 메트릭 조회: {namespace}/{metric_name} "
                f"배치 {batch_idx}/{len(batches)} ({len(batch)}개)"
            )

            query = MetricQuery(
                namespace=namespace,
                metric_name=metric_name,
                dimension_name=dimension_name,
                resource_ids=batch,
                start_time=start_time,
                end_time=end_time,
                statistic=statistic,
            )
            samples = self._fetch_batch(query)

            for idx, values in samples.items():
                if not values:
                    continue
                total = sum(values)
                if statistic is Statistic.AVERAGE:
                    results[batch[idx]] = total / len(values)
                else:
                    results[batch[idx]] = total

        return results

    def _fetch_batch(self, query: MetricQuery) -> dict[int, list[float]]:
        """배치 1회 조회 (NextToken 페이지네이션 포함)

        Returns:
            {배치 내 인덱스: 샘플 값 목록}
        """
        samples: dict[int, list[float]] = {}
        batch_len = len(query.resource_ids)
        metric_data_queries = query.to_request_queries()
        next_token: str | None = None

        while True:
            params: dict[str, Any] = {
                "MetricDataQueries": metric_data_queries,
                "StartTime": query.start_time,
                "EndTime": query.end_time,
            }
            if next_token:
                params["NextToken"] = next_token

            try:
                response = self._client.get_metric_data(**params)
            except (ClientError, BotoCoreError) as e:
                logger.warning(f"CloudWatch get_metric_data 오류 ({query.namespace}/{query.metric_name}): {e}")
                raise MetricsError(query.namespace, query.metric_name, cause=e) from e

            for result in response.get("MetricDataResults", []):
                query_id = result.get("Id", "")
                idx = parse_query_index(query_id, batch_len)
                if idx is None:
                    logger.debug(f"예상하지 못한 메트릭 쿼리 ID 무시: {query_id!r} (배치 크기 {batch_len})")
                    continue
                samples.setdefault(idx, []).extend(float(v) for v in result.get("Values", []))

            next_token = response.get("NextToken")
            if not next_token:
                break

        return samples
