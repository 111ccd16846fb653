"""
scanners/sns.py - 구독자 없는 / 유휴 SNS 토픽 탐지

탐지 항목:
    - SNS_NO_SUBSCRIBERS: 구독 0개 (메트릭 불필요)
    - SNS_IDLE: 구독자는 있으나 조회 기간 동안 발행 메시지 0건

메트릭 실패 정책 (degrade):
    NumberOfMessagesPublished 조회가 실패하면 SNS_IDLE 검사만 생략합니다.
    구독 목록 조회 실패는 해당 토픽만 건너뜁니다.
"""

from __future__ import annotations

import logging

from botocore.exceptions import BotoCoreError, ClientError

from core.exceptions import MetricsError
from core.scan.types import FindingKind, ResourceType, ScanConfig, ScanResult, Severity

from .base import MetricResourceScanner

logger = logging.getLogger(__name__)


def topic_name_from_arn(arn: str) -> str:
    """arn:aws:sns:us-east-1:123456789012:my-topic -> my-topic"""
    return arn.rsplit(":", 1)[-1]


class SNSScanner(MetricResourceScanner):
    """SNS 토픽 스캐너"""

    resource_type = ResourceType.SNS
    service_name = "sns"

    def scan(self, config: ScanConfig) -> ScanResult:
        topics = self._paginate("list_topics", "Topics")
        result = ScanResult(resources_scanned=len(topics))

        with_subscribers: dict[str, tuple[str, int]] = {}
        for topic in topics:
            arn = topic.get("TopicArn", "")
            name = topic_name_from_arn(arn)
            if config.exclude.should_exclude(name, None):
                continue

            try:
                count = self._count_subscriptions(arn)
            except (ClientError, BotoCoreError) as e:
                logger.warning(f"{self.region}: SNS 구독 조회 실패 ({name}): {e}")
                continue

            if count == 0:
                result.findings.append(
                    self._finding(
                        FindingKind.SNS_NO_SUBSCRIBERS,
                        Severity.MEDIUM,
                        name,
                        "구독이 없는 토픽",
                        name=arn,
                    )
                )
            else:
                with_subscribers[name] = (arn, count)

        if with_subscribers:
            self._report_idle(result, with_subscribers, config.idle_days)

        return result

    def _count_subscriptions(self, topic_arn: str) -> int:
        self._check_cancelled()
        paginator = self.client.get_paginator("list_subscriptions_by_topic")
        count = 0
        for page in paginator.paginate(TopicArn=topic_arn):
            self._check_cancelled()
            count += len(page.get("Subscriptions", []))
        return count

    def _report_idle(self, result: ScanResult, topics: dict[str, tuple[str, int]], idle_days: int) -> None:
        try:
            published = self.metrics.fetch_sum("AWS/SNS", "NumberOfMessagesPublished", "TopicName", list(topics), idle_days)
        except MetricsError as e:
            logger.warning(f"{self.region}: SNS 메트릭 조회 실패, 유휴 검사 생략: {e}")
            return

        for name, (arn, subscribers) in topics.items():
            if published.get(name, 0.0) > 0:
                continue
            result.findings.append(
                self._finding(
                    FindingKind.SNS_IDLE,
                    Severity.LOW,
                    name,
                    f"{idle_days}일간 발행 메시지 0건 (구독자 {subscribers}개)",
                    name=arn,
                    metadata={"subscriber_count": subscribers},
                )
            )
