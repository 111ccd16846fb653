"""
scanners/sqs.py - 유휴 SQS 큐 / 소비자 없는 큐 / 고아 DLQ 탐지

탐지 항목:
    - SQS_IDLE: 조회 기간 동안 송신 0, 수신 0
    - SQS_NO_CONSUMER: 송신은 있으나 수신 0
    - SQS_DLQ_ORPHANED: RedriveAllowPolicy가 있지만 어떤 소스 큐도 참조하지 않는 DLQ

메트릭 실패 정책 (degrade):
    송신/수신 메트릭 조회가 실패하면 유휴/소비자 검사를 생략하고,
    메트릭이 필요 없는 DLQ 검사는 계속 수행합니다.
    큐 속성 조회 실패는 해당 큐만 건너뜁니다.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass

from botocore.exceptions import BotoCoreError, ClientError

from core.exceptions import MetricsError
from core.scan.types import FindingKind, ResourceType, ScanConfig, ScanResult, Severity

from .base import MetricResourceScanner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueueInfo:
    url: str
    name: str
    arn: str
    redrive_policy: str = ""
    redrive_allow_policy: str = ""


def queue_name_from_url(url: str) -> str:
    """https://sqs.us-east-1.amazonaws.com/123456789012/my-queue -> my-queue"""
    return url.rstrip("/").rsplit("/", 1)[-1]


def parse_dlq_arn(redrive_policy: str) -> str:
    """RedrivePolicy JSON에서 deadLetterTargetArn 추출 (실패 시 빈 문자열)"""
    try:
        policy = json.loads(redrive_policy)
    except (TypeError, ValueError):
        return ""
    if not isinstance(policy, dict):
        return ""
    return str(policy.get("deadLetterTargetArn", ""))


class SQSScanner(MetricResourceScanner):
    """SQS 큐 스캐너"""

    resource_type = ResourceType.SQS
    service_name = "sqs"

    def scan(self, config: ScanConfig) -> ScanResult:
        urls = self._paginate("list_queues", "QueueUrls")
        result = ScanResult(resources_scanned=len(urls))

        # 제외된 큐도 속성은 조회 (DLQ 참조 판정용)
        listed: list[QueueInfo] = []
        targets: list[QueueInfo] = []
        for url in urls:
            name = queue_name_from_url(url)
            try:
                info = self._queue_info(url)
            except (ClientError, BotoCoreError) as e:
                logger.warning(f"{self.region}: SQS 큐 속성 조회 실패 ({name}): {e}")
                continue
            listed.append(info)
            if not config.exclude.should_exclude(name, None):
                targets.append(info)

        if not targets:
            return result

        self._report_idle(result, targets, config.idle_days)
        self._report_orphaned_dlqs(result, targets, listed)
        return result

    def _queue_info(self, url: str) -> QueueInfo:
        self._check_cancelled()
        attrs = self.client.get_queue_attributes(
            QueueUrl=url,
            AttributeNames=["QueueArn", "RedrivePolicy", "RedriveAllowPolicy"],
        ).get("Attributes", {})
        return QueueInfo(
            url=url,
            name=queue_name_from_url(url),
            arn=attrs.get("QueueArn", ""),
            redrive_policy=attrs.get("RedrivePolicy", ""),
            redrive_allow_policy=attrs.get("RedriveAllowPolicy", ""),
        )

    def _report_idle(self, result: ScanResult, queues: list[QueueInfo], idle_days: int) -> None:
        names = [q.name for q in queues]
        try:
            sent = self.metrics.fetch_sum("AWS/SQS", "NumberOfMessagesSent", "QueueName", names, idle_days)
            received = self.metrics.fetch_sum("AWS/SQS", "NumberOfMessagesReceived", "QueueName", names, idle_days)
        except MetricsError as e:
            logger.warning(f"{self.region}: SQS 메트릭 조회 실패, 유휴 검사 생략: {e}")
            return

        for queue in queues:
            sent_count = sent.get(queue.name, 0.0)
            received_count = received.get(queue.name, 0.0)
            if received_count > 0:
                continue

            if sent_count == 0:
                result.findings.append(
                    self._finding(
                        FindingKind.SQS_IDLE,
                        Severity.MEDIUM,
                        queue.name,
                        f"{idle_days}일간 송신/수신 메시지 0건",
                        name=queue.arn,
                    )
                )
            else:
                result.findings.append(
                    self._finding(
                        FindingKind.SQS_NO_CONSUMER,
                        Severity.MEDIUM,
                        queue.name,
                        f"{idle_days}일간 메시지 {sent_count:.0f}건 송신, 수신 0건",
                        name=queue.arn,
                        metadata={"messages_sent": sent_count},
                    )
                )

    def _report_orphaned_dlqs(self, result: ScanResult, queues: list[QueueInfo], listed: list[QueueInfo]) -> None:
        referenced = {parse_dlq_arn(q.redrive_policy) for q in listed if q.redrive_policy}
        referenced.discard("")

        for queue in queues:
            if not queue.redrive_allow_policy or queue.arn in referenced:
                continue
            result.findings.append(
                self._finding(
                    FindingKind.SQS_DLQ_ORPHANED,
                    Severity.HIGH,
                    queue.name,
                    "연결된 소스 큐가 없는 DLQ",
                    name=queue.arn,
                )
            )
