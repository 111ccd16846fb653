"""
scanners/kinesis.py - 유휴/과다 프로비저닝 Kinesis 스트림 및 유휴 Firehose 탐지

탐지 항목:
    - KINESIS_STREAM_IDLE: 조회 기간 동안 수신 레코드 0, 읽은 레코드 0
    - KINESIS_OVER_PROVISIONED: 프로비저닝 모드에서 샤드 용량(1 MiB/s) 대비
      평균 수신 처리량이 10% 미만
    - KINESIS_FIREHOSE_IDLE: 전송 스트림 수신 레코드 0

메트릭 실패 정책 (degrade):
    - IncomingRecords / GetRecords.Records 조회 실패: 발견 없이 종료
    - IncomingBytes 조회 실패: 과다 프로비저닝 검사만 생략
    - Firehose IncomingRecords 조회 실패: 발견 없이 종료
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from botocore.exceptions import BotoCoreError, ClientError

from core.exceptions import MetricsError
from core.scan.types import FindingKind, ResourceType, ScanConfig, ScanResult, Severity
from shared.aws.pricing import monthly_kinesis_shard_cost

from .base import MetricResourceScanner

logger = logging.getLogger(__name__)

# 샤드당 쓰기 용량 (bytes/s)
SHARD_CAPACITY_BYTES_PER_SEC = 1024 * 1024
# 이 비율 미만이면 과다 프로비저닝
OVER_PROVISIONED_PCT = 10.0

PROVISIONED = "PROVISIONED"


@dataclass(frozen=True)
class StreamInfo:
    name: str
    arn: str
    shard_count: int
    mode: str


class KinesisScanner(MetricResourceScanner):
    """Kinesis Data Streams 스캐너"""

    resource_type = ResourceType.KINESIS
    service_name = "kinesis"

    def scan(self, config: ScanConfig) -> ScanResult:
        names = self._paginate("list_streams", "StreamNames")
        result = ScanResult(resources_scanned=len(names))

        streams: list[StreamInfo] = []
        for name in names:
            if config.exclude.should_exclude(name, None):
                continue
            try:
                streams.append(self._describe(name))
            except (ClientError, BotoCoreError) as e:
                logger.warning(f"{self.region}: Kinesis 스트림 조회 실패 ({name}): {e}")

        if not streams:
            return result

        ids = [s.name for s in streams]
        try:
            incoming = self.metrics.fetch_sum("AWS/Kinesis", "IncomingRecords", "StreamName", ids, config.idle_days)
            reading = self.metrics.fetch_sum("AWS/Kinesis", "GetRecords.Records", "StreamName", ids, config.idle_days)
        except MetricsError as e:
            logger.warning(f"{self.region}: Kinesis 레코드 메트릭 조회 실패: {e}")
            return result

        incoming_bytes: dict[str, float] | None
        try:
            incoming_bytes = self.metrics.fetch_sum("AWS/Kinesis", "IncomingBytes", "StreamName", ids, config.idle_days)
        except MetricsError as e:
            logger.warning(f"{self.region}: Kinesis IncomingBytes 조회 실패, 과다 프로비저닝 검사 생략: {e}")
            incoming_bytes = None

        for stream in streams:
            provisioned = stream.mode == PROVISIONED
            shard_cost = monthly_kinesis_shard_cost(stream.shard_count, self.region) if provisioned else 0.0

            if incoming.get(stream.name, 0.0) == 0 and reading.get(stream.name, 0.0) == 0:
                result.findings.append(
                    self._finding(
                        FindingKind.KINESIS_STREAM_IDLE,
                        Severity.HIGH,
                        stream.name,
                        f"{config.idle_days}일간 입출력 레코드 0건 (샤드 {stream.shard_count}개, {stream.mode} 모드)",
                        cost=shard_cost,
                        name=stream.arn,
                        metadata={"shard_count": stream.shard_count, "stream_mode": stream.mode},
                    )
                )
                continue

            if not provisioned or incoming_bytes is None or stream.shard_count <= 0:
                continue

            avg_bytes_per_sec = incoming_bytes.get(stream.name, 0.0) / (config.idle_days * 86400)
            capacity_pct = avg_bytes_per_sec / (stream.shard_count * SHARD_CAPACITY_BYTES_PER_SEC) * 100
            if capacity_pct >= OVER_PROVISIONED_PCT:
                continue

            result.findings.append(
                self._finding(
                    FindingKind.KINESIS_OVER_PROVISIONED,
                    Severity.MEDIUM,
                    stream.name,
                    f"{config.idle_days}일간 샤드 사용률 {capacity_pct:.1f}% (샤드 {stream.shard_count}개)",
                    cost=shard_cost,
                    name=stream.arn,
                    metadata={
                        "shard_count": stream.shard_count,
                        "stream_mode": stream.mode,
                        "avg_incoming_bytes_per_sec": avg_bytes_per_sec,
                        "capacity_pct": capacity_pct,
                    },
                )
            )

        return result

    def _describe(self, name: str) -> StreamInfo:
        self._check_cancelled()
        summary = self.client.describe_stream_summary(StreamName=name)["StreamDescriptionSummary"]
        mode = summary.get("StreamModeDetails", {}).get("StreamMode", PROVISIONED)
        return StreamInfo(
            name=name,
            arn=summary.get("StreamARN", ""),
            shard_count=summary.get("OpenShardCount", 0),
            mode=mode,
        )


class FirehoseScanner(MetricResourceScanner):
    """Kinesis Data Firehose 전송 스트림 스캐너"""

    resource_type = ResourceType.FIREHOSE
    service_name = "firehose"

    def scan(self, config: ScanConfig) -> ScanResult:
        names = self._list_delivery_streams()
        result = ScanResult(resources_scanned=len(names))

        targets = [name for name in names if not config.exclude.should_exclude(name, None)]
        if not targets:
            return result

        try:
            incoming = self.metrics.fetch_sum(
                "AWS/Firehose", "IncomingRecords", "DeliveryStreamName", targets, config.idle_days
            )
        except MetricsError as e:
            logger.warning(f"{self.region}: Firehose 메트릭 조회 실패: {e}")
            return result

        for name in targets:
            if incoming.get(name, 0.0) > 0:
                continue
            result.findings.append(
                self._finding(
                    FindingKind.KINESIS_FIREHOSE_IDLE,
                    Severity.MEDIUM,
                    name,
                    f"{config.idle_days}일간 수신 레코드 0건",
                    metadata={"delivery_stream_name": name},
                )
            )

        return result

    def _list_delivery_streams(self) -> list[str]:
        # list_delivery_streams는 boto3 paginator가 없음
        names: list[str] = []
        kwargs: dict[str, str] = {}
        while True:
            response = self._call("list_delivery_streams", **kwargs)
            page = response.get("DeliveryStreamNames", [])
            names.extend(page)
            if not response.get("HasMoreDeliveryStreams") or not page:
                break
            kwargs["ExclusiveStartDeliveryStreamName"] = page[-1]
        return names
