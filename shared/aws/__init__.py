"""AWS 관련 공유 유틸리티.

하위 모듈:
- metrics: CloudWatch 메트릭 배치 조회 (GetMetricData API)
- pricing: 리소스 유형별 정적 온디맨드 가격
"""

from . import metrics, pricing

__all__ = ["metrics", "pricing"]
