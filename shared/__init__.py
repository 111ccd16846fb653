"""공유 유틸리티 - 스캐너와 CLI에서 공통 사용.

- aws: AWS 관련 유틸리티 (CloudWatch 배치 메트릭, 정적 가격표)
- io: 입출력 유틸리티 (리포트 출력)

의존성 구조:
    core (스캔 엔진, 예외, 설정)
       ↑
    shared (공유 유틸리티)
       ↑
    scanners / cli
"""

from . import aws, io

__all__ = ["aws", "io"]
