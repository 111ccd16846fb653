# core/__init__.py
"""
core - AWS 낭비 리소스 스캔 엔진

아키텍처:
    core/
    ├── parallel/       # 제한 동시성 실행, 취소 토큰, boto3 client 설정
    ├── scan/           # 데이터 모델, 리전/멀티 리전 오케스트레이터
    ├── analysis.py     # 최소 비용 필터링 및 요약
    ├── config.py       # 설정 파일 로드
    └── exceptions.py   # 통합 예외 계층

Usage:
    from core.scan import AWSClient, MultiRegionScanner, ScanConfig

    aws = AWSClient(profile="dev")
    result = MultiRegionScanner(aws, aws.list_enabled_regions(), ScanConfig()).scan_all()
"""

__all__: list[str] = [
    "analysis",
    "config",
    "exceptions",
    "parallel",
    "scan",
]
