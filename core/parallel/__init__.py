"""
core/parallel - 병렬 처리 모듈

리전/스캐너 2단계 제한 동시성 실행을 위한 기반 구성 요소입니다.

주요 구성 요소:
- run_bounded: ThreadPoolExecutor 기반 제한 동시성 실행 (barrier 포함)
- CancelToken: 스캔 전체에 공유되는 취소/타임아웃 토큰
- get_client: botocore Config가 적용된 boto3 client 생성
- categorize_error / get_error_code: 에러 분류

Example:
    from core.parallel import CancelToken, run_bounded

    token = CancelToken.with_timeout(600)
    outcomes = run_bounded(regions, scan_region, max_workers=4, token=token)

    for outcome in outcomes:
        if not outcome.success:
            print(f"{outcome.item}: {outcome.error}")
"""

from .cancel import CancelToken
from .client import get_client
from .errors import categorize_error, describe_error, get_error_code
from .executor import resolve_concurrency, run_bounded
from .types import ErrorCategory, UnitOutcome

__all__: list[str] = [
    # Executor
    "run_bounded",
    "resolve_concurrency",
    # Cancellation
    "CancelToken",
    # Client
    "get_client",
    # Error handling
    "categorize_error",
    "describe_error",
    "get_error_code",
    # Types
    "ErrorCategory",
    "UnitOutcome",
]
