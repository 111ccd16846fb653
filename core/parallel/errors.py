"""
core/parallel/errors.py - AWS API 에러 분류 유틸리티

병렬 경계에서 예외를 에러 문자열로 변환할 때 사용하는
에러 분류/코드 추출 함수를 제공합니다.

주요 구성 요소:
- categorize_error: 예외를 ErrorCategory로 분류
- get_error_code: 예외에서 에러 코드 추출
- describe_error: 에러 문자열용 한 줄 요약

스캔 엔진은 원격 호출을 재시도하지 않습니다. botocore 클라이언트 자체의
재시도 설정은 core.parallel.client.get_client에서 관리합니다.
"""

import logging

from core.exceptions import WasteScanError, is_access_denied, is_not_found, is_throttling

from .types import ErrorCategory

logger = logging.getLogger(__name__)


def categorize_error(error: BaseException) -> ErrorCategory:
    """예외 객체를 분석하여 ErrorCategory로 분류

    WasteScanError는 원인 예외(cause)를 기준으로 분류하고,
    ClientError의 경우 response에서 에러 코드를 추출하며,
    네트워크/타임아웃 에러는 타입으로 분류합니다.

    Args:
        error: 분류할 예외

    Returns:
        에러 카테고리
    """
    if isinstance(error, WasteScanError) and error.cause is not None:
        return categorize_error(error.cause)

    if not isinstance(error, Exception):
        return ErrorCategory.UNKNOWN

    if is_throttling(error):
        return ErrorCategory.THROTTLING
    if is_access_denied(error):
        return ErrorCategory.ACCESS_DENIED
    if is_not_found(error):
        return ErrorCategory.NOT_FOUND

    response = getattr(error, "response", None)
    if isinstance(response, dict):
        error_code = response.get("Error", {}).get("Code", "")

        if "Timeout" in error_code:
            return ErrorCategory.TIMEOUT
        if error_code in ("ExpiredToken", "ExpiredTokenException"):
            return ErrorCategory.EXPIRED_TOKEN
        if any(x in error_code for x in ("Invalid", "Validation", "Malformed")):
            return ErrorCategory.INVALID_REQUEST
        if any(x in error_code for x in ("InternalError", "ServiceUnavailable", "InternalFailure")):
            return ErrorCategory.SERVICE_ERROR

    # TimeoutError는 OSError의 하위 클래스이므로 먼저 확인
    if isinstance(error, TimeoutError):
        return ErrorCategory.TIMEOUT
    if isinstance(error, (ConnectionError, OSError)):
        return ErrorCategory.NETWORK

    return ErrorCategory.UNKNOWN


def get_error_code(error: BaseException) -> str:
    """예외 객체에서 에러 코드 문자열 추출

    ClientError의 경우 response에서 Code를 추출하고,
    그 외에는 예외 클래스명을 반환합니다.

    Args:
        error: 예외 객체

    Returns:
        에러 코드 문자열
    """
    if isinstance(error, WasteScanError) and error.cause is not None:
        return get_error_code(error.cause)

    response = getattr(error, "response", None)
    if isinstance(response, dict):
        code: str = response.get("Error", {}).get("Code", "Unknown")
        return code
    return error.__class__.__name__


def describe_error(error: BaseException) -> str:
    """에러 문자열용 한 줄 요약

    Returns:
        str(error)가 비어 있으면 에러 코드만, 아니면 str(error)
    """
    text = str(error).strip()
    return text or get_error_code(error)
