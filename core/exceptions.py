"""
core/exceptions.py - 통합 예외 계층 구조

스캔 엔진 전체에서 사용되는 예외 클래스들을 정의합니다.
병렬 경계를 넘는 순간 예외는 문자열(ScanResult.errors)로 변환되며,
최상위 호출자까지 전파되는 것은 취소/타임아웃뿐입니다.

예외 계층 구조:
    WasteScanError (베이스)
    ├── ScanError (스캐너 1개 실패 - 리전 오케스트레이터가 문자열로 기록)
    ├── MetricsError (CloudWatch 배치 조회 실패 - 스캐너가 처리 정책 결정)
    ├── ScanCancelledError (전체 스캔 취소/타임아웃 - 부분 결과 포함)
    └── ConfigError (설정 파일/옵션 오류)

Usage:
    from core.exceptions import ScanError, is_access_denied

    try:
        volumes = ec2.describe_volumes()["Volumes"]
    except ClientError as e:
        raise ScanError("EBS 볼륨 목록 조회 실패", region=region, resource_type="ebs", cause=e) from e
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from core.scan.types import ScanResult

# =============================================================================
# 베이스 예외
# =============================================================================


class WasteScanError(Exception):
    """스캔 엔진 기본 예외 클래스

    모든 커스텀 예외의 베이스 클래스입니다.

    Attributes:
        message: 에러 메시지
        cause: 원인 예외 (체이닝용)
        details: 추가 상세 정보
    """

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.details = details or {}

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """예외 정보를 딕셔너리로 반환"""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "cause": str(self.cause) if self.cause else None,
            "details": self.details,
        }


# =============================================================================
# 스캔 관련 예외
# =============================================================================


class ScanError(WasteScanError):
    """리소스 유형 하나를 스캔할 수 없음

    "발견 0건"이 아니라 "확인 불가"를 의미합니다.
    """

    def __init__(
        self,
        message: str,
        region: str = "",
        resource_type: str = "",
        cause: Exception | None = None,
    ):
        super().__init__(message, cause)
        self.region = region
        self.resource_type = resource_type
        if region:
            self.details["region"] = region
        if resource_type:
            self.details["resource_type"] = resource_type


class MetricsError(WasteScanError):
    """CloudWatch 배치 조회 실패

    배치 중 하나라도 실패하면 fetch 전체가 실패합니다 (부분 결과 없음).
    """

    def __init__(
        self,
        namespace: str,
        metric_name: str,
        cause: Exception | None = None,
    ):
        super().__init__(f"메트릭 조회 실패 ({namespace}/{metric_name})", cause)
        self.namespace = namespace
        self.metric_name = metric_name
        self.details["namespace"] = namespace
        self.details["metric_name"] = metric_name


class ScanCancelledError(WasteScanError):
    """전체 스캔 취소 또는 타임아웃

    Attributes:
        partial_result: 취소 시점까지 병합된 결과 (없으면 None)
    """

    def __init__(
        self,
        message: str = "스캔이 취소되었습니다",
        partial_result: ScanResult | None = None,
    ):
        super().__init__(message)
        self.partial_result = partial_result


class ConfigError(WasteScanError):
    """설정 관련 예외"""

    def __init__(
        self,
        message: str,
        config_path: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, cause)
        self.config_path = config_path
        if config_path:
            self.details["config_path"] = config_path


# =============================================================================
# 에러 분류 헬퍼
# =============================================================================


def _client_error_code(error: Exception) -> str:
    response = getattr(error, "response", None)
    if not isinstance(response, dict):
        return ""
    code: str = response.get("Error", {}).get("Code", "")
    return code


def is_access_denied(error: Exception) -> bool:
    """권한 부족 오류인지 확인

    Args:
        error: 확인할 예외

    Returns:
        권한 부족 오류이면 True
    """
    access_denied_codes = {
        "AccessDenied",
        "AccessDeniedException",
        "UnauthorizedAccess",
        "UnauthorizedOperation",
        "AuthorizationError",
    }
    return _client_error_code(error) in access_denied_codes


def is_throttling(error: Exception) -> bool:
    """스로틀링 오류인지 확인

    Args:
        error: 확인할 예외

    Returns:
        스로틀링 오류이면 True
    """
    throttling_codes = {
        "Throttling",
        "ThrottlingException",
        "RequestLimitExceeded",
        "TooManyRequestsException",
        "RateExceeded",
    }
    return _client_error_code(error) in throttling_codes


def is_not_found(error: Exception) -> bool:
    """리소스를 찾을 수 없는 오류인지 확인

    Args:
        error: 확인할 예외

    Returns:
        NotFound 계열 오류이면 True
    """
    code = _client_error_code(error)
    return "NotFound" in code or code.startswith("NoSuch") or code == "ResourceNotFoundException"
