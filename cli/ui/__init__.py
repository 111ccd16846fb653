# cli/ui - 콘솔 출력 컴포넌트 (rich)
"""
콘솔 출력 모듈

CLI 전용 UI 컴포넌트들 (상태 메시지, 로깅 설정, 진행 스피너)
"""

from .console import (
    SYMBOL_ERROR,
    SYMBOL_INFO,
    SYMBOL_SUCCESS,
    SYMBOL_WARNING,
    configure_logging,
    console,
    get_console,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from .progress import ScanProgressDisplay

__all__: list[str] = [
    "SYMBOL_ERROR",
    "SYMBOL_INFO",
    "SYMBOL_SUCCESS",
    "SYMBOL_WARNING",
    "configure_logging",
    "console",
    "get_console",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "ScanProgressDisplay",
]
