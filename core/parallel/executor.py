"""
core/parallel/executor.py - 제한 동시성 실행기

ThreadPoolExecutor 기반으로 작업 단위를 최대 max_workers개까지 동시에
실행하고, 모든 작업이 종료 상태에 도달할 때까지 대기합니다 (barrier).
리전 레벨(외부 풀)과 스캐너 레벨(내부 풀) 양쪽에서 사용됩니다.

주요 구성 요소:
- run_bounded: 작업 목록을 제한 동시성으로 실행하고 UnitOutcome 목록 반환
- resolve_concurrency: 0 이하 설정값을 기본값으로 보정

Example:
    from core.parallel import CancelToken, run_bounded

    def scan_one(region):
        return scanner.scan_region(region)

    outcomes = run_bounded(regions, scan_one, max_workers=4, token=CancelToken())
    failed = [o for o in outcomes if not o.success]
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import TypeVar

from core.exceptions import ScanCancelledError

from .cancel import CancelToken
from .types import UnitOutcome

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

# 취소 여부 확인 주기 (초)
POLL_INTERVAL = 0.2


def _clear_exception_chain(e: BaseException) -> None:
    """traceback + chained exception 메모리 누수 방지"""
    e.__traceback__ = None
    if e.__context__ is not None:
        e.__context__.__traceback__ = None
    if e.__cause__ is not None:
        e.__cause__.__traceback__ = None


def resolve_concurrency(value: int | None, default: int) -> int:
    """동시성 설정값 보정

    0 이하 또는 None이면 에러 없이 기본값을 사용합니다.

    Args:
        value: 설정된 동시성
        default: 기본 동시성

    Returns:
        1 이상의 동시성 값
    """
    if value is None or value <= 0:
        return default
    return value


def _run_unit(
    func: Callable[[T], R],
    item: T,
    token: CancelToken | None,
) -> UnitOutcome[T, R]:
    """단일 작업 실행 (워커 스레드 내에서 호출)

    작업 함수의 예외는 UnitOutcome.error로 변환되어 반환됩니다.
    """
    if token is not None and token.cancelled:
        return UnitOutcome(item=item, error=ScanCancelledError(token.reason))

    start_time = time.monotonic()
    try:
        value = func(item)
    except Exception as e:
        _clear_exception_chain(e)
        return UnitOutcome(
            item=item,
            error=e,
            duration_ms=(time.monotonic() - start_time) * 1000,
        )
    return UnitOutcome(
        item=item,
        value=value,
        duration_ms=(time.monotonic() - start_time) * 1000,
    )


def run_bounded(
    items: Iterable[T],
    func: Callable[[T], R],
    max_workers: int,
    token: CancelToken | None = None,
    name: str = "unit",
) -> list[UnitOutcome[T, R]]:
    """작업 목록을 제한 동시성으로 실행

    풀은 최대 max_workers개의 작업을 동시에 실행하며, 완료된 작업이
    슬롯을 반환하면 대기 중인 다음 작업이 시작됩니다. 완료 순서는
    비결정적입니다. 모든 작업이 종료 상태에 도달한 뒤에 반환합니다.

    Args:
        items: 작업 입력 목록
        func: item -> R 작업 함수 (예외는 UnitOutcome.error로 수집)
        max_workers: 최대 동시 실행 수 (1 이상)
        token: 취소 토큰 (선택사항)
        name: 스레드 이름 접두사 (로깅용)

    Returns:
        완료된 작업의 UnitOutcome 목록 (완료 순서)

    Raises:
        ValueError: max_workers가 1 미만인 경우
        ScanCancelledError: 대기 중 토큰이 취소된 경우.
            대기열의 작업은 취소되고 실행 중인 작업은 기다리지 않습니다.
    """
    if max_workers < 1:
        raise ValueError(f"max_workers must be >= 1, got {max_workers}")

    work = list(items)
    if not work:
        return []

    outcomes: list[UnitOutcome[T, R]] = []
    executor = ThreadPoolExecutor(
        max_workers=min(max_workers, len(work)),
        thread_name_prefix=name,
    )

    logger.debug(f"병렬 실행 시작 [{name}]: {len(work)}개 작업, max_workers={max_workers}")

    try:
        pending: set[Future[UnitOutcome[T, R]]] = {executor.submit(_run_unit, func, item, token) for item in work}

        while pending:
            if token is not None and token.cancelled:
                raise ScanCancelledError(token.reason)

            timeout = None
            if token is not None:
                remaining = token.remaining()
                timeout = POLL_INTERVAL if remaining is None else min(POLL_INTERVAL, remaining)

            done, pending = wait(pending, timeout=timeout, return_when=FIRST_COMPLETED)
            for future in done:
                outcomes.append(future.result())

    except BaseException:
        # 취소/인터럽트: 대기열 작업 취소, 실행 중인 작업은 기다리지 않음
        executor.shutdown(wait=False, cancel_futures=True)
        raise

    executor.shutdown(wait=True)

    failed = sum(1 for o in outcomes if not o.success)
    logger.debug(f"병렬 실행 완료 [{name}]: 성공 {len(outcomes) - failed}, 실패 {failed}")

    return outcomes
