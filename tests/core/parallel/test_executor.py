"""
tests/core/parallel/test_executor.py - run_bounded / resolve_concurrency 테스트
"""

import threading
import time

import pytest

from core.exceptions import ScanCancelledError
from core.parallel.cancel import CancelToken
from core.parallel.executor import resolve_concurrency, run_bounded


class TestResolveConcurrency:
    """동시성 설정값 보정 테스트"""

    @pytest.mark.parametrize("value", [None, 0, -1, -100])
    def test_non_positive_falls_back(self, value):
        """0 이하/None은 기본값"""
        assert resolve_concurrency(value, 4) == 4

    def test_positive_kept(self):
        """양수는 그대로 사용"""
        assert resolve_concurrency(7, 4) == 7


class TestRunBounded:
    """run_bounded 테스트"""

    def test_empty_items(self):
        """빈 입력은 빈 결과"""
        assert run_bounded([], lambda x: x, max_workers=4) == []

    def test_all_items_complete(self):
        """모든 작업 결과 수집"""
        outcomes = run_bounded(range(10), lambda x: x * 2, max_workers=3)

        assert len(outcomes) == 10
        assert sorted(o.value for o in outcomes) == [x * 2 for x in range(10)]
        assert all(o.success for o in outcomes)

    def test_exception_captured_as_outcome(self):
        """작업 예외는 UnitOutcome.error로 수집되고 다른 작업은 계속"""

        def work(x):
            if x == 2:
                raise RuntimeError("boom")
            return x

        outcomes = run_bounded([1, 2, 3], work, max_workers=2)
        failed = [o for o in outcomes if not o.success]

        assert len(outcomes) == 3
        assert len(failed) == 1
        assert failed[0].item == 2
        assert isinstance(failed[0].error, RuntimeError)

    def test_invalid_max_workers(self):
        """max_workers < 1이면 ValueError"""
        with pytest.raises(ValueError):
            run_bounded([1], lambda x: x, max_workers=0)

    def test_concurrency_never_exceeds_limit(self):
        """동시 실행 수가 max_workers를 넘지 않음"""
        lock = threading.Lock()
        active = 0
        peak = 0

        def work(_):
            nonlocal active, peak
            with lock:
                active += 1
                peak = max(peak, active)
            time.sleep(0.02)
            with lock:
                active -= 1

        run_bounded(range(20), work, max_workers=3)

        assert 1 <= peak <= 3

    def test_cancel_raises(self):
        """대기 중 취소되면 ScanCancelledError"""
        token = CancelToken()
        release = threading.Event()

        def work(x):
            if x == 0:
                token.cancel("테스트 취소")
            release.wait(1)
            return x

        with pytest.raises(ScanCancelledError) as exc_info:
            run_bounded(range(5), work, max_workers=1, token=token)
        release.set()

        assert "테스트 취소" in str(exc_info.value)

    def test_already_cancelled_token(self):
        """이미 취소된 토큰이면 작업을 실행하지 않고 중단"""
        token = CancelToken()
        token.cancel()
        calls = []

        with pytest.raises(ScanCancelledError):
            run_bounded([1, 2], calls.append, max_workers=2, token=token)
