"""
tests/core/parallel/test_cancel.py - CancelToken 테스트
"""

import time

import pytest

from core.exceptions import ScanCancelledError
from core.parallel.cancel import CancelToken


class TestCancelToken:
    """CancelToken 테스트"""

    def test_initial_state(self):
        """생성 직후에는 취소되지 않음"""
        token = CancelToken()

        assert token.cancelled is False
        assert token.remaining() is None
        token.raise_if_cancelled()

    def test_cancel_keeps_first_reason(self):
        """여러 번 취소해도 첫 사유 유지"""
        token = CancelToken()
        token.cancel("first")
        token.cancel("second")

        assert token.cancelled is True
        assert token.reason == "first"

    def test_raise_if_cancelled(self):
        """취소 후 raise_if_cancelled는 ScanCancelledError"""
        token = CancelToken()
        token.cancel("중단")

        with pytest.raises(ScanCancelledError, match="중단"):
            token.raise_if_cancelled()

    def test_deadline_expires(self):
        """deadline이 지나면 타임아웃 사유로 취소"""
        token = CancelToken.with_timeout(0.01)
        time.sleep(0.03)

        assert token.cancelled is True
        assert token.reason == "스캔 타임아웃 초과"
        assert token.remaining() == 0.0

    @pytest.mark.parametrize("seconds", [None, 0, -5])
    def test_no_timeout(self, seconds):
        """타임아웃이 없으면 deadline 없음"""
        token = CancelToken.with_timeout(seconds)

        assert token.remaining() is None
        assert token.cancelled is False

    def test_wait_returns_on_cancel(self):
        """wait는 취소되면 True"""
        token = CancelToken()
        token.cancel()

        assert token.wait(0.01) is True

    def test_wait_times_out(self):
        """취소되지 않으면 timeout 후 False"""
        assert CancelToken().wait(0.01) is False
