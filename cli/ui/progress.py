"""
cli/ui/progress.py - 스캔 진행 표시

ScanProgress 이벤트를 받아 rich 스피너 한 줄로 표시합니다.
콜백은 워커 스레드에서 호출되므로 상태 갱신은 잠금 안에서만 합니다.
"""

from __future__ import annotations

import threading
from types import TracebackType

from rich.status import Status

from core.scan.types import ScanProgress

from .console import console


class ScanProgressDisplay:
    """스캔 진행 스피너

    Example:
        with ScanProgressDisplay(total_regions=3, enabled=True) as progress:
            scanner = MultiRegionScanner(..., on_progress=progress.update)
            scanner.scan_all()
    """

    def __init__(self, total_regions: int, enabled: bool = True):
        self.total_regions = total_regions
        self.enabled = enabled
        self._lock = threading.Lock()
        self._completed = 0
        self._failed_regions: set[str] = set()
        self._status: Status | None = None

    def __enter__(self) -> ScanProgressDisplay:
        if self.enabled:
            self._status = console.status(self._render("스캔 준비 중"), spinner="dots")
            self._status.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._status is not None:
            self._status.stop()
            self._status = None

    def update(self, event: ScanProgress) -> None:
        """on_progress 콜백"""
        with self._lock:
            if not event.scanner:
                self._failed_regions.add(event.region)
            elif event.message.startswith("완료") or event.message == "실패":
                self._completed += 1
            label = f"{event.region}/{event.scanner}" if event.scanner else event.region
            text = self._render(f"{label}: {event.message}")
            if self._status is not None:
                self._status.update(text)

    @property
    def completed_scanners(self) -> int:
        with self._lock:
            return self._completed

    def _render(self, detail: str) -> str:
        return f"[bold cyan]스캔 중[/bold cyan] [dim]({self.total_regions}개 리전, 스캐너 {self._completed}개 완료)[/dim] {detail}"
