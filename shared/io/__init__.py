"""입출력 유틸리티.

하위 모듈:
- output: 스캔 리포트 출력 (text, json, sarif)
"""

from . import output

__all__: list[str] = ["output"]
