"""
shared/aws/pricing/_lookup.py - 리전 가격표 조회 공통 로직
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from .constants import FALLBACK_REGION

logger = logging.getLogger(__name__)


def lookup_typed(table: Mapping[str, Mapping[str, float]], region: str, key: str) -> float | None:
    """{region: {key: price}} 표에서 가격 조회

    리전 표에 key가 없으면 us-east-1 가격을 사용합니다.

    Returns:
        가격 (어느 표에도 없으면 None)
    """
    regional = table.get(region)
    if regional is not None and key in regional:
        return regional[key]

    fallback = table.get(FALLBACK_REGION, {})
    if key in fallback:
        return fallback[key]

    logger.debug(f"가격 정보 없음: {key}/{region}")
    return None


def lookup_flat(table: Mapping[str, float], region: str) -> float | None:
    """{region: price} 표에서 가격 조회 (없으면 us-east-1)"""
    if region in table:
        return table[region]
    return table.get(FALLBACK_REGION)
