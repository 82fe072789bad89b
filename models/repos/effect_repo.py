"""
ActiveEffect Repository

아이템 효과 수치를 조회합니다. 엔진은 이 값을 불투명한 퍼센트로만 취급합니다.
"""
import time
from typing import Callable, Optional

from tortoise.expressions import Q

from models.active_effect import ActiveEffect, EffectKind


class EffectRepository:
    """아이템 효과 조회/부여"""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock

    async def get_modifier(self, guild_id: int, user_id: int, effect_kind: EffectKind) -> float:
        """
        만료되지 않은 효과 중 가장 큰 값

        Returns:
            효과 수치 (%), 없으면 0
        """
        values = await ActiveEffect.filter(
            Q(expires_at__isnull=True) | Q(expires_at__gt=self._clock()),
            guild_id=guild_id,
            user_id=user_id,
            effect_kind=effect_kind,
        ).values_list("value", flat=True)
        return max(values, default=0.0)

    async def grant(
        self,
        guild_id: int,
        user_id: int,
        effect_kind: EffectKind,
        value: float,
        duration_seconds: Optional[float] = None,
    ) -> ActiveEffect:
        expires_at = self._clock() + duration_seconds if duration_seconds is not None else None
        return await ActiveEffect.create(
            guild_id=guild_id,
            user_id=user_id,
            effect_kind=effect_kind,
            value=value,
            expires_at=expires_at,
        )

    async def cleanup_expired(self) -> int:
        return await ActiveEffect.filter(expires_at__lt=self._clock()).delete()
