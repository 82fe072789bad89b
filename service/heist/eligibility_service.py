"""
공격 자격 / 쿨다운 추적

- 공격자 쿨다운: 공격 시작 즉시 기록, 스킬 레벨로 감소
- 피해자 보호: 결과 확정 후 기록 (강도는 항상, 해킹은 성공 시에만)
- 반복 공격 방지: 같은 대상을 다시 공격하기 전 서로 다른 대상을 일정 수 이상 공격해야 XP 지급
"""
import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from config.heist import Discipline
from models.repos import cooldown_repo, history_repo

logger = logging.getLogger(__name__)


@dataclass
class CooldownCheck:
    """쿨다운/보호 검사 결과"""
    allowed: bool
    remaining_seconds: Optional[float] = None


@dataclass
class VictimCheck:
    """
    반복 공격 검사 결과

    allowed는 항상 True입니다. 반복 공격은 XP만 막고 공격 자체는 허용합니다.
    """
    allowed: bool = True
    awards_xp: bool = True
    targets_still_needed: int = 0


@dataclass
class CooldownOverview:
    """길드 쿨다운 현황"""
    attackers: List[Tuple[int, float]] = field(default_factory=list)
    """(유저 ID, 남은 쿨다운 초)"""

    protected_targets: List[Tuple[int, float]] = field(default_factory=list)
    """(유저 ID, 남은 보호 시간 초)"""


def effective_cooldown(base_seconds: float, cooldown_reduction: float) -> float:
    """
    스킬 감소가 적용된 쿨다운

    공식: base * (1 - reduction / 100), 최소 0
    """
    return max(0.0, base_seconds * (1 - cooldown_reduction / 100))


class EligibilityTracker:
    """
    공격 자격 검사기

    Args:
        settings_store: 길드별 설정 저장소
        clock: epoch 초를 반환하는 시계
    """

    def __init__(self, settings_store, clock: Callable[[], float] = time.time):
        self._settings = settings_store
        self._clock = clock
        self._start_locks: Dict[Tuple[int, int, Discipline], asyncio.Lock] = {}

    async def can_attack(
        self,
        guild_id: int,
        attacker_id: int,
        discipline: Discipline,
        cooldown_reduction: float = 0.0,
    ) -> CooldownCheck:
        """공격자 쿨다운 검사"""
        settings = await self._settings.get_attack_settings(guild_id, discipline)
        last_action = await cooldown_repo.get_last_action(guild_id, attacker_id, discipline)
        if last_action is None:
            return CooldownCheck(allowed=True)

        cooldown = effective_cooldown(settings.cooldown_seconds, cooldown_reduction)
        remaining = last_action + cooldown - self._clock()
        if remaining > 0:
            return CooldownCheck(allowed=False, remaining_seconds=remaining)
        return CooldownCheck(allowed=True)

    async def can_be_targeted(self, guild_id: int, target_id: int, discipline: Discipline) -> CooldownCheck:
        """피해자 보호 시간 검사"""
        settings = await self._settings.get_attack_settings(guild_id, discipline)
        last_targeted = await cooldown_repo.get_last_targeted(guild_id, target_id, discipline)
        if last_targeted is None:
            return CooldownCheck(allowed=True)

        remaining = last_targeted + settings.protection_seconds - self._clock()
        if remaining > 0:
            return CooldownCheck(allowed=False, remaining_seconds=remaining)
        return CooldownCheck(allowed=True)

    async def can_target_victim(
        self,
        guild_id: int,
        attacker_id: int,
        target_id: int,
        discipline: Discipline,
    ) -> VictimCheck:
        """
        반복 공격 검사

        해당 대상에 대한 마지막 공격 이후(초과) 공격한 서로 다른 대상 수가
        요구치 미만이면 XP를 지급하지 않습니다.
        """
        settings = await self._settings.get_attack_settings(guild_id, discipline)
        required = settings.unique_targets_required
        if required <= 0:
            return VictimCheck()

        last_attack = await history_repo.get_last_attack_time(guild_id, discipline, attacker_id, target_id)
        if last_attack is None:
            return VictimCheck()

        distinct = await history_repo.count_distinct_targets_since(
            guild_id, discipline, attacker_id, last_attack
        )
        if distinct < required:
            return VictimCheck(awards_xp=False, targets_still_needed=required - distinct)
        return VictimCheck()

    # =========================================================================
    # 기록
    # =========================================================================

    async def record_attack_start(self, guild_id: int, attacker_id: int, discipline: Discipline) -> None:
        """공격 시작 즉시 공격자 쿨다운 기록"""
        await cooldown_repo.set_last_action(guild_id, attacker_id, discipline, self._clock())

    async def claim_attack_start(
        self,
        guild_id: int,
        attacker_id: int,
        discipline: Discipline,
        cooldown_reduction: float = 0.0,
    ) -> CooldownCheck:
        """
        쿨다운 재검사 후 공격 시작 기록 (확인-후-설정)

        같은 공격자가 동시에 여러 공격을 시작해도 하나만 기록됩니다.

        Returns:
            허용되면 기록 후 allowed=True, 쿨다운 중이면 기록 없이 남은 시간 반환
        """
        lock = self._start_locks.setdefault((guild_id, attacker_id, discipline), asyncio.Lock())
        async with lock:
            check = await self.can_attack(guild_id, attacker_id, discipline, cooldown_reduction)
            if check.allowed:
                await self.record_attack_start(guild_id, attacker_id, discipline)
            else:
                logger.debug(f"Attack start rejected: {attacker_id} on {discipline.value} cooldown")
        return check

    async def record_target_protection(
        self, guild_id: int, target_id: int, discipline: Discipline, using_db=None
    ) -> None:
        await cooldown_repo.set_last_targeted(guild_id, target_id, discipline, self._clock(), using_db=using_db)

    async def clear_target_protection(
        self, guild_id: int, target_id: int, discipline: Discipline, using_db=None
    ) -> None:
        await cooldown_repo.clear_last_targeted(guild_id, target_id, discipline, using_db=using_db)

    # =========================================================================
    # 현황
    # =========================================================================

    async def list_active_cooldowns(self, guild_id: int, discipline: Discipline) -> CooldownOverview:
        """
        쿨다운 중인 공격자와 보호 중인 피해자 목록

        공격자 쿨다운은 스킬 감소 전 기본값 기준입니다.
        """
        settings = await self._settings.get_attack_settings(guild_id, discipline)
        now = self._clock()

        attackers = await cooldown_repo.list_recent_attackers(
            guild_id, discipline, now - settings.cooldown_seconds
        )
        targets = await cooldown_repo.list_recent_targets(
            guild_id, discipline, now - settings.protection_seconds
        )
        return CooldownOverview(
            attackers=[(user_id, at + settings.cooldown_seconds - now) for user_id, at in attackers],
            protected_targets=[(user_id, at + settings.protection_seconds - now) for user_id, at in targets],
        )
