"""
강도/해킹 엔진

명령 계층 → 자격 검사 → 성공률 사전 계산 → (해킹) 대상 점유 → 상태 머신 실행 → 결과 반영

사용 예:
    attack = await engine.prepare_hack(guild_id, attacker_id, target_id)
    attack.events.subscribe(HeistEventType.HACK_PROGRESS, renderer.on_progress)
    await engine.launch(attack)
"""
import asyncio
import logging
import random
import time
from typing import Callable, Iterable, Set, Union

from tortoise.exceptions import BaseORMException

from config.heist import Discipline
from exceptions import (
    AttackerOnCooldownError,
    BotTargetError,
    FeatureDisabledError,
    InsufficientTargetFundsError,
    SelfTargetError,
    StorageUnavailableError,
    TargetFullyProtectedError,
    TargetImmuneError,
    TargetProtectedError,
    TargetUnderAttackError,
)
from models.active_effect import EffectKind
from models.repos.effect_repo import EffectRepository
from models.repos.ledger_repo import Ledger
from service.heist.attack_types import HeistContext, PreparedAttack
from service.heist.eligibility_service import EligibilityTracker
from service.heist.hack_service import HackAttack
from service.heist.operation_registry import ActiveOperationRegistry
from service.heist.outcome_calculator import OutcomeCalculator
from service.heist.rob_service import RobAttack
from service.heist.settings_store import SettingsStore
from service.skill.progression_service import SkillProgressionEngine

logger = logging.getLogger(__name__)

Attack = Union[RobAttack, HackAttack]

# 종류별 아이템 효과
PROTECTION_EFFECT = {
    Discipline.ROB: EffectKind.ROB_PROTECTION,
    Discipline.HACK: EffectKind.HACK_PROTECTION,
}
SUCCESS_BOOST_EFFECT = {
    Discipline.ROB: EffectKind.ROB_SUCCESS_BOOST,
    Discipline.HACK: EffectKind.HACK_SUCCESS_BOOST,
}
FINE_REDUCTION_EFFECT = {
    Discipline.ROB: EffectKind.ROB_FINE_REDUCTION,
    Discipline.HACK: EffectKind.HACK_FINE_REDUCTION,
}


class HeistEngine:
    """
    공격 엔진

    진행 중인 공격 Task를 소유하므로, 명령을 보낸 인터랙션이 사라져도 공격은 끝까지 진행됩니다.
    """

    def __init__(self, ctx: HeistContext):
        self.ctx = ctx
        self._tasks: Set[asyncio.Task] = set()

    @classmethod
    def create(cls, rng=random, clock: Callable[[], float] = time.time) -> "HeistEngine":
        """기본 협력 객체로 엔진 생성"""
        settings = SettingsStore()
        ledger = Ledger(clock=clock)
        effects = EffectRepository(clock=clock)
        ctx = HeistContext(
            ledger=ledger,
            settings=settings,
            eligibility=EligibilityTracker(settings, clock=clock),
            registry=ActiveOperationRegistry(),
            skills=SkillProgressionEngine(settings, ledger, effects, clock=clock),
            effects=effects,
            rng=rng,
            clock=clock,
        )
        return cls(ctx)

    @property
    def active_count(self) -> int:
        return len(self._tasks)

    # =========================================================================
    # 준비 (자격 검사)
    # =========================================================================

    async def prepare_rob(
        self,
        guild_id: int,
        attacker_id: int,
        target_id: int,
        target_is_bot: bool = False,
        target_role_ids: Iterable[int] = (),
    ) -> RobAttack:
        """
        강도 준비

        Raises:
            AttackNotAllowedError 계열: 자격 미달 (상태 변경 없음)
            StorageUnavailableError: 저장소 접근 실패
        """
        prepared = await self._preflight(
            guild_id, attacker_id, target_id, Discipline.ROB, target_is_bot, target_role_ids
        )
        return RobAttack(self.ctx, prepared)

    async def prepare_hack(
        self,
        guild_id: int,
        attacker_id: int,
        target_id: int,
        target_is_bot: bool = False,
        target_role_ids: Iterable[int] = (),
    ) -> HackAttack:
        """해킹 준비 (prepare_rob과 동일한 예외)"""
        prepared = await self._preflight(
            guild_id, attacker_id, target_id, Discipline.HACK, target_is_bot, target_role_ids
        )
        return HackAttack(self.ctx, prepared)

    async def _preflight(
        self,
        guild_id: int,
        attacker_id: int,
        target_id: int,
        discipline: Discipline,
        target_is_bot: bool,
        target_role_ids: Iterable[int],
    ) -> PreparedAttack:
        if attacker_id == target_id:
            raise SelfTargetError()
        if target_is_bot:
            raise BotTargetError()

        try:
            return await self._check_and_prepare(
                guild_id, attacker_id, target_id, discipline, target_role_ids
            )
        except BaseORMException as e:
            logger.error(f"Storage error during {discipline.value} preflight: {e}", exc_info=True)
            raise StorageUnavailableError() from e

    async def _check_and_prepare(
        self,
        guild_id: int,
        attacker_id: int,
        target_id: int,
        discipline: Discipline,
        target_role_ids: Iterable[int],
    ) -> PreparedAttack:
        ctx = self.ctx
        settings = await ctx.settings.get_attack_settings(guild_id, discipline)
        if not settings.enabled:
            raise FeatureDisabledError(discipline)

        immune_roles = await ctx.settings.get_immune_roles(guild_id, discipline)
        if immune_roles & set(target_role_ids):
            raise TargetImmuneError(discipline)

        skill_settings = await ctx.settings.get_skill_settings(guild_id)
        bonuses = await ctx.skills.get_bonuses(guild_id, attacker_id, discipline)

        cooldown = await ctx.eligibility.can_attack(
            guild_id, attacker_id, discipline, bonuses.cooldown_reduction
        )
        if not cooldown.allowed:
            raise AttackerOnCooldownError(discipline, cooldown.remaining_seconds)

        protection = await ctx.eligibility.can_be_targeted(guild_id, target_id, discipline)
        if not protection.allowed:
            raise TargetProtectedError(discipline, protection.remaining_seconds)

        protection_percent = await ctx.effects.get_modifier(guild_id, target_id, PROTECTION_EFFECT[discipline])
        if protection_percent >= 100:
            raise TargetFullyProtectedError(discipline)

        attacker_balance = await ctx.ledger.get_balance(guild_id, attacker_id)
        target_balance = await ctx.ledger.get_balance(guild_id, target_id)

        if discipline == Discipline.ROB and target_balance.cash <= 0:
            raise InsufficientTargetFundsError(discipline)
        if discipline == Discipline.HACK and target_balance.bank <= 0:
            raise InsufficientTargetFundsError(discipline)

        # 자격 검사를 모두 통과한 뒤에 끝난 훈련 반영 (레벨 보너스 갱신)
        training = await ctx.skills.check_training_complete(guild_id, attacker_id, discipline)
        if training is not None:
            bonuses = await ctx.skills.get_bonuses(guild_id, attacker_id, discipline)

        success_boost = await ctx.effects.get_modifier(guild_id, attacker_id, SUCCESS_BOOST_EFFECT[discipline])
        bonus = bonuses.success_rate_bonus + success_boost

        if discipline == Discipline.ROB:
            success_rate = OutcomeCalculator.rob_success_rate(
                target_balance.cash, attacker_balance.total, bonus
            )
        else:
            success_rate = OutcomeCalculator.hack_success_rate(
                target_balance.bank, attacker_balance.bank, bonus
            )

        victim = await ctx.eligibility.can_target_victim(guild_id, attacker_id, target_id, discipline)
        item_fine_reduction = await ctx.effects.get_modifier(
            guild_id, attacker_id, FINE_REDUCTION_EFFECT[discipline]
        )

        return PreparedAttack(
            guild_id=guild_id,
            attacker_id=attacker_id,
            target_id=target_id,
            discipline=discipline,
            settings=settings,
            skill_settings=skill_settings,
            bonuses=bonuses,
            success_rate=success_rate,
            protection_percent=protection_percent,
            item_fine_reduction=item_fine_reduction,
            awards_xp=victim.awards_xp,
            targets_still_needed=victim.targets_still_needed,
            training=training,
        )

    # =========================================================================
    # 실행
    # =========================================================================

    async def launch(self, attack: Attack) -> asyncio.Task:
        """
        공격 시작

        해킹은 대상 점유에 실패하면 TargetUnderAttackError를 발생시키며, 이때 쿨다운은 소모되지 않습니다.
        점유에 성공하면 공격자 쿨다운을 다시 확인해 즉시 기록하고 상태 머신을 엔진 소유 Task로 실행합니다.
        준비 이후 같은 공격자의 다른 공격이 먼저 시작되었다면 AttackerOnCooldownError가 발생합니다.

        Returns:
            공격 Task (결과는 AttackOutcome)
        """
        ctx = self.ctx
        claimed = False
        if attack.discipline == Discipline.HACK:
            claimed = await ctx.registry.try_claim(
                attack.guild_id, attack.target_id, attack.discipline, attack.attacker_id
            )
            if not claimed:
                raise TargetUnderAttackError(attack.target_id)

        try:
            cooldown = await ctx.eligibility.claim_attack_start(
                attack.guild_id,
                attack.attacker_id,
                attack.discipline,
                attack.prepared.bonuses.cooldown_reduction,
            )
        except BaseORMException as e:
            if claimed:
                await ctx.registry.release(attack.guild_id, attack.target_id, attack.discipline)
            logger.error(f"Failed to record attack start: {e}", exc_info=True)
            raise StorageUnavailableError() from e

        # 준비 이후 같은 공격자의 다른 공격이 먼저 시작됨
        if not cooldown.allowed:
            if claimed:
                await ctx.registry.release(attack.guild_id, attack.target_id, attack.discipline)
            raise AttackerOnCooldownError(attack.discipline, cooldown.remaining_seconds)

        task = asyncio.create_task(attack.run(), name=f"{attack.discipline.value}-{attack.attack_id}")
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

        logger.info(
            f"Attack {attack.attack_id} launched: {attack.discipline.value} "
            f"{attack.attacker_id} -> {attack.target_id} (rate {attack.prepared.success_rate:.1f}%)"
        )
        return task

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Attack task {task.get_name()} failed: {error}", exc_info=error)

    async def shutdown(self) -> None:
        """진행 중인 공격을 모두 취소 (각 공격은 현재 상태로 결과를 확정)"""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info(f"Heist engine shut down, {len(tasks)} attacks resolved early")
