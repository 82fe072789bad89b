"""
해킹 공격

대상의 은행 잔고를 노리는 다단계 공격입니다.
진행도가 일정 주기로 오르며, 강탈액은 진행도에 비례합니다.
피해자는 진행도 80% 전까지 한 번 백신(방어)을 시도할 수 있고, 진행도가 낮을수록 성공률이 높습니다.
실패하거나 방어된 해킹은 역추적 창을 엽니다.
"""
import asyncio
import logging
from typing import Optional

from tortoise.transactions import in_transaction

from config.heist import Discipline
from models.repos.ledger_repo import BANK
from service.event.event_bus import HeistEventType
from service.heist.attack_types import AttackOutcome, AttackState, TraceResult
from service.heist.base_attack import BaseAttack
from service.heist.decision_window import DecisionWindow
from service.heist.history_service import HistoryService
from service.heist.outcome_calculator import OutcomeCalculator

logger = logging.getLogger(__name__)

# 이 진행도 이상이면 백신을 사용할 수 없음
DEFENSE_CUTOFF_PROGRESS = 80


class HackAttack(BaseAttack):
    """
    해킹 상태 머신

    진행도 틱과 피해자의 백신 입력이 경쟁합니다.
    - 백신 성공: 즉시 종료, 강탈 없음, 공격자 벌금
    - 백신 실패: 해킹 계속 (백신 기회 소진)
    - 진행도 100%: 성공 판정
    전달 실패나 취소로 틱이 중단되면 그 시점의 진행도로 성공 판정하며, 강탈액이 0이면 실패로 처리합니다.
    """

    discipline = Discipline.HACK

    def __init__(self, ctx, prepared):
        super().__init__(ctx, prepared)
        self.progress = 0
        self.defense = DecisionWindow(owner_id=prepared.target_id, timeout=None)
        self.trace = DecisionWindow(
            owner_id=prepared.target_id,
            timeout=prepared.settings.trace_window_seconds,
        )
        self.trace_result: Optional[TraceResult] = None
        self._defended = False
        self._defense_handled = False

    def submit_defense(self, user_id: int) -> bool:
        """
        피해자의 백신 시도

        Returns:
            입력이 받아들여졌는지 (이미 사용했거나 진행도 80% 이상이면 False)

        Raises:
            NotDecisionOwnerError: 피해자가 아닌 유저의 입력
        """
        return self.defense.submit(user_id, True)

    def submit_trace(self, user_id: int) -> bool:
        """피해자의 역추적 시도 (창이 열려있는 동안 한 번만)"""
        return self.trace.submit(user_id, True)

    @property
    def defense_chance(self) -> float:
        return OutcomeCalculator.hack_defense_chance(self.progress)

    async def _play(self) -> None:
        self.defense.open()
        self.state = AttackState.AWAITING_DEFENSE

        delivered = await self.publish(
            HeistEventType.HACK_STARTED,
            target_id=self.target_id,
            progress=self.progress,
            defense_chance=self.defense_chance,
            success_rate=self.prepared.success_rate,
        )
        if not delivered:
            logger.warning(f"Hack {self.attack_id} announcement not delivered, resolving at progress 0")
            return

        await self._run_ticks()

    async def _run_ticks(self) -> None:
        settings = self.settings
        sleeper = None
        try:
            while self.progress < 100:
                if sleeper is None:
                    sleeper = asyncio.ensure_future(asyncio.sleep(settings.tick_seconds))
                waiters = {sleeper}
                if not self._defense_handled:
                    waiters.add(self.defense.future)

                await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)

                if not self._defense_handled and self.defense.future.done():
                    self._defense_handled = True
                    decision = self.defense.future.result()
                    if not decision.timed_out and await self._process_defense():
                        return
                    if not sleeper.done():
                        continue

                sleeper = None
                self.progress = min(100, self.progress + settings.progress_step)
                if self.progress >= DEFENSE_CUTOFF_PROGRESS:
                    self.defense.close()

                delivered = await self.publish(
                    HeistEventType.HACK_PROGRESS,
                    progress=self.progress,
                    defense_chance=self.defense_chance,
                    defense_available=self.defense.is_open,
                )
                if not delivered:
                    logger.warning(
                        f"Hack {self.attack_id} progress update not delivered, resolving at {self.progress}%"
                    )
                    return
        finally:
            if sleeper is not None and not sleeper.done():
                sleeper.cancel()

    async def _process_defense(self) -> bool:
        """
        백신 판정

        Returns:
            방어 성공 여부
        """
        chance = self.defense_chance
        if OutcomeCalculator.roll(chance, self.ctx.rng):
            self._defended = True
            self.state = AttackState.DEFENDED
            await self.publish(
                HeistEventType.DEFENSE_ACCEPTED,
                user_id=self.target_id,
                progress=self.progress,
                rate=chance,
            )
            return True

        await self.publish(
            HeistEventType.DEFENSE_FAILED,
            user_id=self.target_id,
            progress=self.progress,
            rate=chance,
        )
        return False

    def _on_cancel(self) -> None:
        self.defense.close()

    async def _resolve(self) -> AttackOutcome:
        ctx = self.ctx
        settings = self.settings
        bonuses = self.prepared.bonuses

        attacker_balance = await ctx.ledger.get_balance(self.guild_id, self.attacker_id)
        target_balance = await ctx.ledger.get_balance(self.guild_id, self.target_id)

        steal = OutcomeCalculator.hack_steal(
            target_balance.bank,
            settings.max_steal_percent + bonuses.max_steal_bonus,
            self.progress,
            self.prepared.protection_percent,
        )

        outcome = AttackOutcome(
            guild_id=self.guild_id,
            discipline=self.discipline,
            attacker_id=self.attacker_id,
            target_id=self.target_id,
            success=False,
            amount=0,
            defended=self._defended,
            awards_xp=self.prepared.awards_xp,
            targets_still_needed=self.prepared.targets_still_needed,
            success_rate=self.prepared.success_rate,
            potential=steal.potential,
            progress=self.progress,
        )

        if not outcome.defended:
            self.state = AttackState.UNDEFENDED
            rolled = OutcomeCalculator.roll(self.prepared.success_rate, ctx.rng)
            # 강탈액이 0이면 (진행도 0에서 중단 등) 성공으로 치지 않음
            outcome.success = rolled and steal.amount > 0

        if outcome.success:
            outcome.amount = steal.amount
        else:
            outcome.amount = OutcomeCalculator.fine(
                steal.potential,
                settings.min_fine_percent,
                settings.max_fine_percent,
                bonuses.fine_reduction + self.prepared.item_fine_reduction,
                attacker_balance.total,
                rng=ctx.rng,
            )

        await self._commit(outcome)
        await ctx.registry.release(self.guild_id, self.target_id, self.discipline)
        return await self._finish(outcome)

    async def _commit(self, outcome: AttackOutcome) -> None:
        """잔고 변경, 기록, 피해자 보호(성공 시 설정, 실패 시 해제)를 하나의 트랜잭션으로 반영"""
        ctx = self.ctx
        guild_id = self.guild_id

        async with in_transaction() as conn:
            if outcome.success:
                await ctx.ledger.force_debit(guild_id, self.target_id, outcome.amount, "hack_victim", account=BANK)
                await ctx.ledger.credit(guild_id, self.attacker_id, outcome.amount, "hack_success")
                await ctx.eligibility.record_target_protection(
                    guild_id, self.target_id, self.discipline, using_db=conn
                )
            else:
                await ctx.ledger.apply_fine(guild_id, self.attacker_id, outcome.amount, "hack_fine")
                await ctx.eligibility.clear_target_protection(
                    guild_id, self.target_id, self.discipline, using_db=conn
                )

            await HistoryService.record(outcome, ctx.clock(), using_db=conn)

    async def _cleanup(self) -> None:
        self.defense.close()
        await self.ctx.registry.release(self.guild_id, self.target_id, self.discipline)

    # =========================================================================
    # 역추적
    # =========================================================================

    async def _after_resolved(self) -> None:
        if not self.outcome.can_trace:
            return

        self.trace.open()
        self.state = AttackState.TRACE_WINDOW_OPEN
        chance = OutcomeCalculator.trace_chance(self.prepared.bonuses.trace_reduction)
        try:
            delivered = await self.publish(
                HeistEventType.TRACE_OPENED,
                user_id=self.target_id,
                window_seconds=self.settings.trace_window_seconds,
                chance=chance,
            )
            if not delivered:
                self.trace.close()

            decision = await self.trace.wait()
            if decision.timed_out:
                self.trace_result = TraceResult(attempted=False, chance=chance)
            else:
                self.trace_result = await self._resolve_trace(chance)
        finally:
            self.trace.close()

        self.state = AttackState.TRACE_RESOLVED
        await self.publish(
            HeistEventType.TRACE_RESOLVED,
            user_id=self.target_id,
            trace=self.trace_result,
        )

    async def _resolve_trace(self, chance: float) -> TraceResult:
        """역추적 판정 (성공 시 예상 강탈액의 일부를 피해자에게 지급)"""
        rng = self.ctx.rng
        if not OutcomeCalculator.roll(chance, rng):
            return TraceResult(attempted=True, success=False, chance=chance)

        recovered = OutcomeCalculator.trace_recovery(self.outcome.potential, rng)
        await self.ctx.ledger.credit(self.guild_id, self.target_id, recovered, "hack_trace_recovery")
        logger.info(f"Hack {self.attack_id} traced by {self.target_id}, recovered {recovered}")
        return TraceResult(attempted=True, success=True, chance=chance, recovered=recovered)
