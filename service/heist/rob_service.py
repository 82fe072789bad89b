"""
강도 공격

대상의 현금을 노립니다. 피해자는 제한 시간 안에 세 가지 방어 중 하나를 선택할 수 있으며,
빠르게 반응할수록 방어 성공률이 높습니다.
"""
import logging
from typing import Optional

from tortoise.transactions import in_transaction

from config.heist import DefenseChoice, Discipline
from service.event.event_bus import HeistEventType
from service.heist.attack_types import AttackOutcome, AttackState
from service.heist.base_attack import BaseAttack
from service.heist.decision_window import Decision, DecisionWindow
from service.heist.history_service import HistoryService
from service.heist.outcome_calculator import OutcomeCalculator

logger = logging.getLogger(__name__)


class RobAttack(BaseAttack):
    """
    강도 상태 머신

    Announced → AwaitingDefenseChoice → (방어 성공) Defended → Resolved
                                      → (방어 실패/시간 초과) Undefended → Resolved
    방어 실패는 공격 성공을 보장하지 않으며, 공격 자체의 성공 판정이 그대로 적용됩니다.
    """

    discipline = Discipline.ROB

    def __init__(self, ctx, prepared):
        super().__init__(ctx, prepared)
        self.defense = DecisionWindow(
            owner_id=prepared.target_id,
            timeout=prepared.settings.defense_window_seconds,
        )
        self._decision: Optional[Decision] = None

    def submit_defense(self, user_id: int, choice: DefenseChoice) -> bool:
        """
        피해자의 방어 선택

        Returns:
            선택이 받아들여졌는지 (이미 결정되었으면 False)

        Raises:
            NotDecisionOwnerError: 피해자가 아닌 유저의 입력
        """
        return self.defense.submit(user_id, DefenseChoice(choice))

    async def _play(self) -> None:
        if not self.settings.defenses_enabled:
            self.state = AttackState.UNDEFENDED
            return

        self.defense.open()
        self.state = AttackState.AWAITING_DEFENSE
        delivered = await self.publish(
            HeistEventType.ROB_ANNOUNCED,
            target_id=self.target_id,
            window_seconds=self.settings.defense_window_seconds,
            success_rate=self.prepared.success_rate,
            choices=list(DefenseChoice),
        )
        if not delivered:
            # 피해자에게 방어 선택지를 보여주지 못했으므로 방어 없이 진행
            self.defense.close()

        self._decision = await self.defense.wait()

    def _on_cancel(self) -> None:
        self.defense.close()

    async def _resolve(self) -> AttackOutcome:
        ctx = self.ctx
        settings = self.settings
        bonuses = self.prepared.bonuses

        attacker_balance = await ctx.ledger.get_balance(self.guild_id, self.attacker_id)
        target_balance = await ctx.ledger.get_balance(self.guild_id, self.target_id)

        steal = OutcomeCalculator.rob_steal(
            target_balance.cash,
            settings.min_steal_percent + bonuses.min_steal_bonus,
            settings.max_steal_percent + bonuses.max_steal_bonus,
            self.prepared.protection_percent,
            rng=ctx.rng,
        )

        outcome = AttackOutcome(
            guild_id=self.guild_id,
            discipline=self.discipline,
            attacker_id=self.attacker_id,
            target_id=self.target_id,
            success=False,
            amount=0,
            awards_xp=self.prepared.awards_xp,
            targets_still_needed=self.prepared.targets_still_needed,
            success_rate=self.prepared.success_rate,
            potential=steal.amount,
        )

        decision = self._decision
        if decision is not None and not decision.timed_out:
            outcome.defense_choice = decision.choice
            outcome.defense_rate = OutcomeCalculator.rob_defense_rate(
                settings.defense_rate(decision.choice),
                decision.elapsed,
                settings.defense_window_seconds,
            )
            outcome.defended = OutcomeCalculator.roll(outcome.defense_rate, ctx.rng)

        if outcome.defended:
            self.state = AttackState.DEFENDED
            outcome.amount = OutcomeCalculator.defense_payout(decision.choice, steal.amount)
            await self.publish(
                HeistEventType.DEFENSE_ACCEPTED,
                user_id=self.target_id,
                choice=decision.choice,
                rate=outcome.defense_rate,
            )
        else:
            if outcome.defense_choice is not None:
                await self.publish(
                    HeistEventType.DEFENSE_FAILED,
                    user_id=self.target_id,
                    choice=outcome.defense_choice,
                    rate=outcome.defense_rate,
                )
            self.state = AttackState.UNDEFENDED
            outcome.success = OutcomeCalculator.roll(self.prepared.success_rate, ctx.rng)
            if outcome.success:
                outcome.amount = steal.amount
            else:
                outcome.amount = OutcomeCalculator.fine(
                    attacker_balance.total,
                    settings.fine_min_percent,
                    settings.fine_max_percent,
                    bonuses.fine_reduction + self.prepared.item_fine_reduction,
                    attacker_balance.total,
                    rng=ctx.rng,
                )

        await self._commit(outcome)
        return await self._finish(outcome)

    async def _commit(self, outcome: AttackOutcome) -> None:
        """잔고 변경, 기록, 피해자 보호를 하나의 트랜잭션으로 반영"""
        ctx = self.ctx
        guild_id = self.guild_id

        async with in_transaction() as conn:
            if outcome.defended:
                await ctx.ledger.force_debit(guild_id, self.attacker_id, outcome.amount, "rob_defense_payout")
                await ctx.ledger.credit(guild_id, self.target_id, outcome.amount, "rob_defense_payout")
            elif outcome.success:
                await ctx.ledger.force_debit(guild_id, self.target_id, outcome.amount, "rob_victim")
                await ctx.ledger.credit(guild_id, self.attacker_id, outcome.amount, "rob_success")
            else:
                await ctx.ledger.apply_fine(guild_id, self.attacker_id, outcome.amount, "rob_fine")

            await HistoryService.record(outcome, ctx.clock(), using_db=conn)
            await ctx.eligibility.record_target_protection(
                guild_id, self.target_id, self.discipline, using_db=conn
            )
