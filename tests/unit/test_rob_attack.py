"""
강도 공격 유닛 테스트

자격 검사, 방어 선택, 결과 반영을 엔진을 통해 테스트합니다.
난수는 SequenceRandom으로 고정하며, 소비 순서는 강탈 비율 → (방어 판정) → 성공 판정 → (벌금 비율)입니다.
"""
import asyncio

import pytest

from config.heist import DefenseChoice, Discipline
from exceptions import (
    AttackerOnCooldownError,
    BotTargetError,
    FeatureDisabledError,
    InsufficientTargetFundsError,
    NotDecisionOwnerError,
    SelfTargetError,
    TargetFullyProtectedError,
    TargetImmuneError,
    TargetProtectedError,
)
from models.active_effect import EffectKind
from models.attack_history import AttackHistory
from models.heist_cooldown import AttackerCooldown
from service.event.event_bus import HeistEventType
from service.heist.history_service import HistoryService
from tests.fixtures.heist import ATTACKER_ID, GUILD_ID, OTHER_ID, TARGET_ID


@pytest.fixture
async def funded(balance_factory):
    """공격자 현금 5,000 / 피해자 현금 10,000"""
    await balance_factory(ATTACKER_ID, cash=5_000)
    await balance_factory(TARGET_ID, cash=10_000)


async def _run(engine, attack):
    task = await engine.launch(attack)
    return await task


async def _balances(engine):
    attacker = await engine.ctx.ledger.get_balance(GUILD_ID, ATTACKER_ID)
    target = await engine.ctx.ledger.get_balance(GUILD_ID, TARGET_ID)
    return attacker, target


class TestPreflight:
    """자격 검사 테스트 (실패 시 상태 변경 없음)"""

    async def test_self_target(self, engine):
        with pytest.raises(SelfTargetError):
            await engine.prepare_rob(GUILD_ID, ATTACKER_ID, ATTACKER_ID)

    async def test_bot_target(self, engine):
        with pytest.raises(BotTargetError):
            await engine.prepare_rob(GUILD_ID, ATTACKER_ID, TARGET_ID, target_is_bot=True)

    async def test_feature_disabled(self, engine, funded):
        await engine.ctx.settings.update(GUILD_ID, "rob", enabled=False)
        with pytest.raises(FeatureDisabledError):
            await engine.prepare_rob(GUILD_ID, ATTACKER_ID, TARGET_ID)

    async def test_immune_role(self, engine, funded):
        await engine.ctx.settings.add_immune_role(GUILD_ID, 555, Discipline.ROB)
        with pytest.raises(TargetImmuneError):
            await engine.prepare_rob(GUILD_ID, ATTACKER_ID, TARGET_ID, target_role_ids=[1, 555])

    async def test_target_without_cash(self, engine, balance_factory):
        await balance_factory(ATTACKER_ID, cash=5_000)
        await balance_factory(TARGET_ID, cash=0, bank=50_000)
        with pytest.raises(InsufficientTargetFundsError):
            await engine.prepare_rob(GUILD_ID, ATTACKER_ID, TARGET_ID)

    async def test_full_protection_item(self, engine, funded):
        await engine.ctx.effects.grant(GUILD_ID, TARGET_ID, EffectKind.ROB_PROTECTION, 100)
        with pytest.raises(TargetFullyProtectedError):
            await engine.prepare_rob(GUILD_ID, ATTACKER_ID, TARGET_ID)

    async def test_rejection_has_no_side_effects(self, engine, funded):
        await engine.ctx.settings.add_immune_role(GUILD_ID, 555, Discipline.ROB)
        with pytest.raises(TargetImmuneError):
            await engine.prepare_rob(GUILD_ID, ATTACKER_ID, TARGET_ID, target_role_ids=[555])

        assert await AttackerCooldown.all().count() == 0
        assert await AttackHistory.all().count() == 0

    async def test_success_rate_precomputed(self, engine, funded):
        attack = await engine.prepare_rob(GUILD_ID, ATTACKER_ID, TARGET_ID)
        assert attack.prepared.success_rate == pytest.approx(66.67, abs=0.01)
        assert attack.prepared.awards_xp is True


class TestUndefendedRob:
    """방어 없는 강도 테스트"""

    async def test_successful_rob(self, engine, funded, rng):
        """현금 10,000 대상, 50% 강탈 → 공격자 +5,000 / 대상 5,000"""
        await engine.ctx.settings.update(GUILD_ID, "rob", defenses_enabled=False)
        rng.extend([0.5, 0.1])

        attack = await engine.prepare_rob(GUILD_ID, ATTACKER_ID, TARGET_ID)
        outcome = await _run(engine, attack)

        assert outcome.success is True
        assert outcome.amount == 5_000
        attacker, target = await _balances(engine)
        assert attacker.cash == 10_000
        assert target.cash == 5_000

    async def test_failed_rob_fines_attacker(self, engine, funded, rng):
        """실패 시 공격자 총자산의 10% 벌금"""
        await engine.ctx.settings.update(GUILD_ID, "rob", defenses_enabled=False)
        rng.extend([0.5, 0.99, 0.0])

        attack = await engine.prepare_rob(GUILD_ID, ATTACKER_ID, TARGET_ID)
        outcome = await _run(engine, attack)

        assert outcome.success is False
        assert outcome.fined is True
        assert outcome.amount == 500
        attacker, target = await _balances(engine)
        assert attacker.cash == 4_500
        assert target.cash == 10_000

    async def test_results_recorded(self, engine, funded, rng):
        """기록, XP, 공격자 쿨다운, 대상 보호가 모두 반영됨"""
        await engine.ctx.settings.update(GUILD_ID, "rob", defenses_enabled=False)
        rng.extend([0.5, 0.1])

        attack = await engine.prepare_rob(GUILD_ID, ATTACKER_ID, TARGET_ID)
        await _run(engine, attack)

        stats = await HistoryService.get_stats(GUILD_ID, ATTACKER_ID, Discipline.ROB)
        assert stats.attempts == 1
        assert stats.total_stolen == 5_000

        status = await engine.ctx.skills.get_status(GUILD_ID, ATTACKER_ID, Discipline.ROB)
        assert status.xp == 25

        with pytest.raises(AttackerOnCooldownError):
            await engine.prepare_rob(GUILD_ID, ATTACKER_ID, TARGET_ID)
        with pytest.raises(TargetProtectedError):
            await engine.prepare_rob(GUILD_ID, OTHER_ID, TARGET_ID)

    async def test_exactly_one_resolution_event(self, engine, funded, rng):
        await engine.ctx.settings.update(GUILD_ID, "rob", defenses_enabled=False)
        rng.extend([0.5, 0.1])
        resolved = []

        async def on_resolved(event):
            resolved.append(event.data["outcome"])

        attack = await engine.prepare_rob(GUILD_ID, ATTACKER_ID, TARGET_ID)
        attack.events.subscribe(HeistEventType.ATTACK_RESOLVED, on_resolved)
        await _run(engine, attack)

        assert len(resolved) == 1


class TestDefense:
    """피해자 방어 테스트"""

    async def test_dodge_pays_consolation(self, engine, funded, rng):
        """회피 성공 → 예상 강탈액 5,000의 15%를 공격자가 대상에게 지급"""
        rng.extend([0.5, 0.0])
        attack = await engine.prepare_rob(GUILD_ID, ATTACKER_ID, TARGET_ID)

        async def on_announced(event):
            attack.submit_defense(TARGET_ID, DefenseChoice.DODGE)

        attack.events.subscribe(HeistEventType.ROB_ANNOUNCED, on_announced)
        outcome = await _run(engine, attack)

        assert outcome.defended is True
        assert outcome.success is False
        assert outcome.defense_choice == DefenseChoice.DODGE
        assert outcome.amount == 750
        attacker, target = await _balances(engine)
        assert attacker.cash == 4_250
        assert target.cash == 10_750

    async def test_hide_cash_pays_nothing(self, engine, funded, rng):
        rng.extend([0.5, 0.0])
        attack = await engine.prepare_rob(GUILD_ID, ATTACKER_ID, TARGET_ID)

        async def on_announced(event):
            attack.submit_defense(TARGET_ID, DefenseChoice.HIDE_CASH)

        attack.events.subscribe(HeistEventType.ROB_ANNOUNCED, on_announced)
        outcome = await _run(engine, attack)

        assert outcome.defended is True
        assert outcome.amount == 0
        attacker, target = await _balances(engine)
        assert attacker.cash == 5_000
        assert target.cash == 10_000

    async def test_failed_defense_falls_back_to_success_roll(self, engine, funded, rng):
        """방어 실패는 공격 성공을 보장하지 않고 성공 판정으로 이어짐"""
        rng.extend([0.5, 0.99, 0.1])
        failures = []
        attack = await engine.prepare_rob(GUILD_ID, ATTACKER_ID, TARGET_ID)

        async def on_announced(event):
            attack.submit_defense(TARGET_ID, DefenseChoice.FIGHT_BACK)

        async def on_failed(event):
            failures.append(event.data["choice"])

        attack.events.subscribe(HeistEventType.ROB_ANNOUNCED, on_announced)
        attack.events.subscribe(HeistEventType.DEFENSE_FAILED, on_failed)
        outcome = await _run(engine, attack)

        assert failures == [DefenseChoice.FIGHT_BACK]
        assert outcome.defended is False
        assert outcome.success is True
        assert outcome.amount == 5_000

    async def test_timeout_means_no_defense(self, engine, funded, rng):
        rng.extend([0.5, 0.1])
        attack = await engine.prepare_rob(GUILD_ID, ATTACKER_ID, TARGET_ID)
        outcome = await _run(engine, attack)

        assert outcome.defense_choice is None
        assert outcome.success is True

    async def test_late_submission_ignored(self, engine, funded, rng):
        rng.extend([0.5, 0.1])
        attack = await engine.prepare_rob(GUILD_ID, ATTACKER_ID, TARGET_ID)
        await _run(engine, attack)

        assert attack.submit_defense(TARGET_ID, DefenseChoice.DODGE) is False

    async def test_only_target_may_defend(self, engine, funded):
        attack = await engine.prepare_rob(GUILD_ID, ATTACKER_ID, TARGET_ID)
        with pytest.raises(NotDecisionOwnerError):
            attack.submit_defense(OTHER_ID, DefenseChoice.DODGE)

    async def test_undelivered_announcement_skips_defense(self, engine, funded, rng):
        """방어 선택지를 보여주지 못하면 방어 없이 바로 판정"""
        rng.extend([0.5, 0.1])
        attack = await engine.prepare_rob(GUILD_ID, ATTACKER_ID, TARGET_ID)

        async def broken(event):
            raise RuntimeError("message send failed")

        attack.events.subscribe(HeistEventType.ROB_ANNOUNCED, broken)
        outcome = await _run(engine, attack)

        assert outcome.defense_choice is None
        assert outcome.success is True


class TestCancellation:
    """엔진 종료 시 진행 중인 강도 처리"""

    async def test_shutdown_resolves_pending_rob(self, engine, funded, rng):
        await engine.ctx.settings.update(GUILD_ID, "rob", defense_window_seconds=30)
        rng.extend([0.5, 0.1])

        attack = await engine.prepare_rob(GUILD_ID, ATTACKER_ID, TARGET_ID)
        await engine.launch(attack)
        await asyncio.sleep(0.01)

        await engine.shutdown()

        assert attack.outcome is not None
        assert attack.outcome.success is True
        assert engine.active_count == 0
        assert await AttackHistory.all().count() == 1


class TestConcurrentStart:
    """같은 공격자의 동시 공격 시작"""

    async def test_second_launch_from_same_attacker_rejected(self, engine, funded, balance_factory, rng):
        """준비를 둘 다 통과해도 먼저 시작한 공격만 진행되고 쿨다운이 지켜짐"""
        await balance_factory(OTHER_ID, cash=10_000)
        await engine.ctx.settings.update(GUILD_ID, "rob", defenses_enabled=False)
        rng.extend([0.5, 0.1])

        first = await engine.prepare_rob(GUILD_ID, ATTACKER_ID, TARGET_ID)
        second = await engine.prepare_rob(GUILD_ID, ATTACKER_ID, OTHER_ID)

        results = await asyncio.gather(
            engine.launch(first), engine.launch(second), return_exceptions=True
        )
        tasks = [r for r in results if isinstance(r, asyncio.Task)]
        errors = [r for r in results if isinstance(r, AttackerOnCooldownError)]
        assert len(tasks) == 1
        assert len(errors) == 1

        await tasks[0]
        assert await AttackHistory.all().count() == 1

    async def test_launch_after_other_attack_started(self, engine, funded, balance_factory, rng):
        await balance_factory(OTHER_ID, cash=10_000)
        await engine.ctx.settings.update(GUILD_ID, "rob", defenses_enabled=False)
        rng.extend([0.5, 0.1])

        first = await engine.prepare_rob(GUILD_ID, ATTACKER_ID, TARGET_ID)
        second = await engine.prepare_rob(GUILD_ID, ATTACKER_ID, OTHER_ID)

        task = await engine.launch(first)
        with pytest.raises(AttackerOnCooldownError):
            await engine.launch(second)
        await task

        other = await engine.ctx.ledger.get_balance(GUILD_ID, OTHER_ID)
        assert other.cash == 10_000
        assert second.outcome is None


class TestAntiFarming:
    """같은 대상 반복 공격 (공격은 진행, XP만 없음)"""

    async def test_repeat_target_runs_without_xp(self, engine, funded, rng, clock):
        await engine.ctx.settings.update(GUILD_ID, "rob", defenses_enabled=False)
        rng.extend([0.5, 0.1, 0.5, 0.1])

        first = await engine.prepare_rob(GUILD_ID, ATTACKER_ID, TARGET_ID)
        await _run(engine, first)
        status = await engine.ctx.skills.get_status(GUILD_ID, ATTACKER_ID, Discipline.ROB)
        assert status.xp == 25

        # 공격자 쿨다운(240분)과 대상 보호(60초) 이후
        clock.advance(240 * 60 + 61)

        second = await engine.prepare_rob(GUILD_ID, ATTACKER_ID, TARGET_ID)
        assert second.prepared.awards_xp is False
        assert second.prepared.targets_still_needed == 3

        outcome = await _run(engine, second)

        assert outcome.success is True
        assert outcome.amount == 2_500
        assert outcome.awards_xp is False
        assert outcome.xp is None

        status = await engine.ctx.skills.get_status(GUILD_ID, ATTACKER_ID, Discipline.ROB)
        assert status.xp == 25
        assert await AttackHistory.filter(awards_xp=False).count() == 1


class TestTrainingPoll:
    """준비 단계의 훈련 완료 반영"""

    async def test_rejected_preflight_leaves_training_pending(self, engine, balance_factory, clock):
        await balance_factory(ATTACKER_ID, cash=20_000)
        await balance_factory(TARGET_ID, cash=0)
        await engine.ctx.skills.start_training(GUILD_ID, ATTACKER_ID, Discipline.ROB)
        clock.advance(3601)

        with pytest.raises(InsufficientTargetFundsError):
            await engine.prepare_rob(GUILD_ID, ATTACKER_ID, TARGET_ID)

        status = await engine.ctx.skills.get_status(GUILD_ID, ATTACKER_ID, Discipline.ROB)
        assert status.xp == 0
        assert status.training_xp_reward == 75

    async def test_accepted_preflight_completes_training(self, engine, balance_factory, clock):
        await balance_factory(ATTACKER_ID, cash=20_000)
        await balance_factory(TARGET_ID, cash=10_000)
        await engine.ctx.skills.start_training(GUILD_ID, ATTACKER_ID, Discipline.ROB)
        clock.advance(3601)

        attack = await engine.prepare_rob(GUILD_ID, ATTACKER_ID, TARGET_ID)

        assert attack.prepared.training is not None
        assert attack.prepared.training.xp_gained == 75
