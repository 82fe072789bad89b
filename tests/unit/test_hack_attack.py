"""
해킹 공격 유닛 테스트

진행도 틱, 백신, 대상 점유, 역추적을 엔진을 통해 테스트합니다.
난수 소비 순서는 (백신 판정) → 성공 판정(방어되지 않은 경우) → (벌금 비율) → (역추적 판정 → 회수 비율)입니다.
"""
import asyncio

import pytest

from config.heist import Discipline
from exceptions import NotDecisionOwnerError, TargetProtectedError, TargetUnderAttackError
from models.attack_history import AttackHistory
from service.event.event_bus import HeistEventType
from tests.fixtures.heist import ATTACKER_ID, GUILD_ID, OTHER_ID, TARGET_ID


async def _run(engine, attack):
    task = await engine.launch(attack)
    return await task


async def _balance(engine, user_id):
    return await engine.ctx.ledger.get_balance(GUILD_ID, user_id)


class TestHackProgress:
    """진행도 / 결과 테스트"""

    async def test_full_hack_success(self, engine, balance_factory, rng):
        """진행도 100% 성공 → 은행 잔고의 5% 강탈, 대상 보호 설정"""
        await balance_factory(ATTACKER_ID, cash=10_000)
        await balance_factory(TARGET_ID, bank=100_000)
        rng.extend([0.1])
        progress = []

        attack = await engine.prepare_hack(GUILD_ID, ATTACKER_ID, TARGET_ID)
        assert attack.prepared.success_rate == pytest.approx(40)

        async def on_progress(event):
            progress.append(event.data["progress"])

        attack.events.subscribe(HeistEventType.HACK_PROGRESS, on_progress)
        outcome = await _run(engine, attack)

        assert progress == [20, 40, 60, 80, 100]
        assert outcome.success is True
        assert outcome.amount == 5_000
        assert (await _balance(engine, TARGET_ID)).bank == 95_000
        assert (await _balance(engine, ATTACKER_ID)).cash == 15_000
        assert attack.trace_result is None

        with pytest.raises(TargetProtectedError):
            await engine.prepare_hack(GUILD_ID, OTHER_ID, TARGET_ID)

    async def test_defense_closes_at_80_percent(self, engine, balance_factory, rng):
        await balance_factory(ATTACKER_ID, cash=10_000)
        await balance_factory(TARGET_ID, bank=100_000)
        rng.extend([0.1])
        available = []

        attack = await engine.prepare_hack(GUILD_ID, ATTACKER_ID, TARGET_ID)

        async def on_progress(event):
            available.append(event.data["defense_available"])

        attack.events.subscribe(HeistEventType.HACK_PROGRESS, on_progress)
        await _run(engine, attack)

        assert available == [True, True, True, False, False]
        assert attack.submit_defense(TARGET_ID) is False

    async def test_undelivered_progress_resolves_at_current_progress(self, engine, balance_factory, rng):
        """진행도 갱신 전달 실패 시 그 시점 진행도(20%)로 판정"""
        await balance_factory(ATTACKER_ID, cash=10_000)
        await balance_factory(TARGET_ID, bank=100_000)
        rng.extend([0.1])

        attack = await engine.prepare_hack(GUILD_ID, ATTACKER_ID, TARGET_ID)

        async def broken(event):
            raise RuntimeError("message edit failed")

        attack.events.subscribe(HeistEventType.HACK_PROGRESS, broken)
        outcome = await _run(engine, attack)

        assert outcome.progress == 20
        assert outcome.success is True
        assert outcome.amount == 1_000

    async def test_undelivered_start_is_not_a_theft(self, engine, balance_factory, rng):
        """시작 메시지 전달 실패 → 진행도 0, 성공 판정이 나와도 강탈액 0이므로 실패 처리"""
        await balance_factory(ATTACKER_ID, cash=10_000)
        await balance_factory(TARGET_ID, bank=100_000)
        rng.extend([0.1, 0.0])

        attack = await engine.prepare_hack(GUILD_ID, ATTACKER_ID, TARGET_ID)

        async def broken(event):
            raise RuntimeError("message send failed")

        attack.events.subscribe(HeistEventType.HACK_STARTED, broken)
        outcome = await _run(engine, attack)

        assert outcome.progress == 0
        assert outcome.success is False
        assert outcome.amount == 1
        assert outcome.xp.xp_gained == 8
        assert (await _balance(engine, TARGET_ID)).bank == 100_000
        assert (await _balance(engine, ATTACKER_ID)).cash == 9_999

        history = await AttackHistory.get(attacker_id=ATTACKER_ID)
        assert history.success is False
        assert history.progress == 0

        check = await engine.ctx.eligibility.can_be_targeted(GUILD_ID, TARGET_ID, Discipline.HACK)
        assert check.allowed is True


class TestHackDefense:
    """백신 테스트"""

    async def test_defended_at_40_percent(self, engine, balance_factory, rng):
        """
        진행도 40%에서 백신 성공
        예상 강탈액 = 100,000의 2% = 2,000, 벌금 17.5% = 350 → 공격자 현금 200 - 350 = -150
        """
        await balance_factory(ATTACKER_ID, cash=200)
        await balance_factory(TARGET_ID, bank=100_000)
        rng.extend([0.1, 0.5])
        accepted = []

        attack = await engine.prepare_hack(GUILD_ID, ATTACKER_ID, TARGET_ID)

        async def on_progress(event):
            if event.data["progress"] == 40:
                attack.submit_defense(TARGET_ID)

        async def on_accepted(event):
            accepted.append(event.data["rate"])

        attack.events.subscribe(HeistEventType.HACK_PROGRESS, on_progress)
        attack.events.subscribe(HeistEventType.DEFENSE_ACCEPTED, on_accepted)
        outcome = await _run(engine, attack)

        assert accepted == [40]
        assert outcome.defended is True
        assert outcome.success is False
        assert outcome.progress == 40
        assert outcome.potential == 2_000
        assert outcome.amount == 350
        assert (await _balance(engine, TARGET_ID)).bank == 100_000
        assert (await _balance(engine, ATTACKER_ID)).cash == -150
        assert attack.trace_result.attempted is False

    async def test_failed_defense_continues_hack(self, engine, balance_factory, rng):
        """백신 실패 후 해킹은 계속되고 두 번째 백신은 받지 않음"""
        await balance_factory(ATTACKER_ID, cash=10_000)
        await balance_factory(TARGET_ID, bank=100_000)
        rng.extend([0.99, 0.1])
        second_attempt = []

        attack = await engine.prepare_hack(GUILD_ID, ATTACKER_ID, TARGET_ID)

        async def on_progress(event):
            if event.data["progress"] == 20:
                attack.submit_defense(TARGET_ID)
            elif event.data["progress"] == 40:
                second_attempt.append(attack.submit_defense(TARGET_ID))

        attack.events.subscribe(HeistEventType.HACK_PROGRESS, on_progress)
        outcome = await _run(engine, attack)

        assert second_attempt == [False]
        assert outcome.progress == 100
        assert outcome.success is True

    async def test_only_target_may_defend(self, engine, balance_factory):
        await balance_factory(ATTACKER_ID, cash=10_000)
        await balance_factory(TARGET_ID, bank=100_000)

        attack = await engine.prepare_hack(GUILD_ID, ATTACKER_ID, TARGET_ID)
        with pytest.raises(NotDecisionOwnerError):
            attack.submit_defense(ATTACKER_ID)


class TestTargetClaim:
    """대상 점유 테스트"""

    async def test_second_hacker_rejected_without_cooldown(self, engine, balance_factory, rng):
        """이미 해킹 중인 대상은 거절되며, 거절된 공격자의 쿨다운은 소모되지 않음"""
        await balance_factory(ATTACKER_ID, cash=10_000)
        await balance_factory(OTHER_ID, cash=10_000)
        await balance_factory(TARGET_ID, bank=100_000)
        rng.extend([0.1])

        first = await engine.prepare_hack(GUILD_ID, ATTACKER_ID, TARGET_ID)
        second = await engine.prepare_hack(GUILD_ID, OTHER_ID, TARGET_ID)

        task = await engine.launch(first)
        with pytest.raises(TargetUnderAttackError):
            await engine.launch(second)

        check = await engine.ctx.eligibility.can_attack(GUILD_ID, OTHER_ID, Discipline.HACK)
        assert check.allowed is True

        await task
        assert not engine.ctx.registry.is_claimed(GUILD_ID, TARGET_ID, Discipline.HACK)

    async def test_claim_released_after_cancellation(self, engine, balance_factory, rng):
        await engine.ctx.settings.update(GUILD_ID, "hack", tick_seconds=10)
        await balance_factory(ATTACKER_ID, cash=10_000)
        await balance_factory(TARGET_ID, bank=100_000)
        rng.extend([0.99, 0.0])

        attack = await engine.prepare_hack(GUILD_ID, ATTACKER_ID, TARGET_ID)
        await engine.launch(attack)
        await asyncio.sleep(0.01)
        await engine.shutdown()

        assert attack.outcome.progress == 0
        assert attack.outcome.amount == 1
        assert not engine.ctx.registry.is_claimed(GUILD_ID, TARGET_ID, Discipline.HACK)


class TestTrace:
    """역추적 테스트"""

    async def test_trace_recovers_part_of_potential(self, engine, balance_factory, rng):
        """
        실패한 해킹 역추적 성공
        예상 강탈액 5,000, 벌금 15% = 750, 회수 10% = 500
        """
        await balance_factory(ATTACKER_ID, cash=10_000)
        await balance_factory(TARGET_ID, bank=100_000)
        rng.extend([0.99, 0.0, 0.0, 0.0])

        attack = await engine.prepare_hack(GUILD_ID, ATTACKER_ID, TARGET_ID)

        async def on_trace_opened(event):
            attack.submit_trace(TARGET_ID)

        attack.events.subscribe(HeistEventType.TRACE_OPENED, on_trace_opened)
        outcome = await _run(engine, attack)

        assert outcome.success is False
        assert outcome.amount == 750
        assert attack.trace_result.success is True
        assert attack.trace_result.recovered == 500
        assert (await _balance(engine, ATTACKER_ID)).cash == 9_250
        assert (await _balance(engine, TARGET_ID)).cash == 500

    async def test_trace_window_times_out(self, engine, balance_factory, rng):
        await balance_factory(ATTACKER_ID, cash=10_000)
        await balance_factory(TARGET_ID, bank=100_000)
        rng.extend([0.99, 0.0])
        resolved = []

        attack = await engine.prepare_hack(GUILD_ID, ATTACKER_ID, TARGET_ID)

        async def on_trace_resolved(event):
            resolved.append(event.data["trace"])

        attack.events.subscribe(HeistEventType.TRACE_RESOLVED, on_trace_resolved)
        await _run(engine, attack)

        assert len(resolved) == 1
        assert resolved[0].attempted is False
        assert attack.submit_trace(TARGET_ID) is False
