"""
공격 베이스 클래스

강도/해킹 공격은 이 클래스를 상속받아 상태 머신을 구현합니다.
상태 전이는 공격별 EventBus로 발행되며, 표시 계층은 이를 구독해 메시지를 갱신합니다.
"""
import asyncio
import logging
import uuid
from abc import ABC, abstractmethod
from typing import Optional

from config.heist import Discipline
from service.event.event_bus import EventBus, HeistEvent, HeistEventType
from service.heist.attack_types import AttackOutcome, AttackState, HeistContext, PreparedAttack

logger = logging.getLogger(__name__)


class BaseAttack(ABC):
    """
    공격 베이스 클래스

    run()은 엔진이 소유한 Task에서 실행되므로, 명령을 보낸 유저의 세션이 끊겨도 끝까지 진행됩니다.
    Task가 취소되면 마지막으로 알려진 상태로 결과를 확정한 뒤 취소를 전파합니다.
    """

    discipline: Discipline

    def __init__(self, ctx: HeistContext, prepared: PreparedAttack):
        self.ctx = ctx
        self.prepared = prepared
        self.attack_id = uuid.uuid4().hex[:12]
        self.events = EventBus()
        self.state = AttackState.ANNOUNCED
        self.outcome: Optional[AttackOutcome] = None

    @property
    def guild_id(self) -> int:
        return self.prepared.guild_id

    @property
    def attacker_id(self) -> int:
        return self.prepared.attacker_id

    @property
    def target_id(self) -> int:
        return self.prepared.target_id

    @property
    def settings(self):
        return self.prepared.settings

    @property
    def is_resolved(self) -> bool:
        return self.outcome is not None

    async def run(self) -> AttackOutcome:
        """
        공격 실행

        Returns:
            확정된 AttackOutcome
        """
        try:
            await self._announce_training()
            await self._play()
            if self.outcome is None:
                await self._resolve()
        except asyncio.CancelledError:
            logger.warning(f"Attack {self.attack_id} cancelled in state {self.state.value}, resolving")
            self._on_cancel()
            if self.outcome is None:
                await self._resolve()
            raise
        finally:
            await self._cleanup()

        await self._after_resolved()
        return self.outcome

    @abstractmethod
    async def _play(self) -> None:
        """대화형 단계 (방어 대기, 진행도 틱 등)"""

    @abstractmethod
    async def _resolve(self) -> AttackOutcome:
        """현재 상태로 결과 확정 (정확히 한 번)"""

    def _on_cancel(self) -> None:
        """취소 시 대기 중인 결정 창 정리"""

    async def _cleanup(self) -> None:
        """종료 시 자원 정리 (레지스트리 해제 등)"""

    async def _after_resolved(self) -> None:
        """결과 확정 후 추가 단계 (역추적 등)"""

    # =========================================================================
    # 공통 처리
    # =========================================================================

    async def publish(self, event_type: HeistEventType, user_id: int = None, **data) -> bool:
        """이벤트 발행 (전달 실패 시 False)"""
        data.setdefault("attack_id", self.attack_id)
        return await self.events.publish(HeistEvent(
            type=event_type,
            user_id=user_id if user_id is not None else self.attacker_id,
            data=data,
        ))

    async def _announce_training(self) -> None:
        training = self.prepared.training
        if training is not None:
            await self.publish(
                HeistEventType.TRAINING_COMPLETED,
                discipline=self.discipline,
                training=training,
            )

    async def _award_xp(self, outcome: AttackOutcome) -> None:
        """반복 공격이 아니면 XP 지급"""
        if not outcome.awards_xp:
            return
        result = await self.ctx.skills.award_attack_xp(
            self.guild_id,
            self.attacker_id,
            self.discipline,
            success=outcome.success,
            amount_stolen=outcome.amount if outcome.success else 0,
        )
        outcome.xp = result
        if result.level_up:
            await self.publish(
                HeistEventType.LEVEL_UP,
                discipline=self.discipline,
                new_level=result.new_level,
            )

    async def _finish(self, outcome: AttackOutcome) -> AttackOutcome:
        """결과 확정 후 XP 지급 및 결과 발행"""
        self.outcome = outcome
        self.state = AttackState.RESOLVED
        try:
            await self._award_xp(outcome)
        except Exception as e:
            logger.error(f"Failed to award xp for attack {self.attack_id}: {e}", exc_info=True)
        await self.publish(HeistEventType.ATTACK_RESOLVED, outcome=outcome)

        logger.info(
            f"Attack {self.attack_id} resolved: {self.discipline.value} "
            f"{self.attacker_id} -> {self.target_id}, success {outcome.success}, "
            f"defended {outcome.defended}, amount {outcome.amount}"
        )
        return outcome
