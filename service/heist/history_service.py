"""공격 기록/통계 서비스"""
import logging
from dataclasses import dataclass
from typing import List

from config.heist import Discipline
from models.attack_history import AttackHistory
from models.repos import history_repo

logger = logging.getLogger(__name__)


@dataclass
class AttackStats:
    """공격 통계"""
    attempts: int = 0
    successes: int = 0
    defended: int = 0
    total_stolen: int = 0
    total_fined: int = 0
    times_targeted: int = 0
    total_lost: int = 0

    @property
    def success_rate(self) -> float:
        if self.attempts == 0:
            return 0.0
        return self.successes / self.attempts * 100


class HistoryService:
    """공격 기록 저장 및 통계 조회"""

    @staticmethod
    async def record(outcome, now: float, using_db=None) -> AttackHistory:
        """
        공격 결과 기록

        Args:
            outcome: AttackOutcome
            now: 기록 시각 (epoch 초)
            using_db: 결과 반영 트랜잭션

        Returns:
            생성된 AttackHistory
        """
        history = await history_repo.append_history(
            using_db=using_db,
            guild_id=outcome.guild_id,
            discipline=outcome.discipline,
            attacker_id=outcome.attacker_id,
            target_id=outcome.target_id,
            success=outcome.success,
            amount=outcome.amount,
            defended=outcome.defended,
            awards_xp=outcome.awards_xp,
            progress=outcome.progress,
            created_at=now,
        )

        logger.info(
            f"Attack recorded: {outcome.discipline.value} {outcome.attacker_id} -> {outcome.target_id}, "
            f"success {outcome.success}, defended {outcome.defended}, amount {outcome.amount}"
        )
        return history

    @staticmethod
    async def get_stats(guild_id: int, user_id: int, discipline: Discipline) -> AttackStats:
        """유저의 공격/피격 통계"""
        stats = AttackStats()

        for row in await history_repo.get_attacks_by(guild_id, discipline, user_id):
            stats.attempts += 1
            if row.success:
                stats.successes += 1
                stats.total_stolen += row.amount
            else:
                stats.total_fined += row.amount
                if row.defended:
                    stats.defended += 1

        for row in await history_repo.get_attacks_on(guild_id, discipline, user_id):
            stats.times_targeted += 1
            if row.success:
                stats.total_lost += row.amount

        return stats

    @staticmethod
    async def get_recent(
        guild_id: int, user_id: int, discipline: Discipline, limit: int = 10
    ) -> List[AttackHistory]:
        return await history_repo.get_recent_involving(guild_id, discipline, user_id, limit)
