"""
AttackHistory Repository

공격 기록 추가 및 조회 레이어입니다.
"""
from typing import List, Optional

from tortoise.expressions import Q

from config.heist import Discipline
from models.attack_history import AttackHistory


async def append_history(using_db=None, **values) -> AttackHistory:
    return await AttackHistory.create(using_db=using_db, **values)


async def get_last_attack_time(
    guild_id: int, discipline: Discipline, attacker_id: int, target_id: int
) -> Optional[float]:
    """
    공격자가 해당 대상을 마지막으로 공격한 시각 (결과 무관)

    Returns:
        epoch 초 또는 None (공격 기록 없음)
    """
    row = await AttackHistory.filter(
        guild_id=guild_id,
        discipline=discipline,
        attacker_id=attacker_id,
        target_id=target_id,
    ).order_by("-created_at").first()
    return row.created_at if row else None


async def count_distinct_targets_since(
    guild_id: int, discipline: Discipline, attacker_id: int, since: float
) -> int:
    """since 이후(초과) 공격한 서로 다른 대상 수"""
    target_ids = await AttackHistory.filter(
        guild_id=guild_id,
        discipline=discipline,
        attacker_id=attacker_id,
        created_at__gt=since,
    ).values_list("target_id", flat=True)
    return len(set(target_ids))


async def get_attacks_by(guild_id: int, discipline: Discipline, attacker_id: int) -> List[AttackHistory]:
    return await AttackHistory.filter(
        guild_id=guild_id, discipline=discipline, attacker_id=attacker_id
    ).all()


async def get_attacks_on(guild_id: int, discipline: Discipline, target_id: int) -> List[AttackHistory]:
    return await AttackHistory.filter(
        guild_id=guild_id, discipline=discipline, target_id=target_id
    ).all()


async def get_recent_involving(
    guild_id: int, discipline: Discipline, user_id: int, limit: int
) -> List[AttackHistory]:
    """유저가 공격자 또는 피해자인 최근 기록"""
    return await AttackHistory.filter(
        Q(attacker_id=user_id) | Q(target_id=user_id),
        guild_id=guild_id,
        discipline=discipline,
    ).order_by("-created_at").limit(limit)
