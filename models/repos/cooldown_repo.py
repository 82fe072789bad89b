"""
Cooldown Repository

공격자 쿨다운 / 피해자 보호 시각 데이터 접근 레이어입니다.
"""
from typing import List, Optional, Tuple

from config.heist import Discipline
from models.heist_cooldown import AttackerCooldown, TargetProtection


async def get_last_action(guild_id: int, user_id: int, discipline: Discipline) -> Optional[float]:
    """공격자의 마지막 공격 시작 시각"""
    row = await AttackerCooldown.get_or_none(guild_id=guild_id, user_id=user_id, discipline=discipline)
    return row.last_action_at if row else None


async def set_last_action(guild_id: int, user_id: int, discipline: Discipline, at: float) -> None:
    await AttackerCooldown.update_or_create(
        defaults={"last_action_at": at},
        guild_id=guild_id,
        user_id=user_id,
        discipline=discipline,
    )


async def get_last_targeted(guild_id: int, user_id: int, discipline: Discipline) -> Optional[float]:
    """피해자의 마지막 피격 시각"""
    row = await TargetProtection.get_or_none(guild_id=guild_id, user_id=user_id, discipline=discipline)
    return row.last_targeted_at if row else None


async def set_last_targeted(
    guild_id: int, user_id: int, discipline: Discipline, at: float, using_db=None
) -> None:
    await TargetProtection.update_or_create(
        defaults={"last_targeted_at": at},
        guild_id=guild_id,
        user_id=user_id,
        discipline=discipline,
        using_db=using_db,
    )


async def clear_last_targeted(guild_id: int, user_id: int, discipline: Discipline, using_db=None) -> None:
    query = TargetProtection.filter(guild_id=guild_id, user_id=user_id, discipline=discipline)
    if using_db is not None:
        query = query.using_db(using_db)
    await query.delete()


async def list_recent_attackers(
    guild_id: int, discipline: Discipline, since: float
) -> List[Tuple[int, float]]:
    """since 이후 공격을 시작한 (유저 ID, 시각) 목록"""
    return await AttackerCooldown.filter(
        guild_id=guild_id, discipline=discipline, last_action_at__gt=since
    ).order_by("-last_action_at").values_list("user_id", "last_action_at")


async def list_recent_targets(
    guild_id: int, discipline: Discipline, since: float
) -> List[Tuple[int, float]]:
    """since 이후 피격된 (유저 ID, 시각) 목록"""
    return await TargetProtection.filter(
        guild_id=guild_id, discipline=discipline, last_targeted_at__gt=since
    ).order_by("-last_targeted_at").values_list("user_id", "last_targeted_at")
