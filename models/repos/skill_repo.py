"""
SkillProfile Repository

강도/해킹 스킬 프로필 데이터 접근 레이어입니다.
"""
from typing import List

from tortoise.expressions import F

from config.heist import Discipline
from models.skill_profile import SkillProfile


async def get_or_create_profile(guild_id: int, user_id: int, discipline: Discipline) -> SkillProfile:
    profile, _ = await SkillProfile.get_or_create(
        guild_id=guild_id, user_id=user_id, discipline=discipline
    )
    return profile


async def add_xp(profile: SkillProfile, amount: int, now: float) -> None:
    """XP 원자적 증가 후 프로필 갱신"""
    await SkillProfile.filter(id=profile.id).update(xp=F("xp") + amount, last_activity_at=now)
    await profile.refresh_from_db(fields=["xp", "last_activity_at"])


async def get_inactive_profiles(guild_id: int, discipline: Discipline, cutoff: float) -> List[SkillProfile]:
    """cutoff 이전부터 활동이 없고 XP가 남아있는 프로필"""
    return await SkillProfile.filter(
        guild_id=guild_id,
        discipline=discipline,
        last_activity_at__lt=cutoff,
        xp__gt=0,
    ).all()
