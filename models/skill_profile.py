"""강도/해킹 스킬 프로필 모델"""
from typing import Optional

from tortoise import fields
from tortoise.models import Model

from config.heist import Discipline


class SkillProfile(Model):
    """
    유저별 공격 스킬 (길드 + 종류 단위)

    레벨은 저장하지 않고 xp에서 고정 임계값 테이블로 계산합니다.
    """

    id = fields.IntField(pk=True)

    guild_id = fields.BigIntField()
    user_id = fields.BigIntField()
    discipline = fields.CharEnumField(Discipline, max_length=8)

    xp = fields.BigIntField(default=0)
    """누적 경험치"""

    # 진행 중인 훈련
    training_started_at = fields.FloatField(null=True)
    training_ends_at = fields.FloatField(null=True)
    training_xp_reward = fields.IntField(null=True)
    training_started_at_level = fields.IntField(null=True)

    trained_at_level = fields.IntField(default=-1)
    """마지막으로 훈련 보상을 받은 레벨 (-1: 없음)"""

    last_activity_at = fields.FloatField(null=True)
    """마지막 XP 획득 시각 (감소 정책용)"""

    @property
    def has_training(self) -> bool:
        return self.training_ends_at is not None

    def training_remaining(self, now: float) -> Optional[float]:
        if self.training_ends_at is None:
            return None
        return max(0.0, self.training_ends_at - now)

    class Meta:
        table = "heist_skill_profile"
        unique_together = (("guild_id", "user_id", "discipline"),)
