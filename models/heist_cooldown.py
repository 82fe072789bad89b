"""공격자 쿨다운 / 피해자 보호 모델"""
from tortoise import fields
from tortoise.models import Model

from config.heist import Discipline


class AttackerCooldown(Model):
    """공격자 마지막 공격 시각 (공격 시작 즉시 기록)"""

    id = fields.IntField(pk=True)

    guild_id = fields.BigIntField()
    user_id = fields.BigIntField()
    discipline = fields.CharEnumField(Discipline, max_length=8)

    last_action_at = fields.FloatField()
    """마지막 공격 시작 시각 (epoch 초)"""

    class Meta:
        table = "heist_attacker_cooldown"
        unique_together = (("guild_id", "user_id", "discipline"),)


class TargetProtection(Model):
    """피해자 마지막 피격 시각 (결과 확정 후 기록)"""

    id = fields.IntField(pk=True)

    guild_id = fields.BigIntField()
    user_id = fields.BigIntField()
    discipline = fields.CharEnumField(Discipline, max_length=8)

    last_targeted_at = fields.FloatField()
    """마지막 피격 시각 (epoch 초)"""

    class Meta:
        table = "heist_target_protection"
        unique_together = (("guild_id", "user_id", "discipline"),)
