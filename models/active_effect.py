"""아이템 효과 모델"""
from enum import Enum

from tortoise import fields
from tortoise.models import Model


class EffectKind(str, Enum):
    """공격에 영향을 주는 아이템 효과 종류"""

    ROB_PROTECTION = "rob_protection"
    HACK_PROTECTION = "hack_protection"
    ROB_SUCCESS_BOOST = "rob_success_boost"
    HACK_SUCCESS_BOOST = "hack_success_boost"
    ROB_FINE_REDUCTION = "rob_fine_reduction"
    HACK_FINE_REDUCTION = "hack_fine_reduction"
    XP_BOOST = "xp_boost"


class ActiveEffect(Model):
    """사용 중인 아이템 효과"""

    id = fields.IntField(pk=True)

    guild_id = fields.BigIntField()
    user_id = fields.BigIntField()
    effect_kind = fields.CharEnumField(EffectKind, max_length=24)

    value = fields.FloatField()
    """효과 수치 (%)"""

    expires_at = fields.FloatField(null=True)
    """만료 시각 (epoch 초, None이면 영구)"""

    class Meta:
        table = "heist_active_effect"
        indexes = [("guild_id", "user_id", "effect_kind")]
