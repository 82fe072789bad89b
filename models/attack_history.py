"""공격 기록 모델"""
from tortoise import fields
from tortoise.models import Model

from config.heist import Discipline


class AttackHistory(Model):
    """
    공격 결과 기록 (추가 전용)

    통계 조회와 반복 공격 방지(서로 다른 대상 수 계산)에 사용됩니다.
    """

    id = fields.IntField(pk=True)

    guild_id = fields.BigIntField()
    discipline = fields.CharEnumField(Discipline, max_length=8)

    attacker_id = fields.BigIntField()
    """공격자 Discord ID"""

    target_id = fields.BigIntField()
    """피해자 Discord ID"""

    success = fields.BooleanField()
    """강탈 성공 여부"""

    amount = fields.BigIntField(default=0)
    """성공 시 강탈액, 실패 시 벌금"""

    defended = fields.BooleanField(default=False)
    """피해자 방어 성공 여부"""

    awards_xp = fields.BooleanField(default=True)
    """XP 지급 여부 (반복 공격이면 False)"""

    progress = fields.IntField(default=100)
    """종료 시점 진행도 (해킹)"""

    created_at = fields.FloatField()
    """기록 시각 (epoch 초)"""

    class Meta:
        table = "heist_attack_history"
        indexes = [("guild_id", "discipline", "attacker_id", "created_at")]
