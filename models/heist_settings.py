"""길드별 강도/해킹/스킬 설정 모델"""
from tortoise import fields
from tortoise.models import Model

from config.heist import Discipline


class GuildHeistSettings(Model):
    """
    길드별 설정 덮어쓰기

    kind별(rob, hack, skill)로 한 행이며, 기본값과 다른 항목만 overrides에 저장합니다.
    """

    id = fields.IntField(pk=True)

    guild_id = fields.BigIntField()

    kind = fields.CharField(max_length=16)
    """설정 종류: rob, hack, skill"""

    overrides = fields.JSONField(default=dict)
    """덮어쓴 설정 값 {필드명: 값}"""

    class Meta:
        table = "guild_heist_settings"
        unique_together = (("guild_id", "kind"),)


class ImmuneRole(Model):
    """공격 대상에서 제외되는 역할"""

    id = fields.IntField(pk=True)

    guild_id = fields.BigIntField()
    role_id = fields.BigIntField()
    discipline = fields.CharEnumField(Discipline, max_length=8)

    class Meta:
        table = "heist_immune_role"
        unique_together = (("guild_id", "role_id", "discipline"),)
