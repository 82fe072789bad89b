from models.balance import Balance, LedgerTransaction
from models.heist_settings import GuildHeistSettings, ImmuneRole
from models.heist_cooldown import AttackerCooldown, TargetProtection
from models.attack_history import AttackHistory
from models.skill_profile import SkillProfile
from models.active_effect import ActiveEffect, EffectKind

__all__ = [
    "Balance", "LedgerTransaction",
    "GuildHeistSettings", "ImmuneRole",
    "AttackerCooldown", "TargetProtection",
    "AttackHistory",
    "SkillProfile",
    "ActiveEffect", "EffectKind",
]
