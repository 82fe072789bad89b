"""임베드 생성 유틸리티"""
from views.embeds.heist_embeds import (
    rob_announce_embed,
    hack_progress_embed,
    outcome_embed,
    trace_embed,
    skill_status_embed,
    training_info_embed,
    cooldown_overview_embed,
    stats_embed,
    settings_embed,
)

__all__ = [
    "rob_announce_embed",
    "hack_progress_embed",
    "outcome_embed",
    "trace_embed",
    "skill_status_embed",
    "training_info_embed",
    "cooldown_overview_embed",
    "stats_embed",
    "settings_embed",
]
