"""
heistbot 게임 설정 상수

강도/해킹 밸런스 값과 고정 테이블을 여기서 관리합니다.
각 도메인별 설정은 config/ 하위 모듈에 정의되어 있습니다.
"""
from config.heist import (
    Discipline, DefenseChoice,
    RobSettings, HackSettings,
    DefenseConfig, DEFENSE,
)
from config.skills import (
    MAX_SKILL_LEVEL, LEVEL_THRESHOLDS, XP_PER_LEVEL,
    TRAINING_COSTS, TRAINING_HOURS, SkillSettings,
)
from config.ui import EmbedColor, UIConfig, UI

__all__ = [
    # heist
    "Discipline", "DefenseChoice",
    "RobSettings", "HackSettings",
    "DefenseConfig", "DEFENSE",
    # skills
    "MAX_SKILL_LEVEL", "LEVEL_THRESHOLDS", "XP_PER_LEVEL",
    "TRAINING_COSTS", "TRAINING_HOURS", "SkillSettings",
    # ui
    "EmbedColor", "UIConfig", "UI",
]
