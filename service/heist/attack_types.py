"""
공격 상태/결과 타입

Announced → AwaitingDefenseChoice → {Undefended, Defended} → Resolved → (TraceWindowOpen → TraceResolved)
"""
import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from config.heist import DefenseChoice, Discipline


class AttackState(Enum):
    """공격 상태"""

    ANNOUNCED = "announced"
    AWAITING_DEFENSE = "awaiting_defense"
    UNDEFENDED = "undefended"
    DEFENDED = "defended"
    RESOLVED = "resolved"
    TRACE_WINDOW_OPEN = "trace_window_open"
    TRACE_RESOLVED = "trace_resolved"


@dataclass
class HeistContext:
    """공격 실행에 필요한 협력 객체 묶음"""
    ledger: Any
    settings: Any
    eligibility: Any
    registry: Any
    skills: Any
    effects: Any
    rng: Any = random
    clock: Callable[[], float] = time.time


@dataclass
class PreparedAttack:
    """자격 검사를 통과한 공격의 사전 계산 값"""

    guild_id: int
    attacker_id: int
    target_id: int
    discipline: Discipline
    settings: Any
    """공격 시작 시점 설정 스냅샷 (RobSettings / HackSettings)"""

    skill_settings: Any
    bonuses: Any
    """공격자 SkillBonuses"""

    success_rate: float
    """스킬/아이템 보너스가 반영된 성공률 (%)"""

    protection_percent: float = 0.0
    """피해자 보호 아이템 수치 (%)"""

    item_fine_reduction: float = 0.0
    """공격자 벌금 감면 아이템 수치 (%)"""

    awards_xp: bool = True
    targets_still_needed: int = 0
    training: Any = None
    """공격 전 확인된 훈련 완료 결과 (TrainingCompletion)"""


@dataclass
class AttackOutcome:
    """
    공격 결과 (공격당 한 번 계산, 한 번 기록)

    amount는 성공 시 강탈액, 실패 시 벌금, 방어 성공 시 공격자가 물어준 보상금입니다.
    """
    guild_id: int
    discipline: Discipline
    attacker_id: int
    target_id: int
    success: bool
    amount: int
    defended: bool = False
    awards_xp: bool = True
    targets_still_needed: int = 0
    defense_choice: Optional[DefenseChoice] = None
    defense_rate: Optional[float] = None
    success_rate: float = 0.0
    potential: int = 0
    """보호 효과 적용 전 예상 강탈액"""

    progress: int = 100
    xp: Any = None
    """XpGainResult (XP 미지급이면 None)"""

    @property
    def fined(self) -> bool:
        return not self.success and not self.defended

    @property
    def can_trace(self) -> bool:
        return self.discipline == Discipline.HACK and not self.success


@dataclass
class TraceResult:
    """역추적 결과"""
    attempted: bool
    success: bool = False
    chance: float = 0.0
    recovered: int = 0

