"""
강도/해킹 기본 설정

길드별 설정이 없을 때 사용되는 기본값입니다.
관리자가 변경한 값은 SettingsStore를 통해 길드 단위로 덮어씁니다.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class Discipline(str, Enum):
    """공격 종류"""

    ROB = "rob"      # 현금 강탈
    HACK = "hack"    # 은행 해킹


class DefenseChoice(str, Enum):
    """강도 방어 선택지"""

    HIDE_CASH = "hidecash"      # 현금 숨기기
    DODGE = "dodge"             # 회피
    FIGHT_BACK = "fightback"    # 반격


@dataclass(frozen=True)
class RobSettings:
    """강도 설정 (길드별로 덮어쓰기 가능)"""

    enabled: bool = True
    """강도 기능 활성화 여부"""

    min_steal_percent: float = 20
    """최소 강탈 비율 (%)"""

    max_steal_percent: float = 80
    """최대 강탈 비율 (%)"""

    cooldown_minutes: float = 240
    """공격자 쿨다운 (분)"""

    target_cooldown_seconds: float = 60
    """피해자 보호 시간 (초)"""

    unique_targets_required: int = 3
    """같은 대상을 다시 털기 전 필요한 서로 다른 대상 수"""

    fine_min_percent: float = 10
    """실패 시 최소 벌금 비율 (공격자 총자산 %)"""

    fine_max_percent: float = 25
    """실패 시 최대 벌금 비율 (공격자 총자산 %)"""

    defenses_enabled: bool = True
    """피해자 방어 기능 활성화 여부"""

    defense_window_seconds: float = 30
    """방어 선택 제한 시간 (초)"""

    hide_cash_success_rate: float = 70
    """현금 숨기기 성공률 (%)"""

    dodge_success_rate: float = 60
    """회피 성공률 (%)"""

    fight_back_success_rate: float = 50
    """반격 성공률 (%)"""

    def defense_rate(self, choice: DefenseChoice) -> float:
        """방어 선택지별 기본 성공률"""
        return {
            DefenseChoice.HIDE_CASH: self.hide_cash_success_rate,
            DefenseChoice.DODGE: self.dodge_success_rate,
            DefenseChoice.FIGHT_BACK: self.fight_back_success_rate,
        }[choice]

    @property
    def cooldown_seconds(self) -> float:
        return self.cooldown_minutes * 60

    @property
    def protection_seconds(self) -> float:
        return self.target_cooldown_seconds


@dataclass(frozen=True)
class HackSettings:
    """해킹 설정 (길드별로 덮어쓰기 가능)"""

    enabled: bool = True
    """해킹 기능 활성화 여부"""

    hacker_cooldown_minutes: float = 60
    """해커 쿨다운 (분)"""

    target_cooldown_minutes: float = 720
    """해킹 성공 후 피해자 보호 시간 (분)"""

    max_steal_percent: float = 5
    """최대 강탈 비율 (은행 잔고 %), 진행도에 비례해 적용"""

    min_fine_percent: float = 15
    """실패 시 최소 벌금 비율 (예상 강탈액 %)"""

    max_fine_percent: float = 20
    """실패 시 최대 벌금 비율 (예상 강탈액 %)"""

    unique_targets_required: int = 3
    """같은 대상을 다시 해킹하기 전 필요한 서로 다른 대상 수"""

    tick_seconds: float = 5
    """진행도 갱신 주기 (초)"""

    progress_step: int = 20
    """틱당 진행도 증가량 (%)"""

    trace_window_seconds: float = 15
    """역추적 제한 시간 (초)"""

    @property
    def cooldown_seconds(self) -> float:
        return self.hacker_cooldown_minutes * 60

    @property
    def protection_seconds(self) -> float:
        return self.target_cooldown_minutes * 60


@dataclass(frozen=True)
class DefenseConfig:
    """방어/역추적 고정 테이블"""

    # 반응 시간 구간별 성공률 배수: (제한 시간 대비 경과 비율 상한, 배수)
    REACTION_DECAY_BANDS: Tuple[Tuple[float, float], ...] = (
        (1 / 3, 1.0),
        (2 / 3, 0.75),
        (1.0, 0.5),
    )

    # 해킹 진행도별 백신 성공률: (진행도 하한, 성공률)
    HACK_DEFENSE_CHANCE_STEPS: Tuple[Tuple[int, float], ...] = (
        (80, 0),
        (60, 20),
        (40, 40),
        (20, 60),
        (0, 80),
    )

    DODGE_PAYOUT_PERCENT: float = 15
    """회피 성공 시 보상 (예상 강탈액 %)"""

    DODGE_PAYOUT_CAP: int = 25_000
    """회피 보상 상한"""

    FIGHT_BACK_PAYOUT_PERCENT: float = 30
    """반격 성공 시 보상 (예상 강탈액 %)"""

    FIGHT_BACK_PAYOUT_CAP: int = 50_000
    """반격 보상 상한"""

    TRACE_BASE_CHANCE: float = 40
    """역추적 기본 성공률 (%)"""

    TRACE_MIN_CHANCE: float = 5
    """역추적 최소 성공률 (%)"""

    TRACE_RECOVERY_MIN_PERCENT: float = 10
    """역추적 성공 시 최소 회수 비율 (예상 강탈액 %)"""

    TRACE_RECOVERY_MAX_PERCENT: float = 25
    """역추적 성공 시 최대 회수 비율 (예상 강탈액 %)"""


DEFENSE = DefenseConfig()
