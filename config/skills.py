"""
강도/해킹 스킬 성장 설정

레벨 임계값, 훈련 비용/시간은 공식이 아니라 고정 테이블입니다.
게임 밸런스 유지를 위해 값을 계산으로 대체하지 마세요.
"""
import math
from dataclasses import dataclass
from typing import Tuple

MAX_SKILL_LEVEL = 10

# 레벨 n에 도달하기 위한 누적 XP (0 ~ 10)
# 레벨 10은 상한 표시용으로, XP로는 도달할 수 없습니다.
LEVEL_THRESHOLDS: Tuple[float, ...] = (
    0, 100, 350, 850, 1850, 3850, 7850, 15350, 27850, 47850, math.inf,
)

# 레벨 n에서 다음 레벨까지 필요한 XP
XP_PER_LEVEL: Tuple[int, ...] = (
    100, 250, 500, 1000, 2000, 4000, 7500, 12500, 20000, 0,
)

# 목표 레벨별 훈련 비용 (레벨 9까지만 훈련 가능)
TRAINING_COSTS: Tuple[int, ...] = (
    0, 10_000, 25_000, 50_000, 100_000, 175_000, 300_000, 500_000, 750_000, 1_000_000,
)

# 목표 레벨별 훈련 시간 (시간)
TRAINING_HOURS: Tuple[int, ...] = (
    0, 1, 2, 4, 8, 12, 24, 48, 72, 96,
)


@dataclass(frozen=True)
class SkillSettings:
    """스킬 성장 설정 (길드별로 덮어쓰기 가능)"""

    # XP 획득
    success_xp_base: int = 20
    """성공 시 기본 XP"""

    success_xp_per_thousand: int = 1
    """강탈액 1,000당 추가 XP"""

    success_xp_bonus_cap: int = 30
    """강탈액 보너스 XP 상한"""

    failure_xp: int = 8
    """실패 시 XP"""

    training_xp_percent: float = 75
    """훈련 완료 보상 (해당 레벨 필요 XP의 %)"""

    # 해킹 레벨당 보너스
    hack_success_rate_per_level: float = 4
    hack_max_steal_per_level: float = 1.5
    hack_cooldown_reduction_per_level: float = 2
    hack_trace_reduction_per_level: float = 4
    hack_fine_reduction_per_level: float = 3

    # 강도 레벨당 보너스
    rob_success_rate_per_level: float = 2
    rob_min_steal_per_level: float = 1.5
    rob_max_steal_per_level: float = 1.5
    rob_cooldown_reduction_per_level: float = 1.5
    rob_fine_reduction_per_level: float = 3

    # 장기 미활동 XP 감소
    decay_enabled: bool = False
    """XP 감소 활성화 여부"""

    decay_days: float = 7
    """감소 적용 기준 미활동 일수"""

    decay_percent: float = 5
    """감소 비율 (%)"""
