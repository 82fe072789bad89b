"""
강도/해킹 결과 계산 시스템

성공률, 강탈액, 벌금, 방어/역추적 확률을 계산합니다.
모든 함수는 입력값과 난수원(rng)만으로 결정되며 내부 상태가 없습니다.
rng는 random() 메서드만 사용하므로 random 모듈이나 random.Random 인스턴스를 넘기면 됩니다.
"""
import math
import random
from dataclasses import dataclass

from config.heist import DEFENSE, DefenseChoice


@dataclass
class StealRoll:
    """강탈액 계산 결과"""

    percent: float
    """적용된 강탈 비율 (%)"""

    potential: int
    """보호 효과 적용 전 강탈액"""

    amount: int
    """보호 효과 적용 후 실제 강탈액"""


def clamp_rate(rate: float) -> float:
    """확률을 0 ~ 100 범위로 제한"""
    return max(0.0, min(100.0, rate))


class OutcomeCalculator:
    """
    결과 계산기

    확률은 모두 0 ~ 100 (%) 단위입니다.
    """

    # =========================================================================
    # 성공률
    # =========================================================================

    @staticmethod
    def rob_success_rate(target_cash: int, attacker_total: int, bonus: float = 0.0) -> float:
        """
        강도 성공률

        공식: targetCash / (targetCash + attackerTotal) * 100 + bonus

        Args:
            target_cash: 피해자 현금
            attacker_total: 공격자 총자산 (현금 + 은행)
            bonus: 스킬 + 아이템 보너스 (%)

        Returns:
            0 ~ 100 사이 성공률. 피해자 현금이 없으면 0
        """
        if target_cash <= 0:
            return 0.0
        denominator = target_cash + attacker_total
        if denominator <= 0:
            return 0.0
        return clamp_rate(target_cash / denominator * 100 + bonus)

    @staticmethod
    def hack_success_rate(target_bank: int, attacker_bank: int, bonus: float = 0.0) -> float:
        """
        해킹 성공률

        공식: (targetBank / 2.5) / (attackerBank + targetBank) * 100 + bonus
        """
        if target_bank <= 0:
            return 0.0
        denominator = attacker_bank + target_bank
        if denominator <= 0:
            return 0.0
        return clamp_rate((target_bank / 2.5) / denominator * 100 + bonus)

    @staticmethod
    def roll(rate: float, rng=random) -> bool:
        """rate(%) 확률로 True"""
        return rng.random() * 100 < rate

    # =========================================================================
    # 강탈액
    # =========================================================================

    @staticmethod
    def apply_protection(amount: int, protection_percent: float) -> int:
        """보호 효과(%)만큼 선형으로 감소"""
        if protection_percent <= 0:
            return amount
        if protection_percent >= 100:
            return 0
        return math.floor(amount * (1 - protection_percent / 100))

    @staticmethod
    def rob_steal(
        target_cash: int,
        min_percent: float,
        max_percent: float,
        protection_percent: float = 0.0,
        rng=random,
    ) -> StealRoll:
        """
        강도 강탈액

        [min_percent, max_percent] 구간의 균등 난수 비율을 현금에 적용합니다.
        max_percent는 100을 넘지 않습니다.

        Args:
            target_cash: 피해자 현금
            min_percent: 최소 비율 (기본값 + 스킬 보너스)
            max_percent: 최대 비율 (기본값 + 스킬 보너스)
            protection_percent: 피해자 보호 아이템 수치
            rng: 난수원

        Returns:
            StealRoll
        """
        high = min(100.0, max_percent)
        low = min(min_percent, high)
        percent = low + rng.random() * (high - low)

        cash = max(0, target_cash)
        potential = min(cash, math.floor(cash * percent / 100))
        amount = OutcomeCalculator.apply_protection(potential, protection_percent)
        return StealRoll(percent=percent, potential=potential, amount=amount)

    @staticmethod
    def hack_steal(
        target_bank: int,
        max_percent: float,
        progress: int,
        protection_percent: float = 0.0,
    ) -> StealRoll:
        """
        해킹 강탈액 (진행도에 선형 비례)

        공식: stealPercent = maxPercent * (progress / 100)

        Args:
            target_bank: 피해자 은행 잔고
            max_percent: 최대 비율 (기본값 + 스킬 보너스)
            progress: 공격 진행도 (0 ~ 100)
            protection_percent: 피해자 보호 아이템 수치
        """
        percent = min(100.0, max_percent) * max(0, min(100, progress)) / 100
        bank = max(0, target_bank)
        potential = min(bank, math.floor(bank * percent / 100))
        amount = OutcomeCalculator.apply_protection(potential, protection_percent)
        return StealRoll(percent=percent, potential=potential, amount=amount)

    # =========================================================================
    # 벌금
    # =========================================================================

    @staticmethod
    def fine(
        base_amount: int,
        min_percent: float,
        max_percent: float,
        reduction_percent: float,
        attacker_total: int,
        rng=random,
    ) -> int:
        """
        실패 벌금

        base_amount의 [min_percent, max_percent] 균등 난수 비율에서 감면율을 적용합니다.
        공격자 총자산이 양수이면 최소 1, 아니면 최소 0입니다.

        Args:
            base_amount: 벌금 기준액 (강도: 공격자 총자산, 해킹: 예상 강탈액)
            min_percent: 최소 벌금 비율
            max_percent: 최대 벌금 비율
            reduction_percent: 스킬 + 아이템 감면율
            attacker_total: 공격자 총자산
            rng: 난수원
        """
        low = min(min_percent, max_percent)
        percent = low + rng.random() * (max_percent - low)
        base = math.floor(max(0, base_amount) * percent / 100)

        reduction = max(0.0, min(100.0, reduction_percent))
        fine = math.floor(base * (1 - reduction / 100))

        minimum = 1 if attacker_total > 0 else 0
        return max(fine, minimum)

    # =========================================================================
    # 방어 / 역추적
    # =========================================================================

    @staticmethod
    def reaction_multiplier(elapsed: float, window: float) -> float:
        """반응 시간 구간별 방어 성공률 배수 (고정 테이블)"""
        if window <= 0:
            return DEFENSE.REACTION_DECAY_BANDS[0][1]
        fraction = max(0.0, elapsed) / window
        for upper_bound, multiplier in DEFENSE.REACTION_DECAY_BANDS:
            if fraction < upper_bound:
                return multiplier
        return DEFENSE.REACTION_DECAY_BANDS[-1][1]

    @staticmethod
    def rob_defense_rate(base_rate: float, elapsed: float, window: float) -> float:
        """반응 시간이 반영된 강도 방어 성공률"""
        return clamp_rate(base_rate * OutcomeCalculator.reaction_multiplier(elapsed, window))

    @staticmethod
    def defense_payout(choice: DefenseChoice, would_be_stolen: int) -> int:
        """
        강도 방어 성공 시 피해자 보상

        현금 숨기기는 보상이 없고, 회피/반격은 예상 강탈액 비율(상한 있음)만큼 받습니다.
        """
        if choice == DefenseChoice.DODGE:
            return min(
                math.floor(would_be_stolen * DEFENSE.DODGE_PAYOUT_PERCENT / 100),
                DEFENSE.DODGE_PAYOUT_CAP,
            )
        if choice == DefenseChoice.FIGHT_BACK:
            return min(
                math.floor(would_be_stolen * DEFENSE.FIGHT_BACK_PAYOUT_PERCENT / 100),
                DEFENSE.FIGHT_BACK_PAYOUT_CAP,
            )
        return 0

    @staticmethod
    def hack_defense_chance(progress: int) -> float:
        """진행도별 백신 성공률 (고정 계단 테이블)"""
        for min_progress, chance in DEFENSE.HACK_DEFENSE_CHANCE_STEPS:
            if progress >= min_progress:
                return chance
        return DEFENSE.HACK_DEFENSE_CHANCE_STEPS[-1][1]

    @staticmethod
    def trace_chance(trace_reduction: float) -> float:
        """역추적 성공률 (최소 5%)"""
        return max(DEFENSE.TRACE_MIN_CHANCE, DEFENSE.TRACE_BASE_CHANCE - trace_reduction)

    @staticmethod
    def trace_recovery(potential_steal: int, rng=random) -> int:
        """역추적 성공 시 회수액 (예상 강탈액의 10 ~ 25%)"""
        low = DEFENSE.TRACE_RECOVERY_MIN_PERCENT
        high = DEFENSE.TRACE_RECOVERY_MAX_PERCENT
        percent = low + rng.random() * (high - low)
        return math.floor(max(0, potential_steal) * percent / 100)
