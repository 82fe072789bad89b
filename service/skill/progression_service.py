"""
강도/해킹 스킬 성장 서비스

XP 획득, 레벨 계산, 레벨 보너스, 시간제 훈련, 장기 미활동 XP 감소를 담당합니다.
레벨은 config.skills의 고정 임계값 테이블로 계산합니다.
"""
import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Optional

from tortoise.expressions import F
from tortoise.transactions import in_transaction

from config.heist import Discipline
from config.skills import (
    LEVEL_THRESHOLDS,
    MAX_SKILL_LEVEL,
    TRAINING_COSTS,
    TRAINING_HOURS,
    XP_PER_LEVEL,
    SkillSettings,
)
from exceptions import (
    AlreadyTrainedAtLevelError,
    InsufficientFundsError,
    MaxSkillLevelError,
    TrainingInProgressError,
)
from models.active_effect import EffectKind
from models.repos import skill_repo
from models.skill_profile import SkillProfile

logger = logging.getLogger(__name__)


# =============================================================================
# 결과 타입
# =============================================================================


@dataclass
class SkillBonuses:
    """레벨 기반 보너스 (모두 % 단위)"""
    level: int
    success_rate_bonus: float = 0.0
    min_steal_bonus: float = 0.0
    max_steal_bonus: float = 0.0
    cooldown_reduction: float = 0.0
    fine_reduction: float = 0.0
    trace_reduction: float = 0.0


@dataclass
class XpProgress:
    """현재 레벨 내 XP 진행 상황"""
    current: int
    needed: int
    percent: int


@dataclass
class XpGainResult:
    """XP 획득 결과"""
    xp_gained: int
    level_up: bool
    old_level: int
    new_level: int
    total_xp: int
    xp_boost_percent: float = 0.0


@dataclass
class TrainingStartResult:
    """훈련 시작 결과"""
    cost: int
    duration_seconds: float
    xp_reward: int
    ends_at: float
    next_level: int


@dataclass
class TrainingCompletion:
    """훈련 완료 결과"""
    xp_gained: int
    level_up: bool
    new_level: int
    total_xp: int
    trained_at_level: int


@dataclass
class TrainingInfo:
    """다음 훈련 정보"""
    current_level: int
    max_level: bool
    next_level: Optional[int] = None
    cost: int = 0
    duration_seconds: float = 0
    xp_reward: int = 0
    active_remaining: Optional[float] = None
    already_trained_at_level: bool = False

    @property
    def can_train(self) -> bool:
        return not self.max_level and self.active_remaining is None and not self.already_trained_at_level


@dataclass
class SkillStatus:
    """스킬 현황"""
    discipline: Discipline
    level: int
    xp: int
    progress: XpProgress
    bonuses: SkillBonuses
    training_remaining: Optional[float]
    training_xp_reward: Optional[int]


# =============================================================================
# 순수 함수
# =============================================================================


def level_for_xp(xp: int) -> int:
    """누적 XP에 해당하는 레벨 (임계값 테이블 역순 탐색)"""
    for level in range(len(LEVEL_THRESHOLDS) - 1, -1, -1):
        if xp >= LEVEL_THRESHOLDS[level]:
            return level
    return 0


def xp_progress(xp: int) -> XpProgress:
    """현재 레벨 구간에서의 XP 진행 상황"""
    level = level_for_xp(xp)
    if level >= MAX_SKILL_LEVEL or math.isinf(LEVEL_THRESHOLDS[level + 1]):
        return XpProgress(current=0, needed=0, percent=100)

    current = int(xp - LEVEL_THRESHOLDS[level])
    needed = int(LEVEL_THRESHOLDS[level + 1] - LEVEL_THRESHOLDS[level])
    return XpProgress(current=current, needed=needed, percent=math.floor(current / needed * 100))


def calculate_bonuses(level: int, discipline: Discipline, settings: SkillSettings) -> SkillBonuses:
    """레벨 * 레벨당 수치로 보너스 계산"""
    if discipline == Discipline.HACK:
        return SkillBonuses(
            level=level,
            success_rate_bonus=level * settings.hack_success_rate_per_level,
            max_steal_bonus=level * settings.hack_max_steal_per_level,
            cooldown_reduction=level * settings.hack_cooldown_reduction_per_level,
            trace_reduction=level * settings.hack_trace_reduction_per_level,
            fine_reduction=level * settings.hack_fine_reduction_per_level,
        )
    return SkillBonuses(
        level=level,
        success_rate_bonus=level * settings.rob_success_rate_per_level,
        min_steal_bonus=level * settings.rob_min_steal_per_level,
        max_steal_bonus=level * settings.rob_max_steal_per_level,
        cooldown_reduction=level * settings.rob_cooldown_reduction_per_level,
        fine_reduction=level * settings.rob_fine_reduction_per_level,
    )


def attack_xp(success: bool, amount_stolen: int, settings: SkillSettings, xp_boost_percent: float = 0.0) -> int:
    """
    공격 1회당 XP

    성공: 기본값 + min(강탈액/1000 * 1000당 XP, 상한)
    실패: 고정값
    XP 부스트 아이템이 있으면 배율을 곱한 뒤 내림합니다.
    """
    if success:
        bonus = min(
            (max(0, amount_stolen) // 1000) * settings.success_xp_per_thousand,
            settings.success_xp_bonus_cap,
        )
        xp = settings.success_xp_base + bonus
    else:
        xp = settings.failure_xp

    if xp_boost_percent > 0:
        xp = math.floor(xp * (1 + xp_boost_percent / 100))
    return xp


def training_reward(level: int, settings: SkillSettings) -> int:
    """레벨 level에서 시작한 훈련의 XP 보상"""
    return math.floor(XP_PER_LEVEL[level] * settings.training_xp_percent / 100)


def is_trainable_level(level: int) -> bool:
    """다음 레벨 훈련 테이블이 존재하는지"""
    return level < MAX_SKILL_LEVEL and level + 1 < len(TRAINING_COSTS)


# =============================================================================
# 서비스
# =============================================================================


class SkillProgressionEngine:
    """
    스킬 성장 엔진

    Args:
        settings_store: 길드별 설정 저장소
        ledger: 훈련 비용 출금용 잔고 관리자
        effects: XP 부스트 조회용 아이템 효과 저장소
        clock: epoch 초를 반환하는 시계
    """

    def __init__(self, settings_store, ledger, effects, clock: Callable[[], float] = time.time):
        self._settings = settings_store
        self._ledger = ledger
        self._effects = effects
        self._clock = clock

    async def get_level(self, guild_id: int, user_id: int, discipline: Discipline) -> int:
        profile = await skill_repo.get_or_create_profile(guild_id, user_id, discipline)
        return level_for_xp(profile.xp)

    async def get_bonuses(self, guild_id: int, user_id: int, discipline: Discipline) -> SkillBonuses:
        settings = await self._settings.get_skill_settings(guild_id)
        level = await self.get_level(guild_id, user_id, discipline)
        return calculate_bonuses(level, discipline, settings)

    async def add_xp(self, guild_id: int, user_id: int, discipline: Discipline, amount: int) -> XpGainResult:
        """
        XP 지급

        Args:
            amount: 지급할 XP (부스트 적용 완료 값)

        Returns:
            XpGainResult
        """
        profile = await skill_repo.get_or_create_profile(guild_id, user_id, discipline)
        old_level = level_for_xp(profile.xp)
        await skill_repo.add_xp(profile, amount, self._clock())
        new_level = level_for_xp(profile.xp)

        if new_level > old_level:
            logger.info(
                f"Skill level up: user {user_id}, {discipline.value} {old_level} -> {new_level}"
            )

        return XpGainResult(
            xp_gained=amount,
            level_up=new_level > old_level,
            old_level=old_level,
            new_level=new_level,
            total_xp=profile.xp,
        )

    async def award_attack_xp(
        self,
        guild_id: int,
        user_id: int,
        discipline: Discipline,
        success: bool,
        amount_stolen: int = 0,
    ) -> XpGainResult:
        """공격 결과에 따른 XP 지급 (XP 부스트 아이템 반영)"""
        settings = await self._settings.get_skill_settings(guild_id)
        xp_boost = await self._effects.get_modifier(guild_id, user_id, EffectKind.XP_BOOST)
        amount = attack_xp(success, amount_stolen, settings, xp_boost)

        result = await self.add_xp(guild_id, user_id, discipline, amount)
        result.xp_boost_percent = xp_boost
        return result

    # =========================================================================
    # 훈련
    # =========================================================================

    async def start_training(self, guild_id: int, user_id: int, discipline: Discipline) -> TrainingStartResult:
        """
        훈련 시작

        비용 출금과 훈련 기록은 하나의 트랜잭션으로 처리되어,
        훈련 시작에 실패하면 비용도 되돌려집니다.

        Raises:
            MaxSkillLevelError: 더 이상 훈련할 레벨이 없음
            TrainingInProgressError: 이미 훈련 중
            AlreadyTrainedAtLevelError: 현재 레벨에서 이미 훈련 보상을 받음
            InsufficientFundsError: 현금 부족
        """
        await self.check_training_complete(guild_id, user_id, discipline)

        settings = await self._settings.get_skill_settings(guild_id)
        profile = await skill_repo.get_or_create_profile(guild_id, user_id, discipline)
        now = self._clock()
        level = level_for_xp(profile.xp)

        if not is_trainable_level(level):
            raise MaxSkillLevelError()
        if profile.has_training:
            raise TrainingInProgressError(profile.training_remaining(now))
        if profile.trained_at_level == level:
            raise AlreadyTrainedAtLevelError(level)

        next_level = level + 1
        cost = TRAINING_COSTS[next_level]
        duration = TRAINING_HOURS[next_level] * 3600
        reward = training_reward(level, settings)

        async with in_transaction() as conn:
            paid = await self._ledger.debit(
                guild_id, user_id, cost, f"{discipline.value}_training"
            )
            if not paid:
                balance = await self._ledger.get_balance(guild_id, user_id)
                raise InsufficientFundsError(cost, balance.cash)

            started = await SkillProfile.filter(
                id=profile.id, training_ends_at__isnull=True
            ).using_db(conn).update(
                training_started_at=now,
                training_ends_at=now + duration,
                training_xp_reward=reward,
                training_started_at_level=level,
            )
            if not started:
                # 동시에 다른 훈련이 시작됨 (트랜잭션 롤백으로 비용 환불)
                await profile.refresh_from_db()
                raise TrainingInProgressError(profile.training_remaining(now) or 0)

        logger.info(
            f"Training started: user {user_id}, {discipline.value} level {level} -> {next_level}, "
            f"cost {cost}, reward {reward}xp"
        )
        return TrainingStartResult(
            cost=cost,
            duration_seconds=duration,
            xp_reward=reward,
            ends_at=now + duration,
            next_level=next_level,
        )

    async def check_training_complete(
        self, guild_id: int, user_id: int, discipline: Discipline
    ) -> Optional[TrainingCompletion]:
        """
        훈련 완료 확인 (멱등)

        종료 시각이 지났으면 기록된 XP를 정확히 한 번 지급하고 훈련 기록을 지웁니다.
        trained_at_level은 현재 레벨이 아니라 훈련을 시작한 레벨로 기록됩니다.

        Returns:
            완료 처리했으면 TrainingCompletion, 아니면 None
        """
        profile = await SkillProfile.get_or_none(
            guild_id=guild_id, user_id=user_id, discipline=discipline
        )
        if profile is None or not profile.has_training:
            return None

        now = self._clock()
        if now < profile.training_ends_at:
            return None

        old_level = level_for_xp(profile.xp)
        reward = profile.training_xp_reward or 0
        started_level = profile.training_started_at_level
        if started_level is None:
            started_level = old_level

        # 같은 훈련 기록에 대해서만 적용되는 조건부 UPDATE
        claimed = await SkillProfile.filter(
            id=profile.id,
            training_started_at=profile.training_started_at,
            training_ends_at__isnull=False,
        ).update(
            xp=F("xp") + reward,
            training_started_at=None,
            training_ends_at=None,
            training_xp_reward=None,
            training_started_at_level=None,
            trained_at_level=started_level,
            last_activity_at=now,
        )
        if not claimed:
            return None

        await profile.refresh_from_db()
        new_level = level_for_xp(profile.xp)
        logger.info(
            f"Training complete: user {user_id}, {discipline.value} +{reward}xp "
            f"(trained at level {started_level})"
        )
        return TrainingCompletion(
            xp_gained=reward,
            level_up=new_level > old_level,
            new_level=new_level,
            total_xp=profile.xp,
            trained_at_level=started_level,
        )

    async def get_training_info(self, guild_id: int, user_id: int, discipline: Discipline) -> TrainingInfo:
        settings = await self._settings.get_skill_settings(guild_id)
        profile = await skill_repo.get_or_create_profile(guild_id, user_id, discipline)
        level = level_for_xp(profile.xp)

        if not is_trainable_level(level):
            return TrainingInfo(current_level=level, max_level=True)

        next_level = level + 1
        return TrainingInfo(
            current_level=level,
            max_level=False,
            next_level=next_level,
            cost=TRAINING_COSTS[next_level],
            duration_seconds=TRAINING_HOURS[next_level] * 3600,
            xp_reward=training_reward(level, settings),
            active_remaining=profile.training_remaining(self._clock()),
            already_trained_at_level=profile.trained_at_level == level,
        )

    async def get_status(self, guild_id: int, user_id: int, discipline: Discipline) -> SkillStatus:
        settings = await self._settings.get_skill_settings(guild_id)
        profile = await skill_repo.get_or_create_profile(guild_id, user_id, discipline)
        level = level_for_xp(profile.xp)
        return SkillStatus(
            discipline=discipline,
            level=level,
            xp=profile.xp,
            progress=xp_progress(profile.xp),
            bonuses=calculate_bonuses(level, discipline, settings),
            training_remaining=profile.training_remaining(self._clock()),
            training_xp_reward=profile.training_xp_reward,
        )

    # =========================================================================
    # XP 감소
    # =========================================================================

    async def apply_level_decay(self, guild_id: int, discipline: Discipline) -> int:
        """
        장기 미활동 프로필의 XP 감소

        Returns:
            감소 적용된 프로필 수 (비활성화 상태면 0)
        """
        settings = await self._settings.get_skill_settings(guild_id)
        if not settings.decay_enabled:
            return 0

        cutoff = self._clock() - settings.decay_days * 86400
        keep_ratio = 1 - settings.decay_percent / 100
        profiles = await skill_repo.get_inactive_profiles(guild_id, discipline, cutoff)

        for profile in profiles:
            profile.xp = math.floor(profile.xp * keep_ratio)
            await profile.save(update_fields=["xp"])

        if profiles:
            logger.info(
                f"Skill decay applied: guild {guild_id}, {discipline.value}, {len(profiles)} profiles"
            )
        return len(profiles)
