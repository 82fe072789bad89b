"""
heistbot 커스텀 예외 정의

모든 예외는 HeistBotError를 상속하며, message 속성에 사용자에게 보여줄 문구를 담습니다.
Cog에서는 HeistBotError를 잡아 ephemeral 메시지로 응답합니다.
"""
from config.heist import Discipline
from utils.formatting import discipline_name, format_duration, format_money


class HeistBotError(Exception):
    """heistbot 기본 예외 클래스"""

    def __init__(self, message: str = "알 수 없는 오류가 발생했습니다"):
        self.message = message
        super().__init__(self.message)


# =============================================================================
# 공격 불가 (자격 검사 단계에서 발생, 상태 변경 없음)
# =============================================================================


class AttackNotAllowedError(HeistBotError):
    """공격 자격 미달 기본 예외"""
    pass


class FeatureDisabledError(AttackNotAllowedError):
    """기능 비활성화"""

    def __init__(self, discipline: Discipline):
        self.discipline = discipline
        super().__init__(f"이 서버에서는 {discipline_name(discipline)} 기능이 비활성화되어 있습니다.")


class SelfTargetError(AttackNotAllowedError):
    """자기 자신을 대상으로 지정"""

    def __init__(self):
        super().__init__("자기 자신은 대상으로 지정할 수 없습니다.")


class BotTargetError(AttackNotAllowedError):
    """봇을 대상으로 지정"""

    def __init__(self):
        super().__init__("봇은 대상으로 지정할 수 없습니다.")


class AttackerOnCooldownError(AttackNotAllowedError):
    """공격자 쿨다운 중"""

    def __init__(self, discipline: Discipline, remaining_seconds: float):
        self.discipline = discipline
        self.remaining_seconds = remaining_seconds
        super().__init__(
            f"{discipline_name(discipline)} 쿨다운 중입니다. "
            f"({format_duration(remaining_seconds)} 남음)"
        )


class TargetProtectedError(AttackNotAllowedError):
    """대상이 보호 시간 중"""

    def __init__(self, discipline: Discipline, remaining_seconds: float):
        self.discipline = discipline
        self.remaining_seconds = remaining_seconds
        super().__init__(
            f"대상은 최근 {discipline_name(discipline)} 피해를 입어 보호 중입니다. "
            f"({format_duration(remaining_seconds)} 남음)"
        )


class TargetImmuneError(AttackNotAllowedError):
    """대상이 면역 역할 보유"""

    def __init__(self, discipline: Discipline):
        self.discipline = discipline
        super().__init__(f"대상은 {discipline_name(discipline)} 면역 역할을 가지고 있습니다.")


class TargetFullyProtectedError(AttackNotAllowedError):
    """대상이 100% 보호 아이템 사용 중"""

    def __init__(self, discipline: Discipline):
        self.discipline = discipline
        super().__init__(f"대상은 {discipline_name(discipline)} 보호 아이템을 사용 중입니다.")


class InsufficientTargetFundsError(AttackNotAllowedError):
    """대상의 자산 부족"""

    def __init__(self, discipline: Discipline):
        self.discipline = discipline
        where = "현금" if discipline == Discipline.ROB else "은행 잔고"
        super().__init__(f"대상의 {where}이 없어 훔칠 것이 없습니다.")


# =============================================================================
# 동시성 충돌
# =============================================================================


class TargetUnderAttackError(HeistBotError):
    """대상이 이미 다른 해킹을 받는 중"""

    def __init__(self, target_id: int):
        self.target_id = target_id
        super().__init__("대상은 이미 다른 사람에게 해킹당하는 중입니다.")


class NotDecisionOwnerError(HeistBotError):
    """선택 권한이 없는 유저의 입력"""

    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__("이 선택은 당신의 것이 아닙니다.")


# =============================================================================
# 스킬 관련 예외
# =============================================================================


class SkillError(HeistBotError):
    """스킬 관련 기본 예외"""
    pass


class MaxSkillLevelError(SkillError):
    """이미 최대 레벨"""

    def __init__(self):
        super().__init__("이미 최대 레벨입니다.")


class TrainingInProgressError(SkillError):
    """이미 훈련 중"""

    def __init__(self, remaining_seconds: float):
        self.remaining_seconds = remaining_seconds
        super().__init__(f"이미 훈련 중입니다. ({format_duration(remaining_seconds)} 남음)")


class AlreadyTrainedAtLevelError(SkillError):
    """현재 레벨에서 이미 훈련 완료"""

    def __init__(self, level: int):
        self.level = level
        super().__init__(f"레벨 {level}에서는 이미 훈련을 마쳤습니다. 레벨을 올린 뒤 다시 시도하세요.")


class InsufficientFundsError(HeistBotError):
    """잔액 부족"""

    def __init__(self, required: int, available: int):
        self.required = required
        self.available = available
        super().__init__(
            f"현금이 부족합니다. (필요: {format_money(required)}, 보유: {format_money(available)})"
        )


# =============================================================================
# 설정/저장소 관련 예외
# =============================================================================


class InvalidSettingError(HeistBotError):
    """존재하지 않는 설정 키 또는 잘못된 값"""

    def __init__(self, key: str, value: str = None):
        self.key = key
        self.value = value
        if value is None:
            super().__init__(f"알 수 없는 설정 항목입니다: {key}")
        else:
            super().__init__(f"{key}에 사용할 수 없는 값입니다: {value}")


class StorageUnavailableError(HeistBotError):
    """저장소 접근 실패"""

    def __init__(self):
        super().__init__("데이터베이스에 접근할 수 없습니다. 잠시 후 다시 시도해주세요.")
