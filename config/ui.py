"""Discord UI 관련 설정"""
from dataclasses import dataclass
from enum import IntEnum


class EmbedColor(IntEnum):
    """임베드 색상"""

    DEFAULT = 0x3498DB  # 파란색
    SUCCESS = 0x2ECC71  # 초록색
    WARNING = 0xF39C12  # 주황색
    ERROR = 0xE74C3C  # 빨간색
    ROB = 0xE67E22  # 강도용 주황색
    HACK = 0x1ABC9C  # 해킹용 청록색
    DEFENDED = 0x9B59B6  # 방어 성공 보라색


@dataclass(frozen=True)
class UIConfig:
    """UI 설정"""

    PROGRESS_BAR_LENGTH: int = 10
    """해킹 진행도 바 길이"""

    HISTORY_PAGE_SIZE: int = 10
    """기록 조회 시 최대 개수"""

    COOLDOWN_LIST_LIMIT: int = 15
    """쿨다운 목록 최대 표시 수"""


UI = UIConfig()
