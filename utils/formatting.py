"""
표시용 포맷 유틸리티

금액, 남은 시간, 진행도 바를 사람이 읽기 쉬운 문자열로 변환합니다.
"""
from config.heist import Discipline


def format_money(amount: int) -> str:
    """금액을 천 단위 구분 기호와 함께 표시"""
    return f"{amount:,}원"


def format_duration(seconds: float) -> str:
    """
    남은 시간을 '1시간 2분 3초' 형식으로 변환

    Args:
        seconds: 초 단위 시간 (음수는 0으로 처리)

    Returns:
        포맷된 문자열
    """
    total = max(0, int(seconds + 0.999))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)

    parts = []
    if hours:
        parts.append(f"{hours}시간")
    if minutes:
        parts.append(f"{minutes}분")
    if secs or not parts:
        parts.append(f"{secs}초")
    return " ".join(parts)


def progress_bar(progress: int, length: int = 10) -> str:
    """해킹 진행도 바 (예: ████░░░░░░ 40%)"""
    progress = max(0, min(100, progress))
    filled = round(length * progress / 100)
    return f"{'█' * filled}{'░' * (length - filled)} {progress}%"


def discipline_name(discipline: Discipline) -> str:
    """공격 종류 한글 이름"""
    return "강도" if discipline == Discipline.ROB else "해킹"
