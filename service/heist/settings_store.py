"""
길드별 설정 저장소

읽기가 대부분이므로 메모리에 캐시하고, 쓰기 시 캐시를 갱신합니다.
저장된 값이 없으면 config의 기본값을 사용합니다.
"""
import logging
from dataclasses import asdict, fields, replace
from typing import Any, Dict, FrozenSet, Tuple, Type, TypeVar

from config.heist import Discipline, HackSettings, RobSettings
from config.skills import SkillSettings
from exceptions import InvalidSettingError
from models.heist_settings import GuildHeistSettings, ImmuneRole

logger = logging.getLogger(__name__)

T = TypeVar("T", RobSettings, HackSettings, SkillSettings)

SETTINGS_KINDS: Dict[str, Type] = {
    "rob": RobSettings,
    "hack": HackSettings,
    "skill": SkillSettings,
}


class SettingsStore:
    """
    길드별 강도/해킹/스킬 설정

    반환되는 설정은 frozen dataclass 스냅샷이므로,
    공격 하나가 진행되는 동안 관리자가 설정을 바꿔도 영향을 받지 않습니다.
    """

    def __init__(self):
        self._cache: Dict[Tuple[int, str], Any] = {}
        self._immune_cache: Dict[Tuple[int, Discipline], FrozenSet[int]] = {}

    async def get_rob_settings(self, guild_id: int) -> RobSettings:
        return await self._get(guild_id, "rob")

    async def get_hack_settings(self, guild_id: int) -> HackSettings:
        return await self._get(guild_id, "hack")

    async def get_skill_settings(self, guild_id: int) -> SkillSettings:
        return await self._get(guild_id, "skill")

    async def get_attack_settings(self, guild_id: int, discipline: Discipline):
        if discipline == Discipline.ROB:
            return await self.get_rob_settings(guild_id)
        return await self.get_hack_settings(guild_id)

    async def get(self, guild_id: int, kind: str) -> Any:
        """종류 이름으로 설정 조회

        Raises:
            InvalidSettingError: 존재하지 않는 종류
        """
        if kind not in SETTINGS_KINDS:
            raise InvalidSettingError(kind)
        return await self._get(guild_id, kind)

    async def update(self, guild_id: int, kind: str, **updates) -> Any:
        """
        설정 변경 (관리자 전용)

        Args:
            guild_id: 길드 ID
            kind: rob, hack, skill
            **updates: 변경할 필드와 값

        Returns:
            변경 후 설정 스냅샷

        Raises:
            InvalidSettingError: 존재하지 않는 종류 또는 필드
        """
        settings_cls = SETTINGS_KINDS.get(kind)
        if settings_cls is None:
            raise InvalidSettingError(kind)

        valid_keys = {f.name for f in fields(settings_cls)}
        for key in updates:
            if key not in valid_keys:
                raise InvalidSettingError(key)

        row, _ = await GuildHeistSettings.get_or_create(guild_id=guild_id, kind=kind)
        row.overrides = {**(row.overrides or {}), **updates}
        await row.save()

        snapshot = self._build(settings_cls, row.overrides)
        self._cache[(guild_id, kind)] = snapshot
        logger.info(f"Settings updated: guild {guild_id}, {kind} {updates}")
        return snapshot

    async def reset(self, guild_id: int, kind: str) -> None:
        """기본값으로 초기화"""
        await GuildHeistSettings.filter(guild_id=guild_id, kind=kind).delete()
        self._cache.pop((guild_id, kind), None)
        logger.info(f"Settings reset: guild {guild_id}, {kind}")

    def invalidate(self, guild_id: int = None) -> None:
        """캐시 무효화 (guild_id가 없으면 전체)"""
        if guild_id is None:
            self._cache.clear()
            self._immune_cache.clear()
            return
        for key in [k for k in self._cache if k[0] == guild_id]:
            del self._cache[key]
        for key in [k for k in self._immune_cache if k[0] == guild_id]:
            del self._immune_cache[key]

    # =========================================================================
    # 면역 역할
    # =========================================================================

    async def get_immune_roles(self, guild_id: int, discipline: Discipline) -> FrozenSet[int]:
        key = (guild_id, discipline)
        if key not in self._immune_cache:
            role_ids = await ImmuneRole.filter(
                guild_id=guild_id, discipline=discipline
            ).values_list("role_id", flat=True)
            self._immune_cache[key] = frozenset(role_ids)
        return self._immune_cache[key]

    async def add_immune_role(self, guild_id: int, role_id: int, discipline: Discipline) -> None:
        await ImmuneRole.get_or_create(guild_id=guild_id, role_id=role_id, discipline=discipline)
        self._immune_cache.pop((guild_id, discipline), None)
        logger.info(f"Immune role added: guild {guild_id}, role {role_id}, {discipline.value}")

    async def remove_immune_role(self, guild_id: int, role_id: int, discipline: Discipline) -> None:
        await ImmuneRole.filter(guild_id=guild_id, role_id=role_id, discipline=discipline).delete()
        self._immune_cache.pop((guild_id, discipline), None)
        logger.info(f"Immune role removed: guild {guild_id}, role {role_id}, {discipline.value}")

    # =========================================================================
    # 내부
    # =========================================================================

    async def _get(self, guild_id: int, kind: str):
        key = (guild_id, kind)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug(f"Settings cache hit: guild {guild_id}, {kind}")
            return cached

        settings_cls = SETTINGS_KINDS[kind]
        row = await GuildHeistSettings.get_or_none(guild_id=guild_id, kind=kind)
        snapshot = self._build(settings_cls, row.overrides if row else {})
        self._cache[key] = snapshot
        return snapshot

    @staticmethod
    def _build(settings_cls: Type[T], values: Dict[str, Any]) -> T:
        """저장된 값으로 기본 설정 덮어쓰기 (알 수 없는 키는 무시)"""
        defaults = settings_cls()
        valid_keys = set(asdict(defaults))
        known = {k: v for k, v in (values or {}).items() if k in valid_keys}
        return replace(defaults, **known)


_TRUE_VALUES = {"true", "on", "1", "yes", "켜기", "예"}
_FALSE_VALUES = {"false", "off", "0", "no", "끄기", "아니오"}


def parse_setting_value(kind: str, key: str, raw: str) -> Any:
    """
    관리자 입력 문자열을 설정 필드 타입으로 변환

    Args:
        kind: rob, hack, skill
        key: 필드 이름
        raw: 입력 문자열

    Returns:
        변환된 값 (bool, int, float)

    Raises:
        InvalidSettingError: 알 수 없는 종류/필드이거나 변환할 수 없는 값
    """
    settings_cls = SETTINGS_KINDS.get(kind)
    if settings_cls is None:
        raise InvalidSettingError(kind)

    field_types = {f.name: f.type for f in fields(settings_cls)}
    if key not in field_types:
        raise InvalidSettingError(key)

    value = raw.strip().lower()
    expected = field_types[key]
    if expected is bool:
        if value in _TRUE_VALUES:
            return True
        if value in _FALSE_VALUES:
            return False
        raise InvalidSettingError(key, raw)

    try:
        number = float(value)
    except ValueError:
        raise InvalidSettingError(key, raw)
    if number < 0:
        raise InvalidSettingError(key, raw)
    return int(number) if expected is int else number
