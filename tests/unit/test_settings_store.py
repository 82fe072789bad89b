"""
SettingsStore 유닛 테스트
"""
import pytest

from config.heist import Discipline, HackSettings, RobSettings
from exceptions import InvalidSettingError
from models.heist_settings import GuildHeistSettings
from service.heist.settings_store import SettingsStore, parse_setting_value
from tests.fixtures.heist import GUILD_ID


class TestSettingsStore:
    """길드별 설정 저장소 테스트"""

    async def test_defaults_without_row(self, test_db):
        store = SettingsStore()
        assert await store.get_rob_settings(GUILD_ID) == RobSettings()
        assert await store.get_hack_settings(GUILD_ID) == HackSettings()

    async def test_update_persists_and_returns_snapshot(self, test_db):
        store = SettingsStore()
        snapshot = await store.update(GUILD_ID, "rob", cooldown_minutes=10, defenses_enabled=False)

        assert snapshot.cooldown_minutes == 10
        assert snapshot.defenses_enabled is False
        assert snapshot.max_steal_percent == RobSettings().max_steal_percent

        # 새 인스턴스도 DB에서 같은 값을 읽음
        fresh = SettingsStore()
        assert (await fresh.get_rob_settings(GUILD_ID)).cooldown_minutes == 10

    async def test_guilds_are_independent(self, test_db):
        store = SettingsStore()
        await store.update(GUILD_ID, "hack", enabled=False)

        assert (await store.get_hack_settings(GUILD_ID)).enabled is False
        assert (await store.get_hack_settings(GUILD_ID + 1)).enabled is True

    async def test_unknown_key_rejected(self, test_db):
        store = SettingsStore()
        with pytest.raises(InvalidSettingError):
            await store.update(GUILD_ID, "rob", no_such_key=1)

    async def test_unknown_kind_rejected(self, test_db):
        store = SettingsStore()
        with pytest.raises(InvalidSettingError):
            await store.update(GUILD_ID, "casino", enabled=True)

    async def test_unknown_stored_keys_ignored(self, test_db):
        """이전 버전에서 저장된 알 수 없는 키는 무시"""
        await GuildHeistSettings.create(guild_id=GUILD_ID, kind="rob", overrides={"legacy": 1, "cooldown_minutes": 5})
        store = SettingsStore()
        assert (await store.get_rob_settings(GUILD_ID)).cooldown_minutes == 5

    async def test_reset(self, test_db):
        store = SettingsStore()
        await store.update(GUILD_ID, "rob", cooldown_minutes=10)
        await store.reset(GUILD_ID, "rob")
        assert await store.get_rob_settings(GUILD_ID) == RobSettings()

    async def test_snapshot_not_affected_by_later_update(self, test_db):
        """진행 중인 공격이 잡은 설정은 이후 변경에 영향 받지 않음"""
        store = SettingsStore()
        before = await store.get_rob_settings(GUILD_ID)
        await store.update(GUILD_ID, "rob", max_steal_percent=30)

        assert before.max_steal_percent == 80
        assert (await store.get_rob_settings(GUILD_ID)).max_steal_percent == 30

    async def test_immune_roles(self, test_db):
        store = SettingsStore()
        await store.add_immune_role(GUILD_ID, 555, Discipline.ROB)

        assert await store.get_immune_roles(GUILD_ID, Discipline.ROB) == frozenset({555})
        assert await store.get_immune_roles(GUILD_ID, Discipline.HACK) == frozenset()

        await store.remove_immune_role(GUILD_ID, 555, Discipline.ROB)
        assert await store.get_immune_roles(GUILD_ID, Discipline.ROB) == frozenset()


class TestParseSettingValue:
    """관리자 입력 변환 테스트"""

    @pytest.mark.parametrize("raw, expected", [("true", True), ("끄기", False), ("OFF", False)])
    def test_bool(self, raw, expected):
        assert parse_setting_value("rob", "enabled", raw) is expected

    def test_float_field_keeps_fraction(self):
        assert parse_setting_value("rob", "min_steal_percent", "25.5") == 25.5

    def test_int_field(self):
        value = parse_setting_value("rob", "unique_targets_required", "4")
        assert value == 4
        assert isinstance(value, int)

    @pytest.mark.parametrize("raw", ["abc", "-1"])
    def test_invalid_value(self, raw):
        with pytest.raises(InvalidSettingError):
            parse_setting_value("hack", "tick_seconds", raw)

    def test_invalid_key(self):
        with pytest.raises(InvalidSettingError):
            parse_setting_value("skill", "nope", "1")
