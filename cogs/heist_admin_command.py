"""
강도/해킹 관리자 커맨드

/강도설정, /해킹설정, /스킬설정: 길드 설정 조회/변경/초기화
/면역역할: 공격 대상에서 제외할 역할 관리
"""
import logging
from dataclasses import fields
from typing import List

import discord
from discord import app_commands
from discord.ext import commands

from config.environment import GUILD_IDS
from config.heist import Discipline
from exceptions import HeistBotError
from service.heist.settings_store import SETTINGS_KINDS, parse_setting_value
from utils.formatting import discipline_name
from views.embeds.heist_embeds import settings_embed

logger = logging.getLogger(__name__)

RESET_KEYWORD = "초기화"

KIND_TITLES = {
    "rob": "강도 설정",
    "hack": "해킹 설정",
    "skill": "스킬 설정",
}


def _key_choices(kind: str, current: str) -> List[app_commands.Choice[str]]:
    """설정 항목 자동완성 (Discord 제한 25개)"""
    keys = [f.name for f in fields(SETTINGS_KINDS[kind])] + [RESET_KEYWORD]
    return [app_commands.Choice(name=key, value=key) for key in keys if current.lower() in key.lower()][:25]


async def rob_key_autocomplete(interaction: discord.Interaction, current: str):
    return _key_choices("rob", current)


async def hack_key_autocomplete(interaction: discord.Interaction, current: str):
    return _key_choices("hack", current)


async def skill_key_autocomplete(interaction: discord.Interaction, current: str):
    return _key_choices("skill", current)


class HeistAdminCommand(commands.Cog):
    """관리자 전용 설정 커맨드"""

    def __init__(self, bot):
        self.bot = bot

    @property
    def settings(self):
        return self.bot.heist_engine.ctx.settings

    @app_commands.command(name="강도설정", description="[관리자] 강도 설정 조회/변경")
    @app_commands.guilds(*GUILD_IDS)
    @app_commands.default_permissions(administrator=True)
    @app_commands.describe(항목="변경할 항목 (초기화: 기본값 복원)", 값="새 값")
    @app_commands.autocomplete(항목=rob_key_autocomplete)
    async def rob_settings(self, interaction: discord.Interaction, 항목: str = None, 값: str = None):
        await self._handle_settings(interaction, "rob", 항목, 값)

    @app_commands.command(name="해킹설정", description="[관리자] 해킹 설정 조회/변경")
    @app_commands.guilds(*GUILD_IDS)
    @app_commands.default_permissions(administrator=True)
    @app_commands.describe(항목="변경할 항목 (초기화: 기본값 복원)", 값="새 값")
    @app_commands.autocomplete(항목=hack_key_autocomplete)
    async def hack_settings(self, interaction: discord.Interaction, 항목: str = None, 값: str = None):
        await self._handle_settings(interaction, "hack", 항목, 값)

    @app_commands.command(name="스킬설정", description="[관리자] 스킬 설정 조회/변경")
    @app_commands.guilds(*GUILD_IDS)
    @app_commands.default_permissions(administrator=True)
    @app_commands.describe(항목="변경할 항목 (초기화: 기본값 복원)", 값="새 값")
    @app_commands.autocomplete(항목=skill_key_autocomplete)
    async def skill_settings(self, interaction: discord.Interaction, 항목: str = None, 값: str = None):
        await self._handle_settings(interaction, "skill", 항목, 값)

    async def _handle_settings(self, interaction: discord.Interaction, kind: str, key: str, raw: str):
        guild_id = interaction.guild.id
        title = KIND_TITLES[kind]

        if key == RESET_KEYWORD:
            await self.settings.reset(guild_id, kind)
            await interaction.response.send_message(f"✅ {title}을 기본값으로 되돌렸습니다.", ephemeral=True)
            return

        if key is None:
            snapshot = await self.settings.get(guild_id, kind)
            await interaction.response.send_message(embed=settings_embed(title, snapshot), ephemeral=True)
            return

        if raw is None:
            await interaction.response.send_message("❌ 변경할 값을 입력해주세요.", ephemeral=True)
            return

        try:
            value = parse_setting_value(kind, key, raw)
            snapshot = await self.settings.update(guild_id, kind, **{key: value})
        except HeistBotError as e:
            await interaction.response.send_message(f"❌ {e.message}", ephemeral=True)
            return

        logger.info(f"{interaction.user} changed {kind}.{key} to {value} in guild {guild_id}")
        await interaction.response.send_message(
            f"✅ `{key}` = **{value}**", embed=settings_embed(title, snapshot), ephemeral=True
        )

    @app_commands.command(name="면역역할", description="[관리자] 강도/해킹 면역 역할 관리")
    @app_commands.guilds(*GUILD_IDS)
    @app_commands.default_permissions(administrator=True)
    @app_commands.describe(동작="추가/제거/목록", 종류="공격 종류", 역할="대상 역할 (목록 조회 시 생략)")
    @app_commands.choices(
        동작=[
            app_commands.Choice(name="추가", value="add"),
            app_commands.Choice(name="제거", value="remove"),
            app_commands.Choice(name="목록", value="list"),
        ],
        종류=[
            app_commands.Choice(name="💰 강도", value=Discipline.ROB.value),
            app_commands.Choice(name="💻 해킹", value=Discipline.HACK.value),
        ],
    )
    async def immune_role(
        self,
        interaction: discord.Interaction,
        동작: app_commands.Choice[str],
        종류: app_commands.Choice[str],
        역할: discord.Role = None,
    ):
        guild_id = interaction.guild.id
        discipline = Discipline(종류.value)
        name = discipline_name(discipline)

        if 동작.value == "list":
            role_ids = await self.settings.get_immune_roles(guild_id, discipline)
            mentions = ", ".join(f"<@&{role_id}>" for role_id in sorted(role_ids)) or "없음"
            await interaction.response.send_message(f"🛡️ {name} 면역 역할: {mentions}", ephemeral=True)
            return

        if 역할 is None:
            await interaction.response.send_message("❌ 역할을 지정해주세요.", ephemeral=True)
            return

        if 동작.value == "add":
            await self.settings.add_immune_role(guild_id, 역할.id, discipline)
            message = f"✅ {역할.mention} 역할이 {name} 면역이 되었습니다."
        else:
            await self.settings.remove_immune_role(guild_id, 역할.id, discipline)
            message = f"✅ {역할.mention} 역할의 {name} 면역을 해제했습니다."
        await interaction.response.send_message(message, ephemeral=True)


async def setup(bot: commands.Bot):
    await bot.add_cog(HeistAdminCommand(bot))
