"""
강도/해킹 커맨드

/강도, /해킹: 공격 시작 (자격 검사 실패 시 본인에게만 사유 표시)
/쿨다운: 길드 쿨다운 현황
/강도기록, /해킹기록: 공격 통계
"""
import logging

import discord
from discord import app_commands
from discord.ext import commands

from config.environment import GUILD_IDS
from config.heist import Discipline
from config.ui import UI
from exceptions import HeistBotError
from service.heist.history_service import HistoryService
from views.embeds.heist_embeds import cooldown_overview_embed, stats_embed
from views.heist_renderer import HeistRenderer

logger = logging.getLogger(__name__)

DISCIPLINE_CHOICES = [
    app_commands.Choice(name="💰 강도", value=Discipline.ROB.value),
    app_commands.Choice(name="💻 해킹", value=Discipline.HACK.value),
]


class HeistCommand(commands.Cog):
    """강도/해킹 커맨드"""

    def __init__(self, bot):
        self.bot = bot

    @property
    def engine(self):
        return self.bot.heist_engine

    @app_commands.command(name="강도", description="대상의 현금을 노립니다")
    @app_commands.guilds(*GUILD_IDS)
    @app_commands.describe(대상="강도질할 유저")
    async def rob(self, interaction: discord.Interaction, 대상: discord.Member):
        await self._start_attack(interaction, 대상, Discipline.ROB)

    @app_commands.command(name="해킹", description="대상의 은행 잔고를 해킹합니다")
    @app_commands.guilds(*GUILD_IDS)
    @app_commands.describe(대상="해킹할 유저")
    async def hack(self, interaction: discord.Interaction, 대상: discord.Member):
        await self._start_attack(interaction, 대상, Discipline.HACK)

    async def _start_attack(self, interaction: discord.Interaction, target: discord.Member, discipline: Discipline):
        """자격 검사 → 렌더러 연결 → 엔진에 공격 위임"""
        if interaction.guild is None:
            await interaction.response.send_message("❌ 서버에서만 사용할 수 있습니다.", ephemeral=True)
            return

        prepare = self.engine.prepare_rob if discipline == Discipline.ROB else self.engine.prepare_hack
        try:
            attack = await prepare(
                interaction.guild.id,
                interaction.user.id,
                target.id,
                target_is_bot=target.bot,
                target_role_ids=[role.id for role in target.roles],
            )
        except HeistBotError as e:
            await interaction.response.send_message(f"❌ {e.message}", ephemeral=True)
            return

        await interaction.response.defer()
        HeistRenderer(interaction, attack, interaction.user, target).attach()

        try:
            await self.engine.launch(attack)
        except HeistBotError as e:
            await interaction.followup.send(f"❌ {e.message}", ephemeral=True)

    @app_commands.command(name="쿨다운", description="서버의 강도/해킹 쿨다운 현황")
    @app_commands.guilds(*GUILD_IDS)
    @app_commands.describe(종류="공격 종류")
    @app_commands.choices(종류=DISCIPLINE_CHOICES)
    async def cooldowns(self, interaction: discord.Interaction, 종류: app_commands.Choice[str]):
        discipline = Discipline(종류.value)
        overview = await self.engine.ctx.eligibility.list_active_cooldowns(interaction.guild.id, discipline)

        def resolve_name(user_id: int) -> str:
            member = interaction.guild.get_member(user_id)
            return member.display_name if member else f"<@{user_id}>"

        await interaction.response.send_message(
            embed=cooldown_overview_embed(discipline, overview, resolve_name),
            ephemeral=True,
        )

    @app_commands.command(name="강도기록", description="강도 통계를 확인합니다")
    @app_commands.guilds(*GUILD_IDS)
    @app_commands.describe(유저="조회할 유저 (생략 시 본인)")
    async def rob_stats(self, interaction: discord.Interaction, 유저: discord.Member = None):
        await self._send_stats(interaction, 유저 or interaction.user, Discipline.ROB)

    @app_commands.command(name="해킹기록", description="해킹 통계를 확인합니다")
    @app_commands.guilds(*GUILD_IDS)
    @app_commands.describe(유저="조회할 유저 (생략 시 본인)")
    async def hack_stats(self, interaction: discord.Interaction, 유저: discord.Member = None):
        await self._send_stats(interaction, 유저 or interaction.user, Discipline.HACK)

    async def _send_stats(self, interaction: discord.Interaction, user: discord.abc.User, discipline: Discipline):
        guild_id = interaction.guild.id
        stats = await HistoryService.get_stats(guild_id, user.id, discipline)
        recent = await HistoryService.get_recent(guild_id, user.id, discipline, limit=UI.HISTORY_PAGE_SIZE)
        await interaction.response.send_message(embed=stats_embed(user, discipline, stats, recent))


async def setup(bot: commands.Bot):
    await bot.add_cog(HeistCommand(bot))
