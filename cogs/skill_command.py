"""
스킬 커맨드

/스킬: 강도/해킹 스킬 현황
/훈련: 비용을 내고 시간이 지나면 XP를 받는 훈련 시작
/훈련정보: 다음 훈련 비용/시간/보상 확인
"""
import logging

import discord
from discord import app_commands
from discord.ext import commands

from config.environment import GUILD_IDS
from config.heist import Discipline
from exceptions import HeistBotError
from utils.formatting import discipline_name, format_duration, format_money
from views.embeds.heist_embeds import skill_status_embed, training_info_embed

logger = logging.getLogger(__name__)

DISCIPLINE_CHOICES = [
    app_commands.Choice(name="💰 강도", value=Discipline.ROB.value),
    app_commands.Choice(name="💻 해킹", value=Discipline.HACK.value),
]


class SkillCommand(commands.Cog):
    """스킬/훈련 커맨드"""

    def __init__(self, bot):
        self.bot = bot

    @property
    def skills(self):
        return self.bot.heist_engine.ctx.skills

    @app_commands.command(name="스킬", description="강도/해킹 스킬 레벨을 확인합니다")
    @app_commands.guilds(*GUILD_IDS)
    @app_commands.describe(유저="조회할 유저 (생략 시 본인)")
    async def skill_status(self, interaction: discord.Interaction, 유저: discord.Member = None):
        user = 유저 or interaction.user
        guild_id = interaction.guild.id

        statuses = []
        notices = []
        for discipline in Discipline:
            # 본인 조회 시 끝난 훈련 먼저 반영
            if user.id == interaction.user.id:
                completion = await self.skills.check_training_complete(guild_id, user.id, discipline)
                if completion is not None:
                    notices.append(
                        f"🏋️ {discipline_name(discipline)} 훈련 완료! (+{completion.xp_gained:,} XP)"
                    )
            statuses.append(await self.skills.get_status(guild_id, user.id, discipline))

        await interaction.response.send_message(
            content="\n".join(notices) or None,
            embed=skill_status_embed(user, statuses),
        )

    @app_commands.command(name="훈련", description="스킬 훈련을 시작합니다")
    @app_commands.guilds(*GUILD_IDS)
    @app_commands.describe(종류="훈련할 스킬")
    @app_commands.choices(종류=DISCIPLINE_CHOICES)
    async def train(self, interaction: discord.Interaction, 종류: app_commands.Choice[str]):
        discipline = Discipline(종류.value)
        try:
            result = await self.skills.start_training(interaction.guild.id, interaction.user.id, discipline)
        except HeistBotError as e:
            await interaction.response.send_message(f"❌ {e.message}", ephemeral=True)
            return

        await interaction.response.send_message(
            f"🏋️ {discipline_name(discipline)} 훈련을 시작했습니다!\n"
            f"비용: {format_money(result.cost)} · 소요 시간: {format_duration(result.duration_seconds)}\n"
            f"완료 보상: {result.xp_reward:,} XP (레벨 {result.next_level} 목표)"
        )

    @app_commands.command(name="훈련정보", description="다음 훈련의 비용과 보상을 확인합니다")
    @app_commands.guilds(*GUILD_IDS)
    @app_commands.describe(종류="확인할 스킬")
    @app_commands.choices(종류=DISCIPLINE_CHOICES)
    async def training_info(self, interaction: discord.Interaction, 종류: app_commands.Choice[str]):
        discipline = Discipline(종류.value)
        info = await self.skills.get_training_info(interaction.guild.id, interaction.user.id, discipline)
        await interaction.response.send_message(embed=training_info_embed(discipline, info), ephemeral=True)


async def setup(bot: commands.Bot):
    await bot.add_cog(SkillCommand(bot))
