# bot.py
import os
import logging

import discord
from discord.app_commands import CommandSignatureMismatch
from discord.ext import commands
from tortoise import Tortoise

from config.environment import APPLICATION_ID, DATABASE_URL, GUILD_IDS, TOKEN
from service.heist.heist_engine import HeistEngine

# 로그 기본 설정
logging.basicConfig(
    level=logging.INFO,  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)

logger = logging.getLogger(__name__)


class HeistBot(commands.Bot):
    def __init__(self):
        intents = discord.Intents.default()
        intents.members = True
        super().__init__(
            command_prefix="!",
            intents=intents,
            application_id=APPLICATION_ID
        )
        self.heist_engine = HeistEngine.create()

    async def setup_hook(self):
        logger.info("데이터 베이스 연결 시작")
        await self.init_db()
        logger.info("데이터 베이스 연결")

        for fn in sorted(os.listdir("./cogs")):
            if fn.endswith(".py") and not fn.startswith("_"):
                await self.load_extension(f"cogs.{fn[:-3]}")
                logger.info(f"Loaded cogs.{fn[:-3]}")

        for guild_id in GUILD_IDS:
            synced = await self.tree.sync(guild=discord.Object(id=guild_id))
            logger.info(f"길드 {guild_id}: {len(synced)}개 synced: {[c.name for c in synced]}")

    async def init_db(self):
        await Tortoise.init(
            db_url=DATABASE_URL,
            modules={"models": ["models"]}
        )
        await Tortoise.generate_schemas()

    async def close(self):
        # 진행 중인 공격은 현재 상태로 결과를 확정한 뒤 종료
        await self.heist_engine.shutdown()
        await super().close()
        await Tortoise.close_connections()
        logger.info("데이터 베이스 연결 종료")

    async def on_ready(self):
        logger.info(f"Logged in as {self.user} (ID: {self.user.id})")


if __name__ == "__main__":
    if not TOKEN or not APPLICATION_ID or not GUILD_IDS:
        raise RuntimeError("환경변수 DISCORD_TOKEN, APPLICATION_ID, GUILD_IDS를 .env에 모두 설정해주세요")

    bot = HeistBot()

    @bot.tree.error
    async def on_app_command_error(interaction: discord.Interaction, error):
        if isinstance(error, CommandSignatureMismatch):
            await interaction.response.defer(ephemeral=True, thinking=True)
            synced = await bot.tree.sync(guild=interaction.guild)
            return await interaction.followup.send(
                f"⚠️ 명령 시그니처가 갱신되어 `{', '.join(c.name for c in synced)}` 명령어를 재등록했습니다 .\n "
                "다시 시도해 주세요.",
                ephemeral=True
            )
        logger.error(f"Unhandled command error: {error}", exc_info=error)
        raise error

    bot.run(TOKEN)
