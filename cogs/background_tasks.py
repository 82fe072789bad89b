"""배경 작업 Cog - 만료 효과 정리, 스킬 XP 감소"""
import logging

from discord.ext import commands, tasks

from config.heist import Discipline

logger = logging.getLogger(__name__)


class BackgroundTasksCog(commands.Cog):
    """주기적 배경 작업 관리"""

    def __init__(self, bot):
        self.bot = bot
        self.cleanup_expired_effects.start()
        self.apply_skill_decay.start()
        logger.info("BackgroundTasksCog initialized")

    def cog_unload(self):
        """Cog 언로드 시 작업 정지"""
        self.cleanup_expired_effects.cancel()
        self.apply_skill_decay.cancel()
        logger.info("BackgroundTasksCog unloaded")

    @tasks.loop(hours=1)
    async def cleanup_expired_effects(self):
        """만료된 아이템 효과 정리 (1시간마다)"""
        try:
            deleted_count = await self.bot.heist_engine.ctx.effects.cleanup_expired()

            if deleted_count > 0:
                logger.info(f"🧹 Cleaned up {deleted_count} expired effects")
            else:
                logger.debug("No expired effects to clean up")

        except Exception as e:
            logger.error(f"Failed to cleanup expired effects: {e}", exc_info=True)

    @tasks.loop(hours=6)
    async def apply_skill_decay(self):
        """미활동 유저 스킬 XP 감소 (6시간마다, 길드 설정에서 켜진 경우만)"""
        skills = self.bot.heist_engine.ctx.skills
        for guild in self.bot.guilds:
            for discipline in Discipline:
                try:
                    await skills.apply_level_decay(guild.id, discipline)
                except Exception as e:
                    logger.error(
                        f"Failed to apply {discipline.value} decay in guild {guild.id}: {e}", exc_info=True
                    )

    @cleanup_expired_effects.before_loop
    @apply_skill_decay.before_loop
    async def before_background_task(self):
        """봇 준비 대기"""
        await self.bot.wait_until_ready()
        logger.info("Background task ready")


async def setup(bot):
    """Cog 로드"""
    await bot.add_cog(BackgroundTasksCog(bot))
