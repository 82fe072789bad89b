"""
강도/해킹 방어 버튼 View

버튼은 피해자만 누를 수 있으며, 처음 받아들여진 입력 이후에는 모두 비활성화됩니다.
실제 판정은 엔진의 결정 창이 담당하므로 늦은 입력은 무시됩니다.
"""
import logging

import discord
from discord.ui import Button, View

from config.heist import DefenseChoice
from exceptions import NotDecisionOwnerError
from views.embeds.heist_embeds import DEFENSE_LABELS

logger = logging.getLogger(__name__)


class _TargetOnlyView(View):
    """피해자 전용 버튼 View 베이스"""

    def __init__(self, attack, timeout: float):
        super().__init__(timeout=timeout)
        self.attack = attack

    async def interaction_check(self, interaction: discord.Interaction) -> bool:
        if interaction.user.id != self.attack.target_id:
            await interaction.response.send_message("❌ 당신에게 온 공격이 아닙니다!", ephemeral=True)
            return False
        return True

    def disable_all(self) -> None:
        for item in self.children:
            item.disabled = True

    async def _accept(self, interaction: discord.Interaction, accepted: bool) -> None:
        if not accepted:
            await interaction.response.send_message("⌛ 이미 처리되었습니다.", ephemeral=True)
            return
        self.disable_all()
        self.stop()
        await interaction.response.edit_message(view=self)


class RobDefenseView(_TargetOnlyView):
    """강도 방어 선택 (현금 숨기기 / 회피 / 반격)"""

    def __init__(self, attack):
        super().__init__(attack, timeout=attack.settings.defense_window_seconds + 5)

    async def _choose(self, interaction: discord.Interaction, choice: DefenseChoice) -> None:
        try:
            accepted = self.attack.submit_defense(interaction.user.id, choice)
        except NotDecisionOwnerError as e:
            await interaction.response.send_message(e.message, ephemeral=True)
            return
        await self._accept(interaction, accepted)

    @discord.ui.button(label=DEFENSE_LABELS[DefenseChoice.HIDE_CASH], style=discord.ButtonStyle.primary)
    async def hide_cash(self, interaction: discord.Interaction, button: Button):
        await self._choose(interaction, DefenseChoice.HIDE_CASH)

    @discord.ui.button(label=DEFENSE_LABELS[DefenseChoice.DODGE], style=discord.ButtonStyle.secondary)
    async def dodge(self, interaction: discord.Interaction, button: Button):
        await self._choose(interaction, DefenseChoice.DODGE)

    @discord.ui.button(label=DEFENSE_LABELS[DefenseChoice.FIGHT_BACK], style=discord.ButtonStyle.danger)
    async def fight_back(self, interaction: discord.Interaction, button: Button):
        await self._choose(interaction, DefenseChoice.FIGHT_BACK)


class HackDefenseView(_TargetOnlyView):
    """해킹 백신 버튼 (진행도 80% 이상이면 비활성화)"""

    def __init__(self, attack):
        settings = attack.settings
        super().__init__(attack, timeout=settings.tick_seconds * (100 / settings.progress_step) + 5)

    @discord.ui.button(label="🛡️ 백신 실행", style=discord.ButtonStyle.success)
    async def run_antivirus(self, interaction: discord.Interaction, button: Button):
        try:
            accepted = self.attack.submit_defense(interaction.user.id)
        except NotDecisionOwnerError as e:
            await interaction.response.send_message(e.message, ephemeral=True)
            return
        await self._accept(interaction, accepted)


class TraceView(_TargetOnlyView):
    """역추적 버튼"""

    def __init__(self, attack):
        super().__init__(attack, timeout=attack.settings.trace_window_seconds + 5)

    @discord.ui.button(label="🔍 역추적", style=discord.ButtonStyle.primary)
    async def trace(self, interaction: discord.Interaction, button: Button):
        try:
            accepted = self.attack.submit_trace(interaction.user.id)
        except NotDecisionOwnerError as e:
            await interaction.response.send_message(e.message, ephemeral=True)
            return
        await self._accept(interaction, accepted)
