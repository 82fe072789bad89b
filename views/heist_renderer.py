"""
공격 메시지 렌더러

공격의 EventBus를 구독해 Discord 메시지를 보내고 갱신합니다.
여기서 발생한 예외는 EventBus가 로그로 남기고 엔진에는 전달 실패로만 알려집니다.
"""
import logging
from typing import Optional

import discord

from service.event.event_bus import HeistEvent, HeistEventType
from utils.formatting import discipline_name
from views.embeds.heist_embeds import hack_progress_embed, outcome_embed, rob_announce_embed, trace_embed
from views.heist_defense import HackDefenseView, RobDefenseView, TraceView

logger = logging.getLogger(__name__)


class HeistRenderer:
    """
    공격 한 건의 메시지 렌더러

    Args:
        interaction: 공격 명령 인터랙션 (defer 완료 상태)
        attack: RobAttack 또는 HackAttack
        attacker: 공격자 멤버
        target: 피해자 멤버
    """

    def __init__(self, interaction: discord.Interaction, attack, attacker: discord.Member, target: discord.Member):
        self.interaction = interaction
        self.attack = attack
        self.attacker = attacker
        self.target = target
        self.message: Optional[discord.Message] = None
        self.view: Optional[discord.ui.View] = None
        self.trace_message: Optional[discord.Message] = None
        self.trace_view: Optional[TraceView] = None

    def attach(self) -> None:
        """공격 이벤트 구독"""
        bus = self.attack.events
        bus.subscribe(HeistEventType.ROB_ANNOUNCED, self.on_rob_announced)
        bus.subscribe(HeistEventType.HACK_STARTED, self.on_hack_progress)
        bus.subscribe(HeistEventType.HACK_PROGRESS, self.on_hack_progress)
        bus.subscribe(HeistEventType.DEFENSE_FAILED, self.on_defense_failed)
        bus.subscribe(HeistEventType.ATTACK_RESOLVED, self.on_resolved)
        bus.subscribe(HeistEventType.TRACE_OPENED, self.on_trace_opened)
        bus.subscribe(HeistEventType.TRACE_RESOLVED, self.on_trace_resolved)
        bus.subscribe(HeistEventType.LEVEL_UP, self.on_level_up)
        bus.subscribe(HeistEventType.TRAINING_COMPLETED, self.on_training_completed)

    async def on_rob_announced(self, event: HeistEvent):
        self.view = RobDefenseView(self.attack)
        embed = rob_announce_embed(
            self.attacker.mention,
            self.target.mention,
            event.data["success_rate"],
            event.data["window_seconds"],
        )
        self.message = await self.interaction.followup.send(
            content=self.target.mention, embed=embed, view=self.view, wait=True
        )

    async def on_hack_progress(self, event: HeistEvent):
        embed = hack_progress_embed(
            self.attacker.mention,
            self.target.mention,
            event.data["progress"],
            event.data["defense_chance"],
            event.data.get("defense_available", True),
        )
        if self.message is None:
            self.view = HackDefenseView(self.attack)
            self.message = await self.interaction.followup.send(
                content=self.target.mention, embed=embed, view=self.view, wait=True
            )
            return

        if not event.data.get("defense_available", True) and self.view is not None:
            self.view.disable_all()
        await self.message.edit(embed=embed, view=self.view)

    async def on_defense_failed(self, event: HeistEvent):
        await self.interaction.followup.send(
            f"⚠️ {self.target.mention}님의 방어가 실패했습니다! (성공률 {event.data['rate']:.0f}%)"
        )

    async def on_resolved(self, event: HeistEvent):
        if self.view is not None:
            self.view.stop()
        embed = outcome_embed(event.data["outcome"], self.attacker.mention, self.target.mention)
        if self.message is None:
            self.message = await self.interaction.followup.send(embed=embed, wait=True)
        else:
            await self.message.edit(content=None, embed=embed, view=None)

    async def on_trace_opened(self, event: HeistEvent):
        self.trace_view = TraceView(self.attack)
        self.trace_message = await self.interaction.followup.send(
            content=(
                f"{self.target.mention}님, 해커를 역추적할 수 있습니다! "
                f"(성공률 {event.data['chance']:.0f}%, {event.data['window_seconds']:.0f}초)"
            ),
            view=self.trace_view,
            wait=True,
        )

    async def on_trace_resolved(self, event: HeistEvent):
        if self.trace_view is not None:
            self.trace_view.stop()
        embed = trace_embed(event.data["trace"], self.attacker.mention, self.target.mention)
        if self.trace_message is None:
            await self.interaction.followup.send(embed=embed)
        else:
            await self.trace_message.edit(content=None, embed=embed, view=None)

    async def on_level_up(self, event: HeistEvent):
        name = discipline_name(event.data["discipline"])
        await self.interaction.followup.send(
            f"🎉 {self.attacker.mention}님의 {name} 레벨이 **{event.data['new_level']}**(으)로 올랐습니다!"
        )

    async def on_training_completed(self, event: HeistEvent):
        training = event.data["training"]
        name = discipline_name(event.data["discipline"])
        await self.interaction.followup.send(
            f"🏋️ {self.attacker.mention}님의 {name} 훈련이 끝났습니다! (+{training.xp_gained:,} XP)",
            ephemeral=True,
        )
