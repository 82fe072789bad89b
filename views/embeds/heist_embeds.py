"""
Heist Embeds

강도/해킹 진행 상황과 결과의 Discord Embed 생성을 담당합니다.
"""
from dataclasses import asdict
from typing import List, Optional

import discord

from config import UI, EmbedColor
from config.heist import DefenseChoice, Discipline
from utils.formatting import discipline_name, format_duration, format_money, progress_bar

DEFENSE_LABELS = {
    DefenseChoice.HIDE_CASH: "💰 현금 숨기기",
    DefenseChoice.DODGE: "💨 회피",
    DefenseChoice.FIGHT_BACK: "👊 반격",
}


def rob_announce_embed(attacker: str, target: str, success_rate: float, window_seconds: float) -> discord.Embed:
    embed = discord.Embed(
        title="🦹 강도 발생!",
        description=(
            f"{attacker}님이 {target}님의 지갑을 노리고 있습니다!\n\n"
            f"{target}님은 **{format_duration(window_seconds)}** 안에 방어를 선택하세요.\n"
            f"빠르게 반응할수록 방어 성공률이 높습니다."
        ),
        color=EmbedColor.ROB,
    )
    embed.add_field(name="성공 확률", value=f"{success_rate:.1f}%", inline=True)
    return embed


def hack_progress_embed(
    attacker: str,
    target: str,
    progress: int,
    defense_chance: float,
    defense_available: bool,
) -> discord.Embed:
    embed = discord.Embed(
        title="💻 해킹 진행 중",
        description=f"{attacker}님이 {target}님의 은행 계좌를 해킹하고 있습니다!",
        color=EmbedColor.HACK,
    )
    embed.add_field(name="진행도", value=progress_bar(progress, UI.PROGRESS_BAR_LENGTH), inline=False)
    if defense_available:
        embed.add_field(name="백신 성공률", value=f"{defense_chance:.0f}%", inline=True)
    else:
        embed.add_field(name="백신", value="사용 불가", inline=True)
    return embed


def outcome_embed(outcome, attacker: str, target: str) -> discord.Embed:
    """
    공격 결과 Embed

    Args:
        outcome: AttackOutcome
        attacker: 공격자 표시 이름
        target: 피해자 표시 이름
    """
    name = discipline_name(outcome.discipline)

    if outcome.defended:
        embed = discord.Embed(title=f"🛡️ {name} 방어 성공!", color=EmbedColor.DEFENDED)
        if outcome.discipline == Discipline.ROB and outcome.defense_choice is not None:
            line = f"{target}님이 **{DEFENSE_LABELS[outcome.defense_choice]}**으로 막아냈습니다!"
            if outcome.amount > 0:
                line += f"\n{attacker}님이 {target}님에게 **{format_money(outcome.amount)}**을 물어줍니다."
        else:
            line = (
                f"{target}님의 백신이 {outcome.progress}%에서 해킹을 차단했습니다!\n"
                f"{attacker}님은 벌금 **{format_money(outcome.amount)}**을 냅니다."
            )
        embed.description = line
    elif outcome.success:
        where = "현금" if outcome.discipline == Discipline.ROB else "은행 잔고"
        embed = discord.Embed(
            title=f"💸 {name} 성공!",
            description=f"{attacker}님이 {target}님의 {where}에서 **{format_money(outcome.amount)}**을 훔쳤습니다!",
            color=EmbedColor.SUCCESS,
        )
    else:
        embed = discord.Embed(
            title=f"🚨 {name} 실패!",
            description=f"{attacker}님이 붙잡혀 벌금 **{format_money(outcome.amount)}**을 냈습니다.",
            color=EmbedColor.ERROR,
        )

    if outcome.xp is not None:
        xp_line = f"+{outcome.xp.xp_gained} XP"
        if outcome.xp.level_up:
            xp_line += f" (레벨 {outcome.xp.new_level} 달성!)"
        embed.add_field(name="경험치", value=xp_line, inline=True)
    elif not outcome.awards_xp:
        embed.add_field(
            name="경험치",
            value=f"같은 대상을 반복 공격해 XP가 없습니다. (다른 대상 {outcome.targets_still_needed}명 더 필요)",
            inline=False,
        )
    return embed


def trace_embed(trace, attacker: str, target: str) -> discord.Embed:
    """역추적 결과 Embed (TraceResult)"""
    if not trace.attempted:
        return discord.Embed(
            title="🔍 역추적 종료",
            description=f"{target}님이 역추적을 시도하지 않았습니다.",
            color=EmbedColor.DEFAULT,
        )
    if trace.success:
        return discord.Embed(
            title="🔍 역추적 성공!",
            description=f"{target}님이 {attacker}님을 추적해 **{format_money(trace.recovered)}**을 회수했습니다!",
            color=EmbedColor.SUCCESS,
        )
    return discord.Embed(
        title="🔍 역추적 실패",
        description=f"{attacker}님의 흔적을 찾지 못했습니다. (성공률 {trace.chance:.0f}%)",
        color=EmbedColor.WARNING,
    )


def skill_status_embed(user: discord.abc.User, statuses: List) -> discord.Embed:
    """스킬 현황 Embed (SkillStatus 목록)"""
    embed = discord.Embed(title=f"🎯 {user.display_name}님의 스킬", color=EmbedColor.DEFAULT)
    for status in statuses:
        lines = [f"레벨 **{status.level}** · {status.xp:,} XP"]
        if status.progress.needed:
            lines.append(progress_bar(status.progress.percent, UI.PROGRESS_BAR_LENGTH))
            lines.append(f"다음 레벨까지 {status.progress.needed - status.progress.current:,} XP")
        else:
            lines.append("최고 레벨")

        bonuses = status.bonuses
        lines.append(f"성공률 +{bonuses.success_rate_bonus:g}% · 쿨다운 -{bonuses.cooldown_reduction:g}%")
        if status.discipline == Discipline.ROB:
            lines.append(f"강탈 범위 +{bonuses.max_steal_bonus:g}% · 벌금 -{bonuses.fine_reduction:g}%")
        else:
            lines.append(f"최대 강탈 +{bonuses.max_steal_bonus:g}% · 역추적 -{bonuses.trace_reduction:g}%")

        if status.training_remaining is not None:
            lines.append(f"🏋️ 훈련 중: {format_duration(status.training_remaining)} 남음")

        embed.add_field(name=discipline_name(status.discipline), value="\n".join(lines), inline=True)
    return embed


def training_info_embed(discipline: Discipline, info) -> discord.Embed:
    """훈련 정보 Embed (TrainingInfo)"""
    embed = discord.Embed(title=f"🏋️ {discipline_name(discipline)} 훈련", color=EmbedColor.DEFAULT)
    if info.max_level:
        embed.description = "더 이상 훈련할 수 있는 레벨이 없습니다."
        return embed

    embed.add_field(name="목표", value=f"레벨 {info.current_level} → {info.next_level}", inline=True)
    embed.add_field(name="비용", value=format_money(info.cost), inline=True)
    embed.add_field(name="시간", value=format_duration(info.duration_seconds), inline=True)
    embed.add_field(name="보상", value=f"{info.xp_reward:,} XP", inline=True)

    status: Optional[str] = None
    if info.active_remaining is not None:
        status = f"훈련 중 ({format_duration(info.active_remaining)} 남음)"
    elif info.already_trained_at_level:
        status = "이 레벨에서는 이미 훈련했습니다"
    embed.add_field(name="상태", value=status or "훈련 가능", inline=False)
    return embed


def cooldown_overview_embed(discipline: Discipline, overview, resolve_name) -> discord.Embed:
    """
    쿨다운 현황 Embed

    Args:
        discipline: 공격 종류
        overview: CooldownOverview
        resolve_name: 유저 ID → 표시 이름 함수
    """
    embed = discord.Embed(title=f"⏱️ {discipline_name(discipline)} 쿨다운 현황", color=EmbedColor.DEFAULT)

    attackers = overview.attackers[:UI.COOLDOWN_LIST_LIMIT]
    targets = overview.protected_targets[:UI.COOLDOWN_LIST_LIMIT]

    embed.add_field(
        name="공격 대기",
        value="\n".join(f"{resolve_name(uid)}: {format_duration(sec)}" for uid, sec in attackers) or "없음",
        inline=True,
    )
    embed.add_field(
        name="보호 중",
        value="\n".join(f"{resolve_name(uid)}: {format_duration(sec)}" for uid, sec in targets) or "없음",
        inline=True,
    )
    return embed


def stats_embed(user: discord.abc.User, discipline: Discipline, stats, recent: List) -> discord.Embed:
    """공격 통계 Embed (AttackStats, AttackHistory 목록)"""
    name = discipline_name(discipline)
    embed = discord.Embed(title=f"📊 {user.display_name}님의 {name} 기록", color=EmbedColor.DEFAULT)
    embed.add_field(name="시도", value=f"{stats.attempts}회", inline=True)
    embed.add_field(name="성공", value=f"{stats.successes}회 ({stats.success_rate:.0f}%)", inline=True)
    embed.add_field(name="방어당함", value=f"{stats.defended}회", inline=True)
    embed.add_field(name="총 강탈액", value=format_money(stats.total_stolen), inline=True)
    embed.add_field(name="총 벌금", value=format_money(stats.total_fined), inline=True)
    embed.add_field(name="피해", value=f"{stats.times_targeted}회 · {format_money(stats.total_lost)}", inline=True)

    if recent:
        lines = []
        for row in recent:
            role = "공격" if row.attacker_id == user.id else "피해"
            other = row.target_id if role == "공격" else row.attacker_id
            result = "🛡️" if row.defended else ("✅" if row.success else "❌")
            lines.append(f"{result} {role} <@{other}> {format_money(row.amount)}")
        embed.add_field(name="최근 기록", value="\n".join(lines), inline=False)
    return embed


def settings_embed(title: str, settings) -> discord.Embed:
    """길드 설정 스냅샷 Embed"""
    embed = discord.Embed(title=f"⚙️ {title}", color=EmbedColor.DEFAULT)
    lines = [f"`{key}` = **{value}**" for key, value in asdict(settings).items()]
    embed.description = "\n".join(lines)
    embed.set_footer(text="사용법: 항목과 값을 함께 입력하면 변경됩니다")
    return embed
