"""
진행 중인 공격 레지스트리

대상 하나에 동시에 하나의 다단계 공격(해킹)만 허용합니다.
모듈 전역 싱글톤이 아니라 엔진에 주입되는 객체이므로, 테스트마다 독립된 인스턴스를 만들 수 있습니다.
"""
import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from config.heist import Discipline

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActiveOperation:
    """진행 중인 공격"""
    guild_id: int
    target_id: int
    attacker_id: int
    discipline: Discipline
    started_at: float


class ActiveOperationRegistry:
    """
    (길드, 대상, 종류) 단위 점유 관리

    try_claim은 원자적 확인-후-설정이며, 같은 대상에 대한 동시 요청 중 정확히 하나만 성공합니다.
    """

    def __init__(self):
        self._operations: Dict[Tuple[int, int, Discipline], ActiveOperation] = {}
        self._lock = asyncio.Lock()

    async def try_claim(
        self, guild_id: int, target_id: int, discipline: Discipline, attacker_id: int
    ) -> bool:
        """
        대상 점유 시도

        Returns:
            점유 성공 여부 (이미 점유되어 있으면 False)
        """
        key = (guild_id, target_id, discipline)
        async with self._lock:
            if key in self._operations:
                logger.debug(f"Claim rejected: target {target_id} already under {discipline.value}")
                return False
            self._operations[key] = ActiveOperation(
                guild_id=guild_id,
                target_id=target_id,
                attacker_id=attacker_id,
                discipline=discipline,
                started_at=time.time(),
            )
            return True

    async def release(self, guild_id: int, target_id: int, discipline: Discipline) -> None:
        """점유 해제 (점유되어 있지 않아도 안전)"""
        async with self._lock:
            self._operations.pop((guild_id, target_id, discipline), None)

    def get(self, guild_id: int, target_id: int, discipline: Discipline) -> Optional[ActiveOperation]:
        return self._operations.get((guild_id, target_id, discipline))

    def is_claimed(self, guild_id: int, target_id: int, discipline: Discipline) -> bool:
        return (guild_id, target_id, discipline) in self._operations

    def __len__(self) -> int:
        return len(self._operations)
