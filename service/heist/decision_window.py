"""
방어 선택 대기

"플레이어 입력 vs 시간 초과" 경쟁을 한 번만 결정하는 단일 결정 Future입니다.
먼저 도착한 쪽이 이기고, 이후의 제출은 아무 효과가 없습니다.
입력이 먼저 오면 타이머를 취소하고, 타이머가 먼저 오면 이후 입력을 무시합니다.
"""
import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from exceptions import NotDecisionOwnerError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Decision:
    """결정 결과"""

    choice: Any
    """선택 값 (시간 초과/종료 시 None)"""

    elapsed: float
    """창이 열린 뒤 결정까지 걸린 시간 (초)"""

    timed_out: bool
    """시간 초과 또는 강제 종료로 결정되었는지"""


class DecisionWindow:
    """
    단일 결정 창

    Args:
        owner_id: 선택 권한을 가진 유저 ID
        timeout: 제한 시간 (초). None이면 close()로만 종료
        clock: 경과 시간 측정용 단조 시계
    """

    def __init__(
        self,
        owner_id: int,
        timeout: Optional[float],
        clock: Callable[[], float] = time.monotonic,
    ):
        self.owner_id = owner_id
        self.timeout = timeout
        self._clock = clock
        self._future: Optional[asyncio.Future] = None
        self._timer: Optional[asyncio.TimerHandle] = None
        self._opened_at: float = 0.0

    def open(self) -> None:
        """창 열기 (타이머 시작)"""
        loop = asyncio.get_running_loop()
        self._future = loop.create_future()
        self._opened_at = self._clock()
        if self.timeout is not None:
            self._timer = loop.call_later(self.timeout, self._expire)

    @property
    def is_open(self) -> bool:
        return self._future is not None and not self._future.done()

    @property
    def future(self) -> asyncio.Future:
        return self._future

    def submit(self, user_id: int, choice: Any) -> bool:
        """
        선택 제출

        Returns:
            이번 제출로 결정되었으면 True, 이미 결정된 뒤라면 False

        Raises:
            NotDecisionOwnerError: 선택 권한이 없는 유저
        """
        if user_id != self.owner_id:
            raise NotDecisionOwnerError(user_id)
        if not self.is_open:
            logger.debug(f"Late decision ignored from user {user_id}")
            return False

        self._cancel_timer()
        self._future.set_result(Decision(choice=choice, elapsed=self._elapsed(), timed_out=False))
        return True

    def close(self) -> bool:
        """
        입력 없이 종료 (이미 결정되었으면 무시)

        Returns:
            이번 호출로 종료되었는지
        """
        self._cancel_timer()
        if not self.is_open:
            return False
        self._future.set_result(Decision(choice=None, elapsed=self._elapsed(), timed_out=True))
        return True

    async def wait(self) -> Decision:
        """결정될 때까지 대기"""
        if self._future is None:
            self.open()
        return await asyncio.shield(self._future)

    def _expire(self) -> None:
        self._timer = None
        if self.is_open:
            self._future.set_result(Decision(choice=None, elapsed=self._elapsed(), timed_out=True))

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _elapsed(self) -> float:
        return self._clock() - self._opened_at
