"""
이벤트 버스 (Event Bus)

옵저버 패턴으로 공격 상태 전이 이벤트를 발행하고 구독합니다.
엔진은 이벤트를 발행하기만 하고, 표시 계층(메시지 렌더러 등)이 구독해서 처리합니다.

공격마다 별도의 EventBus 인스턴스를 사용하므로 싱글톤이 아닙니다.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)


class HeistEventType(Enum):
    """공격 이벤트 타입"""

    # 공격 진행
    ROB_ANNOUNCED = "rob_announced"             # 강도 예고 (방어 선택 대기)
    HACK_STARTED = "hack_started"               # 해킹 시작
    HACK_PROGRESS = "hack_progress"             # 해킹 진행도 갱신

    # 방어
    DEFENSE_ACCEPTED = "defense_accepted"       # 방어 성공
    DEFENSE_FAILED = "defense_failed"           # 방어 실패 (공격 계속)

    # 종료
    ATTACK_RESOLVED = "attack_resolved"         # 결과 확정

    # 역추적
    TRACE_OPENED = "trace_opened"               # 역추적 창 열림
    TRACE_RESOLVED = "trace_resolved"           # 역추적 결과

    # 성장
    LEVEL_UP = "level_up"                       # 스킬 레벨업
    TRAINING_COMPLETED = "training_completed"   # 훈련 완료


@dataclass
class HeistEvent:
    """공격 이벤트"""

    type: HeistEventType
    user_id: int
    data: Dict[str, Any]
    timestamp: float = field(default_factory=time.time)

    def __repr__(self) -> str:
        return f"HeistEvent(type={self.type.value}, user_id={self.user_id}, data={self.data})"


class EventBus:
    """
    이벤트 버스

    구독자 콜백에서 발생한 오류는 로그만 남기고 다른 구독자와 발행자에게 전파하지 않습니다.
    대신 publish()가 False를 반환해 전달 실패를 알립니다.

    Example:
        >>> bus = EventBus()
        >>>
        >>> async def on_resolved(event: HeistEvent):
        ...     print(f"Resolved: {event.data['outcome']}")
        >>>
        >>> bus.subscribe(HeistEventType.ATTACK_RESOLVED, on_resolved)
        >>> delivered = await bus.publish(HeistEvent(
        ...     type=HeistEventType.ATTACK_RESOLVED,
        ...     user_id=123,
        ...     data={"outcome": outcome}
        ... ))
    """

    def __init__(self):
        self._subscribers: Dict[HeistEventType, List[Callable]] = {}
        self._wildcard: List[Callable] = []

    def subscribe(self, event_type: HeistEventType, callback: Callable) -> None:
        """
        이벤트 구독

        Args:
            event_type: 구독할 이벤트 타입
            callback: 이벤트 발생 시 호출할 콜백 함수 (async function)
        """
        callbacks = self._subscribers.setdefault(event_type, [])
        if callback not in callbacks:
            callbacks.append(callback)
            logger.debug(f"Subscribed to {event_type.value}: {callback.__name__}")

    def subscribe_all(self, callback: Callable) -> None:
        """모든 이벤트 구독"""
        if callback not in self._wildcard:
            self._wildcard.append(callback)

    def unsubscribe(self, event_type: HeistEventType, callback: Callable) -> None:
        callbacks = self._subscribers.get(event_type, [])
        if callback in callbacks:
            callbacks.remove(callback)
            logger.debug(f"Unsubscribed from {event_type.value}: {callback.__name__}")

    async def publish(self, event: HeistEvent) -> bool:
        """
        이벤트 발행

        구독자 콜백을 순차적으로 호출합니다.

        Args:
            event: 발행할 이벤트

        Returns:
            모든 구독자에게 전달되었으면 True, 하나라도 실패하면 False
        """
        callbacks = self._subscribers.get(event.type, []) + self._wildcard
        if not callbacks:
            logger.debug(f"No subscribers for event: {event.type.value}")
            return True

        logger.debug(f"Publishing event: {event}")

        delivered = True
        for callback in callbacks:
            try:
                await callback(event)
            except Exception as e:
                delivered = False
                logger.error(
                    f"Error in event callback {callback.__name__} for {event.type.value}: {e}",
                    exc_info=True
                )
        return delivered

    def get_subscriber_count(self, event_type: HeistEventType) -> int:
        return len(self._subscribers.get(event_type, [])) + len(self._wildcard)
