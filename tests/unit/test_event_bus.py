"""
EventBus 유닛 테스트
"""
from service.event.event_bus import EventBus, HeistEvent, HeistEventType


def _event(event_type: HeistEventType = HeistEventType.HACK_PROGRESS, **data) -> HeistEvent:
    return HeistEvent(type=event_type, user_id=1, data=data)


class TestPublish:
    """이벤트 발행 테스트"""

    async def test_subscriber_receives_event(self):
        bus = EventBus()
        received = []

        async def on_progress(event):
            received.append(event.data["progress"])

        bus.subscribe(HeistEventType.HACK_PROGRESS, on_progress)
        delivered = await bus.publish(_event(progress=40))

        assert delivered is True
        assert received == [40]

    async def test_no_subscribers_counts_as_delivered(self):
        bus = EventBus()
        assert await bus.publish(_event()) is True

    async def test_failing_callback_reports_delivery_failure(self):
        """콜백 오류는 전파되지 않고 다른 구독자는 계속 호출됨"""
        bus = EventBus()
        received = []

        async def broken(event):
            raise RuntimeError("discord down")

        async def healthy(event):
            received.append(event.type)

        bus.subscribe(HeistEventType.HACK_PROGRESS, broken)
        bus.subscribe(HeistEventType.HACK_PROGRESS, healthy)

        assert await bus.publish(_event()) is False
        assert received == [HeistEventType.HACK_PROGRESS]

    async def test_wildcard_subscriber(self):
        bus = EventBus()
        received = []

        async def on_any(event):
            received.append(event.type)

        bus.subscribe_all(on_any)
        await bus.publish(_event(HeistEventType.ROB_ANNOUNCED))
        await bus.publish(_event(HeistEventType.ATTACK_RESOLVED))

        assert received == [HeistEventType.ROB_ANNOUNCED, HeistEventType.ATTACK_RESOLVED]


class TestSubscription:
    """구독 관리 테스트"""

    async def test_duplicate_subscription_ignored(self):
        bus = EventBus()

        async def callback(event):
            pass

        bus.subscribe(HeistEventType.LEVEL_UP, callback)
        bus.subscribe(HeistEventType.LEVEL_UP, callback)
        assert bus.get_subscriber_count(HeistEventType.LEVEL_UP) == 1

    async def test_unsubscribe(self):
        bus = EventBus()

        async def callback(event):
            pass

        bus.subscribe(HeistEventType.LEVEL_UP, callback)
        bus.unsubscribe(HeistEventType.LEVEL_UP, callback)
        assert bus.get_subscriber_count(HeistEventType.LEVEL_UP) == 0
