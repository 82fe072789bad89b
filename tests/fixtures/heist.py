"""
강도/해킹 테스트용 공용 데이터와 결정적 난수원/시계
"""
from typing import Iterable

GUILD_ID = 1000
ATTACKER_ID = 111
TARGET_ID = 222
OTHER_ID = 333

# 2023-11-14 22:13:20 UTC
START_TIME = 1_700_000_000.0


class SequenceRandom:
    """
    미리 정한 값을 순서대로 반환하는 난수원

    random()만 구현합니다. 준비된 값이 모자라면 테스트가 실패합니다.
    """

    def __init__(self, values: Iterable[float] = ()):
        self.values = list(values)
        self.drawn = []

    def extend(self, values: Iterable[float]) -> None:
        self.values.extend(values)

    def random(self) -> float:
        assert self.values, f"SequenceRandom exhausted after {self.drawn}"
        value = self.values.pop(0)
        self.drawn.append(value)
        return value


class FakeClock:
    """수동으로 진행시키는 epoch 시계 (호출할 때마다 1ms씩 흐름)"""

    def __init__(self, now: float = START_TIME, step: float = 0.001):
        self.now = now
        self.step = step

    def __call__(self) -> float:
        self.now += self.step
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
