"""
pytest 설정 및 공통 픽스처 정의
"""
import sys
from pathlib import Path
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest

# 프로젝트 루트를 Python 경로에 추가
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from tests.fixtures.heist import ATTACKER_ID, GUILD_ID, FakeClock, SequenceRandom  # noqa: E402


# =============================================================================
# pytest 설정
# =============================================================================


def pytest_configure(config):
    """pytest 설정"""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


# =============================================================================
# 결정적 난수 / 시계
# =============================================================================


@pytest.fixture
def rng() -> SequenceRandom:
    return SequenceRandom()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# =============================================================================
# 데이터베이스 픽스처
# =============================================================================


@pytest.fixture(scope="function")
async def test_db() -> AsyncGenerator[None, None]:
    """
    테스트용 인메모리 SQLite 데이터베이스
    각 테스트 함수마다 새로운 DB 생성
    """
    from tortoise import Tortoise

    await Tortoise.init(
        db_url="sqlite://:memory:",
        modules={"models": ["models"]}
    )
    await Tortoise.generate_schemas()

    yield

    await Tortoise.close_connections()


# =============================================================================
# 엔진 픽스처
# =============================================================================


@pytest.fixture
async def engine(test_db, rng, clock):
    """
    결정적 난수/시계를 주입한 엔진

    대기 시간이 짧은 설정을 길드에 미리 적용합니다.
    """
    from service.heist.heist_engine import HeistEngine

    heist_engine = HeistEngine.create(rng=rng, clock=clock)
    await heist_engine.ctx.settings.update(GUILD_ID, "rob", defense_window_seconds=0.05)
    await heist_engine.ctx.settings.update(
        GUILD_ID, "hack", tick_seconds=0.01, trace_window_seconds=0.05
    )

    yield heist_engine

    await heist_engine.shutdown()


@pytest.fixture
def balance_factory():
    """테스트용 잔고 생성 팩토리"""
    from models.balance import Balance

    async def _create_balance(user_id: int, cash: int = 0, bank: int = 0, guild_id: int = GUILD_ID):
        return await Balance.create(guild_id=guild_id, user_id=user_id, cash=cash, bank=bank)

    return _create_balance


# =============================================================================
# Mock 픽스처
# =============================================================================


@pytest.fixture
def mock_discord_interaction() -> MagicMock:
    """Mock Discord Interaction 객체"""
    interaction = MagicMock()
    interaction.user = MagicMock()
    interaction.user.id = ATTACKER_ID
    interaction.user.mention = f"<@{ATTACKER_ID}>"
    interaction.response = MagicMock()
    interaction.response.send_message = AsyncMock()
    interaction.response.edit_message = AsyncMock()
    interaction.response.defer = AsyncMock()
    interaction.followup = MagicMock()
    interaction.followup.send = AsyncMock()
    interaction.guild = MagicMock()
    interaction.guild.id = GUILD_ID
    return interaction


# =============================================================================
# 헬퍼 함수
# =============================================================================


def assert_approx_equal(actual: float, expected: float, tolerance: float = 0.01):
    """부동소수점 근사 비교"""
    assert abs(actual - expected) <= tolerance, f"Expected {expected}, got {actual}"
