import pytest

from lottoai.presets import get_preset
from lottoai.schemas import LotteryConfig, NumberRange, Pool, SingleDomain

def single(count: int, lo: int, hi: int, name: str = "Test 5/10") -> LotteryConfig:
    return LotteryConfig(game_name=name, shape=SingleDomain(main=Pool(count=count, range=NumberRange(min=lo, max=hi))))

@pytest.fixture
def five_of_ten() -> LotteryConfig:
    return single(5, 1, 10)

@pytest.fixture
def powerball() -> LotteryConfig:
    return get_preset("SA PowerBall")

@pytest.fixture
def gemini_key(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    monkeypatch.delenv("API_KEY", raising=False)

@pytest.fixture
def no_gemini_key(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)
