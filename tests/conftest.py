import random

import pytest

from market_pulse.market.service import MarketService
from tests.fakes import FakeMarketProvider, RecordingSleep


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def market_provider() -> FakeMarketProvider:
    return FakeMarketProvider(
        prices={"RELIANCE.NS": 2950.0, "TCS.NS": 4100.0},
        histories={
            "RELIANCE.NS": [2900.0, 2910.5, 2925.0, 2930.25, 2941.0, 2948.0, 2950.0],
            "TCS.NS": [4000.0, 4050.0, 4100.0],
        },
    )


@pytest.fixture
def market_service(market_provider: FakeMarketProvider) -> MarketService:
    return MarketService(market_provider)
