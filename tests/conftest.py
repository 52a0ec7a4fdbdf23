import pytest
from pay_station import CoinPayStation, RateConfig


@pytest.fixture
def station():
    """Return a fresh pay station with the default rate."""
    return CoinPayStation()


@pytest.fixture
def insert():
    """Return a helper that inserts a sequence of coins into a station."""
    def _insert(station, *coins):
        for coin in coins:
            station.add_payment(coin)
        return station
    return _insert


@pytest.fixture
def hourly_station():
    """Return a pay station selling 60 minutes per 100 cents."""
    return CoinPayStation(RateConfig(cents_per_block=100, minutes_per_block=60))
