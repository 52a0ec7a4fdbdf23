import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, List, Optional, Union
from dataclasses import dataclass, field
from datetime import datetime
from threading import Lock
from collections import deque


logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 100


# ==================== Enums ====================

class Coin(Enum):
    """Accepted coin denominations, valued in cents"""
    NICKEL = 5
    DIME = 10
    QUARTER = 25


ACCEPTED_COIN_VALUES = frozenset(coin.value for coin in Coin)


class StationState(Enum):
    """States of the pay station"""
    SETTLED = "SETTLED"
    ACCUMULATING = "ACCUMULATING"


class SettlementType(Enum):
    """Ways a transaction can end"""
    BUY = "BUY"
    CANCEL = "CANCEL"
    EMPTY = "EMPTY"


# ==================== Exceptions ====================

class PayStationError(Exception):
    """Base error for pay station operations"""


class InvalidCoinError(PayStationError, ValueError):
    """Raised when a coin outside the accepted denominations is inserted"""

    def __init__(self, coin_value):
        super().__init__(f"Invalid coin: {coin_value}")
        self.coin_value = coin_value


# ==================== Core Models ====================

@dataclass(frozen=True)
class Receipt:
    """Parking time bought, handed to the customer"""
    minutes: int
    issued_at: datetime = field(default_factory=datetime.now, compare=False)

    def value(self) -> int:
        return self.minutes

    def __repr__(self) -> str:
        return f"Receipt({self.minutes} min)"


@dataclass(frozen=True)
class Settlement:
    """Audit record for a finished transaction"""
    settlement_id: str
    settlement_type: SettlementType
    amount: int
    minutes: int
    timestamp: datetime

    def __repr__(self) -> str:
        return f"Settlement({self.settlement_id}, {self.settlement_type.value}, {self.amount}c)"


@dataclass(frozen=True)
class RateConfig:
    """Linear parking rate: every full block of cents buys a fixed number of minutes"""
    cents_per_block: int = 5
    minutes_per_block: int = 2

    def __post_init__(self):
        if self.cents_per_block <= 0:
            raise ValueError("cents_per_block must be positive")
        if self.minutes_per_block < 0:
            raise ValueError("minutes_per_block cannot be negative")

    def minutes_for(self, cents: int) -> int:
        """Minutes bought for an amount; partial blocks buy nothing"""
        return cents // self.cents_per_block * self.minutes_per_block


def make_change(amount: int) -> Dict[int, int]:
    """
    Split an amount into coins using the greedy algorithm.
    Returns dict of coin value -> count, holding only coins actually used.
    """
    if amount < 0:
        raise ValueError("Amount cannot be negative")

    remaining = amount
    coins: Dict[int, int] = {}

    # Largest denomination first
    for coin in sorted(Coin, key=lambda c: c.value, reverse=True):
        count = remaining // coin.value
        if count > 0:
            coins[coin.value] = count
            remaining -= coin.value * count

        if remaining == 0:
            break

    if remaining > 0:
        raise ValueError(f"Cannot return {amount} cents in accepted coins")

    return coins


# ==================== Pay Station ====================

class PayStation(ABC):
    """Operations a parking pay station offers to its callers"""

    @abstractmethod
    def add_payment(self, coin_value: Union[int, Coin]) -> None:
        """Insert a coin; raises InvalidCoinError for unknown coins"""
        pass

    @abstractmethod
    def read_display(self) -> int:
        """Minutes of parking time bought so far"""
        pass

    @abstractmethod
    def buy(self) -> Receipt:
        """Finish the transaction and issue a receipt"""
        pass

    @abstractmethod
    def cancel(self) -> Dict[int, int]:
        """Abort the transaction and return the inserted money as coins"""
        pass

    @abstractmethod
    def empty(self) -> int:
        """Collect the inserted money, returns its value in cents"""
        pass


class CoinPayStation(PayStation):
    """
    Pay station accepting nickels, dimes and quarters.

    All operations run under one lock, so an instance can be shared between
    threads; each call sees a complete transaction state.
    """

    def __init__(self, rate: Optional[RateConfig] = None, history_limit: int = DEFAULT_HISTORY_LIMIT):
        if history_limit <= 0:
            raise ValueError("history_limit must be positive")

        self._rate = rate or RateConfig()
        self._inserted_so_far = 0
        self._time_bought = 0
        self._state = StationState.SETTLED
        self._history: deque = deque(maxlen=history_limit)  # Recent settlements only
        self._settlement_counter = 0
        self._lock = Lock()

    def get_rate(self) -> RateConfig:
        return self._rate

    def get_state(self) -> StationState:
        with self._lock:
            return self._state

    def get_history(self) -> List[Settlement]:
        with self._lock:
            return list(self._history)

    def add_payment(self, coin_value: Union[int, Coin]) -> None:
        if isinstance(coin_value, Coin):
            coin_value = coin_value.value

        # bool is an int subclass but never a coin
        if isinstance(coin_value, bool) or not isinstance(coin_value, int) \
                or coin_value not in ACCEPTED_COIN_VALUES:
            logger.warning("Rejected coin: %r", coin_value)
            raise InvalidCoinError(coin_value)

        with self._lock:
            self._inserted_so_far += coin_value
            self._time_bought = self._rate.minutes_for(self._inserted_so_far)
            self._state = StationState.ACCUMULATING
            logger.debug("Accepted %d cents, %d inserted, %d min",
                         coin_value, self._inserted_so_far, self._time_bought)

    def read_display(self) -> int:
        with self._lock:
            return self._time_bought

    def buy(self) -> Receipt:
        with self._lock:
            receipt = Receipt(self._time_bought)
            self._settle(SettlementType.BUY)
            return receipt

    def cancel(self) -> Dict[int, int]:
        with self._lock:
            coins = make_change(self._inserted_so_far)
            self._settle(SettlementType.CANCEL)
            return coins

    def empty(self) -> int:
        with self._lock:
            collected = self._inserted_so_far
            self._settle(SettlementType.EMPTY)
            return collected

    def _settle(self, settlement_type: SettlementType) -> None:
        """Record the finished transaction and reset. Caller holds the lock."""
        self._settlement_counter += 1
        settlement = Settlement(
            settlement_id=f"SET-{self._settlement_counter:08d}",
            settlement_type=settlement_type,
            amount=self._inserted_so_far,
            minutes=self._time_bought,
            timestamp=datetime.now()
        )
        self._history.append(settlement)
        logger.info("%s %s: %d cents, %d min", settlement.settlement_id,
                    settlement_type.value, settlement.amount, settlement.minutes)

        self._inserted_so_far = 0
        self._time_bought = 0
        self._state = StationState.SETTLED

    def display_history(self) -> None:
        """Display settlement history"""
        history = self.get_history()

        print(f"\n{'='*60}")
        print("PAY STATION HISTORY")
        print(f"{'='*60}")

        if not history:
            print("No settlements yet")
        else:
            for settlement in history:
                print(f"{settlement.timestamp.strftime('%Y-%m-%d %H:%M:%S')} - "
                      f"{settlement.settlement_id} - {settlement.settlement_type.value} - "
                      f"{settlement.amount}c / {settlement.minutes} min")

            bought = sum(s.minutes for s in history if s.settlement_type == SettlementType.BUY)
            print(f"\nMinutes sold: {bought}")

        print(f"{'='*60}\n")


# ==================== Demo Usage ====================

def main():
    """Demo the pay station"""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print("=== Pay Station Demo ===\n")

    station = CoinPayStation()

    print("--- Buying Parking Time ---")
    station.add_payment(Coin.DIME)
    station.add_payment(Coin.QUARTER)
    print(f"Display: {station.read_display()} min")
    receipt = station.buy()
    print(f"Receipt: {receipt.value()} min")

    print("\n--- Rejecting A Coin ---")
    try:
        station.add_payment(17)
    except InvalidCoinError as e:
        print(f"Rejected: {e}")

    print("\n--- Cancelling ---")
    for _ in range(3):
        station.add_payment(Coin.DIME)
    print(f"Display: {station.read_display()} min")
    print(f"Returned coins: {station.cancel()}")

    print("\n--- Emptying ---")
    station.add_payment(Coin.DIME)
    station.add_payment(Coin.NICKEL)
    print(f"Collected: {station.empty()} cents")
    print(f"Display after empty: {station.read_display()} min")

    station.display_history()

    print("=== Demo Complete ===")


if __name__ == "__main__":
    main()
