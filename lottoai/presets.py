from __future__ import annotations
from typing import Dict

from .schemas import DualDomain, LotteryConfig, NumberRange, Pool, SingleDomain

def _pool(count: int, lo: int, hi: int) -> Pool:
    return Pool(count=count, range=NumberRange(min=lo, max=hi))

def _dual(name: str, count: int, hi: int, special_name: str, special_count: int, special_hi: int) -> LotteryConfig:
    shape = DualDomain(main=_pool(count, 1, hi), special=_pool(special_count, 1, special_hi), special_name=special_name)
    return LotteryConfig(game_name=name, shape=shape)

PRESETS: Dict[str, LotteryConfig] = {
    "SA Lotto":          _dual("SA Lotto", 6, 58, "Bonus Ball", 1, 58),
    "SA Lotto Plus 1":   _dual("SA Lotto Plus 1", 6, 58, "Bonus Ball", 1, 58),
    "SA PowerBall":      _dual("SA PowerBall", 5, 50, "PowerBall", 1, 20),
    "SA PowerBall Plus": _dual("SA PowerBall Plus", 5, 50, "PowerBall", 1, 20),
    "Daily Lotto":       LotteryConfig(game_name="Daily Lotto", shape=SingleDomain(main=_pool(5, 1, 36))),
}

DEFAULT_PRESET = "SA PowerBall"

# Pre-fills new sessions. Oldest draw first, one draw per line: five main numbers then the PowerBall.
SAMPLE_DATA = "\n".join([
    "03 14 22 37 45 PB 09",
    "07 11 19 28 41 PB 15",
    "02 16 23 34 50 PB 04",
    "05 12 22 31 44 PB 18",
    "09 14 27 33 48 PB 07",
    "01 18 24 36 47 PB 12",
    "06 14 21 30 42 PB 09",
    "10 17 22 35 49 PB 03",
    "04 13 26 38 46 PB 20",
    "08 14 22 29 43 PB 11",
])

def get_preset(name: str) -> LotteryConfig:
    try:
        return PRESETS[name]
    except KeyError:
        raise KeyError(f"unknown preset: {name}") from None
