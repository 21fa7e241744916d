from __future__ import annotations
import logging
import re
from collections import Counter
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .schemas import (
    AnalysisReport, AnalysisResults, Draw, HitScore, LotteryConfig,
    NumberAnalysis, Pool, PredictedNumbers,
)

log = logging.getLogger("lottoai.analysis")

TOP_K = 5
_INT_RE = re.compile(r"\d+")

def _numbers(line: str) -> List[int]:
    # over-long digit runs keep their slot but map to -1, which no range contains
    return [int(x) if len(x) <= 9 else -1 for x in _INT_RE.findall(line)]

# lines are chronological: first line is the oldest draw, last line the newest
def parse_draws(text: str, config: LotteryConfig) -> List[Draw]:
    main, special = config.main, config.special
    need = main.count
    draws: List[Draw] = []
    for lineno, line in enumerate((text or "").splitlines(), 1):
        if not line.strip():
            continue
        nums = _numbers(line)
        if len(nums) < need:
            log.debug("line %d skipped: %d numbers, need %d", lineno, len(nums), need)
            continue
        picked_main = [n for n in nums[:need] if n in main.range]
        picked_special: List[int] = []
        if special is not None:
            picked_special = [n for n in nums[need:need + special.count] if n in special.range]
        draws.append(Draw(main=picked_main, special=picked_special))
    return draws

def tally(draws: Iterable[Draw], pool: Pool, pick: Callable[[Draw], List[int]]) -> Dict[int, int]:
    cnt = Counter()
    for d in draws:
        cnt.update(pick(d))
    return {n: int(cnt.get(n, 0)) for n in pool.range.numbers()}

def gaps(draws: List[Draw], pool: Pool, pick: Callable[[Draw], List[int]]) -> Dict[int, int]:
    total = len(draws)
    last_seen: Dict[int, int] = {}
    for i, d in enumerate(draws):
        for n in pick(d):
            last_seen[n] = i
    return {n: (total - 1 - last_seen[n]) if n in last_seen else total for n in pool.range.numbers()}

def _ranked(values: Dict[int, int], key, k: int) -> List[NumberAnalysis]:
    items: List[Tuple[int, int]] = sorted(values.items(), key=key)
    return [NumberAnalysis(number=n, value=v) for n, v in items[:k]]

def analyze_pool(draws: List[Draw], pool: Pool, pick: Callable[[Draw], List[int]], k: int = TOP_K) -> AnalysisResults:
    if not draws:
        return AnalysisResults()
    freq = tally(draws, pool, pick)
    gap = gaps(draws, pool, pick)
    return AnalysisResults(
        hot_numbers=_ranked(freq, lambda x: (-x[1], x[0]), k),
        cold_numbers=_ranked(freq, lambda x: (x[1], x[0]), k),
        overdue_numbers=_ranked(gap, lambda x: (-x[1], x[0]), k),
    )

def analyze(historical_text: str, config: LotteryConfig, top_k: int = TOP_K) -> AnalysisReport:
    """Hot/cold/overdue statistics for the main pool and, if the game has one, the special pool.

    Never raises for malformed text: unusable lines are skipped and an input
    without a single valid draw yields empty lists.
    """
    draws = parse_draws(historical_text, config)
    special = None
    if config.special is not None:
        special = analyze_pool(draws, config.special, lambda d: d.special, top_k)
    return AnalysisReport(
        draw_count=len(draws),
        main=analyze_pool(draws, config.main, lambda d: d.main, top_k),
        special=special,
    )

class AnalysisTracker:
    """Keeps the last report and recomputes only when the text or config changes.

    Meant for a long-lived caller that owns one editing session, such as a UI
    controller fed on every keystroke; the HTTP routes are stateless and call
    ``analyze`` directly.
    """

    def __init__(self, top_k: int = TOP_K):
        self.top_k = top_k
        self._inputs: Optional[Tuple[str, LotteryConfig]] = None
        self._report: Optional[AnalysisReport] = None
        self.runs = 0

    def update(self, historical_text: str, config: LotteryConfig) -> Optional[AnalysisReport]:
        if not (historical_text or "").strip():
            self._inputs, self._report = None, None
            return None
        if self._inputs is not None and self._inputs == (historical_text, config):
            return self._report
        self._report = analyze(historical_text, config, self.top_k)
        self._inputs = (historical_text, config)
        self.runs += 1
        return self._report

    @property
    def report(self) -> Optional[AnalysisReport]:
        return self._report

def score_prediction(predicted: PredictedNumbers, actual_main: List[int], actual_special: List[int]) -> HitScore:
    main_set, special_set = set(actual_main), set(actual_special)
    return HitScore(
        main_hits=[n for n in predicted.main_numbers if n in main_set],
        special_hits=[n for n in predicted.special_numbers if n in special_set],
    )
