"""Deduplication analysis pipeline.

Compares every unordered pair of components once, keeps the significant
results, merges them into connected groups and selects a non-redundant
subset. Comparisons may run on a thread pool; results are sorted by id
pair before clustering so group formation does not depend on
completion order.
"""

import asyncio
import threading
import time
from collections.abc import Callable, Iterable, Iterator, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from itertools import combinations, islice
from typing import Any

from .config.loader import AnalysisConfig
from .config.thresholds import SimilarityThresholds, ensure_thresholds
from .dedup_logging import LogCategory, get_category_logger
from .errors import AnalysisCancelled
from .models import ComponentGroup, ComponentRecord, PairwiseResult
from .performance import PerformanceAggregator
from .similarity.clustering import SimilarityClustering
from .similarity.comparator import ComponentComparator
from .similarity.consolidation import consolidate

logger = get_category_logger(LogCategory.ANALYZER)

PairFilter = Callable[[ComponentRecord, ComponentRecord], bool]


@dataclass
class AnalysisStats:
    """Counters collected during one analysis run."""

    components: int = 0
    candidate_pairs: int = 0
    filtered_pairs: int = 0
    comparisons: int = 0
    gated_comparisons: int = 0
    significant_pairs: int = 0
    candidate_groups: int = 0
    selected_groups: int = 0

    def to_dict(self) -> dict[str, int]:
        """Convert to dictionary for JSON serialization."""
        return {
            "components": self.components,
            "candidate_pairs": self.candidate_pairs,
            "filtered_pairs": self.filtered_pairs,
            "comparisons": self.comparisons,
            "gated_comparisons": self.gated_comparisons,
            "significant_pairs": self.significant_pairs,
            "candidate_groups": self.candidate_groups,
            "selected_groups": self.selected_groups,
        }


@dataclass
class AnalysisResult:
    """Output of a complete run."""

    groups: list[ComponentGroup] = field(default_factory=list)
    significant_results: list[PairwiseResult] = field(default_factory=list)
    stats: AnalysisStats = field(default_factory=AnalysisStats)
    timings: dict[str, dict[str, float]] = field(default_factory=dict)
    analysis_time_ms: float = 0.0

    def stats_dict(self) -> dict[str, Any]:
        """Counters plus per-stage total milliseconds."""
        data: dict[str, Any] = self.stats.to_dict()
        data["timings_ms"] = {
            stage: round(stat["total_ms"], 3) for stage, stat in self.timings.items()
        }
        data["analysis_time_ms"] = round(self.analysis_time_ms, 3)
        return data

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "groups": [group.to_dict() for group in self.groups],
            "stats": self.stats_dict(),
        }


def _chunked(items: Iterable[Any], size: int) -> Iterator[list[Any]]:
    iterator = iter(items)
    while chunk := list(islice(iterator, size)):
        yield chunk


class DeduplicationAnalyzer:
    """Runs the compare, cluster and consolidate stages.

    Thresholds are validated when the analyzer is created, so an invalid
    configuration fails before any comparison starts.
    """

    def __init__(
        self,
        thresholds: SimilarityThresholds | dict[str, Any] | None = None,
        analysis_config: AnalysisConfig | None = None,
        pair_filter: PairFilter | None = None,
        cancel_event: threading.Event | None = None,
    ):
        """Initialize the analyzer.

        Args:
            thresholds: Thresholds value, mapping or None for defaults.
            analysis_config: Worker, chunking and yield settings.
            pair_filter: Optional predicate; pairs it rejects are not compared.
            cancel_event: Optional event checked between stages and chunks.

        Raises:
            InvalidThresholds: If any threshold is out of range.
        """
        self.thresholds = ensure_thresholds(thresholds)
        self.config = analysis_config or AnalysisConfig()
        self.pair_filter = pair_filter
        self.cancel_event = cancel_event
        self.comparator = ComponentComparator(self.thresholds)
        self.clustering = SimilarityClustering()

    def run(self, components: Sequence[ComponentRecord]) -> AnalysisResult:
        """Analyze components synchronously.

        Args:
            components: Component records; each unordered pair is compared once.

        Returns:
            AnalysisResult with selected groups and run statistics.

        Raises:
            AnalysisCancelled: If the cancel event is set during the run.
        """
        start = time.perf_counter()
        perf = PerformanceAggregator()
        stats = AnalysisStats(components=len(components))

        self._check_cancelled("setup")
        pairs = self._candidate_pairs(components, stats)

        with perf.track("compare"):
            workers = self.config.resolved_workers()
            if workers > 1 and len(pairs) > self.config.chunk_size:
                results = self._compare_parallel(components, pairs, workers)
            else:
                results = self._compare_serial(components, pairs)

        return self._finish(results, stats, perf, start)

    async def run_async(self, components: Sequence[ComponentRecord]) -> AnalysisResult:
        """Analyze components inside one coroutine.

        Control returns to the event loop every ``yield_every`` comparisons.
        """
        start = time.perf_counter()
        perf = PerformanceAggregator()
        stats = AnalysisStats(components=len(components))

        self._check_cancelled("setup")
        pairs = self._candidate_pairs(components, stats)

        results: list[PairwiseResult] = []
        with perf.track("compare"):
            for count, (i, j) in enumerate(pairs, start=1):
                results.append(self.comparator.compare(components[i], components[j]))
                if count % self.config.yield_every == 0:
                    await asyncio.sleep(0)
                    self._check_cancelled("compare")

        return self._finish(results, stats, perf, start)

    def _candidate_pairs(
        self, components: Sequence[ComponentRecord], stats: AnalysisStats
    ) -> list[tuple[int, int]]:
        pairs = []
        for i, j in combinations(range(len(components)), 2):
            stats.candidate_pairs += 1
            if self.pair_filter and not self.pair_filter(components[i], components[j]):
                stats.filtered_pairs += 1
                continue
            pairs.append((i, j))
        if stats.filtered_pairs:
            logger.debug(
                f"Pre-filter skipped {stats.filtered_pairs} of {stats.candidate_pairs} pairs"
            )
        return pairs

    def _compare_chunk(
        self, components: Sequence[ComponentRecord], chunk: list[tuple[int, int]]
    ) -> list[PairwiseResult]:
        return [self.comparator.compare(components[i], components[j]) for i, j in chunk]

    def _compare_serial(
        self, components: Sequence[ComponentRecord], pairs: list[tuple[int, int]]
    ) -> list[PairwiseResult]:
        results: list[PairwiseResult] = []
        for chunk in _chunked(pairs, self.config.chunk_size):
            self._check_cancelled("compare")
            results.extend(self._compare_chunk(components, chunk))
        return results

    def _compare_parallel(
        self,
        components: Sequence[ComponentRecord],
        pairs: list[tuple[int, int]],
        workers: int,
    ) -> list[PairwiseResult]:
        """Compare chunks on a thread pool; result order is not preserved."""
        logger.debug(f"Comparing {len(pairs)} pairs on {workers} workers")
        results: list[PairwiseResult] = []
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(self._compare_chunk, components, chunk)
                for chunk in _chunked(pairs, self.config.chunk_size)
            ]
            for future in as_completed(futures):
                if self.cancel_event is not None and self.cancel_event.is_set():
                    for pending in futures:
                        pending.cancel()
                    raise AnalysisCancelled("compare")
                results.extend(future.result())
        return results

    def _finish(
        self,
        results: list[PairwiseResult],
        stats: AnalysisStats,
        perf: PerformanceAggregator,
        start: float,
    ) -> AnalysisResult:
        stats.comparisons = len(results)
        stats.gated_comparisons = sum(1 for r in results if r.breakdown.gated)

        minimum = self.thresholds.min_similarity_score
        significant = [r for r in results if r.similarity_score >= minimum]
        significant.sort(key=lambda r: r.component_ids)
        stats.significant_pairs = len(significant)

        self._check_cancelled("cluster")
        with perf.track("cluster"):
            candidates = self.clustering.cluster(significant)
        stats.candidate_groups = len(candidates)

        self._check_cancelled("consolidate")
        with perf.track("consolidate"):
            groups = consolidate(candidates)
        stats.selected_groups = len(groups)

        perf.log_report()
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"Compared {stats.comparisons} pairs of {stats.components} components "
            f"({stats.gated_comparisons} gated), selected {stats.selected_groups} groups "
            f"in {elapsed_ms:.0f}ms",
            extra={
                "component_count": stats.components,
                "group_count": stats.selected_groups,
                "duration_ms": elapsed_ms,
            },
        )
        return AnalysisResult(
            groups=groups,
            significant_results=significant,
            stats=stats,
            timings=perf.get_stats(),
            analysis_time_ms=elapsed_ms,
        )

    def _check_cancelled(self, stage: str) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            logger.info(f"Analysis cancelled during {stage}")
            raise AnalysisCancelled(stage)


def analyze(
    components: Sequence[ComponentRecord],
    thresholds: SimilarityThresholds | dict[str, Any] | None = None,
    *,
    max_workers: int = 1,
    pair_filter: PairFilter | None = None,
    cancel_event: threading.Event | None = None,
) -> list[ComponentGroup]:
    """Find groups of near-duplicate components.

    Args:
        components: Component records to analyze.
        thresholds: Thresholds value, mapping, or None for defaults.
        max_workers: Comparison threads; 0 uses one per CPU.
        pair_filter: Optional predicate restricting which pairs are compared.
        cancel_event: Optional event for cooperative cancellation.

    Returns:
        Selected groups, largest and tightest first.

    Raises:
        InvalidThresholds: Before any work, if a threshold is out of range.
        AnalysisCancelled: If ``cancel_event`` is set during the run.
    """
    analyzer = DeduplicationAnalyzer(
        thresholds,
        AnalysisConfig(max_workers=max_workers),
        pair_filter=pair_filter,
        cancel_event=cancel_event,
    )
    return analyzer.run(components).groups


async def analyze_async(
    components: Sequence[ComponentRecord],
    thresholds: SimilarityThresholds | dict[str, Any] | None = None,
    *,
    yield_every: int = 100,
    pair_filter: PairFilter | None = None,
    cancel_event: threading.Event | None = None,
) -> list[ComponentGroup]:
    """Coroutine form of ``analyze`` that yields to the event loop."""
    analyzer = DeduplicationAnalyzer(
        thresholds,
        AnalysisConfig(yield_every=max(1, yield_every)),
        pair_filter=pair_filter,
        cancel_event=cancel_event,
    )
    result = await analyzer.run_async(components)
    return result.groups
