"""Tests for the analysis pipeline entry points."""

import asyncio
import threading

import pytest

from ui_dedup import analyze, analyze_async
from ui_dedup.analyzer import DeduplicationAnalyzer
from ui_dedup.config import AnalysisConfig, SimilarityThresholds
from ui_dedup.errors import AnalysisCancelled, InvalidThresholds


def member_sets(groups) -> list[frozenset[str]]:
    return sorted((g.members for g in groups), key=sorted)


class TestAnalyze:
    """Tests for the synchronous analyze function."""

    def test_finds_profile_family(self, sample_components, profile_card) -> None:
        """Test that the three profile cards form one group."""
        groups = analyze(sample_components)
        assert len(groups) == 1
        assert groups[0].size == 3
        assert profile_card.id in groups[0].members
        assert groups[0].similarity_score == 0.91

    def test_empty_and_single_input(self, profile_card) -> None:
        assert analyze([]) == []
        assert analyze([profile_card]) == []

    def test_mapping_thresholds(self, sample_components, profile_card, member_card) -> None:
        """Test that a stricter minimum score keeps only exact matches."""
        groups = analyze(sample_components, {"minSimilarityScore": 0.95})
        assert member_sets(groups) == [frozenset({profile_card.id, member_card.id})]

    def test_invalid_thresholds_before_work(self, sample_components) -> None:
        """Test that validation fails before any pair is considered."""
        calls = []

        def pair_filter(a, b):
            calls.append((a.id, b.id))
            return True

        with pytest.raises(InvalidThresholds):
            analyze(sample_components, {"minSimilarityScore": -0.5}, pair_filter=pair_filter)
        assert calls == []

    def test_pair_filter(self, sample_components) -> None:
        """Test that rejected pairs are never compared."""
        assert analyze(sample_components, pair_filter=lambda a, b: False) == []

    def test_input_order_independent(self, sample_components) -> None:
        forward = analyze(sample_components)
        backward = analyze(list(reversed(sample_components)))
        assert member_sets(forward) == member_sets(backward)

    def test_parallel_matches_serial(self, sample_components) -> None:
        """Test that the thread pool path yields the same groups."""
        serial = DeduplicationAnalyzer().run(sample_components)
        parallel = DeduplicationAnalyzer(
            analysis_config=AnalysisConfig(max_workers=3, chunk_size=1)
        ).run(sample_components)
        assert member_sets(serial.groups) == member_sets(parallel.groups)
        assert [r.component_ids for r in serial.significant_results] == [
            r.component_ids for r in parallel.significant_results
        ]


class TestAnalysisResult:
    """Tests for run statistics."""

    def test_stats(self, sample_components) -> None:
        result = DeduplicationAnalyzer(SimilarityThresholds()).run(sample_components)
        stats = result.stats
        assert stats.components == 4
        assert stats.candidate_pairs == 6
        assert stats.comparisons == 6
        assert stats.significant_pairs == 3
        assert stats.candidate_groups == 1
        assert stats.selected_groups == 1
        assert set(result.timings) == {"compare", "cluster", "consolidate"}

    def test_gated_and_filtered_counts(self, sample_components, profile_card) -> None:
        analyzer = DeduplicationAnalyzer(
            {"minStructureComplexity": 50},
            pair_filter=lambda a, b: profile_card.id in (a.id, b.id),
        )
        stats = analyzer.run(sample_components).stats
        assert stats.filtered_pairs == 3
        assert stats.comparisons == 3
        assert stats.gated_comparisons == 3

    def test_to_dict(self, sample_components) -> None:
        data = DeduplicationAnalyzer().run(sample_components).to_dict()
        assert data["stats"]["comparisons"] == 6
        assert "compare" in data["stats"]["timings_ms"]
        assert len(data["groups"]) == 1


class TestCancellation:
    """Tests for cooperative cancellation."""

    def test_cancelled_before_start(self, sample_components) -> None:
        event = threading.Event()
        event.set()
        with pytest.raises(AnalysisCancelled) as exc_info:
            analyze(sample_components, cancel_event=event)
        assert exc_info.value.stage == "setup"
        assert exc_info.value.exit_code == 130

    def test_cancelled_between_chunks(self, sample_components) -> None:
        """Test cancellation is noticed before the next comparison chunk."""
        event = threading.Event()

        def cancel_on_first_pair(a, b):
            event.set()
            return True

        with pytest.raises(AnalysisCancelled) as exc_info:
            analyze(sample_components, pair_filter=cancel_on_first_pair, cancel_event=event)
        assert exc_info.value.stage == "compare"

    def test_cancelled_parallel(self, sample_components) -> None:
        event = threading.Event()
        analyzer = DeduplicationAnalyzer(
            analysis_config=AnalysisConfig(max_workers=2, chunk_size=1),
            pair_filter=lambda a, b: event.set() or True,
            cancel_event=event,
        )
        with pytest.raises(AnalysisCancelled):
            analyzer.run(sample_components)


class TestAnalyzeAsync:
    """Tests for the coroutine entry point."""

    def test_same_groups_as_sync(self, sample_components) -> None:
        groups = asyncio.run(analyze_async(sample_components, yield_every=2))
        assert member_sets(groups) == member_sets(analyze(sample_components))

    def test_yields_to_event_loop(self, sample_components) -> None:
        """Test that other tasks run while the analysis is in progress."""

        async def run() -> int:
            ticks = 0

            async def ticker() -> None:
                nonlocal ticks
                while True:
                    ticks += 1
                    await asyncio.sleep(0)

            task = asyncio.create_task(ticker())
            await analyze_async(sample_components, yield_every=1)
            observed = ticks
            task.cancel()
            return observed

        assert asyncio.run(run()) > 0

    def test_async_cancellation(self, sample_components) -> None:
        event = threading.Event()

        async def run() -> None:
            await analyze_async(
                sample_components,
                yield_every=1,
                pair_filter=lambda a, b: event.set() or True,
                cancel_event=event,
            )

        with pytest.raises(AnalysisCancelled):
            asyncio.run(run())
