"""Performance timing decorators and utilities.

- @timed decorator for function timing
- PerformanceTimer context manager for code block timing
- PerformanceAggregator for per-stage timing statistics
"""

import functools
import time
from collections.abc import Callable, Generator
from contextlib import contextmanager
from typing import Any, ParamSpec, TypeVar

from .dedup_logging import LogCategory, get_category_logger

P = ParamSpec("P")
T = TypeVar("T")


def _perf_logger():
    return get_category_logger(LogCategory.PERFORMANCE)


def timed(
    operation_name: str | None = None,
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Decorator to time function execution and log results.

    The duration is logged at DEBUG level with ``duration_ms`` and
    ``operation`` extras for the JSON formatter.

    Args:
        operation_name: Custom name for the operation (defaults to function name).

    Returns:
        Decorator function.
    """

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            op_name = operation_name or func.__name__
            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                duration_ms = (time.perf_counter() - start_time) * 1000
                _perf_logger().error(
                    f"[PERF] {op_name} failed after {duration_ms:.2f}ms: {e}",
                    extra={"duration_ms": duration_ms, "operation": op_name},
                )
                raise
            duration_ms = (time.perf_counter() - start_time) * 1000
            _perf_logger().debug(
                f"[PERF] {op_name} completed in {duration_ms:.2f}ms",
                extra={"duration_ms": duration_ms, "operation": op_name},
            )
            return result

        return wrapper

    return decorator


class PerformanceTimer:
    """Context manager for timing code blocks.

    Example:
        >>> with PerformanceTimer("cluster") as timer:
        ...     groups = cluster(results)
        >>> print(f"Clustered in {timer.duration_ms:.2f}ms")
    """

    def __init__(self, operation_name: str, auto_log: bool = True):
        self.operation_name = operation_name
        self.auto_log = auto_log
        self.start_time: float = 0
        self.end_time: float = 0
        self.duration_ms: float = 0

    def __enter__(self) -> "PerformanceTimer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        self.end_time = time.perf_counter()
        self.duration_ms = (self.end_time - self.start_time) * 1000

        if not self.auto_log:
            return
        extra = {"duration_ms": self.duration_ms, "operation": self.operation_name}
        if exc_type is None:
            _perf_logger().debug(
                f"[PERF] {self.operation_name}: {self.duration_ms:.2f}ms", extra=extra
            )
        else:
            _perf_logger().error(
                f"[PERF] {self.operation_name} failed after {self.duration_ms:.2f}ms",
                extra=extra,
            )


class PerformanceAggregator:
    """Aggregate timing data across pipeline stages.

    Example:
        >>> perf = PerformanceAggregator()
        >>> with perf.track("compare"):
        ...     results = compare_all(components)
        >>> perf.get_stats()["compare"]["count"]
        1
    """

    def __init__(self) -> None:
        self.timings: dict[str, list[float]] = {}

    @contextmanager
    def track(self, operation_name: str) -> Generator[None, None, None]:
        """Track timing for an operation.

        Args:
            operation_name: Name of the operation to track.
        """
        start = time.perf_counter()
        try:
            yield
        finally:
            self.record(operation_name, (time.perf_counter() - start) * 1000)

    def record(self, operation_name: str, duration_ms: float) -> None:
        """Manually record a timing measurement."""
        self.timings.setdefault(operation_name, []).append(duration_ms)

    def get_stats(self) -> dict[str, dict[str, float]]:
        """Get statistics for all tracked operations.

        Returns:
            Mapping of operation name to count, total, avg, min and max (ms).
        """
        stats: dict[str, dict[str, float]] = {}
        for operation, durations in self.timings.items():
            if not durations:
                continue
            total = sum(durations)
            stats[operation] = {
                "count": len(durations),
                "total_ms": total,
                "avg_ms": total / len(durations),
                "min_ms": min(durations),
                "max_ms": max(durations),
            }
        return stats

    def log_report(self) -> None:
        """Log a summary of all tracked timings at DEBUG level."""
        for operation, stat in sorted(self.get_stats().items()):
            _perf_logger().debug(
                f"[PERF] {operation}: {int(stat['count'])} calls, "
                f"total={stat['total_ms']:.2f}ms avg={stat['avg_ms']:.2f}ms",
                extra={"duration_ms": stat["total_ms"], "operation": operation},
            )

    def reset(self) -> None:
        """Clear all timing data."""
        self.timings.clear()
