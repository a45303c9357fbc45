"""
Memory comparison: a native list pipeline vs the equivalent lazy chain.

The native version builds a full intermediate list per step; the chain
pushes each element through every step and only allocates the output.
Run with `python -m chain_memory`.
"""

import gc
import logging
import time
import tracemalloc
from typing import Any, Callable, List, Optional, Tuple

from chain_models import BenchmarkConfig, Implementation, MemoryReport, MemoryUsage
from chain_utils import make_numbers, memory_snapshot
from lazy_chain import wrap

logger = logging.getLogger(__name__)


def native_pipeline(data):
    result = [x * 2 for x in data]
    result = [x * 2 for x in result]
    return [x for x in result if x % 3 == 0]


def chain_pipeline(data):
    return (
        wrap(data)
        .map(lambda x: x * 2)
        .map(lambda x: x * 2)
        .filter(lambda x: x % 3 == 0)
        .collect()
    )


def measure_memory(
    implementation: Implementation,
    pipeline: Callable[[Any], List[Any]],
    data: Any,
    settle_seconds: float = 0.0,
) -> Tuple[MemoryUsage, List[Any]]:
    """Run pipeline(data) once between two memory readings"""
    gc.collect()
    if settle_seconds:
        time.sleep(settle_seconds)

    # an enclosing measure_performance() may already be tracing; leave it running
    already_tracing = tracemalloc.is_tracing()
    if not already_tracing:
        tracemalloc.start()
    tracemalloc.reset_peak()
    try:
        before = memory_snapshot()
        baseline = before["traced_current_mb"]
        result = pipeline(data)
        after = memory_snapshot()
    finally:
        if not already_tracing:
            tracemalloc.stop()

    usage = MemoryUsage(
        implementation=implementation,
        rss_before_mb=before["rss_mb"],
        rss_after_mb=after["rss_mb"],
        traced_peak_mb=max(after["traced_peak_mb"] - baseline, 0.0),
        traced_current_mb=max(after["traced_current_mb"] - baseline, 0.0),
        output_size=len(result),
    )
    logger.info(
        f"{implementation.value}: peak {usage.traced_peak_mb:.2f}MB traced, "
        f"RSS {usage.rss_before_mb:.2f}MB -> {usage.rss_after_mb:.2f}MB"
    )
    return usage, result


def compare_memory(config: Optional[BenchmarkConfig] = None) -> MemoryReport:
    config = config or BenchmarkConfig.from_env()
    data = make_numbers(config.memory_size)

    native_usage, native_result = measure_memory(
        Implementation.NATIVE, native_pipeline, data, config.settle_seconds
    )
    # longer pause between the two runs
    chain_usage, chain_result = measure_memory(
        Implementation.CHAIN, chain_pipeline, data, config.settle_seconds * 2
    )

    report = MemoryReport(
        input_size=len(data),
        native=native_usage,
        chain=chain_usage,
        results_match=native_result == chain_result,
    )
    if not report.results_match:
        logger.error("Native and chain pipelines produced different results")
    return report


def format_memory_report(report: MemoryReport) -> str:
    lines = ["=== MEMORY USAGE COMPARISON ===", f"Results match: {report.results_match}"]
    for usage in (report.native, report.chain):
        lines.append(f"{usage.implementation.value.capitalize()} implementation:")
        lines.append(f"  RSS before: {usage.rss_before_mb:.2f} MB")
        lines.append(f"  RSS after:  {usage.rss_after_mb:.2f} MB ({usage.rss_delta_mb:+.2f} MB)")
        lines.append(f"  Traced peak: {usage.traced_peak_mb:.2f} MB, held: {usage.traced_current_mb:.2f} MB")
    lines.append(f"Peak memory savings: {report.peak_savings_mb:.2f} MB")
    return "\n".join(lines)


def main():
    logging.basicConfig(level=logging.INFO)
    report = compare_memory()
    print(format_memory_report(report))


if __name__ == "__main__":
    main()
