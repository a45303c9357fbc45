"""
Measurement and data helpers shared by the benchmark and memory harnesses
and the test suite.
"""

import gc
import logging
import os
import time
import tracemalloc
from typing import Any, Callable, Dict, List, Sequence, Tuple

import psutil

from lazy_chain import Chain, wrap

logger = logging.getLogger(__name__)

BYTES_PER_MB = 1024 * 1024


# Global performance tracking
_performance_metrics = {
    "operations": [],
    "total_time_ms": 0.0,
    "total_memory_mb": 0.0,
    "operation_count": 0
}


def _record(performance_info: Dict[str, Any]) -> None:
    # the registry keeps metrics only, never the (possibly large) result
    _performance_metrics["operations"].append(
        {k: v for k, v in performance_info.items() if k != "result"}
    )
    _performance_metrics["total_time_ms"] += performance_info["execution_time_ms"]
    _performance_metrics["total_memory_mb"] += performance_info["memory_usage_mb"]
    _performance_metrics["operation_count"] += 1


def measure_performance(operation_name: str, func, *args, **kwargs) -> Dict[str, Any]:
    """Measure performance of a function call with memory tracking"""
    already_tracing = tracemalloc.is_tracing()
    if not already_tracing:
        tracemalloc.start()
    tracemalloc.reset_peak()
    gc.collect()

    start_time = time.perf_counter()
    try:
        result = func(*args, **kwargs)
    except Exception as e:
        execution_time_ms = (time.perf_counter() - start_time) * 1000
        peak_mb = tracemalloc.get_traced_memory()[1] / BYTES_PER_MB
        _record({
            "operation": operation_name,
            "execution_time_ms": execution_time_ms,
            "memory_usage_mb": peak_mb,
            "success": False,
            "error": str(e),
            "timestamp": time.time()
        })
        logger.error(f"{operation_name} failed after {execution_time_ms:.2f}ms: {e}")
        raise
    else:
        execution_time_ms = (time.perf_counter() - start_time) * 1000
        peak_mb = tracemalloc.get_traced_memory()[1] / BYTES_PER_MB
    finally:
        if not already_tracing:
            tracemalloc.stop()

    performance_info = {
        "operation": operation_name,
        "execution_time_ms": execution_time_ms,
        "memory_usage_mb": peak_mb,
        "success": True,
        "result": result,
        "result_size": len(result) if hasattr(result, "__len__") else None,
        "timestamp": time.time()
    }
    _record(performance_info)
    logger.debug(f"{operation_name} took {execution_time_ms:.2f}ms, peak {peak_mb:.2f}MB")
    return performance_info


def get_performance_summary() -> Dict[str, Any]:
    """Get summary of all performance metrics"""
    count = _performance_metrics["operation_count"]
    if count == 0:
        return {
            "total_operations": 0,
            "failed_operations": 0,
            "total_time_ms": 0.0,
            "total_memory_mb": 0.0,
            "avg_time_ms": 0.0,
            "avg_memory_mb": 0.0
        }

    return {
        "total_operations": count,
        "failed_operations": sum(1 for op in _performance_metrics["operations"] if not op["success"]),
        "total_time_ms": _performance_metrics["total_time_ms"],
        "total_memory_mb": _performance_metrics["total_memory_mb"],
        "avg_time_ms": _performance_metrics["total_time_ms"] / count,
        "avg_memory_mb": _performance_metrics["total_memory_mb"] / count
    }


def clear_performance_metrics():
    """Clear all performance metrics"""
    global _performance_metrics
    _performance_metrics = {
        "operations": [],
        "total_time_ms": 0.0,
        "total_memory_mb": 0.0,
        "operation_count": 0
    }


def memory_snapshot() -> Dict[str, float]:
    """Current process RSS and traced Python allocations, in MB"""
    rss = psutil.Process(os.getpid()).memory_info().rss
    if tracemalloc.is_tracing():
        current, peak = tracemalloc.get_traced_memory()
    else:
        current, peak = 0, 0
    return {
        "rss_mb": rss / BYTES_PER_MB,
        "traced_current_mb": current / BYTES_PER_MB,
        "traced_peak_mb": peak / BYTES_PER_MB
    }


def make_numbers(size: int) -> List[int]:
    return list(range(size))


def make_user_profiles(size: int) -> List[Dict[str, Any]]:
    """Synthetic user records for the object workloads"""
    return [
        {
            "id": i,
            "name": f"User {i}",
            "age": 20 + (i % 30),
            "active": i % 3 == 0,
            "email": f"user{i}@example.com"
        }
        for i in range(size)
    ]


def build_chain(source: Sequence[Any], operations: List[Tuple[str, Callable]]) -> Chain:
    """Build a chain from ("map" | "filter", callable) step descriptions"""
    chain = wrap(source)
    for op_type, fn in operations:
        if op_type == "map":
            chain = chain.map(fn)
        elif op_type == "filter":
            chain = chain.filter(fn)
        else:
            raise ValueError(f"Unknown op: {op_type}")
    return chain


def apply_natively(source: Sequence[Any], operations: List[Tuple[str, Callable]]) -> List[Any]:
    """The same step descriptions applied with builtin map/filter, one full pass per step"""
    result = list(source)
    for op_type, fn in operations:
        if op_type == "map":
            result = list(map(fn, result))
        elif op_type == "filter":
            result = list(filter(fn, result))
        else:
            raise ValueError(f"Unknown op: {op_type}")
    return result
