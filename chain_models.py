"""
Pydantic models for the benchmark and memory harnesses.

Configuration, per-workload timings and memory comparison reports.
"""

import os
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


ENV_PREFIX = "LAZY_CHAIN_"


class Implementation(str, Enum):
    """Which side of a comparison a measurement belongs to."""
    NATIVE = "native"
    CHAIN = "chain"


class BenchmarkConfig(BaseModel):
    """Workload sizes and repetition counts for the harnesses."""
    size: int = Field(
        100_000,
        description="Number of integers in the numeric workload",
        ge=0,
        le=50_000_000
    )
    object_size: int = Field(
        10_000,
        description="Number of user profiles in the object workload",
        ge=0,
        le=5_000_000
    )
    long_chain_size: int = Field(
        50_000,
        description="Number of integers in the long-chain workload",
        ge=0,
        le=50_000_000
    )
    chain_length: int = Field(
        20,
        description="Number of map steps in the long-chain workload",
        ge=1,
        le=1_000
    )
    iterations: int = Field(
        5,
        description="Timed runs per workload",
        ge=1,
        le=1_000
    )
    memory_size: int = Field(
        1_000_000,
        description="Number of integers in the memory comparison",
        ge=0,
        le=50_000_000
    )
    settle_seconds: float = Field(
        1.0,
        description="Pause before each memory measurement so allocations settle",
        ge=0.0,
        le=60.0
    )
    workloads: Optional[List[str]] = Field(
        None,
        description="Subset of workloads to run; all when unset"
    )

    @field_validator("workloads")
    @classmethod
    def validate_workloads(cls, v):
        """Only known workload names are accepted"""
        if v is not None:
            if not v:
                raise ValueError("workloads must name at least one workload; leave it unset to run all")
            valid = ["numeric", "long_chain", "objects"]
            invalid = [w for w in v if w not in valid]
            if invalid:
                raise ValueError(f"Invalid workloads: {invalid}. Valid workloads: {valid}")
        return v

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None, **overrides) -> "BenchmarkConfig":
        """Build a config from LAZY_CHAIN_* variables; blank values count as unset and explicit overrides win."""
        environ = os.environ if environ is None else environ
        values: Dict[str, Any] = {}
        for name in cls.model_fields:
            raw = environ.get(ENV_PREFIX + name.upper())
            if raw is None or not raw.strip():
                continue
            if name == "workloads":
                values[name] = [w.strip() for w in raw.split(",") if w.strip()]
            else:
                values[name] = raw
        values.update(overrides)
        return cls(**values)


class BenchmarkResult(BaseModel):
    """Timings for one workload on one implementation"""
    workload: str = Field(..., description="Workload name")
    implementation: Implementation = Field(..., description="Native or chain")
    input_size: int = Field(..., description="Number of source elements", ge=0)
    output_size: int = Field(..., description="Number of produced elements", ge=0)
    iterations: int = Field(..., description="Timed runs", ge=1)
    mean_ms: float = Field(..., description="Mean run time in milliseconds", ge=0)
    min_ms: float = Field(..., description="Fastest run in milliseconds", ge=0)
    max_ms: float = Field(..., description="Slowest run in milliseconds", ge=0)

    @model_validator(mode="after")
    def validate_ordering(self):
        """min <= mean <= max"""
        if not (self.min_ms <= self.mean_ms <= self.max_ms):
            raise ValueError(
                f"Inconsistent timings: min={self.min_ms} mean={self.mean_ms} max={self.max_ms}"
            )
        return self


class BenchmarkReport(BaseModel):
    """All timings from one harness run"""
    config: BenchmarkConfig
    results: List[BenchmarkResult] = Field(default_factory=list)
    outputs_match: Dict[str, bool] = Field(
        default_factory=dict,
        description="Per workload: native and chain produced equal output"
    )
    timestamp: datetime = Field(default_factory=datetime.now)

    def for_workload(self, workload: str) -> Dict[Implementation, BenchmarkResult]:
        return {r.implementation: r for r in self.results if r.workload == workload}

    def speedup(self, workload: str) -> Optional[float]:
        """native mean / chain mean; above 1.0 means the chain was faster"""
        pair = self.for_workload(workload)
        native = pair.get(Implementation.NATIVE)
        chain = pair.get(Implementation.CHAIN)
        if native is None or chain is None or chain.mean_ms == 0:
            return None
        return native.mean_ms / chain.mean_ms


class MemoryUsage(BaseModel):
    """Memory readings around one pipeline run"""
    implementation: Implementation
    rss_before_mb: float = Field(..., description="Process RSS before the run", ge=0)
    rss_after_mb: float = Field(..., description="Process RSS after the run", ge=0)
    traced_peak_mb: float = Field(..., description="Peak traced Python allocations during the run", ge=0)
    traced_current_mb: float = Field(..., description="Traced allocations still held after the run", ge=0)
    output_size: int = Field(..., ge=0)

    @property
    def rss_delta_mb(self) -> float:
        return self.rss_after_mb - self.rss_before_mb


class MemoryReport(BaseModel):
    """Native vs chain memory comparison"""
    input_size: int = Field(..., ge=0)
    native: MemoryUsage
    chain: MemoryUsage
    results_match: bool = Field(..., description="Both pipelines produced equal output")
    timestamp: datetime = Field(default_factory=datetime.now)

    @property
    def peak_savings_mb(self) -> float:
        """Positive when the chain peaked lower than the native pipeline"""
        return self.native.traced_peak_mb - self.chain.traced_peak_mb
