"""Cache engines for vanish.

The move, restore and retention engines each perform one kind of
change to the cache. The pipeline sequences them one item at a time.
"""

from vanish.engine.mover import MoveEngine, probe_candidates
from vanish.engine.pipeline import Operation, Pipeline, PipelineState, PipelineSummary
from vanish.engine.restorer import RestoreEngine, resolve_conflict
from vanish.engine.retention import PurgeResult, RetentionEngine, validate_days
from vanish.engine.stats import CacheStats, compute_stats, newest_first

__all__ = [
    "CacheStats",
    "MoveEngine",
    "Operation",
    "Pipeline",
    "PipelineState",
    "PipelineSummary",
    "PurgeResult",
    "RestoreEngine",
    "RetentionEngine",
    "compute_stats",
    "newest_first",
    "probe_candidates",
    "resolve_conflict",
    "validate_days",
]
