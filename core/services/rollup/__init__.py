from .aggregator import RollupAggregator, aggregate_phase, aggregate_work_package

__all__ = ["RollupAggregator", "aggregate_phase", "aggregate_work_package"]
