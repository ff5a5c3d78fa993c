"""Monthly reporting over the stored records."""

from gym_tracker.reports.aggregator import ReportAggregator

__all__ = ["ReportAggregator"]
