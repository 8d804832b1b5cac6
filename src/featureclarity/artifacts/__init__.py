"""Report artifacts derived from analysis results."""

from .enrichment import ClarityReport, EnrichedItem, enrich

__all__ = ["ClarityReport", "EnrichedItem", "enrich"]
