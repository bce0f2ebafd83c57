"""View graph and attribute resolution."""

from .attributes import dominates, filter_candidates, resolve_attributes
from .graph import ViewGraph

__all__ = ["ViewGraph", "dominates", "filter_candidates", "resolve_attributes"]
