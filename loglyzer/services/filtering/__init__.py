"""Record filtering - pure predicates, no state."""
from .filters import FilterSpec, build_filter_spec, matches

__all__ = ["FilterSpec", "build_filter_spec", "matches"]
