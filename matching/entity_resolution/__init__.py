"""
Entity Resolution Module

Firm-to-case resolution combining:
- Surname matching (strict mode)
- Hybrid token similarity (built-in scorer)
- Approximate-string index (rapidfuzz) with brute-force fallback
"""

from matching.entity_resolution.resolver import (
    FirmCaseResolver,
    ResolverConfig,
    clamp_threshold,
    filter_by_court,
)
from matching.entity_resolution.matchers import (
    ApproximateIndex,
    BruteForceIndex,
    FuzzyNameMatcher,
    RapidfuzzIndex,
    StrictSurnameMatcher,
    similarity,
)

__all__ = [
    "FirmCaseResolver",
    "ResolverConfig",
    "clamp_threshold",
    "filter_by_court",
    "ApproximateIndex",
    "BruteForceIndex",
    "FuzzyNameMatcher",
    "RapidfuzzIndex",
    "StrictSurnameMatcher",
    "similarity",
]
