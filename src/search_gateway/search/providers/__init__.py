"""Search provider implementations."""

from .bocha import BochaSearchProvider
from .brave import BraveSearchProvider
from .perplexity import PerplexitySearchProvider

__all__ = [
    "BraveSearchProvider",
    "PerplexitySearchProvider",
    "BochaSearchProvider",
]
