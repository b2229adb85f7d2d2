"""Run-scoped stores shared across analysis stages."""

from .graph_cache import GraphCache

__all__ = ["GraphCache"]
