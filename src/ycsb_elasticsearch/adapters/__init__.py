"""Bindings the benchmark harness can drive"""

from .base import DB
from .elasticsearch import ElasticsearchClient

__all__ = [
    'DB',
    'ElasticsearchClient'
]
