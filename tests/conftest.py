"""
Pytest configuration for binding tests
"""

from unittest.mock import patch

import pytest

from ycsb_elasticsearch.config import ElasticsearchSettings
from ycsb_elasticsearch.connection import ElasticsearchConnection
from ycsb_elasticsearch.adapters.elasticsearch import ElasticsearchClient

from .fakes import FakeElasticsearch, fake_streaming_bulk


@pytest.fixture(autouse=True)
def in_memory_bulk_helper():
    """Route the bulk helper through the client so fakes and mocks answer it"""
    with patch("ycsb_elasticsearch.bulk.streaming_bulk", side_effect=fake_streaming_bulk) as helper:
        yield helper


@pytest.fixture
def fake_es():
    return FakeElasticsearch()


@pytest.fixture
def settings():
    return ElasticsearchSettings()


@pytest.fixture
def connection(fake_es, settings):
    conn = ElasticsearchConnection(fake_es, settings)
    conn.bootstrap()
    return conn


@pytest.fixture
def binding(connection):
    client = ElasticsearchClient(connection=connection)
    client.init()
    yield client
    client.cleanup()
