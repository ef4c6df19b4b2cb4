"""
Tests for binding property parsing
"""

import pytest

from ycsb_elasticsearch.config import ElasticsearchSettings, parse_bool, parse_hosts
from ycsb_elasticsearch.exceptions import ConfigurationError


class TestDefaults:
    """Test settings built from empty properties"""

    def test_defaults(self):
        settings = ElasticsearchSettings.from_properties({})

        assert settings.index_key == "es.ycsb"
        assert settings.cluster_name == "es.ycsb.cluster"
        assert settings.remote_mode is False
        assert settings.new_db is False
        assert settings.bulk_insert is False
        assert settings.bulk_size == 1000
        assert settings.flush_interval == 5.0
        assert settings.hosts == ["http://localhost:9200"]
        assert settings.index_settings == {"number_of_shards": "1", "number_of_replicas": "0"}

    def test_dataclass_defaults_match_parsed_defaults(self):
        assert ElasticsearchSettings() == ElasticsearchSettings.from_properties(None)


class TestParsing:
    """Test individual properties"""

    @pytest.mark.parametrize("value,expected", [
        ("true", True),
        ("TRUE", True),
        (" True ", True),
        ("false", False),
        ("yes", False),
        ("1", False),
        (None, False),
    ])
    def test_parse_bool(self, value, expected):
        assert parse_bool(value) is expected

    def test_remote_hosts_list(self):
        settings = ElasticsearchSettings.from_properties({
            "elasticsearch.remote": "true",
            "elasticsearch.hosts.list": "node1:9200, node2:9201,https://node3:9243",
        })

        assert settings.remote_mode is True
        assert settings.hosts == ["http://node1:9200", "http://node2:9201", "https://node3:9243"]

    def test_hosts_list_ignored_in_local_mode(self):
        settings = ElasticsearchSettings.from_properties({"elasticsearch.hosts.list": "node1:9200"})
        assert settings.hosts == ["http://localhost:9200"]

    @pytest.mark.parametrize("value", ["node1:abc", "node1", ":9200", "node1:70000", " , "])
    def test_malformed_hosts(self, value):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_hosts("elasticsearch.hosts.list", value)
        assert exc_info.value.key == "elasticsearch.hosts.list"

    def test_bulk_settings(self):
        settings = ElasticsearchSettings.from_properties({
            "bulk.insert": "enabled",
            "bulk.size": "250",
            "bulk.flush.interval": "0.5",
        })

        assert settings.bulk_insert is True
        assert settings.bulk_size == 250
        assert settings.flush_interval == 0.5

    @pytest.mark.parametrize("value", ["many", "0", "-5"])
    def test_invalid_bulk_size(self, value):
        with pytest.raises(ConfigurationError):
            ElasticsearchSettings.from_properties({"bulk.size": value})

    def test_index_settings_overlay_defaults(self):
        settings = ElasticsearchSettings.from_properties({
            "index.number_of_replicas": "2",
            "index.refresh_interval": "-1",
            "es.index.key": "bench",
        })

        assert settings.index_key == "bench"
        assert settings.index_settings == {
            "number_of_shards": "1",
            "number_of_replicas": "2",
            "refresh_interval": "-1",
        }
