"""Owned Elasticsearch connection used by the binding"""

import logging
from typing import Any, Dict, Optional

from elasticsearch import Elasticsearch

from .config import ElasticsearchSettings
from .exceptions import ConnectionError

logger = logging.getLogger(__name__)

STORE_TYPE = "Elasticsearch"

# Reserved document fields that place a record inside its table
TABLE_FIELD = "ycsb_table"
KEY_FIELD = "ycsb_key"
# Harness fields live under their own object, out of reach of the reserved names
FIELDS_FIELD = "fields"

INDEX_MAPPINGS = {
    "properties": {
        TABLE_FIELD: {"type": "keyword"},
        KEY_FIELD: {"type": "keyword"},
        FIELDS_FIELD: {"type": "object", "enabled": False},
    }
}

# Interval between sniffing rounds in remote mode, in seconds
SNIFF_INTERVAL = 30


class ElasticsearchConnection:
    """
    Wraps an Elasticsearch client together with the settings it was built from.

    There are two ways to reach the cluster:
    1. Local mode: a single node on this machine, no node discovery.
    2. Remote mode: a list of nodes, discovery by sniffing, cluster name checked.
    """

    def __init__(self, client: Elasticsearch, settings: ElasticsearchSettings):
        self.client = client
        self.settings = settings
        self._closed = False

    @classmethod
    def open(cls, settings: ElasticsearchSettings) -> "ElasticsearchConnection":
        """Connect, wait for shards and make sure the root index exists"""
        logger.info(f"Elasticsearch starting connection, cluster = {settings.cluster_name}")
        logger.info(f"Elasticsearch remote mode = {settings.remote_mode}")
        if settings.remote_mode:
            logger.info(f"Elasticsearch remote hosts = {','.join(settings.hosts)}")

        try:
            client = Elasticsearch(**cls.client_options(settings))
        except Exception as e:
            logger.error(f"Failed to create Elasticsearch client: {e}")
            raise ConnectionError(STORE_TYPE, str(e))

        connection = cls(client, settings)
        try:
            connection.bootstrap()
        except ConnectionError:
            connection.close()
            raise
        except Exception as e:
            logger.error(f"Failed to initialize Elasticsearch: {e}")
            connection.close()
            raise ConnectionError(STORE_TYPE, str(e))

        return connection

    @staticmethod
    def client_options(settings: ElasticsearchSettings) -> Dict[str, Any]:
        """Keyword arguments for the Elasticsearch constructor"""
        options: Dict[str, Any] = {
            'hosts': settings.hosts,
            'request_timeout': settings.request_timeout,
        }
        if settings.remote_mode:
            options.update({
                'sniff_on_start': True,
                'sniff_on_node_failure': True,
                'sniff_timeout': settings.request_timeout,
                'min_delay_between_sniffing': SNIFF_INTERVAL,
            })
        return options

    def bootstrap(self):
        """Verify the cluster, wait for shards, then prepare the index"""
        if self.settings.remote_mode and not self.settings.ignore_cluster_name:
            self.verify_cluster_name()
        self.wait_for_active_shards()
        self.ensure_index(recreate=self.settings.new_db)

    def verify_cluster_name(self):
        info = self.client.info()
        actual = info.get("cluster_name")
        if actual != self.settings.cluster_name:
            raise ConnectionError(
                STORE_TYPE,
                f"connected to cluster '{actual}', expected '{self.settings.cluster_name}'"
            )

    def wait_for_active_shards(self, timeout: Optional[str] = None):
        """Block until at least one shard is active"""
        timeout = timeout or f"{int(self.settings.request_timeout * 1000)}ms"
        health = self.client.cluster.health(wait_for_active_shards=1, timeout=timeout)
        if health.get("timed_out"):
            raise ConnectionError(STORE_TYPE, f"no active shards after {timeout}")
        logger.info(f"Elasticsearch cluster status = {health.get('status')}")

    def ensure_index(self, recreate: bool = False):
        """Create the root index, dropping it first when recreate is set"""
        index = self.settings.index_key
        if recreate:
            self.client.indices.delete(index=index, ignore_unavailable=True)
            logger.info(f"Dropped index {index}")
        elif self.client.indices.exists(index=index):
            return

        self.client.indices.create(
            index=index,
            settings=self.settings.index_settings,
            mappings=INDEX_MAPPINGS,
        )
        logger.info(f"Created index {index}")

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self):
        if self._closed:
            return
        self._closed = True
        try:
            self.client.close()
        except Exception as e:
            logger.warning(f"Error closing Elasticsearch client: {e}")
