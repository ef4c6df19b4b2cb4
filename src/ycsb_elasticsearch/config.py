"""Binding configuration parsed from harness properties"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .exceptions import ConfigurationError

DEFAULT_CLUSTER_NAME = "es.ycsb.cluster"
DEFAULT_INDEX_KEY = "es.ycsb"
DEFAULT_LOCAL_HOST = "localhost:9200"
DEFAULT_REMOTE_HOST = "localhost:9200"
DEFAULT_BULK_SIZE = "1000"
DEFAULT_BULK_INSERT = "disabled"
DEFAULT_FLUSH_INTERVAL = "5"
DEFAULT_REQUEST_TIMEOUT = "30"

# 1 GiB, the byte cap for a single bulk request
DEFAULT_BULK_SIZE_BYTES = 1024 * 1024 * 1024

INDEX_SETTINGS_PREFIX = "index."

DEFAULT_INDEX_SETTINGS = {
    "number_of_shards": "1",
    "number_of_replicas": "0",
}


def parse_bool(value: Optional[str]) -> bool:
    """Only the string 'true' (any case) is true"""
    return value is not None and str(value).strip().lower() == "true"


def parse_positive_int(key: str, value: str) -> int:
    try:
        number = int(str(value).strip())
    except ValueError:
        raise ConfigurationError(key, f"'{value}' is not an integer")
    if number <= 0:
        raise ConfigurationError(key, f"'{value}' must be greater than zero")
    return number


def parse_positive_float(key: str, value: str) -> float:
    try:
        number = float(str(value).strip())
    except ValueError:
        raise ConfigurationError(key, f"'{value}' is not a number")
    if number <= 0:
        raise ConfigurationError(key, f"'{value}' must be greater than zero")
    return number


def parse_hosts(key: str, value: str) -> List[str]:
    """
    Parse a comma separated list of host:port pairs into node URLs.

    An entry may carry a scheme (https://node1:9200); plain entries default
    to http.
    """
    hosts = []
    for entry in str(value).split(","):
        entry = entry.strip()
        if not entry:
            continue

        scheme = "http"
        if "://" in entry:
            scheme, entry = entry.split("://", 1)

        host, sep, port = entry.rpartition(":")
        if not sep or not host:
            raise ConfigurationError(key, f"'{entry}' is not of the form host:port")
        try:
            port_number = int(port)
        except ValueError:
            raise ConfigurationError(key, f"Unable to parse port number in '{entry}'")
        if not 0 < port_number < 65536:
            raise ConfigurationError(key, f"Port {port_number} out of range in '{entry}'")

        hosts.append(f"{scheme}://{host}:{port_number}")

    if not hosts:
        raise ConfigurationError(key, "no hosts given")
    return hosts


@dataclass
class ElasticsearchSettings:
    """Typed view over the binding properties"""
    index_key: str = DEFAULT_INDEX_KEY
    cluster_name: str = DEFAULT_CLUSTER_NAME
    remote_mode: bool = False
    hosts: List[str] = field(default_factory=lambda: [f"http://{DEFAULT_LOCAL_HOST}"])
    new_db: bool = False
    bulk_insert: bool = False
    bulk_size: int = int(DEFAULT_BULK_SIZE)
    bulk_size_bytes: int = DEFAULT_BULK_SIZE_BYTES
    flush_interval: float = float(DEFAULT_FLUSH_INTERVAL)
    ignore_cluster_name: bool = False
    request_timeout: float = float(DEFAULT_REQUEST_TIMEOUT)
    index_settings: Dict[str, Any] = field(default_factory=lambda: dict(DEFAULT_INDEX_SETTINGS))

    @classmethod
    def from_properties(cls, props: Optional[Mapping[str, Any]] = None) -> "ElasticsearchSettings":
        """Build settings from a harness properties mapping"""
        props = props or {}

        remote_mode = parse_bool(props.get("elasticsearch.remote", "false"))
        if remote_mode:
            hosts = parse_hosts(
                "elasticsearch.hosts.list",
                props.get("elasticsearch.hosts.list", DEFAULT_REMOTE_HOST)
            )
        else:
            hosts = parse_hosts("elasticsearch.local.host", props.get("elasticsearch.local.host", DEFAULT_LOCAL_HOST))

        bulk_insert = str(props.get("bulk.insert", DEFAULT_BULK_INSERT)).strip().lower() == "enabled"

        index_settings = dict(DEFAULT_INDEX_SETTINGS)
        for key, value in props.items():
            if key.startswith(INDEX_SETTINGS_PREFIX):
                index_settings[key[len(INDEX_SETTINGS_PREFIX):]] = value

        return cls(
            index_key=props.get("es.index.key", DEFAULT_INDEX_KEY),
            cluster_name=props.get("cluster.name", DEFAULT_CLUSTER_NAME),
            remote_mode=remote_mode,
            hosts=hosts,
            new_db=parse_bool(props.get("elasticsearch.newdb", "false")),
            bulk_insert=bulk_insert,
            bulk_size=parse_positive_int("bulk.size", props.get("bulk.size", DEFAULT_BULK_SIZE)),
            flush_interval=parse_positive_float(
                "bulk.flush.interval",
                props.get("bulk.flush.interval", DEFAULT_FLUSH_INTERVAL)
            ),
            ignore_cluster_name=parse_bool(props.get("elasticsearch.ignore_cluster_name", "false")),
            request_timeout=parse_positive_float(
                "elasticsearch.request_timeout",
                props.get("elasticsearch.request_timeout", DEFAULT_REQUEST_TIMEOUT)
            ),
            index_settings=index_settings,
        )

    def describe(self) -> Dict[str, Any]:
        """Settings summary for the bootstrap log"""
        return {
            'index': self.index_key,
            'cluster_name': self.cluster_name,
            'remote_mode': self.remote_mode,
            'hosts': self.hosts,
            'new_db': self.new_db,
            'bulk_insert': self.bulk_insert,
            'bulk_size': self.bulk_size,
        }
