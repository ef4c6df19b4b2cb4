"""Custom exceptions for the Elasticsearch benchmark binding"""


class DataAccessError(Exception):
    """Base exception for binding errors"""
    pass


class ConfigurationError(DataAccessError):
    """Raised when a binding property cannot be parsed"""
    def __init__(self, key: str, message: str):
        self.key = key
        self.message = message
        super().__init__(f"Invalid value for property '{key}': {message}")


class ConnectionError(DataAccessError):
    """Raised when connection to the data store fails"""
    def __init__(self, store_type: str, message: str):
        self.store_type = store_type
        super().__init__(f"Failed to connect to {store_type}: {message}")


class BulkError(DataAccessError):
    """Raised when the bulk pipeline is used after it was closed"""
    pass
