"""Result values returned by binding operations"""

from enum import Enum


class Status(Enum):
    """Outcome of a single harness operation"""
    OK = ("OK", "The operation completed successfully.")
    ERROR = ("ERROR", "The operation failed.")
    NOT_FOUND = ("NOT_FOUND", "The requested record was not found.")
    BAD_REQUEST = ("BAD_REQUEST", "The store rejected the request as malformed.")

    def __init__(self, label: str, description: str):
        self.label = label
        self.description = description

    @property
    def ok(self) -> bool:
        return self is Status.OK

    def __str__(self):
        return self.label
