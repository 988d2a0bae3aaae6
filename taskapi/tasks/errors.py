from __future__ import annotations


class TaskApiError(Exception):
    """Base class for errors surfaced by the task service."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class TaskValidationError(TaskApiError):
    """A task payload failed the required-field checks.

    `errors` holds one `<field>: <reason>` entry per failure.
    """

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__(", ".join(self.errors))


class MalformedRequestError(TaskApiError):
    """The request could not be decoded (bad JSON, bad query literal)."""


class StoreError(TaskApiError):
    """The backing task store failed or is unreachable."""


__all__ = ["TaskApiError", "TaskValidationError", "MalformedRequestError", "StoreError"]
