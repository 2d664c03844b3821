"""Adapter layer errors."""


class AdapterError(Exception):
    """Base adapter error."""

    pass


class VoteClientError(AdapterError):
    """Vote API call failed.

    ``revert`` tells the caller to roll back any optimistic state.
    """

    def __init__(
        self,
        kind: str,
        message: str,
        status_code: int | None = None,
        revert: bool = True,
    ) -> None:
        self.kind = kind
        self.message = message
        self.status_code = status_code
        self.revert = revert
        super().__init__(message)
