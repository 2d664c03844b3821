"""Base service class for domain services."""


class Service:
    """Base class for all domain services.

    Domain services hold the vote engine's business rules: the vote state
    machine, quotas and reconciliation. They reach storage only through the
    VoteStore port.
    """

    pass
