"""Strongly typed identifiers for the vote engine.

Product ids come from the external catalog and voter ids from the identity
collaborator, so both are opaque strings rather than UUIDs.
"""

from typing import NewType

ProductId = NewType("ProductId", str)
VoterId = NewType("VoterId", str)
