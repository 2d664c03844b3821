"""Reconciliation use cases."""

from .reconcile_aggregates import (
    DriftItem,
    ReconcileAggregatesRequest,
    ReconcileAggregatesResponse,
    ReconcileAggregatesUseCase,
)

__all__ = [
    "DriftItem",
    "ReconcileAggregatesRequest",
    "ReconcileAggregatesResponse",
    "ReconcileAggregatesUseCase",
]
