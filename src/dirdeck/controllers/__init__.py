"""Workflow controllers driven by the adapter layer."""

from .batch import BatchOperationController, ConfirmGate, DestinationPicker
from .directory import DirectoryController, ListingObserver, ListingView

__all__ = [
    "BatchOperationController",
    "ConfirmGate",
    "DestinationPicker",
    "DirectoryController",
    "ListingObserver",
    "ListingView",
]
