"""flowstore — persistence for flow-graph app records."""

from flowstore.errors import AppNotFoundError, FlowstoreError
from flowstore.services.apps import AppStore

__all__ = ["AppNotFoundError", "AppStore", "FlowstoreError"]

__version__ = "0.1.0"
