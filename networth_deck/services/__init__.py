"""Public service API."""
from .crud import AssetCRUD, AssetCRUDConfig, CRUDError, CRUDState, UnsupportedOperationError
from .model import FormSchema, HealthStatus, Message, NetWorthSummary

__all__ = [
    "AssetCRUD",
    "AssetCRUDConfig",
    "CRUDError",
    "CRUDState",
    "UnsupportedOperationError",
    "FormSchema",
    "HealthStatus",
    "Message",
    "NetWorthSummary",
]
