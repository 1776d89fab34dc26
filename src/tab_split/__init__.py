"""TabSplit - Split restaurant bills with friends and track who still owes."""

__version__ = "0.1.0"

from .amounts import parse_amount
from .calculator import (
    apply_custom_split,
    split_custom,
    split_equally,
    split_shared_tax,
    total_with_tax_and_tip,
)
from .config import Settings, load_settings
from .draft import OutingDraft
from .models import Coordinate, Friend, IconVisual, ImageVisual, Tab
from .scheduler import DeferredActions
from .service import TabService, group_by_month, open_service
from .store import MemoryBlobStore, SqliteBlobStore, TabStore

__all__ = [
    "parse_amount",
    "apply_custom_split",
    "split_custom",
    "split_equally",
    "split_shared_tax",
    "total_with_tax_and_tip",
    "Settings",
    "load_settings",
    "OutingDraft",
    "Coordinate",
    "Friend",
    "IconVisual",
    "ImageVisual",
    "Tab",
    "DeferredActions",
    "TabService",
    "group_by_month",
    "open_service",
    "MemoryBlobStore",
    "SqliteBlobStore",
    "TabStore",
]
