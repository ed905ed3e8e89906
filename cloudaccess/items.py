"""
Value types describing items stored in a cloud backend.

These dataclasses are created at request/response boundaries and never
mutated afterwards.
"""
from dataclasses import dataclass
from dataclasses import field
from datetime import datetime
from enum import Enum
from typing import Optional
from typing import Tuple

from cloudaccess.cloudpath import CloudPath


class CloudItemType(str, Enum):
    """Kind of an item in a cloud backend."""

    FILE = "file"
    FOLDER = "folder"
    SYMLINK = "symlink"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class CloudItemMetadata:
    """
    Metadata for a single item.

    Attributes:
        name: Last path component of cloud_path
        cloud_path: Location of the item, as addressed by the caller
        item_type: File, folder, symlink or unknown
        last_modified_date: Modification time reported by the backend, if any
        size: Size in bytes reported by the backend, if any
    """

    name: str
    cloud_path: CloudPath
    item_type: CloudItemType
    last_modified_date: Optional[datetime] = None
    size: Optional[int] = None


@dataclass(frozen=True)
class CloudItemList:
    """
    One page of a folder listing.

    Attributes:
        items: Metadata of the items in this page, in backend order
        next_page_token: Opaque token for the next page, None at the end
    """

    items: Tuple[CloudItemMetadata, ...] = field(default_factory=tuple)
    next_page_token: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.items, tuple):
            object.__setattr__(self, "items", tuple(self.items))
