# storage/dto.py
from pydantic import BaseModel, Field
from typing import Dict, List, Literal, Optional

ResourceKind = Literal["image", "video", "raw"]
RESOURCE_KINDS = ("image", "video", "raw")


class Asset(BaseModel):
    """
    A standardized Data Transfer Object for a remote asset to abstract away
    provider-specific resource representations.
    Identity is public_id + resource_kind.
    """

    public_id: str
    resource_kind: ResourceKind = "image"
    asset_id: Optional[str] = None
    filename: Optional[str] = None
    size: int = 0
    width: Optional[int] = None
    height: Optional[int] = None
    format: Optional[str] = None
    created_at: Optional[str] = None
    secure_url: Optional[str] = None

    @classmethod
    def from_resource(cls, resource: dict) -> "Asset":
        """Builds an Asset from a raw resource dict returned by the asset service."""
        return cls(
            public_id=resource["public_id"],
            resource_kind=resource.get("resource_type") or "image",
            asset_id=resource.get("asset_id"),
            filename=resource.get("filename"),
            size=resource.get("bytes") or 0,
            width=resource.get("width"),
            height=resource.get("height"),
            format=resource.get("format"),
            created_at=resource.get("created_at"),
            secure_url=resource.get("secure_url"),
        )


class SearchPage(BaseModel):
    """One page of an enumeration. next_cursor is None on the last page."""

    resources: List[Asset] = Field(default_factory=list)
    next_cursor: Optional[str] = None
    total_count: Optional[int] = None


class FolderEntry(BaseModel):
    name: str
    path: str
    # None when the service does not report a count for the listing.
    files_count: Optional[int] = None


class RenamedAsset(BaseModel):
    public_id: str
    url: Optional[str] = None


class BatchDeleteResult(BaseModel):
    """
    Per-id outcome of a bulk delete. Statuses are the service's own strings
    ("deleted", "not_found", ...); an id missing from the map was not confirmed.
    """

    deleted: Dict[str, str] = Field(default_factory=dict)
    partial: bool = False
