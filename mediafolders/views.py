# views.py
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional

from .paths import SEPARATOR, basename
from .storage.dto import Asset, FolderEntry

# Second path segment (the one below the root alias) -> folder name shown in the UI.
UI_FOLDERS = {
    "committee_members": "commitymembers",
    "events": "events",
    "upcoming_events": "events",
    "form_register": "formregister",
    "form_builder": "formregister",
    "user_profiles": "profiles",
    "community_members": "profiles",
}
DEFAULT_UI_FOLDER = "general"

FILE_TYPES_BY_FORMAT = {
    "pdf": "pdf",
    "doc": "document",
    "docx": "document",
    "docm": "document",
    "xls": "spreadsheet",
    "xlsx": "spreadsheet",
    "xlsm": "spreadsheet",
    "csv": "spreadsheet",
    "ppt": "presentation",
    "pptx": "presentation",
}


def ui_folder(public_id: str) -> str:
    parts = public_id.split(SEPARATOR)
    if len(parts) < 2:
        return DEFAULT_UI_FOLDER
    return UI_FOLDERS.get(parts[1], DEFAULT_UI_FOLDER)


def file_type(resource_kind: str, format: Optional[str]) -> str:
    if resource_kind in ("image", "video"):
        return resource_kind
    return FILE_TYPES_BY_FORMAT.get((format or "").lower(), "document")


class View(BaseModel):
    """Response shape serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_response(self) -> dict:
        return self.model_dump(by_alias=True)


class AssetView(View):
    id: str
    name: str
    public_id: str
    url: Optional[str] = None
    format: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    size: int = 0
    created_at: Optional[str] = None
    resource_kind: str
    folder: str = DEFAULT_UI_FOLDER
    file_type: str = Field("document", alias="type")

    @classmethod
    def from_asset(cls, asset: Asset) -> "AssetView":
        return cls(
            id=asset.asset_id or asset.public_id,
            name=asset.filename or basename(asset.public_id),
            public_id=asset.public_id,
            url=asset.secure_url,
            format=asset.format,
            width=asset.width,
            height=asset.height,
            size=asset.size,
            created_at=asset.created_at,
            resource_kind=asset.resource_kind,
            folder=ui_folder(asset.public_id),
            file_type=file_type(asset.resource_kind, asset.format),
        )


class FolderView(View):
    name: str
    path: str
    files_count: int = 0

    @classmethod
    def from_entry(cls, entry: FolderEntry, files_count: int) -> "FolderView":
        return cls(name=entry.name, path=entry.path, files_count=files_count)
