# tests/conftest.py
import pytest
from unittest.mock import MagicMock
from pathlib import Path

from mediafolders.config import Settings, get_settings
from mediafolders.exceptions import NotFoundError, PermanentError, RemoteUnavailableError
from mediafolders.storage.base import AssetClient
from mediafolders.storage.dto import Asset, BatchDeleteResult, FolderEntry, RenamedAsset, SearchPage


@pytest.fixture
def mock_settings():
    """
    Provides a mock of the application settings for testing.
    This avoids the need for environment variables during tests.
    """
    settings = MagicMock(spec=Settings)
    settings.STORAGE_PROVIDER = "cloudinary"
    settings.LOG_LEVEL = "INFO"
    settings.CLOUDINARY_CLOUD_NAME = "demo"
    settings.CLOUDINARY_API_KEY = "test_key"
    settings.CLOUDINARY_API_SECRET = "test_secret"
    settings.ROOT_ALIAS = "home"
    settings.DEFAULT_FOLDER = "hitam_ai"
    settings.BATCH_DELETE_SIZE = 100
    settings.SEARCH_PAGE_SIZE = 500
    settings.DELETE_CONCURRENCY = 1
    settings.CACHE_TTL_SECONDS = 300
    settings.BASE_DIR = Path("/tmp")
    settings.LOG_FILE = Path("/tmp/app.log")
    return settings


@pytest.fixture(autouse=True)
def patch_settings_class(monkeypatch, mock_settings):
    """
    Replaces the `Settings` class constructor for every test, so any code
    that calls `get_settings()` receives the `mock_settings` instance.
    """
    get_settings.cache_clear()
    monkeypatch.setattr("mediafolders.config.Settings", lambda *args, **kwargs: mock_settings)
    yield
    get_settings.cache_clear()


def _parent(path: str) -> str:
    return path.rsplit("/", 1)[0] if "/" in path else ""


class FakeAssetClient(AssetClient):
    """
    In-memory asset service with derived folders.

    A folder exists while an asset lives below it or an explicit placeholder
    was created for it. Assets added with hidden=True are invisible to
    search_by_folder, like uploads the search index has not caught up with.
    """

    def __init__(self, page_size: int = 500, batch_limit: int = 100):
        self.page_size = page_size
        self.batch_limit = batch_limit
        self.assets = {}
        self.placeholders = set()
        self.hidden = set()
        self.calls = []
        self.batch_calls = []
        self.fail_batches = False
        self.unconfirmed = set()
        self.rename_failures = set()
        self.destroy_failures = {}
        self.subfolder_failures = {}
        self.delete_folder_failures = {}

    # --- helpers for tests ---

    def add_asset(self, public_id: str, kind: str = "image", hidden: bool = False):
        self.assets[public_id] = Asset(
            public_id=public_id,
            resource_kind=kind,
            asset_id=f"id-{public_id}",
            size=10,
            format="jpg",
            secure_url=f"https://res.example.com/{public_id}.jpg",
        )
        if hidden:
            self.hidden.add(public_id)

    def folders(self) -> set:
        found = set(self.placeholders)
        for public_id in self.assets:
            folder = _parent(public_id)
            while folder:
                found.add(folder)
                folder = _parent(folder)
        return found

    def folder_exists(self, path: str) -> bool:
        return path in self.folders()

    def _page(self, items, cursor):
        start = int(cursor or 0)
        end = start + self.page_size
        return SearchPage(
            resources=items[start:end],
            next_cursor=str(end) if end < len(items) else None,
            total_count=len(items),
        )

    # --- AssetClient ---

    def search_by_folder(self, folder_path, cursor=None):
        self.calls.append(("search_by_folder", folder_path, cursor))
        items = [
            a
            for pid, a in sorted(self.assets.items())
            if _parent(pid) == folder_path and pid not in self.hidden
        ]
        return self._page(items, cursor)

    def list_resources_by_prefix(self, prefix, resource_kind, cursor=None):
        self.calls.append(("list_resources_by_prefix", prefix, resource_kind))
        items = [
            a
            for pid, a in sorted(self.assets.items())
            if pid.startswith(prefix) and a.resource_kind == resource_kind
        ]
        return self._page(items, cursor)

    def list_subfolders(self, folder_path):
        self.calls.append(("list_subfolders", folder_path))
        if folder_path in self.subfolder_failures:
            raise self.subfolder_failures[folder_path]
        folders = self.folders()
        if folder_path not in folders:
            raise NotFoundError(f"Can't find folder with path {folder_path}")
        return [
            FolderEntry(name=f.rsplit("/", 1)[-1], path=f)
            for f in sorted(folders)
            if _parent(f) == folder_path
        ]

    def list_root_folders(self):
        return [FolderEntry(name=f, path=f) for f in sorted(self.folders()) if "/" not in f]

    def create_folder(self, path):
        self.calls.append(("create_folder", path))
        # Missing ancestors are created along with the folder.
        folder = path
        while folder:
            self.placeholders.add(folder)
            folder = _parent(folder)
        return path

    def delete_folder(self, path):
        self.calls.append(("delete_folder", path))
        if path in self.delete_folder_failures:
            raise self.delete_folder_failures[path]
        if not self.folder_exists(path):
            raise NotFoundError(f"Can't find folder with path {path}")
        if any(pid.startswith(path + "/") for pid in self.assets) or any(
            f.startswith(path + "/") for f in self.folders()
        ):
            raise PermanentError(f"Folder is not empty: {path}")
        self.placeholders.discard(path)

    def rename_asset(self, from_id, to_id, resource_kind):
        self.calls.append(("rename_asset", from_id, to_id))
        if from_id in self.rename_failures:
            raise RemoteUnavailableError(f"Rename failed for '{from_id}'")
        if from_id not in self.assets:
            raise NotFoundError(f"Resource not found - {from_id}")
        if to_id in self.assets:
            raise PermanentError(f"Resource already exists - {to_id}")
        asset = self.assets.pop(from_id)
        self.assets[to_id] = asset.model_copy(update={"public_id": to_id})
        if from_id in self.hidden:
            self.hidden.discard(from_id)
            self.hidden.add(to_id)
        return RenamedAsset(public_id=to_id, url=f"https://res.example.com/{to_id}.jpg")

    def delete_assets_batch(self, public_ids, resource_kind):
        assert len(public_ids) <= self.batch_limit
        self.batch_calls.append(list(public_ids))
        if self.fail_batches:
            raise RemoteUnavailableError("Bulk delete failed")
        deleted = {}
        for public_id in public_ids:
            if public_id in self.unconfirmed:
                continue
            asset = self.assets.get(public_id)
            if asset is not None and asset.resource_kind == resource_kind:
                del self.assets[public_id]
                deleted[public_id] = "deleted"
            else:
                deleted[public_id] = "not_found"
        return BatchDeleteResult(deleted=deleted, partial=bool(self.unconfirmed))

    def delete_asset(self, public_id, resource_kind):
        self.calls.append(("delete_asset", public_id))
        if public_id in self.destroy_failures:
            raise self.destroy_failures[public_id]
        return self.assets.pop(public_id, None) is not None

    def count_assets(self, folder_path):
        return sum(1 for pid in self.assets if _parent(pid) == folder_path)

    def search_all(self, expression, max_results):
        self.calls.append(("search_all", expression, max_results))
        return [a for _, a in sorted(self.assets.items())][:max_results]

    def upload(self, file, folder):
        public_id = f"{folder}/{file.rsplit('/', 1)[-1].rsplit('.', 1)[0]}"
        self.add_asset(public_id)
        return self.assets[public_id]


@pytest.fixture
def fake_client():
    return FakeAssetClient()
