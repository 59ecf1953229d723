# service.py
"""
Entry point for callers: recursive folder mutations plus cache-backed reads.

Every mutation clears the response cache as a whole once it has touched the
remote service.
"""
import logging
from typing import List, Optional

from . import paths
from .cache import ResponseCache
from .config import get_settings
from .deletion import DeleteOrchestrator
from .exceptions import InvalidArgumentError, NotFoundError
from .renaming import RenameOrchestrator
from .report import OperationReport
from .storage.base import AssetClient
from .storage.dto import RESOURCE_KINDS, RenamedAsset
from .views import AssetView, FolderView

ALL_FILES_LIMIT = 500
ALL_IMAGES_LIMIT = 100


class FolderService:
    def __init__(self, client: AssetClient, cache: Optional[ResponseCache] = None, settings=None):
        self.settings = settings or get_settings()
        self.client = client
        self.cache = cache if cache is not None else ResponseCache(self.settings.CACHE_TTL_SECONDS)
        self.deleter = DeleteOrchestrator(client, self.settings)
        self.renamer = RenameOrchestrator(client, self.settings)

    # --- Mutations ---

    def delete_subtree(self, folder_path: str) -> OperationReport:
        """Deletes a folder with all its assets and subfolders."""
        path = paths.normalize(folder_path)
        try:
            return self.deleter.delete_subtree(path)
        finally:
            # Assets may be gone even when the final step failed.
            self.cache.clear()

    def rename_subtree(self, from_path: str, to_path: str) -> OperationReport:
        """Moves a folder with all its assets and subfolders to to_path."""
        source = paths.normalize(from_path)
        target = paths.normalize(to_path)
        if source == target:
            raise InvalidArgumentError("Source and destination folders are the same.")
        if paths.is_strict_child(target, source):
            raise InvalidArgumentError(f"Cannot move folder '{source}' into its own subfolder '{target}'.")

        logging.info(f"Renaming folder request: '{source}' -> '{target}'")
        try:
            return self.renamer.rename_subtree(source, target)
        finally:
            self.cache.clear()

    def create_folder(self, parent_path: str, folder_name: str) -> str:
        if not folder_name or not str(folder_name).strip():
            raise InvalidArgumentError("Folder name is required.")
        target = paths.normalize(paths.join(paths.normalize(parent_path), folder_name.strip()))
        logging.info(f"Creating folder via API: {target}")
        created = self.client.create_folder(target)
        self.cache.clear()
        return created

    def rename_file(self, from_public_id: str, to_public_id: str, resource_kind: str = "image") -> RenamedAsset:
        if not from_public_id or not to_public_id:
            raise InvalidArgumentError("Both from_public_id and to_public_id are required.")
        self._check_kind(resource_kind)
        renamed = self.client.rename_asset(from_public_id, to_public_id, resource_kind)
        self.cache.clear()
        return renamed

    def delete_file(self, public_id: str, resource_kind: str = "image") -> bool:
        """
        Deletes a single asset. An asset that is already gone counts as deleted.

        :return: False if the asset did not exist.
        """
        if not public_id:
            raise InvalidArgumentError("Public ID is required.")
        self._check_kind(resource_kind)
        try:
            existed = self.client.delete_asset(public_id, resource_kind)
        except NotFoundError:
            existed = False
        self.cache.clear()
        return existed

    def upload_file(self, file: str, folder: Optional[str] = None) -> AssetView:
        if not file:
            raise InvalidArgumentError("File is required.")
        alias = self.settings.ROOT_ALIAS
        folder = paths.normalize(folder or alias)
        # Uploads land under the root alias unless they target it or the default folder already.
        if not (
            folder == alias
            or paths.is_strict_child(folder, alias)
            or folder == self.settings.DEFAULT_FOLDER
            or paths.is_strict_child(folder, self.settings.DEFAULT_FOLDER)
        ):
            folder = paths.join(alias, folder)
        asset = self.client.upload(file, folder)
        self.cache.clear()
        return AssetView.from_asset(asset)

    # --- Reads ---

    def list_folder_contents(self, folder_path: Optional[str] = None, force_refresh: bool = False) -> List[AssetView]:
        """
        Lists the assets directly inside a folder, newest first.
        None means the default folder, an empty path means the root.
        """
        if folder_path is None:
            path = self.settings.DEFAULT_FOLDER
        elif not folder_path.strip().strip(paths.SEPARATOR):
            path = ""
        else:
            path = paths.normalize(folder_path)
        cache_key = f"files_{path}"
        if not force_refresh:
            cached = self.cache.get(cache_key)
            if cached is not None:
                return cached

        files = []
        cursor = None
        while True:
            page = self.client.search_by_folder(path, cursor)
            files.extend(AssetView.from_asset(asset) for asset in page.resources)
            cursor = page.next_cursor
            if not cursor:
                break

        self.cache.set(cache_key, files)
        return files

    def list_folders(self, parent_path: Optional[str] = None, force_refresh: bool = False) -> List[FolderView]:
        """Lists the direct child folders of parent_path, or the root folders."""
        parent = paths.normalize(parent_path) if parent_path else None
        cache_key = f"folders_{parent or 'root'}"
        if not force_refresh:
            cached = self.cache.get(cache_key)
            if cached is not None:
                return cached

        entries = self.client.list_subfolders(parent) if parent else self.client.list_root_folders()
        folders = []
        for entry in entries:
            files_count = entry.files_count
            if files_count is None:
                files_count = self.client.count_assets(entry.path)
            folders.append(FolderView.from_entry(entry, files_count))

        self.cache.set(cache_key, folders)
        return folders

    def list_all_files(self, force_refresh: bool = False) -> List[AssetView]:
        """Every asset under the root alias hierarchy, newest first."""
        return self._cached_search(
            "all_files", f"folder:{self.settings.ROOT_ALIAS}*", ALL_FILES_LIMIT, force_refresh
        )

    def list_all_images(self, force_refresh: bool = False) -> List[AssetView]:
        return self._cached_search("all_images", "resource_type:image", ALL_IMAGES_LIMIT, force_refresh)

    def _cached_search(self, cache_key: str, expression: str, limit: int, force_refresh: bool) -> List[AssetView]:
        if not force_refresh:
            cached = self.cache.get(cache_key)
            if cached is not None:
                return cached
        files = [AssetView.from_asset(asset) for asset in self.client.search_all(expression, limit)]
        self.cache.set(cache_key, files)
        return files

    @staticmethod
    def _check_kind(resource_kind: str):
        if resource_kind not in RESOURCE_KINDS:
            raise InvalidArgumentError(
                f"Invalid resource kind '{resource_kind}'. Must be one of: {', '.join(RESOURCE_KINDS)}."
            )
