# storage/base.py
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence
from .dto import Asset, BatchDeleteResult, FolderEntry, RenamedAsset, SearchPage


class AssetClient(ABC):
    """
    Abstract base class for a remote asset service client.
    Defines the operation set the folder orchestrators program against.
    Implementations translate provider errors into the exceptions in
    mediafolders.exceptions (NotFoundError, RateLimitedError, RemoteUnavailableError).
    """

    @abstractmethod
    def search_by_folder(self, folder_path: str, cursor: Optional[str] = None) -> SearchPage:
        """
        Returns one page of the assets stored directly in a folder.
        May lag behind very recent writes.

        :param folder_path: The folder to search.
        :param cursor: The next_cursor of the previous page, if any.
        """
        pass

    @abstractmethod
    def list_resources_by_prefix(
        self, prefix: str, resource_kind: str, cursor: Optional[str] = None
    ) -> SearchPage:
        """
        Returns one page of assets of a kind whose public id starts with prefix.
        Independent of the search index, used when search returns nothing.
        """
        pass

    @abstractmethod
    def list_subfolders(self, folder_path: str) -> List[FolderEntry]:
        """
        Lists the direct child folders of a folder (non-recursive).
        A folder without children yields an empty list, never an error.
        """
        pass

    @abstractmethod
    def list_root_folders(self) -> List[FolderEntry]:
        """Lists the top-level folders."""
        pass

    @abstractmethod
    def create_folder(self, path: str) -> str:
        """
        Ensures a folder placeholder exists. Idempotent.

        :return: The path of the folder.
        """
        pass

    @abstractmethod
    def delete_folder(self, path: str):
        """
        Deletes an (empty) folder.

        :raises NotFoundError: if the folder is already gone.
        """
        pass

    @abstractmethod
    def rename_asset(self, from_id: str, to_id: str, resource_kind: str) -> RenamedAsset:
        """Renames a single asset. Atomic for that asset only."""
        pass

    @abstractmethod
    def delete_assets_batch(self, public_ids: Sequence[str], resource_kind: str) -> BatchDeleteResult:
        """
        Deletes up to the service's batch limit of assets of one kind.
        The result must be checked per id.
        """
        pass

    @abstractmethod
    def delete_asset(self, public_id: str, resource_kind: str) -> bool:
        """
        Deletes a single asset.

        :return: False if the asset did not exist.
        """
        pass

    @abstractmethod
    def count_assets(self, folder_path: str) -> int:
        """Counts the assets stored directly in a folder."""
        pass

    @abstractmethod
    def search_all(self, expression: str, max_results: int) -> List[Asset]:
        """Runs a free-form search expression, newest first."""
        pass

    @abstractmethod
    def upload(self, file: str, folder: str) -> Asset:
        """
        Uploads a file (local path, URL or data URI) into a folder.

        :param file: The file to upload.
        :param folder: The destination folder.
        """
        pass
