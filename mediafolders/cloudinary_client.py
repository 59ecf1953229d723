# cloudinary_client.py
import cloudinary
import cloudinary.api
import cloudinary.uploader
from cloudinary.exceptions import (
    AlreadyExists,
    BadRequest,
    Error as CloudinaryError,
    NotAllowed,
    NotFound,
    RateLimited,
)
from cloudinary.search import Search
import logging
from typing import List, Optional, Sequence

from .config import get_settings
from .exceptions import NotFoundError, PermanentError, RateLimitedError, RemoteUnavailableError
from .storage.base import AssetClient
from .storage.dto import Asset, BatchDeleteResult, FolderEntry, RenamedAsset, SearchPage


def _translate_error(e: CloudinaryError, message: str) -> Exception:
    """Maps an SDK error onto the project's error kinds."""
    # The Upload API raises the base Error class, so its message is all there is to go on.
    text = str(e).lower()
    if isinstance(e, NotFound) or "not found" in text:
        return NotFoundError(f"{message}: {e}")
    if isinstance(e, RateLimited):
        return RateLimitedError(f"{message}: {e}")
    if isinstance(e, (AlreadyExists, BadRequest, NotAllowed)) or "already exists" in text:
        return PermanentError(f"{message}: {e}")
    return RemoteUnavailableError(f"{message}: {e}")


class CloudinaryClient(AssetClient):
    """
    Client for interacting with the Cloudinary Admin, Upload and Search APIs,
    implementing the AssetClient interface.
    """

    def __init__(self, cloud_name, api_key, api_secret):
        try:
            if cloud_name:
                cloudinary.config(
                    cloud_name=cloud_name,
                    api_key=api_key,
                    api_secret=api_secret,
                    secure=True,
                )
            # Verify the credentials with a cheap Admin API call
            cloudinary.api.ping()
            logging.info("Cloudinary client initialized successfully.")
        except Exception as e:
            logging.error(
                f"Failed to initialize Cloudinary client. Check your credentials. Error: {e}"
            )
            raise

    def search_by_folder(self, folder_path: str, cursor: Optional[str] = None) -> SearchPage:
        """Returns one page of the assets stored directly in a folder, newest first."""
        try:
            logging.info(f"Searching Cloudinary folder: '{folder_path}'")
            search = (
                Search()
                .expression(f'folder:"{folder_path}"')
                .sort_by("created_at", "desc")
                .max_results(get_settings().SEARCH_PAGE_SIZE)
            )
            if cursor:
                search = search.next_cursor(cursor)
            result = search.execute()
        except CloudinaryError as e:
            logging.error(f"Failed to search folder '{folder_path}': {e}")
            raise _translate_error(e, f"Search failed for '{folder_path}'") from e

        return SearchPage(
            resources=[Asset.from_resource(r) for r in result.get("resources", [])],
            next_cursor=result.get("next_cursor"),
            total_count=result.get("total_count"),
        )

    def list_resources_by_prefix(
        self, prefix: str, resource_kind: str, cursor: Optional[str] = None
    ) -> SearchPage:
        options = {
            "type": "upload",
            "prefix": prefix,
            "resource_type": resource_kind,
            "max_results": get_settings().SEARCH_PAGE_SIZE,
        }
        if cursor:
            options["next_cursor"] = cursor
        try:
            logging.info(f"Listing Cloudinary {resource_kind} resources by prefix: '{prefix}'")
            result = cloudinary.api.resources(**options)
        except CloudinaryError as e:
            logging.error(f"Failed to list {resource_kind} resources by prefix '{prefix}': {e}")
            raise _translate_error(e, f"Prefix listing failed for '{prefix}'") from e

        resources = []
        for r in result.get("resources", []):
            # The Admin API omits resource_type when it is implied by the request.
            resources.append(Asset.from_resource({"resource_type": resource_kind, **r}))
        return SearchPage(resources=resources, next_cursor=result.get("next_cursor"))

    def _collect_folders(self, fetch, description: str) -> List[FolderEntry]:
        """Pages through a folder listing call until the service reports no more results."""
        folders = []
        cursor = None
        while True:
            options = {"max_results": get_settings().SEARCH_PAGE_SIZE}
            if cursor:
                options["next_cursor"] = cursor
            result = fetch(**options)
            for folder in result.get("folders", []):
                folders.append(
                    FolderEntry(
                        name=folder["name"],
                        path=folder["path"],
                        files_count=folder.get("files_count"),
                    )
                )
            cursor = result.get("next_cursor")
            if not cursor:
                break
            logging.info(f"Found more folders in {description}, continuing listing...")
        return folders

    def list_subfolders(self, folder_path: str) -> List[FolderEntry]:
        try:
            logging.info(f"Listing subfolders of '{folder_path}'")
            return self._collect_folders(
                lambda **options: cloudinary.api.subfolders(folder_path, **options),
                f"'{folder_path}'",
            )
        except CloudinaryError as e:
            error = _translate_error(e, f"Subfolder listing failed for '{folder_path}'")
            if isinstance(error, NotFoundError):
                # A path without children is reported as missing.
                return []
            logging.error(f"Failed to list subfolders of '{folder_path}': {e}")
            raise error from e

    def list_root_folders(self) -> List[FolderEntry]:
        try:
            logging.info("Listing root folders")
            return self._collect_folders(cloudinary.api.root_folders, "root")
        except CloudinaryError as e:
            logging.error(f"Failed to list root folders: {e}")
            raise _translate_error(e, "Root folder listing failed") from e

    def create_folder(self, path: str) -> str:
        try:
            logging.info(f"Creating folder '{path}'...")
            result = cloudinary.api.create_folder(path)
            return result.get("path") or path
        except CloudinaryError as e:
            logging.error(f"Failed to create folder '{path}': {e}")
            raise _translate_error(e, f"Folder creation failed for '{path}'") from e

    def delete_folder(self, path: str):
        try:
            logging.info(f"Deleting folder '{path}'...")
            cloudinary.api.delete_folder(path)
        except CloudinaryError as e:
            error = _translate_error(e, f"Folder deletion failed for '{path}'")
            if not isinstance(error, NotFoundError):
                logging.error(f"Failed to delete folder '{path}': {e}")
            raise error from e

    def rename_asset(self, from_id: str, to_id: str, resource_kind: str) -> RenamedAsset:
        try:
            logging.info(f"Renaming {from_id} to {to_id}...")
            result = cloudinary.uploader.rename(from_id, to_id, resource_type=resource_kind)
        except CloudinaryError as e:
            logging.error(f"Failed to rename '{from_id}' to '{to_id}': {e}")
            raise _translate_error(e, f"Rename failed for '{from_id}'") from e
        return RenamedAsset(
            public_id=result.get("public_id", to_id), url=result.get("secure_url")
        )

    def delete_assets_batch(self, public_ids: Sequence[str], resource_kind: str) -> BatchDeleteResult:
        try:
            logging.info(f"Bulk deleting {len(public_ids)} {resource_kind} assets...")
            result = cloudinary.api.delete_resources(
                list(public_ids), resource_type=resource_kind, type="upload"
            )
        except CloudinaryError as e:
            logging.error(f"Bulk delete failed for batch starting '{public_ids[0]}': {e}")
            raise _translate_error(e, "Bulk delete failed") from e
        return BatchDeleteResult(
            deleted=dict(result.get("deleted", {})), partial=bool(result.get("partial"))
        )

    def delete_asset(self, public_id: str, resource_kind: str) -> bool:
        try:
            logging.info(f"Deleting {public_id}...")
            result = cloudinary.uploader.destroy(public_id, resource_type=resource_kind)
        except CloudinaryError as e:
            logging.error(f"Failed to delete asset '{public_id}': {e}")
            raise _translate_error(e, f"Delete failed for '{public_id}'") from e

        outcome = result.get("result")
        if outcome == "ok":
            return True
        if outcome == "not found":
            return False
        raise RemoteUnavailableError(f"Unexpected delete result for '{public_id}': {outcome}")

    def count_assets(self, folder_path: str) -> int:
        try:
            result = Search().expression(f'folder:"{folder_path}"').max_results(1).execute()
        except CloudinaryError as e:
            logging.error(f"Failed to count assets in '{folder_path}': {e}")
            raise _translate_error(e, f"Count failed for '{folder_path}'") from e
        return int(result.get("total_count") or 0)

    def search_all(self, expression: str, max_results: int) -> List[Asset]:
        try:
            logging.info(f"Searching Cloudinary: {expression}")
            result = (
                Search()
                .expression(expression)
                .sort_by("created_at", "desc")
                .max_results(max_results)
                .execute()
            )
        except CloudinaryError as e:
            logging.error(f"Search '{expression}' failed: {e}")
            raise _translate_error(e, f"Search failed for '{expression}'") from e
        return [Asset.from_resource(r) for r in result.get("resources", [])]

    def upload(self, file: str, folder: str) -> Asset:
        try:
            logging.info(f"Uploading to folder '{folder}'...")
            result = cloudinary.uploader.upload(
                file, folder=folder, resource_type="auto", use_filename=True
            )
        except CloudinaryError as e:
            logging.error(f"Failed to upload file to '{folder}': {e}")
            raise _translate_error(e, f"Upload failed for '{folder}'") from e
        return Asset.from_resource(result)
