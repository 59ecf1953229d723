# deletion.py
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional

from .config import get_settings
from .exceptions import NotFoundError, PermanentError, TransientError
from .paths import with_root_alias
from .report import OperationReport
from .storage.base import AssetClient
from .storage.dto import FolderEntry


class DeleteOrchestrator:
    """
    Empties and removes a folder subtree.

    Folders are walked depth-first with an explicit stack. Each folder's
    assets are deleted first, then its children, then the folder itself,
    one folder at a time to stay under the service's rate limits.
    """

    def __init__(self, client: AssetClient, settings=None):
        settings = settings or get_settings()
        self.client = client
        self.batch_size = settings.BATCH_DELETE_SIZE
        self.concurrency = max(1, min(settings.DELETE_CONCURRENCY, self.batch_size))
        self.root_alias = settings.ROOT_ALIAS

    def delete_subtree(self, folder_path: str) -> OperationReport:
        """
        Deletes every asset under folder_path, every subfolder and the folder itself.
        Calling it again on the same path is a no-op.

        Failures are recorded and the walk goes on, so every reachable asset is
        attempted. The first error that left something behind is raised once the
        whole subtree was processed.

        :raises TransientError: if an asset could not be deleted even one by one.
        :raises PermanentError: if a folder could not be removed for a reason other than not-found.
        """
        report = OperationReport(operation="delete", path=folder_path)
        errors = []
        # (path, children_done)
        stack = [(folder_path, False)]
        while stack:
            path, children_done = stack.pop()
            if children_done:
                errors.extend(self._delete_folder(path, report))
                continue

            logging.info(f"Deleting folder recursive: {path}")
            report.folders_visited += 1
            errors.extend(self._delete_assets(path, report))

            stack.append((path, True))
            children = self._list_children(path, report)
            if children:
                logging.info(f"Found {len(children)} subfolders in {path}. Descending...")
            for child in reversed(children):
                stack.append((child.path, False))

        logging.info(
            f"Deleted folder tree {folder_path}: {report.deleted_count} assets, "
            f"{len(report.failed)} failures."
        )
        if errors:
            raise errors[0]
        return report

    def _collect_ids(self, path: str) -> Dict[str, List[str]]:
        """Pages through every alias variant of path and groups the found ids by resource kind."""
        by_kind: Dict[str, Dict[str, None]] = {}
        for variant in with_root_alias(path, self.root_alias):
            cursor = None
            while True:
                page = self.client.search_by_folder(variant, cursor)
                for asset in page.resources:
                    by_kind.setdefault(asset.resource_kind, {})[asset.public_id] = None
                cursor = page.next_cursor
                if not cursor:
                    break
        return {kind: list(ids) for kind, ids in by_kind.items()}

    def _delete_assets(self, path: str, report: OperationReport) -> List[TransientError]:
        errors = []
        for kind, ids in self._collect_ids(path).items():
            logging.info(f"Found {len(ids)} {kind} assets in {path}. Deleting...")
            for start in range(0, len(ids), self.batch_size):
                error = self._delete_chunk(ids[start : start + self.batch_size], kind, report)
                if error is not None:
                    errors.append(error)
        return errors

    def _delete_chunk(self, ids: List[str], kind: str, report: OperationReport) -> Optional[TransientError]:
        try:
            result = self.client.delete_assets_batch(ids, kind)
        except (PermanentError, TransientError) as e:
            logging.error(f"Bulk delete failed for batch starting {ids[0]}: {e}")
            leftovers = ids
        else:
            leftovers = []
            for public_id in ids:
                status = result.deleted.get(public_id)
                if status == "deleted":
                    report.record("delete_asset", public_id)
                elif status == "not_found":
                    report.record("delete_asset", public_id, "skipped", "already absent")
                else:
                    leftovers.append(public_id)
            if leftovers:
                logging.warning(
                    f"Bulk delete did not confirm {len(leftovers)} of {len(ids)} assets. Retrying one by one..."
                )

        if leftovers:
            return self._delete_individually(leftovers, kind, report)
        return None

    def _delete_individually(self, ids: List[str], kind: str, report: OperationReport) -> Optional[TransientError]:
        """
        Single-item fallback. Every id is attempted and its outcome recorded.

        :return: the first transient error hit, if any.
        """

        def destroy(public_id):
            try:
                return public_id, self.client.delete_asset(public_id, kind), None
            except (PermanentError, TransientError) as e:
                return public_id, False, e

        if self.concurrency > 1 and len(ids) > 1:
            with ThreadPoolExecutor(max_workers=min(self.concurrency, len(ids))) as executor:
                results = list(executor.map(destroy, ids))
        else:
            results = [destroy(public_id) for public_id in ids]

        transient_error = None
        for public_id, existed, error in results:
            if error is None and existed:
                report.record("delete_asset", public_id)
            elif error is None or isinstance(error, NotFoundError):
                report.record("delete_asset", public_id, "skipped", "already absent")
            else:
                logging.error(f"Failed to destroy {public_id}: {error}")
                report.record("delete_asset", public_id, "failed", str(error))
                if transient_error is None and isinstance(error, TransientError):
                    transient_error = error
        return transient_error

    def _list_children(self, path: str, report: OperationReport) -> List[FolderEntry]:
        try:
            return self.client.list_subfolders(path)
        except NotFoundError:
            return []
        except (PermanentError, TransientError) as e:
            # The folder delete will fail if children were left behind.
            logging.warning(f"Error fetching subfolders for {path}: {e}")
            report.record("list_subfolders", path, "failed", str(e))
            return []

    def _delete_folder(self, path: str, report: OperationReport) -> List[Exception]:
        logging.info(f"Deleting empty folder: {path}")
        errors = []
        try:
            self.client.delete_folder(path)
        except NotFoundError:
            report.record("delete_folder", path, "skipped", "already absent")
        except (PermanentError, TransientError) as e:
            logging.error(f"Failed to delete folder {path}: {e}")
            report.record("delete_folder", path, "failed", str(e))
            errors.append(e)
        else:
            report.record("delete_folder", path)

        # The aliased twin of a folder only exists if something was stored under it.
        for variant in with_root_alias(path, self.root_alias)[1:]:
            try:
                self.client.delete_folder(variant)
            except NotFoundError:
                continue
            except (PermanentError, TransientError) as e:
                logging.warning(f"Failed to delete aliased folder {variant}: {e}")
                report.record("delete_folder", variant, "failed", str(e))
                continue
            report.record("delete_folder", variant)
        return errors
