# renaming.py
import logging
from typing import List

from .config import get_settings
from .exceptions import NotFoundError, PermanentError, TransientError
from .paths import join, rebase_aliased, with_root_alias
from .report import OperationReport
from .storage.base import AssetClient
from .storage.dto import RESOURCE_KINDS, Asset, FolderEntry


class RenameOrchestrator:
    """
    Moves a folder subtree to a new path.

    The asset service has no folder move, so every asset is renamed one by
    one and the folder structure is recreated at the destination. Folders
    are processed depth-first from an explicit stack of (source, target)
    tasks; a source folder is cleaned up only after all of its children.
    """

    def __init__(self, client: AssetClient, settings=None):
        settings = settings or get_settings()
        self.client = client
        self.root_alias = settings.ROOT_ALIAS

    def rename_subtree(self, from_path: str, to_path: str) -> OperationReport:
        """
        Migrates every asset below from_path to the same relative place below to_path.

        Individual rename failures are logged and recorded in the returned report,
        they never stop the walk. Errors from the primary search propagate.
        """
        report = OperationReport(operation="rename", path=from_path, target_path=to_path)
        # (source, target, children_done)
        stack = [(from_path, to_path, False)]
        while stack:
            source, target, children_done = stack.pop()
            if children_done:
                self._cleanup(source, report)
                continue

            logging.info(f"Rename recursive: {source} -> {target}")
            report.folders_visited += 1
            files_found = self._migrate_assets(source, target, report)

            subfolders = self._list_children(source, report)
            stack.append((source, target, True))
            for child in reversed(subfolders):
                stack.append((child.path, join(target, child.name), False))

            if files_found == 0 and not subfolders:
                # A placeholder-only folder: nothing moved, so the destination must be created.
                logging.info(f"Empty folder detected (no files/subs). Creating target placeholder: {target}")
                self._create_placeholder(target, report)

        logging.info(
            f"Renamed folder tree {from_path} -> {to_path}: {report.migrated_count} assets migrated, "
            f"{len(report.failed)} failures."
        )
        return report

    def _search_all_pages(self, folder_path: str) -> List[Asset]:
        assets = []
        cursor = None
        while True:
            page = self.client.search_by_folder(folder_path, cursor)
            assets.extend(page.resources)
            cursor = page.next_cursor
            if not cursor:
                return assets

    def _list_by_prefix(self, prefix: str, kind: str) -> List[Asset]:
        assets = []
        cursor = None
        while True:
            page = self.client.list_resources_by_prefix(prefix, kind, cursor)
            assets.extend(page.resources)
            cursor = page.next_cursor
            if not cursor:
                return assets

    def _migrate_assets(self, source: str, target: str, report: OperationReport) -> int:
        variants = with_root_alias(source, self.root_alias)

        # Enumerate everything before renaming so moves cannot shift the search pages.
        found = []
        for variant in variants:
            found.extend(self._search_all_pages(variant))
        for asset in found:
            self._rename(asset, source, target, report)
        if found:
            return len(found)

        # The search index may not reflect very recent uploads yet.
        logging.info(f"Search found 0 files. Checking prefix listing fallback for {source}...")
        for variant in variants:
            for kind in RESOURCE_KINDS:
                prefix = variant + "/"
                try:
                    assets = self._list_by_prefix(prefix, kind)
                except (PermanentError, TransientError) as e:
                    logging.warning(f"Prefix listing fallback warning for {prefix} ({kind}): {e}")
                    report.record("list_resources", f"{prefix} ({kind})", "failed", str(e))
                    continue
                if assets:
                    logging.info(f"Fallback: found {len(assets)} {kind} assets under {prefix}")
                    found.extend(assets)
                    for asset in assets:
                        self._rename(asset, source, target, report)
        return len(found)

    def _rename(self, asset: Asset, source: str, target: str, report: OperationReport):
        new_id = rebase_aliased(asset.public_id, source, target, self.root_alias)
        if new_id is None:
            logging.warning(
                f"File {asset.public_id} found in search but does not match expected folder prefix {source}/"
            )
            report.record("rename_asset", asset.public_id, "skipped", f"not inside '{source}'")
            return
        if new_id == asset.public_id:
            return

        try:
            renamed = self.client.rename_asset(asset.public_id, new_id, asset.resource_kind)
        except NotFoundError:
            # Stale search hit, or already moved by the prefix fallback.
            logging.info(f"Asset {asset.public_id} is already gone, skipping rename")
            report.record("rename_asset", asset.public_id, "skipped", "already absent")
            return
        except (PermanentError, TransientError) as e:
            logging.error(f"Failed to rename asset {asset.public_id}: {e}")
            report.record("rename_asset", asset.public_id, "failed", str(e))
            return
        report.record("rename_asset", asset.public_id, detail=renamed.public_id)

    def _list_children(self, source: str, report: OperationReport) -> List[FolderEntry]:
        try:
            return self.client.list_subfolders(source)
        except NotFoundError:
            return []
        except (PermanentError, TransientError) as e:
            logging.warning(f"Subfolder fetch warning for {source}: {e}")
            report.record("list_subfolders", source, "failed", str(e))
            return []

    def _create_placeholder(self, target: str, report: OperationReport):
        try:
            self.client.create_folder(target)
        except (PermanentError, TransientError) as e:
            logging.warning(f"Failed to create target folder {target}: {e}")
            report.record("create_folder", target, "failed", str(e))
            return
        report.record("create_folder", target)

    def _cleanup(self, source: str, report: OperationReport):
        try:
            self.client.delete_folder(source)
        except NotFoundError:
            # The folder disappeared on its own once its last asset moved.
            report.record("delete_folder", source, "skipped", "already absent")
            return
        except (PermanentError, TransientError) as e:
            logging.warning(f"Cleanup delete failed for {source}: {e}")
            report.record("delete_folder", source, "failed", str(e))
            return
        report.record("delete_folder", source)
