# report.py
from pydantic import BaseModel, Field
from typing import List, Literal, Optional

Status = Literal["ok", "skipped", "failed"]


class ItemOutcome(BaseModel):
    """The result of one leaf operation during a subtree walk."""

    action: str  # rename_asset, delete_asset, delete_folder, create_folder, list_subfolders, ...
    target: str
    status: Status = "ok"
    detail: Optional[str] = None


class OperationReport(BaseModel):
    """
    Accumulates per-item outcomes of a recursive delete or rename so that
    partial failures reach the caller instead of only the log.
    """

    operation: Literal["delete", "rename"]
    path: str
    target_path: Optional[str] = None
    outcomes: List[ItemOutcome] = Field(default_factory=list)
    folders_visited: int = 0

    def record(self, action: str, target: str, status: Status = "ok", detail: Optional[str] = None):
        self.outcomes.append(ItemOutcome(action=action, target=target, status=status, detail=detail))

    def _count(self, action: str, status: Status = "ok") -> int:
        return sum(1 for o in self.outcomes if o.action == action and o.status == status)

    @property
    def migrated_count(self) -> int:
        return self._count("rename_asset")

    @property
    def deleted_count(self) -> int:
        return self._count("delete_asset")

    @property
    def failed(self) -> List[ItemOutcome]:
        return [o for o in self.outcomes if o.status == "failed"]

    @property
    def partial_failure(self) -> bool:
        return bool(self.failed)

    def to_response(self) -> dict:
        # A report only exists once the walk ran to completion.
        response = {"success": True, "partialFailure": self.partial_failure}
        if self.operation == "rename":
            response["migratedCount"] = self.migrated_count
        else:
            response["deletedCount"] = self.deleted_count
        response["failures"] = [
            {"action": o.action, "target": o.target, "detail": o.detail} for o in self.failed
        ]
        return response
