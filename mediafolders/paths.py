# paths.py
"""
Addressing rules for derived folders.

A folder path is a sequence of non-empty segments joined by "/". An asset
belongs to a folder only when its public id starts with the folder path
followed by the separator, so "events" never claims "events_2024/poster".
"""
from typing import Optional, Tuple

from .config import get_settings
from .exceptions import InvalidArgumentError

SEPARATOR = "/"


def normalize(path: str) -> str:
    """Strips surrounding whitespace and slashes and validates every segment."""
    if path is None:
        raise InvalidArgumentError("Folder path is required.")
    cleaned = str(path).strip().strip(SEPARATOR)
    if not cleaned:
        raise InvalidArgumentError("Folder path is required.")
    segments = cleaned.split(SEPARATOR)
    if any(not segment.strip() for segment in segments):
        raise InvalidArgumentError(f"Folder path '{path}' contains an empty segment.")
    return cleaned


def join(*segments: str) -> str:
    return SEPARATOR.join(s.strip(SEPARATOR) for s in segments if s and s.strip(SEPARATOR))


def basename(path: str) -> str:
    return path.rstrip(SEPARATOR).split(SEPARATOR)[-1]


def is_strict_child(candidate_id: str, folder_path: str) -> bool:
    """True if candidate_id lives somewhere below folder_path (exact segment match)."""
    return candidate_id.startswith(folder_path + SEPARATOR)


def rebase(candidate_id: str, from_path: str, to_path: str) -> str:
    """
    Moves candidate_id from below from_path to the same relative place below to_path.

    :raises InvalidArgumentError: if candidate_id is not a strict child of from_path.
    """
    if not is_strict_child(candidate_id, from_path):
        raise InvalidArgumentError(
            f"'{candidate_id}' is not inside folder '{from_path}'."
        )
    return to_path + SEPARATOR + candidate_id[len(from_path) + 1 :]


def with_root_alias(path: str, alias: Optional[str] = None) -> Tuple[str, ...]:
    """
    Returns the path variants an asset of this folder may be stored under:
    the path itself and, unless it already is, the path under the root alias.
    """
    if alias is None:
        alias = get_settings().ROOT_ALIAS
    variants = [path]
    if alias and path != alias and not is_strict_child(path, alias):
        variants.append(alias + SEPARATOR + path)
    return tuple(variants)


def rebase_aliased(
    candidate_id: str, from_path: str, to_path: str, alias: Optional[str] = None
) -> Optional[str]:
    """
    Rebases candidate_id against whichever alias variant of from_path it belongs to.
    An asset stored under the aliased root stays under it at the destination.
    Returns None when no variant of from_path contains the asset.
    """
    if alias is None:
        alias = get_settings().ROOT_ALIAS
    for variant in with_root_alias(from_path, alias):
        if not is_strict_child(candidate_id, variant):
            continue
        target_base = to_path
        if variant != from_path and not is_strict_child(to_path, alias):
            target_base = alias + SEPARATOR + to_path
        return rebase(candidate_id, variant, target_base)
    return None
