"""Vault path helpers for links written from one document to another."""

import posixpath


def _normalize(path: str) -> str:
    return (path or "").strip().replace("\\", "/")


def relative_path_target(source_path: str, target_path: str) -> str:
    """
    Express `target_path` relative to the directory of `source_path`.

    Both paths are vault-relative. An empty source path leaves the target
    unchanged.
    """
    target_path = _normalize(target_path)
    if not target_path:
        return ""
    source_path = _normalize(source_path)
    if not source_path:
        return target_path

    source_dir = posixpath.dirname(source_path) or "."
    rel = posixpath.relpath(target_path, source_dir)
    if not rel or rel == ".":
        return target_path
    return rel



def shortest_path_target(source_path: str, target_path: str) -> str:
    """Pick whichever of the relative or full vault path is shorter."""
    full = _normalize(target_path)
    if not full:
        return ""
    rel = relative_path_target(source_path, full)
    if rel and len(rel) < len(full):
        return rel
    return full


def link_basename(path: str) -> str:
    """File name of a vault path, for shortest-form wiki links."""
    return posixpath.basename(_normalize(path)).strip()
