from __future__ import annotations

from typing import Any, Dict, List

from herald.shared.utils import utc_now_iso


def _renumber(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [{**item, "order": i} for i, item in enumerate(items)]


def sort_media(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return sorted(items or [], key=lambda m: int(m.get("order") or 0))


def add_media(items: List[Dict[str, Any]], url: str, *, caption: str = "", type: str = "image") -> List[Dict[str, Any]]:
    out = sort_media(items)
    out.append(stamp_created({"url": url, "caption": caption, "type": type, "featured": False}))
    return _renumber(out)


def remove_media(items: List[Dict[str, Any]], index: int) -> List[Dict[str, Any]]:
    out = sort_media(items)
    if not 0 <= index < len(out):
        raise IndexError(f"media index out of range: {index}")
    out.pop(index)
    return _renumber(out)


def reorder_media(items: List[Dict[str, Any]], from_index: int, to_index: int) -> List[Dict[str, Any]]:
    """
    Move one item and rewrite ``order`` on every sibling.

    Returns a new list; the caller swaps it in as a whole, so readers never
    see a half-renumbered gallery.
    """
    out = sort_media(items)
    n = len(out)
    if not (0 <= from_index < n and 0 <= to_index < n):
        raise IndexError(f"media index out of range: {from_index} -> {to_index}")
    item = out.pop(from_index)
    out.insert(to_index, item)
    return _renumber(out)


def set_featured(items: List[Dict[str, Any]], index: int) -> List[Dict[str, Any]]:
    out = sort_media(items)
    if not 0 <= index < len(out):
        raise IndexError(f"media index out of range: {index}")
    return [{**item, "featured": i == index} for i, item in enumerate(out)]


def stamp_created(entry: Dict[str, Any]) -> Dict[str, Any]:
    now = utc_now_iso()
    return {**entry, "created_at": entry.get("created_at") or now, "updated_at": now}


def stamp_updated(entry: Dict[str, Any]) -> Dict[str, Any]:
    return {**entry, "updated_at": utc_now_iso()}
