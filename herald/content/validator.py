from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional

from pydantic import ValidationError

from .schemas import ContentValidation, ProfileContent, SectionConfig, SectionsConfig, is_image_url, is_video_url


# Section name in the blob -> attribute holding its items
AUTO_HIDE_SECTIONS: Dict[str, str] = {
    "achievements": "achievements",
    "timeline": "timeline",
    "gallery": "gallery",
    "milestones": "milestones",
    "leadershipHighlights": "leadership_highlights",
    "tributes": "tributes",
}

_FRIENDLY = {
    ("name", "string_too_short"): "Name must be at least 2 characters",
    ("name", "missing"): "Name is required",
    ("bio.original", "string_too_short"): "Bio must be at least 50 characters",
    ("bio.original", "string_too_long"): "Bio must be at most 2000 characters",
    ("bio", "missing"): "Bio is required",
}


def _error_path(loc: Iterable[Any]) -> str:
    return ".".join(str(p) for p in loc) or "__root__"


def format_errors(exc: ValidationError) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    for err in exc.errors():
        path = _error_path(err.get("loc", ()))
        msg = _FRIENDLY.get((path, err.get("type")))
        if msg is None:
            msg = str(err.get("msg", "Invalid value"))
            if msg.startswith("Value error, "):
                msg = msg[len("Value error, "):]
        # first error per field wins
        errors.setdefault(path, msg)
    return errors


def apply_auto_hide(content: ProfileContent) -> ProfileContent:
    """Set visible=False on configured sections that are empty and auto-hide."""
    sections = content.sections or SectionsConfig()
    for attr in AUTO_HIDE_SECTIONS.values():
        cfg: Optional[SectionConfig] = getattr(sections, attr)
        if cfg is None or not cfg.auto_hide_if_empty:
            continue
        items = getattr(content, attr)
        if not items:
            cfg.visible = False
    content.sections = sections
    return content


def validate_profile_content(data: Any) -> ContentValidation:
    if not isinstance(data, Mapping):
        return ContentValidation(ok=False, errors={"__root__": "Content must be an object"})
    try:
        content = ProfileContent.model_validate(dict(data))
    except ValidationError as e:
        return ContentValidation(ok=False, errors=format_errors(e))
    return ContentValidation(ok=True, content=apply_auto_hide(content))


def should_show_section(name: str, items: Optional[List[Any]], sections: Optional[Mapping[str, Any]] = None) -> bool:
    cfg = (sections or {}).get(name) or {}
    if cfg.get("visible") is False:
        return False
    if cfg.get("auto_hide_if_empty") and not items:
        return False
    return bool(items)


def validate_media_url(url: str, kind: str) -> bool:
    if kind == "image":
        return is_image_url(url)
    if kind == "video":
        return is_video_url(url)
    raise ValueError(f"Unknown media kind: {kind}")
