import re
import time
from datetime import datetime, timezone
from typing import Mapping, Optional
from urllib.parse import urlparse


SLUG_BASE_MAX = 50

_SLUG_STRIP_RE = re.compile(r"[^a-z0-9\s-]")
_SLUG_SPACE_RE = re.compile(r"\s+")
_SLUG_DASH_RE = re.compile(r"-{2,}")


def now_ms() -> int:
    return int(time.time() * 1000)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    return utc_now().isoformat()


def slug_base(name: str) -> str:
    s = (name or "").lower()
    s = _SLUG_STRIP_RE.sub("", s)
    s = _SLUG_SPACE_RE.sub("-", s.strip())
    s = _SLUG_DASH_RE.sub("-", s).strip("-")
    s = s[:SLUG_BASE_MAX].rstrip("-")
    return s or "profile"


def generate_slug(name: str, timestamp_ms: Optional[int] = None) -> str:
    """
    URL slug for a profile name with a millisecond suffix, e.g.
    "Jane Doe" -> "jane-doe-1717171717171".
    Same name and timestamp always give the same slug.
    """
    ts = now_ms() if timestamp_ms is None else int(timestamp_ms)
    return f"{slug_base(name)}-{ts}"


def url_path(url: str) -> str:
    try:
        return urlparse(url).path.lower()
    except ValueError:
        return ""


def is_http_url(url: str) -> bool:
    try:
        p = urlparse(url or "")
    except ValueError:
        return False
    return p.scheme in {"http", "https"} and bool(p.netloc)


def strip_code_fences(text: str) -> str:
    s = (text or "").strip()
    if s.startswith("```"):
        # remove the first fence and possible language token
        s = "\n".join(s.splitlines()[1:])
        if s.rstrip().endswith("```"):
            s = "\n".join(s.rstrip().splitlines()[:-1])
    return s.strip()


def client_identifier(headers: Mapping[str, str], fallback: Optional[str] = None) -> str:
    forwarded = headers.get("x-forwarded-for") or ""
    first = forwarded.split(",")[0].strip()
    return first or fallback or "anonymous"
