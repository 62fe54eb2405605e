from typing import Any, Dict, Iterable, List

from fastapi import HTTPException


INVALID_INPUT = "Invalid input data"


def validation_details(errors: Iterable[Dict[str, Any]]) -> List[Dict[str, str]]:
    """pydantic error dicts -> [{"path": "a.b", "message": "..."}]"""
    out: List[Dict[str, str]] = []
    for err in errors:
        # request validation prefixes the location with "body"/"query"
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query")]
        msg = str(err.get("msg", "Invalid value"))
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        out.append({"path": ".".join(loc), "message": msg})
    return out


def invalid_input(errors: Iterable[Dict[str, Any]]) -> HTTPException:
    return HTTPException(status_code=400, detail={"error": INVALID_INPUT, "details": validation_details(errors)})
