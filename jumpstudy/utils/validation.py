"""
Request validation helpers

Turns Pydantic/FastAPI validation errors into the field-level error list the
dashboards render next to form inputs.
"""

from typing import Any, Dict, List, Sequence


def _field_path(loc: Sequence[Any]) -> str:
    # Drop the request part ("body", "query") FastAPI prefixes
    parts = [str(p) for p in loc if p not in ("body", "query", "path")]
    return ".".join(parts) if parts else "root"


def format_validation_errors(errors: Sequence[Dict[str, Any]]) -> List[Dict[str, str]]:
    """Convert ``exc.errors()`` into ``[{"field", "message"}]``."""
    formatted = []
    for err in errors:
        message = str(err.get("msg", "Invalid value"))
        # pydantic prefixes custom ValueError messages
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        formatted.append({
            "field": _field_path(err.get("loc", ())),
            "message": message,
        })
    return formatted
