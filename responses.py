from typing import Any, Optional


def envelope(data: Any = None, message: Optional[str] = None, success: bool = True,
             errors: Optional[dict[str, list[str]]] = None) -> dict:
    """``{data, success, message?, errors?}``, the shape of every API response."""
    body = {"data": data, "success": success}
    if message is not None:
        body["message"] = message
    if errors:
        body["errors"] = errors
    return body


def serialize_user(doc: dict) -> dict:
    if not doc:
        return {}
    return {k: v for k, v in doc.items() if k != "password_hash"}
