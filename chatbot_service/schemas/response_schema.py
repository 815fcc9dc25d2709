"""Unified API response helpers."""

from typing import Any

from pydantic import BaseModel


def success_response(**fields: Any) -> dict:
    """Build the flat ``{"success": true, ...}`` envelope returned by endpoints."""
    body: dict[str, Any] = {"success": True}
    for key, value in fields.items():
        if isinstance(value, BaseModel):
            value = value.model_dump(mode="json")
        elif isinstance(value, list):
            value = [
                item.model_dump(mode="json") if isinstance(item, BaseModel) else item
                for item in value
            ]
        body[key] = value
    return body
