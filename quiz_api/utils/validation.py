"""Validation utilities."""
from fastapi import HTTPException


def validate_id(name: str, value: str) -> str:
    """Validate ID string (non-empty, no path or whitespace characters)."""
    if not isinstance(value, str):
        raise HTTPException(status_code=400, detail=f"{name} is required")
    cleaned = value.strip()
    if not cleaned:
        raise HTTPException(status_code=400, detail=f"{name} is required")
    if len(cleaned) > 64 or any(ch in cleaned for ch in "/\\ \t\n"):
        raise HTTPException(status_code=400, detail=f"Invalid {name}")
    return cleaned
