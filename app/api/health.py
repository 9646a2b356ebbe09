"""Liveness probe."""

from fastapi import APIRouter

router = APIRouter(tags=["health"])


@router.get("/health")
def health() -> dict:
    """Report that the service process is up; does not touch the database."""
    return {"status": "ok"}
