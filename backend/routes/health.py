# backend/routes/health.py
from fastapi import APIRouter

router = APIRouter(tags=["Health"])

# Liveness probe, no database access
@router.get("/health")
def health():
    return {"ok": True}
