"""
Discovery API (feature router)

- Outcomes, opportunities and solutions (the opportunity solution tree)
- RICE scoring and evidence links on opportunities
- Interviews and the evidence extracted from them
"""

from __future__ import annotations

from fastapi import APIRouter

from .routes.evidences import router as evidences_router
from .routes.interviews import router as interviews_router
from .routes.opportunities import router as opportunities_router
from .routes.outcomes import router as outcomes_router
from .routes.solutions import router as solutions_router

router = APIRouter(prefix="/api", tags=["discovery"])

router.include_router(outcomes_router)
router.include_router(opportunities_router)
router.include_router(solutions_router)
router.include_router(interviews_router)
router.include_router(evidences_router)
