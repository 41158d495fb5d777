"""Decision router — pick one venue from a candidate list."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from pickforme.dependencies import get_decision_engine
from pickforme.schemas.decision import DecisionRequest, DecisionResponse
from pickforme.services.decision_engine import DecisionEngine, EmptyCandidateSet, NoCandidatesAvailable

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/decide", response_model=DecisionResponse)
async def decide(
    req: DecisionRequest,
    engine: DecisionEngine = Depends(get_decision_engine),
):
    """Rank the candidates and return the pick with alternatives and reasoning."""
    try:
        if req.force_selection:
            return engine.select_from_available(req.venues, req.preferences, req.location)
        return engine.select_best(req.venues, req.preferences, req.location, req.context)
    except EmptyCandidateSet as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NoCandidatesAvailable as e:
        raise HTTPException(status_code=404, detail=str(e))
