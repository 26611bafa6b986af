from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from app.agents.inspection.graph import build_pairs, run_inspection
from app.agents.llm_provider import LLMProvider
from app.config import Settings
from app.dependencies import get_llm, get_settings_dep, get_store
from app.schemas import CompareRequest, InspectionResult
from app.services.asset_store import AssetStore
from app.services.baselines import UnknownPropertyError, resolve_baselines

router = APIRouter(tags=["compare"])


@router.post("/compare", response_model=InspectionResult)
async def compare(
    body: CompareRequest,
    store: AssetStore = Depends(get_store),
    llm: LLMProvider = Depends(get_llm),
    settings: Settings = Depends(get_settings_dep),
):
    """Compare four uploaded checkout photos against the property's baselines."""
    filenames = body.filenames()
    missing = [room.value for room, name in filenames.items() if not name]
    if missing:
        raise HTTPException(400, f"All four room images are required; missing: {', '.join(missing)}")

    try:
        baselines = resolve_baselines(body.property_id, settings)
    except UnknownPropertyError as e:
        raise HTTPException(404, str(e))

    pairs = build_pairs(baselines, filenames)
    return await run_inspection(pairs, llm, store, property_id=body.property_id, models=settings.models)
