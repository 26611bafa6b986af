"""Inspection Agent: LangGraph StateGraph implementation.

Graph: compare_rooms → summarize

compare_rooms fans out one comparison per room and joins them with
``asyncio.gather``. Every per-room task converts its own failure into that
room's fallback assessment before the join, so the batch always completes
and the summary always sees four assessments.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from langchain_core.runnables import RunnableConfig
from langgraph.graph import StateGraph, END

from app.agents.inspection.prompts import (
    DAMAGE_ASSESSMENT_PROMPT,
    DAMAGE_REPORT_SCHEMA,
    ROOM_INVENTORIES,
    SUMMARY_PROMPT,
    SUMMARY_SCHEMA,
)
from app.agents.inspection.tools import (
    analysis_failed_assessment,
    local_summary,
    parse_room_assessment,
    parse_summary,
    serialize_assessments,
    upload_failed_assessment,
)
from app.agents.llm_provider import LLMProvider
from app.agents.state import InspectionState, RoomPair
from app.config import ModelConfig, get_settings
from app.schemas.asset import AssetState, RemoteAssetReference
from app.schemas.inspection import (
    ROOM_SLOTS,
    FinalSummary,
    InspectionResult,
    RoomAssessment,
    RoomSlot,
)
from app.services.asset_store import AssetStore

logger = logging.getLogger(__name__)

RoomCallback = Callable[[RoomAssessment], Awaitable[None]]


# ── Dispatcher ────────────────────────────────────────────

async def compare_room(
    llm: LLMProvider,
    baseline: RemoteAssetReference,
    current: RemoteAssetReference,
    room: RoomSlot,
    temperature: float = 0.1,
) -> RoomAssessment:
    """One AI comparison for one room. Never raises for model/network errors."""
    logger.info(f"Analyzing {room.value}...")
    prompt = DAMAGE_ASSESSMENT_PROMPT.format(room=room.value, inventory=ROOM_INVENTORIES[room])
    try:
        raw = await llm.compare_images([baseline, current], prompt, DAMAGE_REPORT_SCHEMA, temperature)
    except Exception as e:
        logger.error(f"Error analyzing {room.value}: {e}")
        return analysis_failed_assessment(room, e)

    assessment = parse_room_assessment(raw, room)
    logger.info(f"{room.value} assessment completed")
    return assessment


async def _resolve(store: AssetStore, name: str) -> RemoteAssetReference:
    ref = await store.get(name)
    if ref.state != AssetState.READY:
        raise RuntimeError(f"Image {name} is {ref.state.value}, not ready")
    return ref


async def _assess_pair(pair: RoomPair, llm: LLMProvider, store: AssetStore, temperature: float) -> RoomAssessment:
    room = RoomSlot(pair["room"])
    if pair["upload_error"] or not pair["current_name"]:
        return upload_failed_assessment(room, pair["upload_error"] or "No image uploaded")
    if not pair["baseline_name"]:
        return analysis_failed_assessment(room, f"No baseline image configured for the {room.value}")

    try:
        baseline = await _resolve(store, pair["baseline_name"])
        current = await _resolve(store, pair["current_name"])
    except Exception as e:
        logger.error(f"Could not retrieve images for {room.value}: {e}")
        return analysis_failed_assessment(room, f"Could not retrieve images: {e}")

    return await compare_room(llm, baseline, current, room, temperature)


async def compare_rooms_node(state: InspectionState, config: RunnableConfig) -> dict:
    """Compare all rooms in parallel; each room resolves to an assessment."""
    cfg = config["configurable"]
    llm: LLMProvider = cfg["llm"]
    store: AssetStore = cfg["store"]
    temperature: float = cfg.get("inspection_temperature", 0.1)
    on_room_assessed: RoomCallback | None = cfg.get("on_room_assessed")

    async def _run(pair: RoomPair) -> RoomAssessment:
        room = RoomSlot(pair["room"])
        try:
            assessment = await _assess_pair(pair, llm, store, temperature)
        except Exception as e:
            logger.error(f"Unexpected failure assessing {room.value}: {e}")
            assessment = analysis_failed_assessment(room, e)
        if on_room_assessed is not None:
            try:
                await on_room_assessed(assessment)
            except Exception as e:
                logger.warning(f"Progress callback failed for {room.value}: {e}")
        return assessment

    logger.info("Comparing room images for damage assessment...")
    results = await asyncio.gather(*(_run(pair) for pair in state["pairs"]))

    by_room = {a.room: a for a in results}
    return {"assessments": [by_room[room] for room in ROOM_SLOTS if room in by_room]}


# ── Summarizer ────────────────────────────────────────────

async def summarize(
    llm: LLMProvider,
    assessments: list[RoomAssessment],
    temperature: float = 0.2,
) -> FinalSummary:
    """Second AI call reducing all rooms to one verdict, with a local fallback."""
    prompt = SUMMARY_PROMPT.format(assessments=serialize_assessments(assessments))
    try:
        raw = await llm.generate_json(prompt, SUMMARY_SCHEMA, temperature)
        return parse_summary(raw, assessments)
    except Exception as e:
        logger.error(f"Summary generation failed, using local summary: {e}")
        return local_summary(assessments)


async def summarize_node(state: InspectionState, config: RunnableConfig) -> dict:
    cfg = config["configurable"]
    logger.info("Generating final summary...")
    summary = await summarize(cfg["llm"], state["assessments"], cfg.get("summary_temperature", 0.2))
    return {"summary": summary}


# ── Build graph ───────────────────────────────────────────

def build_inspection_graph():
    graph = StateGraph(InspectionState)

    graph.add_node("compare_rooms", compare_rooms_node)
    graph.add_node("summarize", summarize_node)

    graph.set_entry_point("compare_rooms")
    graph.add_edge("compare_rooms", "summarize")
    graph.add_edge("summarize", END)

    return graph.compile()


# ── Public API ────────────────────────────────────────────

def build_pairs(
    baselines: dict[RoomSlot, str],
    currents: dict[RoomSlot, str],
    upload_errors: dict[RoomSlot, str] | None = None,
) -> list[RoomPair]:
    upload_errors = upload_errors or {}
    return [
        RoomPair(
            room=room.value,
            baseline_name=baselines.get(room, ""),
            current_name=currents.get(room, ""),
            upload_error=upload_errors.get(room, ""),
        )
        for room in ROOM_SLOTS
    ]


async def run_inspection(
    pairs: list[RoomPair],
    llm: LLMProvider,
    store: AssetStore,
    property_id: str = "default",
    on_room_assessed: RoomCallback | None = None,
    models: ModelConfig | None = None,
) -> InspectionResult:
    """Run the inspection agent over exactly one pair per room.

    Sampling temperatures come from ``models`` (default: the configured ones).
    """
    rooms = sorted(pair["room"] for pair in pairs)
    if rooms != sorted(room.value for room in ROOM_SLOTS):
        raise ValueError(f"Expected one pair per room, got {rooms}")

    models = models or get_settings().models
    initial_state: InspectionState = {
        "property_id": property_id,
        "pairs": pairs,
        "assessments": [],
        "summary": None,
    }
    graph = build_inspection_graph()
    result = await graph.ainvoke(
        initial_state,
        config={"configurable": {
            "llm": llm,
            "store": store,
            "inspection_temperature": models.inspection_temperature,
            "summary_temperature": models.summary_temperature,
            "on_room_assessed": on_room_assessed,
        }},
    )
    logger.info("Damage assessment completed successfully")
    return InspectionResult(summary=result["summary"], room_assessments=result["assessments"])
