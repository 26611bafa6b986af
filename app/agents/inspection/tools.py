"""Inspection agent tools: response parsing, fallbacks and the severity rubric."""

from __future__ import annotations

import json
import logging

from pydantic import ValidationError

from app.schemas.inspection import (
    DamageItem,
    FinalSummary,
    ItemToCheck,
    OverallStatus,
    RoomAssessment,
    RoomSlot,
    Severity,
)

logger = logging.getLogger(__name__)

MANUAL_REVIEW_ITEM = ItemToCheck(room="System", item="Manual review required")


def _strip_fences(response: str) -> str:
    text = response.strip()
    if "```json" in text:
        text = text.split("```json")[1].split("```")[0]
    elif "```" in text:
        text = text.split("```")[1].split("```")[0]
    return text


def _error_message(error: BaseException | str) -> str:
    if isinstance(error, str):
        return error or "Unknown error"
    return str(error) or type(error).__name__


# ── Per-room fallbacks ────────────────────────────────────

def parse_failed_assessment(room: RoomSlot, raw: str) -> RoomAssessment:
    return RoomAssessment(
        room=room,
        damage_detected=False,
        items=[],
        notes=f"Error parsing response: {raw[:100]}",
        degraded=True,
    )


def analysis_failed_assessment(room: RoomSlot, error: BaseException | str) -> RoomAssessment:
    return RoomAssessment(
        room=room,
        damage_detected=False,
        items=[],
        notes=f"Error during analysis: {_error_message(error)}",
        degraded=True,
    )


def upload_failed_assessment(room: RoomSlot, error: BaseException | str) -> RoomAssessment:
    return RoomAssessment(
        room=room,
        damage_detected=False,
        items=[],
        notes=f"Error during upload: {_error_message(error)}",
        degraded=True,
    )


# ── Room assessment parsing ───────────────────────────────

def _normalize_item(entry):
    if not isinstance(entry, dict):
        return entry
    out = dict(entry)
    for key in ("condition", "severity"):
        if isinstance(out.get(key), str):
            out[key] = out[key].strip().lower()
    return out


def parse_room_assessment(raw: str, room: RoomSlot) -> RoomAssessment:
    """Turn the model's raw text into a RoomAssessment.

    Unparseable text yields the parse fallback. Items that do not match the
    damage schema are dropped and the assessment is marked degraded.
    A response without a boolean ``damageDetected`` and an ``items`` list is
    treated as unparseable. ``damageDetected`` is always recomputed from the
    surviving items.
    """
    try:
        data = json.loads(_strip_fences(raw))
    except (json.JSONDecodeError, IndexError):
        logger.error(f"Failed to parse JSON for {room.value}, using fallback")
        return parse_failed_assessment(room, raw)
    if not isinstance(data, dict):
        logger.error(f"Response for {room.value} is not a JSON object, using fallback")
        return parse_failed_assessment(room, raw)

    raw_items = data.get("items")
    claimed = data.get("damageDetected")
    if not isinstance(raw_items, list) or not isinstance(claimed, bool):
        logger.error(f"Response for {room.value} does not match the damage report schema, using fallback")
        return parse_failed_assessment(room, raw)

    items: list[DamageItem] = []
    dropped = 0
    for entry in raw_items:
        try:
            items.append(DamageItem.model_validate(_normalize_item(entry)))
        except ValidationError:
            dropped += 1

    notes = data.get("notes")
    if notes is not None and not isinstance(notes, str):
        notes = str(notes)
    if dropped:
        logger.warning(f"Dropped {dropped} malformed item(s) for {room.value}")
        remark = f"{dropped} item(s) did not match the damage schema and were dropped"
        notes = f"{notes} ({remark})" if notes else remark
    if claimed and not items:
        logger.warning(f"{room.value} reported damage without any valid items")
        remark = "Damage was reported but no valid items were listed"
        notes = f"{notes} ({remark})" if notes else remark

    return RoomAssessment(
        room=room,
        damage_detected=bool(items),
        items=items,
        notes=notes,
        degraded=dropped > 0 or (claimed and not items),
    )


# ── Cross-room rubric ─────────────────────────────────────

def count_issues(assessments: list[RoomAssessment]) -> int:
    return sum(len(a.items) for a in assessments)


def classify_status(assessments: list[RoomAssessment]) -> OverallStatus:
    """all_clear: no items; minor_issues: only low items; major_concerns: any medium/high."""
    items = [item for a in assessments for item in a.items]
    if not items:
        return OverallStatus.ALL_CLEAR
    if all(item.severity == Severity.LOW for item in items):
        return OverallStatus.MINOR_ISSUES
    return OverallStatus.MAJOR_CONCERNS


def items_to_check(assessments: list[RoomAssessment]) -> list[ItemToCheck]:
    return [
        ItemToCheck(room=a.room.value, item=f"{item.item_name}: {item.description}")
        for a in assessments
        for item in a.items
    ]


def local_summary(assessments: list[RoomAssessment]) -> FinalSummary:
    """Deterministic summary used when the summary call fails."""
    return FinalSummary(
        overall_status=classify_status(assessments),
        summary="Unable to generate summary - please review room assessments for details",
        items_to_check=[MANUAL_REVIEW_ITEM, *items_to_check(assessments)],
        total_issues_found=count_issues(assessments),
        degraded=True,
    )


def serialize_assessments(assessments: list[RoomAssessment]) -> str:
    return json.dumps([a.model_dump(mode="json", by_alias=True) for a in assessments], indent=2)


def parse_summary(raw: str, assessments: list[RoomAssessment]) -> FinalSummary:
    """Parse the summary call's response and hold it to the rubric.

    Raises ValueError when the text is not a usable summary. Status and total
    are replaced by locally computed values when the model disagrees.
    """
    try:
        data = json.loads(_strip_fences(raw))
    except (json.JSONDecodeError, IndexError) as e:
        raise ValueError(f"Summary is not valid JSON: {raw[:100]}") from e
    if not isinstance(data, dict):
        raise ValueError("Summary is not a JSON object")
    text = data.get("summary")
    if not isinstance(text, str) or not text.strip():
        raise ValueError("Summary text missing")

    status = classify_status(assessments)
    if data.get("overallStatus") != status.value:
        logger.warning(f"Summary status {data.get('overallStatus')!r} overridden by rubric: {status.value}")

    total = count_issues(assessments)
    if data.get("totalIssuesFound") != total:
        logger.warning(f"Summary total {data.get('totalIssuesFound')!r} corrected to {total}")

    degraded = any(a.degraded for a in assessments)
    checks: list[ItemToCheck] = []
    if total or degraded:
        for entry in data.get("itemsToCheck") or []:
            try:
                checks.append(ItemToCheck.model_validate(entry))
            except ValidationError:
                logger.warning(f"Dropping malformed itemsToCheck entry: {entry!r}")

    return FinalSummary(
        overall_status=status,
        summary=text.strip(),
        items_to_check=checks,
        total_issues_found=total,
        degraded=degraded,
    )
