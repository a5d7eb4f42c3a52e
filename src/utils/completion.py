"""Completion rules for course progress and risk assessments.

Both rules are pure functions so every entity store backing applies exactly the
same logic before it writes.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from schemas.assessment import ChecklistItem, RiskAssessment, RiskAssessmentUpdate

COMPLETE_PERCENT = 100


def progress_completed_at(
    progress: int,
    previous: Optional[datetime],
    now: datetime,
) -> Optional[datetime]:
    """Return the completion timestamp a progress row should carry.

    Args:
        progress: New percentage for the row.
        previous: Completion timestamp already stored, if any.
        now: Current time.

    Returns:
        None below 100 percent, otherwise the earlier stamp or ``now``.
    """
    if progress < COMPLETE_PERCENT:
        return None
    return previous or now


def all_required_completed(items: List[ChecklistItem]) -> bool:
    """True when every required item is ticked. Vacuously true with none required."""
    return all(item.completed for item in items if item.required)


def apply_assessment_update(
    current: RiskAssessment,
    updates: RiskAssessmentUpdate,
    now: datetime,
) -> Dict[str, Any]:
    """Compute the field changes for an assessment update.

    Only fields set on ``updates`` are changed. When the update carries an
    ``items`` list and every required item is completed, the assessment becomes
    ``completed`` whatever status the caller sent, and ``completed_at`` is
    stamped (an existing stamp on an already completed assessment is kept).
    Otherwise the caller-supplied status is used as is; a completed assessment
    is never demoted by this rule alone.

    Args:
        current: The stored assessment.
        updates: Partial update from the caller.
        now: Current time.

    Returns:
        Mapping of field name to new value, always including ``updated_at``.
    """
    changes: Dict[str, Any] = updates.model_dump(exclude_unset=True, exclude_none=True)
    changes.pop("items", None)

    if updates.items is not None:
        changes["items"] = [item.model_copy() for item in updates.items]
        if all_required_completed(updates.items):
            changes["status"] = "completed"
            if current.status == "completed" and current.completed_at is not None:
                changes["completed_at"] = current.completed_at
            else:
                changes["completed_at"] = now

    changes["updated_at"] = now
    return changes
