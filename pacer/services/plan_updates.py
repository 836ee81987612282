"""Plan changes requested by the coach through ``UPDATE:`` lines.

The coach is asked to end its reply with lines such as::

    UPDATE: Week 1, Tuesday, Tempo, 10, 7:00

Each line sets the type, planned miles and pace of one (week, day) slot.
Parsing is best effort: a line that does not fit the format is dropped
without error, since the coach's output is free text.
"""
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from pacer.schemas import PlanUpdate, TrainingPlan


DIRECTIVE_PREFIX = "UPDATE:"
CONFIRMATION_SUFFIX = "✓ Training plan updated!"

_DIRECTIVE_RE = re.compile(
    r"^UPDATE:\s*Week\s*(\d+),\s*(\w+),\s*([^,]+),\s*([\d.]+),\s*(.+)$"
)


@dataclass
class CoachReplyResult:
    display_text: str
    updates: List[PlanUpdate]
    plan: TrainingPlan
    applied: int


def _is_directive(line: str) -> bool:
    return line.lstrip().startswith(DIRECTIVE_PREFIX)


def parse_directive(line: str) -> Optional[PlanUpdate]:
    """Parse one directive line, or return None if it does not match."""
    match = _DIRECTIVE_RE.match(line.strip())
    if not match:
        return None
    week, day, workout_type, miles, pace = match.groups()
    try:
        mileage = float(miles)
    except ValueError:
        # "[\d.]+" also accepts things like "1.2.3"
        return None
    return PlanUpdate(
        week=int(week),
        day=day.strip(),
        type=workout_type.strip(),
        mileage=mileage,
        pace=pace.strip(),
    )


def extract_plan_updates(text: str) -> List[PlanUpdate]:
    updates = []
    for line in text.splitlines():
        if not _is_directive(line):
            continue
        update = parse_directive(line)
        if update is not None:
            updates.append(update)
    return updates


def strip_directives(text: str) -> str:
    """Remove every UPDATE: line from text shown to the runner."""
    kept = [line for line in text.splitlines() if not _is_directive(line)]
    return "\n".join(kept).strip()


def copy_plan(plan: TrainingPlan) -> TrainingPlan:
    return {week: [w.model_copy() for w in workouts] for week, workouts in plan.items()}


def apply_plan_updates(plan: TrainingPlan, updates: List[PlanUpdate]) -> Tuple[TrainingPlan, int]:
    """Apply updates to a copy of ``plan``.

    Returns the new plan and how many updates hit an existing slot.
    Updates for a missing week or day are ignored. Values are absolute,
    so applying the same updates twice gives the same plan.
    """
    new_plan = copy_plan(plan)
    applied = 0
    for update in updates:
        workouts = new_plan.get(update.week)
        if not workouts:
            continue
        for index, workout in enumerate(workouts):
            if workout.day != update.day:
                continue
            workouts[index] = workout.model_copy(update={
                "type": update.type or workout.type,
                "planned": update.mileage if update.mileage is not None else workout.planned,
                "pace": update.pace or workout.pace,
            })
            applied += 1
            break
    return new_plan, applied


def process_coach_reply(text: str, plan: TrainingPlan) -> CoachReplyResult:
    """Extract and apply directives, and build the text to display."""
    updates = extract_plan_updates(text)
    new_plan, applied = apply_plan_updates(plan, updates)

    display_text = strip_directives(text)
    if applied > 0:
        display_text = f"{display_text}\n\n{CONFIRMATION_SUFFIX}" if display_text else CONFIRMATION_SUFFIX

    return CoachReplyResult(
        display_text=display_text,
        updates=updates,
        plan=new_plan,
        applied=applied,
    )
