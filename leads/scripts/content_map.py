#!/usr/bin/env python3
"""
Content mapping for quiz answers.

Turns enumerated answers into display labels, a workout split, a weekly
schedule and exercise suggestions. Everything here is a pure lookup: no I/O,
no state, same output for the same input.
"""

from typing import Any, Dict, List, Optional

from constants import (
    ACTIVITY_LABELS,
    COMMITMENT_LABELS,
    DAYS_LABELS,
    DEFAULT_DAYS_AVAILABLE,
    EQUIPMENT_KEYWORDS,
    EXERCISE_POOLS,
    GOAL_LABELS,
    GOAL_PLAN_TITLES,
    GYM_MACHINE_KEYWORDS,
    HOME_EQUIPMENT,
    LOCATION_LABELS,
    METHOD_LABELS,
    METHOD_LOCATIONS,
    PROGRAM_LABELS,
    SCHEDULE_DAYS,
    SPLIT_BY_DAYS,
    SPLIT_ROTATIONS,
)


# ============================================================================
# LABELS
# ============================================================================

def goal_label(goal: str) -> str:
    return GOAL_LABELS.get(goal, goal)


def program_label(program: str) -> str:
    return PROGRAM_LABELS.get(program, program)


def activity_label(level: str) -> str:
    return ACTIVITY_LABELS.get(level, level)


def days_label(days_available: str) -> str:
    return DAYS_LABELS.get(days_available, days_available)


def method_label(method: str) -> str:
    return METHOD_LABELS.get(method, method)


def commitment_label(level: str) -> str:
    return COMMITMENT_LABELS.get(level, level)


def location_label(location: str) -> str:
    return LOCATION_LABELS.get(location, location)


def location_for_method(method: Optional[str]) -> Optional[str]:
    """Map a preferred training method onto a training location."""
    return METHOD_LOCATIONS.get(method)


# ============================================================================
# SCHEDULE & SPLIT
# ============================================================================

def schedule_days(days_available: str) -> List[str]:
    """Weekdays to train on for a days-available bucket (3-day default)."""
    return list(SCHEDULE_DAYS.get(days_available, SCHEDULE_DAYS[DEFAULT_DAYS_AVAILABLE]))


def workout_split(days_available: str) -> Dict[str, str]:
    """
    Classify the days-available bucket into a split strategy.

    More training days means more muscle-group specialization:
    full body -> upper/lower -> push/pull/legs -> body part split.
    """
    split_type, name, description = SPLIT_BY_DAYS.get(
        days_available, SPLIT_BY_DAYS[DEFAULT_DAYS_AVAILABLE]
    )
    return {'type': split_type, 'name': name, 'description': description}


def workout_for_day(day_index: int, days_available: str, split_type: Optional[str] = None,
                    location: Optional[str] = None, equipment: Optional[List[str]] = None) -> str:
    """
    Name of the workout for the Nth training day of the week.

    Cycles the split's rotation with day_index modulo its length. Home
    workouts are tagged (Home), or (Bodyweight) when no home kit beyond
    bodyweight is available.
    """
    if split_type not in SPLIT_ROTATIONS:
        split_type = workout_split(days_available)['type']

    rotation = SPLIT_ROTATIONS[split_type]
    name = rotation[day_index % len(rotation)]

    if location == 'home':
        if equipment is None:
            return f"{name} (Home)"
        kit = set(available_equipment('home', equipment)) - {'bodyweight'}
        return f"{name} (Home)" if kit else f"{name} (Bodyweight)"

    return name


# ============================================================================
# EQUIPMENT & EXERCISES
# ============================================================================

def available_equipment(location: str, equipment: List[str]) -> List[str]:
    """Equipment usable at the given location (gym keeps everything)."""
    if location == 'gym':
        return list(equipment)
    return [item for item in equipment if item in HOME_EQUIPMENT]


def _needs_gym_machine(exercise: str) -> bool:
    lowered = exercise.lower()
    return any(keyword in lowered for keyword in GYM_MACHINE_KEYWORDS)


def exercise_suggestions(workout_type: str, location: str,
                         equipment: Optional[List[str]] = None) -> List[str]:
    """
    Exercise suggestions for a workout.

    At home, anything needing a gym machine is removed; if an equipment list
    is given, dumbbell and band movements are dropped when that kit is missing.
    """
    # Home suffixes added by workout_for_day are not part of the pool key
    base_type = workout_type.split(' (')[0]
    pool = EXERCISE_POOLS.get(base_type, EXERCISE_POOLS[SPLIT_ROTATIONS['full_body'][0]])

    if location != 'home':
        return list(pool)

    exercises = [name for name in pool if not _needs_gym_machine(name)]

    if equipment is not None:
        kit = available_equipment('home', equipment)
        for tag, keyword in EQUIPMENT_KEYWORDS.items():
            if tag not in kit:
                exercises = [name for name in exercises if keyword not in name.lower()]

    return exercises


# ============================================================================
# PLAN CONTENT
# ============================================================================

def plan_content(goal: str, location: str) -> Dict[str, str]:
    """Title and description for a personalized plan."""
    title = GOAL_PLAN_TITLES.get(goal, goal_label(goal))
    where = 'home training' if location == 'home' else 'gym workouts'
    return {
        'title': f"{title} - {location_label(location)}",
        'description': f"Your personalized {title} designed for {where}.",
    }


def build_plan_summary(form_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Assemble the results view for a stored lead.

    Works for both flows: the location comes from trainingLocation when the
    flow asked for it, otherwise from the preferred training method.
    """
    location = form_data.get('trainingLocation') or location_for_method(form_data.get('preferredMethod')) or 'gym'
    equipment = form_data.get('equipment')
    days_available = form_data.get('daysAvailable') or DEFAULT_DAYS_AVAILABLE
    split = workout_split(days_available)

    schedule = []
    for index, day in enumerate(schedule_days(days_available)):
        workout = workout_for_day(index, days_available, split['type'], location, equipment)
        schedule.append({
            'day': day,
            'workout': workout,
            'exercises': exercise_suggestions(workout, location, equipment),
        })

    summary = plan_content(form_data.get('goal', ''), location)
    summary.update({
        'goal': goal_label(form_data.get('goal', '')),
        'location': location_label(location),
        'days_available': days_label(days_available),
        'split': split,
        'schedule': schedule,
    })
    return summary
