#!/usr/bin/env python3
"""
Single source of truth for constants used across the quiz.

Enumerated answer domains, display labels and workout tables live here so the
wizard, the content mapper and the WhatsApp handoff all agree on them.
"""

from pathlib import Path
from typing import Dict, List, Tuple


# === PATHS ===

SCRIPTS_DIR: Path = Path(__file__).parent.resolve()
LEADS_BASE_DIR: Path = SCRIPTS_DIR.parent
PROJECT_ROOT: Path = LEADS_BASE_DIR.parent
FLOWS_FILE: Path = SCRIPTS_DIR / 'flows.yaml'


# === ANSWER DOMAINS ===
# Referenced by name from flows.yaml (field `domain:` key)

DOMAINS: Dict[str, List[str]] = {
    'gender': ['male', 'female'],
    'goal': ['fat_loss', 'muscle_building', 'body_toning', 'mobility', 'strength', 'general_fitness'],
    'activity_level': ['beginner', 'intermediate', 'advanced'],
    'days_available': ['2-3', '3-4', '4-5', '5-6'],
    'preferred_method': ['home_workouts', 'gym_training', 'calisthenics'],
    'training_location': ['home', 'gym'],
    'equipment': ['dumbbells', 'bands', 'bodyweight'],
    'commitment_level': ['low', 'medium', 'high'],
    'selected_program': ['21_day_abs', '12_week_muscle', 'strength_training'],
}


# === DISPLAY LABELS ===

GOAL_LABELS: Dict[str, str] = {
    'fat_loss': 'Fat Loss',
    'muscle_building': 'Muscle Building',
    'body_toning': 'Body Toning',
    'mobility': 'Mobility',
    'strength': 'Strength',
    'general_fitness': 'General Fitness',
}

PROGRAM_LABELS: Dict[str, str] = {
    '21_day_abs': '21 Days Abs Challenge',
    '12_week_muscle': '12 Week Muscle Building Program',
    'strength_training': 'Strength Training Workout',
}

ACTIVITY_LABELS: Dict[str, str] = {
    'beginner': 'Beginner',
    'intermediate': 'Intermediate',
    'advanced': 'Advanced',
}

DAYS_LABELS: Dict[str, str] = {
    '2-3': '2-3 days',
    '3-4': '3-4 days',
    '4-5': '4-5 days',
    '5-6': '5-6 days',
}

METHOD_LABELS: Dict[str, str] = {
    'home_workouts': 'Home Workouts',
    'gym_training': 'Gym Training',
    'calisthenics': 'Calisthenics',
}

COMMITMENT_LABELS: Dict[str, str] = {
    'low': 'Just Curious',
    'medium': 'Ready to Start',
    'high': 'I will do whatever it takes',
}

LOCATION_LABELS: Dict[str, str] = {
    'home': 'Home Workout',
    'gym': 'Gym Training',
}

# Plan titles (one per goal)
GOAL_PLAN_TITLES: Dict[str, str] = {
    'fat_loss': 'Fat Loss Protocol',
    'muscle_building': 'Muscle Building Program',
    'body_toning': 'Body Toning Transformation',
    'mobility': 'Mobility & Flexibility',
    'strength': 'Strength Training Program',
    'general_fitness': 'General Fitness Plan',
}

METHOD_LOCATIONS: Dict[str, str] = {
    'home_workouts': 'home',
    'calisthenics': 'home',
    'gym_training': 'gym',
}


# === SCHEDULE ===

DEFAULT_DAYS_AVAILABLE: str = '2-3'

SCHEDULE_DAYS: Dict[str, List[str]] = {
    '2-3': ['Monday', 'Wednesday', 'Friday'],
    '3-4': ['Monday', 'Wednesday', 'Friday', 'Saturday'],
    '4-5': ['Monday', 'Tuesday', 'Thursday', 'Friday'],
    '5-6': ['Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday'],
}


# === WORKOUT SPLITS ===
# Split format: (type, name, description)
WorkoutSplit = Tuple[str, str, str]

SPLIT_BY_DAYS: Dict[str, WorkoutSplit] = {
    '2-3': ('full_body', 'Full Body',
            'Every session trains the whole body so each muscle group is hit 2-3 times a week.'),
    '3-4': ('upper_lower', 'Upper / Lower',
            'Alternate upper-body and lower-body sessions for more volume per muscle group.'),
    '4-5': ('push_pull_legs', 'Push / Pull / Legs',
            'Pushing muscles, pulling muscles and legs each get a dedicated day.'),
    '5-6': ('body_part_split', 'Body Part Split',
            'One or two muscle groups per session for maximum specialization.'),
}

SPLIT_ROTATIONS: Dict[str, List[str]] = {
    'full_body': ['Full Body Strength A', 'Full Body Strength B', 'Full Body Conditioning'],
    'upper_lower': ['Upper Body', 'Lower Body'],
    'push_pull_legs': ['Push Day', 'Pull Day', 'Leg Day'],
    'body_part_split': ['Chest Day', 'Back Day', 'Leg Day', 'Shoulder Day', 'Arm Day', 'Core & Conditioning'],
}


# === EQUIPMENT ===

HOME_EQUIPMENT: List[str] = ['dumbbells', 'bands', 'bodyweight']

# Substrings that mark an exercise as needing a gym machine
GYM_MACHINE_KEYWORDS: List[str] = [
    'cable',
    'machine',
    'smith',
    'leg press',
    'lat pulldown',
    'seated row',
    'chest press machine',
    'leg extension',
    'leg curl',
    'hack squat',
    'cable fly',
]

# Equipment tag -> substring found in exercises that need it
EQUIPMENT_KEYWORDS: Dict[str, str] = {
    'dumbbells': 'dumbbell',
    'bands': 'band',
}


# === EXERCISE POOLS ===
# Keyed by the workout names used in SPLIT_ROTATIONS

EXERCISE_POOLS: Dict[str, List[str]] = {
    'Full Body Strength A': [
        'Goblet Squat', 'Push-Ups', 'Dumbbell Row', 'Leg Press', 'Lat Pulldown', 'Plank',
    ],
    'Full Body Strength B': [
        'Dumbbell Romanian Deadlift', 'Dumbbell Shoulder Press', 'Seated Row',
        'Walking Lunges', 'Glute Bridge', 'Cable Face Pull',
    ],
    'Full Body Conditioning': [
        'Burpees', 'Jump Squats', 'Mountain Climbers', 'Band Pull-Aparts',
        'Rowing Machine Intervals', 'Dumbbell Thrusters',
    ],
    'Upper Body': [
        'Push-Ups', 'Dumbbell Bench Press', 'Chest Press Machine', 'Lat Pulldown',
        'Dumbbell Row', 'Band Face Pulls', 'Dumbbell Curls',
    ],
    'Lower Body': [
        'Goblet Squat', 'Leg Press', 'Dumbbell Romanian Deadlift', 'Leg Curl',
        'Bulgarian Split Squat', 'Calf Raises',
    ],
    'Push Day': [
        'Push-Ups', 'Dumbbell Bench Press', 'Chest Press Machine', 'Dumbbell Shoulder Press',
        'Cable Fly', 'Tricep Dips', 'Band Tricep Pushdown',
    ],
    'Pull Day': [
        'Pull-Ups', 'Lat Pulldown', 'Seated Row', 'Dumbbell Row',
        'Band Pull-Aparts', 'Dumbbell Curls', 'Cable Face Pull',
    ],
    'Leg Day': [
        'Bodyweight Squats', 'Goblet Squat', 'Leg Press', 'Hack Squat', 'Leg Extension',
        'Leg Curl', 'Walking Lunges', 'Glute Bridge',
    ],
    'Chest Day': [
        'Push-Ups', 'Dumbbell Bench Press', 'Incline Dumbbell Press', 'Chest Press Machine',
        'Cable Fly', 'Smith Machine Bench Press',
    ],
    'Back Day': [
        'Pull-Ups', 'Lat Pulldown', 'Seated Row', 'Dumbbell Row',
        'Superman Hold', 'Band Pull-Aparts',
    ],
    'Shoulder Day': [
        'Dumbbell Shoulder Press', 'Dumbbell Lateral Raises', 'Pike Push-Ups',
        'Band Face Pulls', 'Machine Shoulder Press',
    ],
    'Arm Day': [
        'Dumbbell Curls', 'Dumbbell Hammer Curls', 'Tricep Dips', 'Band Tricep Pushdown',
        'Cable Curl', 'Diamond Push-Ups',
    ],
    'Core & Conditioning': [
        'Plank', 'Mountain Climbers', 'Bicycle Crunches', 'Cable Woodchop', 'Burpees', 'Dead Bug',
    ],
}


# === PHONE ===

PHONE_COUNTRY_CODE: str = '254'
PHONE_INTERNATIONAL_PREFIX: str = '+254'
PHONE_TRUNK_PREFIX: str = '0'
PHONE_PATTERN: str = r'^(\+254|254|0)([71])\d{8}$'
PHONE_CANONICAL_LENGTH: int = 13
PHONE_ERROR_MESSAGE: str = 'Please enter a valid Kenyan phone number (e.g., 0712...).'


# === LEAD IDENTIFIERS ===

SLUG_ALPHABET: str = 'abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789'
SLUG_LENGTH: int = 6
SLUG_PATTERN: str = r'^[A-Za-z0-9]{6}$'


# === SUBMISSION ===

FAILURE_POLICIES: List[str] = ['open', 'closed']
HANDOFF_MODES: List[str] = ['url', 'session']

MSG_INVALID_BODY: str = 'Invalid request body'
MSG_MISSING_FIELDS: str = 'Missing required fields'
MSG_INVALID_PHONE: str = 'Invalid phone number'
MSG_CONFIG_ERROR: str = 'Server configuration error'
MSG_SAVE_FAILED: str = 'Something went wrong saving your plan. Please try again.'
