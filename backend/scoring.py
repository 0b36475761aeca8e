"""Stay Score Backend — Safety Scoring Logic

Crime density (incidents per km²) is bucketed into a 1-10 safety score,
which is rescaled to 0-100 and graded A-D for the dashboard.
"""

import math

# (upper density bound, score): first bound the density fits under wins
_DENSITY_BREAKPOINTS: list[tuple[float, int]] = [
    (50, 10),
    (100, 9),
    (200, 8),
    (400, 7),
    (800, 6),
    (1200, 5),
    (1600, 4),
    (2000, 3),
    (2500, 2),
]

_GRADE_BREAKPOINTS: list[tuple[int, str]] = [
    (85, "A"),
    (70, "B"),
    (55, "C"),
]


def density_to_safety_score(density: float) -> int:
    """Map crime density (count / km²) to a safety score in [1, 10]."""
    try:
        density = float(density)
    except (TypeError, ValueError):
        return 1
    if math.isnan(density):
        return 1
    for bound, score in _DENSITY_BREAKPOINTS:
        if density <= bound:
            return score
    return 1


def score_to_grade(score100: float) -> str:
    for threshold, grade in _GRADE_BREAKPOINTS:
        if score100 >= threshold:
            return grade
    return "D"


def safety_score_100(score10: int) -> int:
    return score10 * 10


def crime_density(crime_count: int, area_km2: float) -> float:
    # area_km2 is already floored by geometry.compute_area_km2
    return crime_count / area_km2
