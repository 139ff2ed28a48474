"""
ADKAR rollup for one stakeholder's five explicit stage scores.

Pure functions, no DB access:
    - adkar_rollup:           average + bottleneck stage (first-min wins)
    - performance_from_adkar: performance score recomputed from ADKAR edits
    - round_half_up:          rounding used by every score aggregation

Scores are expected in 0-100. Nothing here validates or clamps them.
"""

import math

ADKAR_STAGES: list[dict] = [
    {
        "key": "awareness",
        "label": "Awareness",
        "question": "Do they understand WHY the change is needed?",
        "low_tip": "Share the business case and impact on their role",
        "high_tip": "They understand the why - move to building desire",
    },
    {
        "key": "desire",
        "label": "Desire",
        "question": "Do they WANT to support the change?",
        "low_tip": "Uncover personal motivations and address concerns",
        "high_tip": "They want to change - ensure they have the knowledge",
    },
    {
        "key": "knowledge",
        "label": "Knowledge",
        "question": "Do they know HOW to change?",
        "low_tip": "Provide training, documentation, and examples",
        "high_tip": "They know how - focus on building practical ability",
    },
    {
        "key": "ability",
        "label": "Ability",
        "question": "CAN they implement the change?",
        "low_tip": "Remove barriers, provide coaching and practice time",
        "high_tip": "They can do it - reinforce the new behaviors",
    },
    {
        "key": "reinforcement",
        "label": "Reinforcement",
        "question": "Are they SUSTAINING the change?",
        "low_tip": "Celebrate wins, address backsliding, gather feedback",
        "high_tip": "Change is sticking - they can help others adopt",
    },
]

ADKAR_KEYS = tuple(stage["key"] for stage in ADKAR_STAGES)

DEFAULT_STAGE_SCORE = 50


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (2.5 -> 3, not 2)."""
    return int(math.floor(value + 0.5))


def adkar_rollup(awareness, desire, knowledge, ability, reinforcement) -> dict:
    """Average and bottleneck for one set of ADKAR scores.

    The bottleneck is the lowest score. On a tie the earliest stage in
    Awareness, Desire, Knowledge, Ability, Reinforcement order wins.

    Returns:
        {"average", "bottleneckStage", "bottleneckScore", "bottleneckTip"}
    """
    scores = (awareness, desire, knowledge, ability, reinforcement)

    lowest = ADKAR_STAGES[0]
    lowest_score = scores[0]
    for stage, score in zip(ADKAR_STAGES[1:], scores[1:]):
        if score < lowest_score:
            lowest, lowest_score = stage, score

    return {
        "average": round_half_up(sum(scores) / 5),
        "bottleneckStage": lowest["label"],
        "bottleneckScore": lowest_score,
        "bottleneckTip": lowest["low_tip"],
    }


def adkar_rollup_from_dict(scores: dict) -> dict:
    """``adkar_rollup`` over a mapping keyed by stage name."""
    return adkar_rollup(*(scores.get(key) for key in ADKAR_KEYS))


def performance_from_adkar(updates: dict, current: dict) -> int:
    """Performance score after an ADKAR edit.

    Each stage takes the updated value if present, else the current value,
    else 50. Result is the rounded mean of the five.
    """
    total = 0
    for key in ADKAR_KEYS:
        value = updates.get(key)
        if value is None:
            value = current.get(key)
        if value is None:
            value = DEFAULT_STAGE_SCORE
        total += value
    return round_half_up(total / 5)
