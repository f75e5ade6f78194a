"""Domain pipeline constants.

Step catalogue, SLA policy and thresholds shared by both execution paths.
"""

from __future__ import annotations

# (id, display name), in execution order
PIPELINE_STEPS: tuple[tuple[str, str], ...] = (
    ("duplicate", "Duplicate Detection"),
    ("classify", "Department Classification"),
    ("sentiment", "Distress Detection"),
    ("sla", "SLA Calculation"),
    ("lapse", "Lapse Risk Prediction"),
    ("similar", "Similar Case Matching"),
    ("alerts", "Proactive Alerts"),
    ("template", "Response Template"),
    ("actions", "Recommended Actions"),
)
STEP_COUNT = len(PIPELINE_STEPS)

STEP_DUPLICATE = 0
STEP_CLASSIFY = 1
STEP_SENTIMENT = 2
STEP_SLA = 3
STEP_LAPSE = 4
STEP_SIMILAR = 5
STEP_ALERTS = 6
STEP_TEMPLATE = 7
STEP_ACTIONS = 8

# Cosmetic pacing (seconds) and the duration reported on each step.
SIMULATION_DELAYS: tuple[float, ...] = (0.3, 0.6, 0.4, 0.2, 0.5, 0.4, 0.2, 0.15, 0.1)
REMOTE_WAIT_DELAYS: tuple[float, ...] = (0.2, 0.3, 0.2)
REMOTE_TAIL_DELAY = 0.1
STEP_DURATIONS: tuple[float, ...] = (0.12, 0.45, 0.28, 0.08, 0.38, 0.32, 0.15, 0.05, 0.03)

# Authoritative SLA hours per distress level (both paths)
SLA_HOURS: dict[str, int] = {
    "CRITICAL": 24,
    "HIGH": 72,
    "MEDIUM": 168,
    "NORMAL": 336,
}

DISTRESS_CONFIDENCE: dict[str, float] = {
    "CRITICAL": 0.98,
    "HIGH": 0.92,
    "MEDIUM": 0.85,
    "NORMAL": 0.78,
}

MIN_GRIEVANCE_LENGTH = 10
CLARIFICATION_THRESHOLD = 0.70

PRIMARY_METHOD_THRESHOLD = 0.75
FALLBACK_METHOD_THRESHOLD = 0.40

LAPSE_HIGH_THRESHOLD = 0.7
LAPSE_MEDIUM_THRESHOLD = 0.4
LAPSE_LIKELY_THRESHOLD = 0.5
SUPERVISOR_REVIEW_THRESHOLD = 0.6
LAPSE_PREDICTOR_ACCURACY = 0.808

ALERT_CLUSTER_SIZE = 3

ACTION_IMMEDIATE_ATTENTION = "IMMEDIATE_ATTENTION"
ACTION_MANUAL_CLASSIFICATION = "MANUAL_CLASSIFICATION"
ACTION_SUPERVISOR_REVIEW = "SUPERVISOR_REVIEW"
ACTION_SIMILAR_CASE_REVIEW = "SIMILAR_CASE_REVIEW"
