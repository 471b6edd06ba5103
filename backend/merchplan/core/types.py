"""
Merchandise Planning - Canonical Metric & Percentage Types
===========================================================

RULE: Every business metric is a finite float.

MetricValue:  float (revenue, margin %, turns, units...)
        - NaN and +/-inf are rejected at the model boundary
        - Booleans are rejected (True is not a revenue figure)
        - Serialized as a plain JSON number

ChangePercent: float, signed percentage (+5.0 = five percent up)

Score / ConfidenceLevel: bounded 0-100 / 50-95 values produced by the
simulator. Values outside the range are rejected, never silently clamped;
clamping is the simulator's job.

This module is the SINGLE SOURCE OF TRUTH for numeric field types used by
the what-if simulator models.
"""

import math
from typing import Annotated, Any

from pydantic import AfterValidator, BeforeValidator, WithJsonSchema


# =============================================================================
# METRIC VALUES (finite floats)
# =============================================================================

def _validate_finite(v: Any) -> float:
    """
    Validate and convert to a finite float.

    Accepts:
        - int / float: converted to float
        - str: parsed as float ("1500000", "52.3")
        - bool: REJECTED
        - NaN / inf: REJECTED
    """
    if isinstance(v, bool):
        raise ValueError(f"Boolean not allowed for a metric value. Got: {v}")

    if isinstance(v, (int, float)):
        value = float(v)
    elif isinstance(v, str):
        try:
            value = float(v)
        except ValueError:
            raise ValueError(f"Invalid metric string: {v}")
    else:
        raise ValueError(f"Invalid metric type: {type(v)}")

    if not math.isfinite(value):
        raise ValueError(f"Metric value must be finite, got: {value}")

    return value


MetricValue = Annotated[
    float,
    BeforeValidator(_validate_finite),
    WithJsonSchema({"type": "number", "description": "Finite metric value"}),
]

ChangePercent = Annotated[
    float,
    BeforeValidator(_validate_finite),
    WithJsonSchema({"type": "number", "description": "Signed percentage change (5.0 = +5%)"}),
]


# =============================================================================
# BOUNDED RESULTS
# =============================================================================

def _bounded(low: float, high: float):
    def _validate(v: float) -> float:
        if v < low or v > high:
            raise ValueError(f"Value must be {low:g}-{high:g}, got: {v}")
        return v
    return _validate


Score = Annotated[
    float,
    BeforeValidator(_validate_finite),
    AfterValidator(_bounded(0, 100)),
    WithJsonSchema({"type": "number", "minimum": 0, "maximum": 100,
                    "description": "Composite scenario score 0-100"}),
]

ConfidenceLevel = Annotated[
    int,
    AfterValidator(_bounded(50, 95)),
    WithJsonSchema({"type": "integer", "minimum": 50, "maximum": 95,
                    "description": "Simulation confidence percentage 50-95"}),
]


def clamp(value: float, low: float, high: float) -> float:
    """Clamp value into [low, high]."""
    return max(low, min(high, value))


# =============================================================================
# CONVENIENCE EXPORTS
# =============================================================================

__all__ = [
    "MetricValue",
    "ChangePercent",
    "Score",
    "ConfidenceLevel",
    "clamp",
]
