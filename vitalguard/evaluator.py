"""
Threshold evaluation.

Pure functions: they take readings and limits that were already fetched and
return the alerts that must exist. Nothing here touches the database or the
notifier; the alert store is responsible for inserting drafts atomically.

- evaluate_reading: one new reading against the patient's current limits.
- evaluate_limit_change: one new or edited limit against every historical
  reading of the patient.

Both only ever generate alerts. Existing alerts are never consulted,
superseded or retracted here.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from numbers import Real
from typing import Any, Iterable, Mapping, Protocol, Sequence

from .models import LIMIT_MAXIMUM, LIMIT_MINIMUM

logger = logging.getLogger(__name__)


class ReadingLike(Protocol):
    id: int
    patient_id: int
    values: Mapping[str, Any]


class LimitLike(Protocol):
    parameter_name: str
    min_value: float
    max_value: float


@dataclass(frozen=True, slots=True)
class AlertDraft:
    """An alert the evaluator decided must exist."""

    patient_id: int
    parameter_name: str
    value: float
    limit_value: float
    limit_type: str
    triggering_reading_id: int

    @property
    def dedup_key(self) -> tuple[int, str, str]:
        return (self.triggering_reading_id, self.parameter_name, self.limit_type)


def numeric_value(raw: Any) -> float | None:
    """Return raw as a finite float, or None when it carries no usable data."""
    # bool is a Real subclass; a sensor sending True is not a measurement
    if isinstance(raw, bool) or not isinstance(raw, Real):
        return None
    try:
        value = float(raw)
    except OverflowError:
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def check_value(value: float, limit: LimitLike) -> tuple[str, float] | None:
    """Compare one value to one limit. Boundaries are inside the range."""
    if value < limit.min_value:
        return LIMIT_MINIMUM, float(limit.min_value)
    if value > limit.max_value:
        return LIMIT_MAXIMUM, float(limit.max_value)
    return None


def _draft_for(reading: ReadingLike, parameter_name: str, limit: LimitLike) -> AlertDraft | None:
    value = numeric_value((reading.values or {}).get(parameter_name))
    if value is None:
        return None
    violation = check_value(value, limit)
    if violation is None:
        return None
    limit_type, limit_value = violation
    return AlertDraft(
        patient_id=reading.patient_id,
        parameter_name=parameter_name,
        value=value,
        limit_value=limit_value,
        limit_type=limit_type,
        triggering_reading_id=reading.id,
    )


def evaluate_reading(reading: ReadingLike, limits: Iterable[LimitLike]) -> list[AlertDraft]:
    """
    Decide which alerts a single reading raises.

    Parameters without a configured limit and values that are missing or not
    numbers are skipped. A reading raises at most one alert per parameter;
    parameters are independent of each other.
    """
    by_parameter = {limit.parameter_name: limit for limit in limits}
    drafts = []
    for parameter_name in (reading.values or {}):
        limit = by_parameter.get(parameter_name)
        if limit is None:
            continue
        draft = _draft_for(reading, parameter_name, limit)
        if draft is not None:
            drafts.append(draft)

    logger.debug("reading %s: %d violation(s)", reading.id, len(drafts))
    return drafts


def evaluate_limit_change(
    patient_id: int,
    parameter_name: str,
    new_limit: LimitLike,
    readings: Sequence[ReadingLike],
) -> list[AlertDraft]:
    """
    Re-scan a patient's history for one parameter against its new limit.

    Only the new limit is used. Drafts are unique per dedup key; readings of
    other patients are ignored.
    """
    seen = set()
    drafts = []
    for reading in readings:
        if reading.patient_id != patient_id:
            continue
        draft = _draft_for(reading, parameter_name, new_limit)
        if draft is None or draft.dedup_key in seen:
            continue
        seen.add(draft.dedup_key)
        drafts.append(draft)

    logger.debug(
        "limit change %s/%s: %d of %d reading(s) violate [%s, %s]",
        patient_id, parameter_name, len(drafts), len(readings),
        new_limit.min_value, new_limit.max_value,
    )
    return drafts
