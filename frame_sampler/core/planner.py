"""Timestamp planning for sequential frame capture."""

import math
from typing import List

from frame_sampler.config.config import TIMESTAMP_PRECISION
from frame_sampler.exceptions import PlanError
from frame_sampler.models import CapturePlan


def plan(start: float, range: float, step: float, duration: float) -> CapturePlan:
    """Build the ordered capture instants for a (start, range, step) request.

    Candidates are ``start + k * step`` for ``k = 0, 1, ...`` while the
    candidate does not pass ``start + range``. Each candidate is rounded to
    ``TIMESTAMP_PRECISION`` decimals, and only those inside ``[0, duration]``
    are kept. The boundary comparison uses the rounded values, so a candidate
    that lands on ``start + range`` up to float noise is included.

    Raises:
        PlanError: if ``range`` or ``step`` is not positive, ``duration`` is
            negative, or any argument is not finite.
    """
    for name, value in (("start", start), ("range", range), ("step", step), ("duration", duration)):
        if not math.isfinite(value):
            raise PlanError(f"{name} must be finite, got {value}")
    if range <= 0:
        raise PlanError("Range must be > 0")
    if step <= 0:
        raise PlanError("Step must be > 0")
    if duration < 0:
        raise PlanError("Duration must be >= 0")

    end = round(start + range, TIMESTAMP_PRECISION)
    timestamps: List[float] = []
    k = 0

    while True:
        candidate = round(start + k * step, TIMESTAMP_PRECISION)
        if candidate > end:
            break
        k += 1

        if candidate < 0 or candidate > duration:
            continue
        # steps finer than the precision can round onto the previous value
        if timestamps and candidate <= timestamps[-1]:
            continue
        timestamps.append(candidate)

    return CapturePlan(
        timestamps=tuple(timestamps),
        start=start,
        range=range,
        step=step,
        duration=duration,
    )
