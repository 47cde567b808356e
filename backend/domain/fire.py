from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import List

from backend.core.projection import MAX_AGE, MAX_PROJECTION_YEARS, FireInputs
from backend.schemas.fire import FireRequest


@dataclass
class PreparationResult:
    inputs: FireInputs
    warnings: List[str] = field(default_factory=list)


def projection_horizon(current_age: int) -> range:
    """Ages the engine simulates for a given starting age."""
    last_age = min(current_age + MAX_PROJECTION_YEARS - 1, MAX_AGE)
    return range(current_age, last_age + 1)


def prepare_inputs(request: FireRequest) -> PreparationResult:
    inputs = request.to_inputs()
    horizon = projection_horizon(inputs.currentAge)
    warnings: List[str] = []

    if len(horizon) < MAX_PROJECTION_YEARS:
        warnings.append(
            f"projection stops at age {MAX_AGE}: only {len(horizon)} years simulated"
        )

    age_counts = Counter(windfall.ageReceived for windfall in inputs.windfalls)
    for age, count in sorted(age_counts.items()):
        if count > 1:
            warnings.append(
                f"{count} windfalls at age {age}: only the first is applied"
            )

    for windfall in inputs.windfalls:
        if windfall.ageReceived not in horizon:
            warnings.append(
                f"windfall at age {windfall.ageReceived} falls outside ages "
                f"{horizon.start}-{horizon.stop - 1} and is ignored"
            )

    return PreparationResult(inputs=inputs, warnings=warnings)


__all__ = ["PreparationResult", "projection_horizon", "prepare_inputs"]
