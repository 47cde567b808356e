from __future__ import annotations

import math
from typing import Any, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from backend.core.money import round_to_thousand

MAX_PROJECTION_YEARS = 40
MAX_AGE = 100

ContributionMode = Literal["fixed", "salaryPercent"]
YearStatus = Literal["short", "windfall", "fire"]


# -----------------------------
# Inputs
# -----------------------------


class Windfall(BaseModel):
    """One-time cash event added to the balance in the year matching ageReceived."""

    model_config = ConfigDict(frozen=True)

    amount: float
    ageReceived: int
    id: Optional[str] = None


class FireInputs(BaseModel):
    """
    Snapshot the engine simulates from.

    No range constraints live here: the request schemas validate upstream and
    the engine accepts whatever numbers reach it (NaN and Infinity included).
    Percent fields are whole percentages, e.g. 10 means 10%.
    """

    model_config = ConfigDict(frozen=True)

    startingInvestments: float
    currentAge: int
    annualExpenses: float
    annualReturn: float
    inflationRate: float
    withdrawalRate: float

    contributionMode: ContributionMode = "fixed"
    # fixed mode
    monthlyContributions: float = 0.0
    adjustContributionsForInflation: bool = False
    # salaryPercent mode
    annualSalary: float = 0.0
    salaryContributionPercent: float = 0.0
    salaryAnnualRaisePercent: float = 0.0

    windfalls: List[Windfall] = Field(default_factory=list)


# -----------------------------
# Outputs
# -----------------------------


class ProjectionYear(BaseModel):
    age: int
    year: int
    investmentValue: float
    annualContribution: float
    potentialWithdrawalNominal: float
    potentialWithdrawalReal: float
    fireTarget: float
    windfallAmount: Optional[float] = None
    investmentGrowth: float
    status: YearStatus


class FireCalculationResult(BaseModel):
    realFireNumber: float
    nominalFireNumber: float
    achievableAge: int
    yearsToRetirement: int
    projectionData: List[ProjectionYear]


# -----------------------------
# Arithmetic helpers
# -----------------------------


def _divide(numerator: float, denominator: float) -> float:
    """IEEE-style division: x/0 gives +/-inf, 0/0 and nan/0 give nan."""
    try:
        return numerator / denominator
    except ZeroDivisionError:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)


def _growth_factor(percent: float, years: int) -> float:
    """(1 + percent/100) ** years, saturating instead of raising."""
    base = 1 + percent / 100
    try:
        return base ** years
    except OverflowError:
        # only reachable for |base| > 1 with a large positive exponent
        if base < 0 and years % 2:
            return -math.inf
        return math.inf
    except ZeroDivisionError:
        # 0 ** negative exponent
        return math.inf


# -----------------------------
# Engine
# -----------------------------


def normalize_inputs(inputs: Union[FireInputs, Mapping[str, Any]]) -> FireInputs:
    """
    Build a mode-consistent snapshot before simulating.

    Missing contributionMode means "fixed". Fields that belong to the other
    contribution mode are zeroed so the simulation never reads them.
    """
    if not isinstance(inputs, FireInputs):
        data = dict(inputs)
        if data.get("contributionMode") is None:
            data.pop("contributionMode", None)
        inputs = FireInputs.model_validate(data)

    if inputs.contributionMode == "salaryPercent":
        return inputs.model_copy(
            update={"monthlyContributions": 0.0, "adjustContributionsForInflation": False}
        )
    return inputs.model_copy(
        update={
            "annualSalary": 0.0,
            "salaryContributionPercent": 0.0,
            "salaryAnnualRaisePercent": 0.0,
        }
    )


def _annual_contribution(inputs: FireInputs, year: int) -> float:
    if inputs.contributionMode == "salaryPercent":
        salary = inputs.annualSalary * _growth_factor(inputs.salaryAnnualRaisePercent, year)
        return salary * (inputs.salaryContributionPercent / 100)

    base = inputs.monthlyContributions * 12
    if inputs.adjustContributionsForInflation:
        return base * _growth_factor(inputs.inflationRate, year)
    return base


def _windfall_for_age(windfalls: List[Windfall], age: int) -> Optional[Windfall]:
    # first match in input order wins; later windfalls for the same age are ignored
    for windfall in windfalls:
        if windfall.ageReceived == age:
            return windfall
    return None


def calculate_fire(
    inputs: Union[FireInputs, Mapping[str, Any]],
    start_year: int,
) -> FireCalculationResult:
    """
    Project the investment balance year by year and find the FIRE age.

    Order of operations (per year):
      1) FIRE target = real FIRE number inflated by `year` years.
      2) Add this year's contribution.
      3) Add the windfall for this age, if any.
      4) Grow the whole balance by annualReturn.
      5) Compare against the target; once reached, every later year is "fire".

    Runs at most 40 years and never past age 100. Reaching FIRE does not stop
    the loop. Only output rows are rounded (to $1,000); the running balance
    keeps full precision. `start_year` labels the first row's calendar year.
    """
    inputs = normalize_inputs(inputs)

    real_fire_number = _divide(inputs.annualExpenses, inputs.withdrawalRate / 100)

    balance = float(inputs.startingInvestments)
    age = inputs.currentAge
    fire_achieved = False
    achievable_age = 0

    rows: List[ProjectionYear] = []
    for year in range(MAX_PROJECTION_YEARS):
        if age > MAX_AGE:
            break

        price_level = _growth_factor(inputs.inflationRate, year)
        fire_target = real_fire_number * price_level

        contribution = _annual_contribution(inputs, year)
        balance += contribution

        windfall = _windfall_for_age(inputs.windfalls, age)
        windfall_amount = windfall.amount if windfall else 0.0
        status: YearStatus = "short"
        if windfall:
            balance += windfall.amount
            status = "windfall"

        pre_growth = balance
        balance *= 1 + inputs.annualReturn / 100
        investment_growth = balance - pre_growth

        withdrawal_nominal = balance * (inputs.withdrawalRate / 100)
        withdrawal_real = _divide(withdrawal_nominal, price_level)

        if balance >= fire_target and not fire_achieved:
            fire_achieved = True
            achievable_age = age
            status = "fire"
        elif fire_achieved:
            status = "fire"

        rows.append(
            ProjectionYear(
                age=age,
                year=start_year + year,
                investmentValue=round_to_thousand(balance),
                annualContribution=round_to_thousand(contribution),
                potentialWithdrawalNominal=round_to_thousand(withdrawal_nominal),
                potentialWithdrawalReal=round_to_thousand(withdrawal_real),
                fireTarget=round_to_thousand(fire_target),
                windfallAmount=(
                    round_to_thousand(windfall_amount) if windfall_amount > 0 else None
                ),
                investmentGrowth=round_to_thousand(investment_growth),
                status=status,
            )
        )

        age += 1

    if not fire_achieved:
        # last simulated age
        achievable_age = age - 1

    years_to_retirement = achievable_age - inputs.currentAge
    nominal_fire_number = real_fire_number * _growth_factor(
        inputs.inflationRate, years_to_retirement
    )

    return FireCalculationResult(
        realFireNumber=round_to_thousand(real_fire_number),
        nominalFireNumber=round_to_thousand(nominal_fire_number),
        achievableAge=achievable_age,
        yearsToRetirement=years_to_retirement,
        projectionData=rows,
    )


__all__ = [
    "MAX_PROJECTION_YEARS",
    "MAX_AGE",
    "ContributionMode",
    "YearStatus",
    "Windfall",
    "FireInputs",
    "ProjectionYear",
    "FireCalculationResult",
    "normalize_inputs",
    "calculate_fire",
]
