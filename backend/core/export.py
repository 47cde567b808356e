"""CSV export of a projection table."""

from __future__ import annotations

import csv
import io
import math
from datetime import date
from typing import List

from backend.core.money import format_currency_detailed
from backend.core.projection import FireCalculationResult, FireInputs

CSV_COLUMNS = [
    "Age",
    "Year",
    "Investment Value",
    "Annual Contribution",
    "Potential Withdrawal (Nominal)",
    "Potential Withdrawal (Real)",
    "Investment Growth",
    "FIRE Target",
    "Status",
]


def _cell(value: float) -> str:
    """Engine values are already rounded; print whole numbers without '.0'."""
    if math.isfinite(value) and float(value).is_integer():
        return str(int(value))
    return str(value)


def methodology_lines(inputs: FireInputs, result: FireCalculationResult) -> List[str]:
    """Comment block describing how every column was derived."""
    if inputs.contributionMode == "salaryPercent":
        contribution_rule = (
            "# - Annual Contribution: Annual Salary * (1 + Raise Rate)^Years"
            " * Contribution Percent / 100"
        )
    else:
        contribution_rule = "# - Annual Contribution: Base Monthly Contribution * 12"
        if inputs.adjustContributionsForInflation:
            contribution_rule += " * (1 + Inflation Rate)^Years"

    return [
        "# FIRE Calculator Projection Export",
        "# Calculation Methodology:",
        (
            "# - Real FIRE Number: Annual Expenses / (Withdrawal Rate / 100)"
            f" = {format_currency_detailed(inputs.annualExpenses)} / "
            f"{inputs.withdrawalRate / 100:g}"
            f" = {format_currency_detailed(result.realFireNumber)}"
        ),
        "# - Nominal FIRE Number: Real FIRE Number * (1 + Inflation Rate)^Years to Retirement",
        "# - Investment Growth: Previous Investment Value * (1 + Annual Return Rate)",
        "# - Potential Withdrawal (Nominal): Current Investment Value * (Withdrawal Rate / 100)",
        "# - Potential Withdrawal (Real): Nominal Withdrawal / (1 + Inflation Rate)^Years from Now",
        contribution_rule,
        (
            f"# - Assumptions: Annual Return={inputs.annualReturn:g}%,"
            f" Inflation={inputs.inflationRate:g}%,"
            f" Withdrawal Rate={inputs.withdrawalRate:g}%"
        ),
        "#",
    ]


def projection_to_csv(inputs: FireInputs, result: FireCalculationResult) -> str:
    """
    Render the projection as delimited text, one row per simulated year.

    Columns are written in a fixed order and carry the engine's rounded
    values verbatim.
    """
    buffer = io.StringIO()
    for line in methodology_lines(inputs, result):
        buffer.write(line + "\n")

    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    for row in result.projectionData:
        writer.writerow(
            [
                row.age,
                row.year,
                _cell(row.investmentValue),
                _cell(row.annualContribution),
                _cell(row.potentialWithdrawalNominal),
                _cell(row.potentialWithdrawalReal),
                _cell(row.investmentGrowth),
                _cell(row.fireTarget),
                row.status,
            ]
        )
    return buffer.getvalue()


def export_filename(day: date) -> str:
    return f"fire-projection-{day.isoformat()}.csv"


__all__ = ["CSV_COLUMNS", "methodology_lines", "projection_to_csv", "export_filename"]
