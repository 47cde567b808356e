from __future__ import annotations

import math

from backend.core.money import round_to_thousand
from backend.core.projection import (
    FireInputs,
    Windfall,
    calculate_fire,
    normalize_inputs,
)


def test_first_year_matches_hand_calculation(fire_payload):
    result = calculate_fire(fire_payload(), start_year=2025)

    assert result.realFireNumber == 5_000_000
    first = result.projectionData[0]
    # (150,000 + 14,400) * 1.10 = 180,840
    assert first.age == 26
    assert first.year == 2025
    assert first.investmentValue == 181_000
    assert first.annualContribution == 14_000
    assert first.investmentGrowth == 16_000
    assert first.potentialWithdrawalNominal == 7_000
    assert first.potentialWithdrawalReal == 7_000
    assert first.fireTarget == 5_000_000
    assert first.windfallAmount is None
    assert first.status == "short"


def test_real_withdrawal_is_deflated_by_elapsed_years(fire_payload):
    payload = fire_payload(startingInvestments=1_000_000, monthlyContributions=0, annualReturn=0)
    rows = calculate_fire(payload, start_year=2025).projectionData

    assert all(row.potentialWithdrawalNominal == 40_000 for row in rows)
    assert rows[0].potentialWithdrawalReal == 40_000
    # 40,000 / 1.03**10 = 29,763.6
    assert rows[10].potentialWithdrawalReal == round_to_thousand(40_000 / (1 + 3 / 100) ** 10)
    assert rows[10].potentialWithdrawalReal == 30_000
    assert rows[20].potentialWithdrawalReal == 22_000
    assert all(
        row.potentialWithdrawalReal < row.potentialWithdrawalNominal for row in rows[1:]
    )


def test_goal_out_of_reach_reports_last_simulated_age(fire_payload):
    result = calculate_fire(fire_payload(), start_year=2025)

    assert len(result.projectionData) == 40
    assert all(row.status == "short" for row in result.projectionData)
    assert result.achievableAge == 65
    assert result.yearsToRetirement == 39
    assert result.nominalFireNumber == round_to_thousand(200000 / (4 / 100) * (1 + 3 / 100) ** 39)


def test_windfall_year_is_flagged_and_reported(fire_payload):
    payload = fire_payload(windfalls=[{"amount": 500000, "ageReceived": 40}])
    result = calculate_fire(payload, start_year=2025)

    by_age = {row.age: row for row in result.projectionData}
    assert all(by_age[age].status == "short" for age in range(26, 40))
    assert by_age[40].windfallAmount == 500_000
    assert by_age[40].status == "windfall"

    # the windfall compounds long enough to cross the target before age 65
    fire_rows = [row for row in result.projectionData if row.status == "fire"]
    assert fire_rows
    assert result.achievableAge == fire_rows[0].age
    assert result.achievableAge > 40
    assert result.yearsToRetirement == result.achievableAge - 26


def test_windfall_in_fire_year_keeps_amount_but_status_is_fire():
    inputs = FireInputs(
        startingInvestments=10_000_000,
        currentAge=40,
        annualExpenses=40_000,
        annualReturn=5,
        inflationRate=2,
        withdrawalRate=4,
        windfalls=[Windfall(amount=250_000, ageReceived=42)],
    )
    result = calculate_fire(inputs, start_year=2025)

    assert result.achievableAge == 40
    assert result.yearsToRetirement == 0
    assert result.nominalFireNumber == result.realFireNumber == 1_000_000
    row = result.projectionData[2]
    assert row.age == 42
    assert row.status == "fire"
    assert row.windfallAmount == 250_000


def test_fire_status_is_monotonic(fire_payload):
    payloads = [
        fire_payload(windfalls=[{"amount": 500000, "ageReceived": 40}]),
        fire_payload(startingInvestments=4_000_000, annualReturn=6),
        fire_payload(monthlyContributions=10_000, windfalls=[{"amount": 1_000_000, "ageReceived": 30}]),
    ]
    for payload in payloads:
        statuses = [row.status for row in calculate_fire(payload, start_year=2025).projectionData]
        assert "fire" in statuses
        first_fire = statuses.index("fire")
        assert all(status == "fire" for status in statuses[first_fire:])


def test_horizon_is_contiguous_and_capped_at_age_100(fire_payload):
    result = calculate_fire(fire_payload(currentAge=70), start_year=2030)

    ages = [row.age for row in result.projectionData]
    assert ages == list(range(70, 101))
    assert [row.year for row in result.projectionData] == list(range(2030, 2061))
    assert result.achievableAge == 100
    assert result.yearsToRetirement == 30


def test_loop_continues_after_fire_is_reached(fire_payload):
    result = calculate_fire(fire_payload(startingInvestments=20_000_000), start_year=2025)

    assert result.achievableAge == 26
    assert len(result.projectionData) == 40
    values = [row.investmentValue for row in result.projectionData]
    assert values == sorted(values)


def test_zero_everything_stays_flat_except_windfalls(fire_payload):
    payload = fire_payload(
        startingInvestments=0,
        monthlyContributions=0,
        annualReturn=0,
        windfalls=[{"amount": 100000, "ageReceived": 30}],
    )
    result = calculate_fire(payload, start_year=2025)

    for row in result.projectionData:
        expected = 100_000 if row.age >= 30 else 0
        assert row.investmentValue == expected
        assert row.investmentGrowth == 0
        assert row.annualContribution == 0
    assert result.achievableAge == 26 + 39


def test_rounding_only_applies_to_output(fire_payload):
    # $480/yr rounds to $0 in every row, yet the balance keeps accumulating
    payload = fire_payload(startingInvestments=0, monthlyContributions=40, annualReturn=0)
    rows = calculate_fire(payload, start_year=2025).projectionData

    assert rows[0].annualContribution == 0
    assert rows[0].investmentValue == 0
    assert rows[1].investmentValue == 1_000  # 960
    assert rows[9].investmentValue == 5_000  # 4,800


def test_fixed_contributions_can_track_inflation(fire_payload):
    payload = fire_payload(monthlyContributions=1000, adjustContributionsForInflation=True)
    rows = calculate_fire(payload, start_year=2025).projectionData

    assert rows[0].annualContribution == 12_000
    assert rows[10].annualContribution == 16_000  # 12,000 * 1.03**10 = 16,127


def test_salary_percent_contributions_grow_with_raises(fire_payload):
    payload = fire_payload(
        contributionMode="salaryPercent",
        annualSalary=100000,
        salaryContributionPercent=20,
        salaryAnnualRaisePercent=5,
    )
    rows = calculate_fire(payload, start_year=2025).projectionData

    assert rows[0].annualContribution == 20_000
    assert rows[1].annualContribution == 21_000


def test_contribution_mode_ignores_other_modes_fields(fire_payload):
    salary = dict(
        contributionMode="salaryPercent",
        annualSalary=90000,
        salaryContributionPercent=15,
        salaryAnnualRaisePercent=3,
    )
    base = calculate_fire(fire_payload(**salary), start_year=2025)
    changed = calculate_fire(
        fire_payload(**salary, monthlyContributions=9999, adjustContributionsForInflation=True),
        start_year=2025,
    )
    assert base == changed

    fixed = calculate_fire(fire_payload(), start_year=2025)
    fixed_with_salary = calculate_fire(
        fire_payload(annualSalary=500000, salaryContributionPercent=50, salaryAnnualRaisePercent=10),
        start_year=2025,
    )
    assert fixed == fixed_with_salary


def test_first_windfall_wins_for_duplicate_ages(fire_payload):
    payload = fire_payload(
        startingInvestments=0,
        monthlyContributions=0,
        annualReturn=0,
        currentAge=30,
        windfalls=[
            {"amount": 1000, "ageReceived": 30},
            {"amount": 50000, "ageReceived": 30},
        ],
    )
    first = calculate_fire(payload, start_year=2025).projectionData[0]

    assert first.windfallAmount == 1_000
    assert first.investmentValue == 1_000


def test_identical_inputs_give_identical_output(fire_payload):
    payload = fire_payload(windfalls=[{"amount": 500000, "ageReceived": 40}])
    first = calculate_fire(payload, start_year=2025)
    second = calculate_fire(payload, start_year=2025)

    assert first.model_dump_json() == second.model_dump_json()


def test_zero_withdrawal_rate_yields_infinite_target(fire_payload):
    result = calculate_fire(fire_payload(withdrawalRate=0), start_year=2025)

    assert math.isinf(result.realFireNumber)
    assert math.isinf(result.nominalFireNumber)
    assert result.achievableAge == 65
    assert all(row.potentialWithdrawalNominal == 0 for row in result.projectionData)


def test_non_finite_inputs_propagate_instead_of_raising(fire_payload):
    result = calculate_fire(fire_payload(annualReturn=math.nan), start_year=2025)
    assert math.isnan(result.projectionData[0].investmentValue)
    assert all(row.status == "short" for row in result.projectionData)

    undefined = calculate_fire(fire_payload(annualExpenses=0, withdrawalRate=0), start_year=2025)
    assert math.isnan(undefined.realFireNumber)

    overflowing = calculate_fire(fire_payload(inflationRate=1e10), start_year=2025)
    assert math.isinf(overflowing.nominalFireNumber)
    assert len(overflowing.projectionData) == 40


def test_start_age_past_horizon_returns_empty_table(fire_payload):
    result = calculate_fire(fire_payload(currentAge=101), start_year=2025)

    assert result.projectionData == []
    assert result.achievableAge == 100
    assert result.yearsToRetirement == -1


def test_normalize_defaults_mode_and_clears_unused_fields(fire_payload):
    payload = fire_payload(annualSalary=80000, salaryContributionPercent=10)
    payload["contributionMode"] = None
    normalized = normalize_inputs(payload)

    assert normalized.contributionMode == "fixed"
    assert normalized.annualSalary == 0
    assert normalized.salaryContributionPercent == 0
    assert normalized.monthlyContributions == 1200

    salary = normalize_inputs(
        fire_payload(contributionMode="salaryPercent", adjustContributionsForInflation=True)
    )
    assert salary.monthlyContributions == 0
    assert salary.adjustContributionsForInflation is False


def test_inputs_are_not_mutated(fire_payload):
    inputs = FireInputs(**fire_payload(annualSalary=1234))
    calculate_fire(inputs, start_year=2025)

    assert inputs.annualSalary == 1234
    assert inputs.monthlyContributions == 1200
