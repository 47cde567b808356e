"""Data contracts for FIRE projections and saved scenarios."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from backend.core.projection import FireInputs, normalize_inputs


class WindfallIn(BaseModel):
    """One-time cash event received at a given age."""

    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    id: Optional[str] = None
    amount: float = Field(..., gt=0, description="Cash amount added to investments.")
    ageReceived: int = Field(..., ge=18, le=120)


class FireRequest(BaseModel):
    """Inputs required to compute a FIRE projection."""

    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    startingInvestments: float = Field(..., ge=0, description="Invested today, in today's dollars.")
    currentAge: int = Field(..., ge=18, le=100)
    annualExpenses: float = Field(..., gt=0, description="Retirement spending in today's dollars.")
    annualReturn: float = Field(7.0, ge=0, le=30, description="Nominal return, in percent.")
    inflationRate: float = Field(3.0, ge=0, le=20, description="Annual inflation, in percent.")
    withdrawalRate: float = Field(4.0, ge=0.1, le=10, description="Safe withdrawal rate, in percent.")

    contributionMode: Literal["fixed", "salaryPercent"] = "fixed"
    monthlyContributions: float = Field(0.0, ge=0)
    adjustContributionsForInflation: bool = False
    annualSalary: float = Field(0.0, ge=0)
    salaryContributionPercent: float = Field(0.0, ge=0, le=100)
    salaryAnnualRaisePercent: float = Field(0.0, ge=0, le=50)

    windfalls: List[WindfallIn] = Field(default_factory=list)

    def to_inputs(self) -> FireInputs:
        """Normalized engine snapshot for this request."""
        return normalize_inputs(self.model_dump(include=set(FireInputs.model_fields)))


class ScenarioCreate(FireRequest):
    """A named set of inputs to keep for later comparison."""

    name: str = Field(..., min_length=1, max_length=200)


class ScenarioUpdate(BaseModel):
    """Partial update: only the fields sent are changed."""

    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    startingInvestments: Optional[float] = None
    currentAge: Optional[int] = None
    annualExpenses: Optional[float] = None
    annualReturn: Optional[float] = None
    inflationRate: Optional[float] = None
    withdrawalRate: Optional[float] = None
    contributionMode: Optional[Literal["fixed", "salaryPercent"]] = None
    monthlyContributions: Optional[float] = None
    adjustContributionsForInflation: Optional[bool] = None
    annualSalary: Optional[float] = None
    salaryContributionPercent: Optional[float] = None
    salaryAnnualRaisePercent: Optional[float] = None
    windfalls: Optional[List[WindfallIn]] = None

    def apply_to(self, current: ScenarioCreate) -> ScenarioCreate:
        """Merge into ``current`` and revalidate the whole record."""
        merged = current.model_dump()
        merged.update(self.model_dump(exclude_unset=True))
        return ScenarioCreate.model_validate(merged)


class Scenario(ScenarioCreate):
    """Stored scenario as returned by the API."""

    id: str
    createdAt: str


__all__ = [
    "WindfallIn",
    "FireRequest",
    "ScenarioCreate",
    "ScenarioUpdate",
    "Scenario",
]
