"""Endangered Animal Index (EAI) calculator.

The score runs from 0 to 1000 and measures how endangered a species is, based
on whether reproduction can outpace the current decline rate:

- 0-249: Recovering
- 250-499: Unstable
- 500-749: High risk
- 750-1000: Critical
"""
from __future__ import annotations

import math
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Callable, List, NamedTuple, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
	model_config = ConfigDict(
		alias_generator=to_camel,
		populate_by_name=True,
		frozen=True,
		allow_inf_nan=False,
	)


# Upper bounds keep every derived figure finite. The tightest is the birth
# cycle: a shorter cycle scales the birth rate without limit.
MAX_POPULATION = 1e12
MAX_BIRTHS_PER_CYCLE = 100_000
MIN_BIRTH_CYCLE_YEARS = 0.01
MAX_YEARS_OF_LIFE = 1000


class MathInputs(CamelModel):
	population: float = Field(ge=1, le=MAX_POPULATION)
	female_population: float = Field(ge=1, le=MAX_POPULATION)
	births_per_cycle: float = Field(gt=0, le=MAX_BIRTHS_PER_CYCLE)
	birth_cycle_years: float = Field(ge=MIN_BIRTH_CYCLE_YEARS, le=MAX_YEARS_OF_LIFE)
	lifespan: float = Field(gt=0, le=MAX_YEARS_OF_LIFE)
	age_at_first_birth: float = Field(ge=0, le=MAX_YEARS_OF_LIFE)
	# Negative value e.g. -0.06 for a 6% decline; only the magnitude is used
	decline_rate: float

	@model_validator(mode="after")
	def _females_within_population(self) -> "MathInputs":
		if self.female_population > self.population:
			raise ValueError("femalePopulation cannot be larger than population")
		return self


class EaiResult(CamelModel):
	score: int = Field(ge=0, le=1000)
	verdict: str
	lifetime_babies_per_female: float
	tipping_point_label: str
	annual_birth_rate: float
	annual_decline_rate: float
	can_recover: bool


# Litter size -> share of offspring reaching adulthood. Species with huge
# clutches (sea turtles) lose almost all of them; single births (great apes)
# mostly survive. First row whose minimum is met wins.
SURVIVAL_RATES: List[Tuple[float, float]] = [
	(100, 0.001),
	(20, 0.01),
	(5, 0.1),
	(2, 0.3),
	(0, 0.6),
]


class DangerBand(NamedTuple):
	lower_bound: float
	formula: Callable[[float], float]
	minimum: float
	maximum: float


# Net change rate -> danger score. Ordered from healthiest to worst; the first
# band whose lower bound is <= the rate is used and its result clamped.
DANGER_BANDS: List[DangerBand] = [
	# Strong recovery
	DangerBand(0.05, lambda n: 100 - n * 1000, 0, 100),
	# Slight recovery
	DangerBand(0.0, lambda n: 250 - n * 3000, 100, 250),
	# Slight decline
	DangerBand(-0.03, lambda n: 250 + abs(n) * 8000, 250, 500),
	# Moderate decline
	DangerBand(-0.08, lambda n: 500 + (abs(n) - 0.03) * 5000, 500, 750),
	# Severe decline
	DangerBand(-math.inf, lambda n: 750 + (abs(n) - 0.08) * 2500, 750, 1000),
]


class RiskBand(NamedTuple):
	min_score: int
	name: str
	tipping_point_label: str
	verdict: str


RISK_BANDS: List[RiskBand] = [
	RiskBand(
		750,
		"Critical",
		"Critical: racing toward extinction",
		"Mathematically heading to extinction without intervention.",
	),
	RiskBand(
		500,
		"High risk",
		"High risk: needs rapid action",
		"Severe pressure, urgent protection needed.",
	),
	RiskBand(
		250,
		"Unstable",
		"Unstable: track closely",
		"Worrying trend but recoverable with coordinated action.",
	),
	RiskBand(
		0,
		"Recovering",
		"Recovering: momentum turning positive",
		"Showing signs of recovery, keep supporting their habitat.",
	),
]


def round_half_up(value: float, places: int = 0) -> float:
	"""Round on the exact binary value, ties away from zero.

	Matches JavaScript's ``toFixed`` for the non-negative values produced here,
	unlike the built-in ``round`` which sends ties to even.
	"""
	if not math.isfinite(value):
		raise ValueError(f"cannot round non-finite value {value!r}")
	exact = Decimal(value)
	with localcontext() as ctx:
		# Large populations need more digits than the default 28
		ctx.prec = max(ctx.prec, exact.adjusted() + places + 2)
		return float(exact.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP))


def _clamp(value: float, minimum: float, maximum: float) -> float:
	return min(max(value, minimum), maximum)


def survival_rate(births_per_cycle: float) -> float:
	for minimum, rate in SURVIVAL_RATES:
		if births_per_cycle >= minimum:
			return rate
	return SURVIVAL_RATES[-1][1]


def danger_score(net_change_rate: float) -> float:
	"""Unrounded 0-1000 danger score for a fractional net change rate."""
	for band in DANGER_BANDS:
		if net_change_rate >= band.lower_bound:
			return _clamp(band.formula(net_change_rate), band.minimum, band.maximum)
	raise ValueError(f"net change rate {net_change_rate!r} is not a number")


def risk_band(score: int) -> RiskBand:
	for band in RISK_BANDS:
		if score >= band.min_score:
			return band
	return RISK_BANDS[-1]


def calculate_eai(inputs: MathInputs) -> EaiResult:
	# Reproductive capacity
	reproductive_years = max(inputs.lifespan - inputs.age_at_first_birth, 1)
	lifetime_babies_per_female = inputs.births_per_cycle * reproductive_years / inputs.birth_cycle_years
	annual_babies_per_female = inputs.births_per_cycle / inputs.birth_cycle_years

	# Share of the whole population that is a breeding female at any instant,
	# assuming breeding years are spread evenly over the lifespan
	reproductive_fraction = reproductive_years / inputs.lifespan
	breeding_female_percent = (inputs.female_population / inputs.population) * reproductive_fraction

	annual_birth_rate = breeding_female_percent * annual_babies_per_female * survival_rate(inputs.births_per_cycle)
	annual_decline_rate = abs(inputs.decline_rate)

	# Negative = declining, positive = growing
	net_change_rate = annual_birth_rate - annual_decline_rate

	score = int(round_half_up(danger_score(net_change_rate)))
	band = risk_band(score)

	return EaiResult(
		score=score,
		verdict=band.verdict,
		lifetime_babies_per_female=round_half_up(lifetime_babies_per_female, 1),
		tipping_point_label=band.tipping_point_label,
		annual_birth_rate=round_half_up(annual_birth_rate * 100, 2),
		annual_decline_rate=round_half_up(annual_decline_rate * 100, 2),
		can_recover=net_change_rate > 0,
	)
