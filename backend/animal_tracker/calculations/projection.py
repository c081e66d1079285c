from __future__ import annotations

import math
from typing import List, Optional

from pydantic import Field, computed_field

from .eai import EaiResult, CamelModel, round_half_up

# Below this many individuals a population is functionally extinct
FUNCTIONAL_EXTINCTION_THRESHOLD = 100
DEFAULT_MAX_YEARS = 100


class ProjectionPoint(CamelModel):
	year: int
	population: int


class Projection(CamelModel):
	start_year: int
	points: List[ProjectionPoint] = Field(default_factory=list)
	extinction_year: Optional[int] = None

	@computed_field(alias="yearsToExtinction")
	@property
	def years_to_extinction(self) -> Optional[int]:
		if self.extinction_year is None:
			return None
		return self.extinction_year - self.start_year


def project_population(
	start_population: float,
	net_change_rate_percent: float,
	start_year: int,
	max_years: int = DEFAULT_MAX_YEARS,
) -> Projection:
	"""Grow or shrink a population geometrically, one point per year.

	The emitted population is clamped at zero, but the extinction and stop
	checks look at the raw value so clamping never moves the extinction year.
	Runaway growth ends the run early once the next value would overflow.
	"""
	net_change_rate = net_change_rate_percent / 100
	pop = start_population
	points: List[ProjectionPoint] = []
	extinction_year: Optional[int] = None

	for i in range(max_years + 1):
		year = start_year + i
		points.append(ProjectionPoint(year=year, population=int(round_half_up(max(0, pop)))))
		if pop <= FUNCTIONAL_EXTINCTION_THRESHOLD and extinction_year is None:
			extinction_year = year
		if pop <= 0:
			break
		pop = pop * (1 + net_change_rate)
		if not math.isfinite(pop):
			# Grown past float range; nothing further to plot
			break

	return Projection(start_year=start_year, points=points, extinction_year=extinction_year)


def project_from_result(
	result: EaiResult,
	start_population: float,
	start_year: int,
	max_years: int = DEFAULT_MAX_YEARS,
) -> Projection:
	net_change_rate_percent = result.annual_birth_rate - result.annual_decline_rate
	return project_population(start_population, net_change_rate_percent, start_year, max_years)
