from __future__ import annotations
from typing import List, Optional, Sequence, Tuple

from .calculations.eai import CamelModel, EaiResult, MathInputs, calculate_eai, risk_band
from .calculations.projection import DEFAULT_MAX_YEARS, Projection, project_from_result
from .species import Species
from .wizard import NarrativeInputs

TREES_PER_PROJECT = 10
CARBON_KG_PER_TREE = 2


class GenderBreakdown(CamelModel):
	female: float
	male: float


class Dashboard(CamelModel):
	species: Species
	inputs: MathInputs
	result: EaiResult
	narrative: NarrativeInputs
	student_name: Optional[str] = None
	risk_band: str
	gender_breakdown: GenderBreakdown
	projection: Projection


class Achievements(CamelModel):
	user_name: str
	certificates: int
	trees_planted: int
	carbon_saved_kg: int
	animals_helped: int
	species_studied: List[str]


def build_dashboard(
	species: Species,
	inputs: MathInputs,
	narrative: NarrativeInputs,
	start_year: int,
	*,
	student_name: Optional[str] = None,
	max_years: int = DEFAULT_MAX_YEARS,
) -> Dashboard:
	"""Everything the results page shows, recomputed from the saved inputs."""
	result = calculate_eai(inputs)
	return Dashboard(
		species=species,
		inputs=inputs,
		result=result,
		narrative=narrative,
		student_name=student_name,
		risk_band=risk_band(result.score).name,
		gender_breakdown=GenderBreakdown(
			female=inputs.female_population,
			male=inputs.population - inputs.female_population,
		),
		projection=project_from_result(result, inputs.population, start_year, max_years),
	)


def summarize_achievements(user_name: str, scores_by_species: Sequence[Tuple[str, int]]) -> Achievements:
	# Every saved project earns a certificate
	certificates = len(scores_by_species)
	trees_planted = certificates * TREES_PER_PROJECT
	studied: List[str] = []
	for slug, _ in scores_by_species:
		if slug not in studied:
			studied.append(slug)
	return Achievements(
		user_name=user_name,
		certificates=certificates,
		trees_planted=trees_planted,
		carbon_saved_kg=trees_planted * CARBON_KG_PER_TREE,
		animals_helped=sum(max(score, 1) for _, score in scores_by_species),
		species_studied=studied,
	)
