from __future__ import annotations
import math
from typing import Any, Dict, List, Literal, NamedTuple, Optional, Tuple

from pydantic import Field, ValidationError, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

from .calculations.eai import (
	MAX_BIRTHS_PER_CYCLE,
	MAX_POPULATION,
	MAX_YEARS_OF_LIFE,
	MIN_BIRTH_CYCLE_YEARS,
	CamelModel,
	MathInputs,
)
from .errors import UnknownStepError
from .species import Species, default_female_population


BIRTH_FREQUENCY_OPTIONS: List[Dict[str, str]] = [
	{"value": "1", "label": "Every year"},
	{"value": "2", "label": "Every 2 years"},
	{"value": "3", "label": "Every 3 years"},
	{"value": "4", "label": "Every 4 years"},
	{"value": "custom", "label": "Other"},
]

_STANDARD_FREQUENCIES = (1, 2, 3, 4)


class WizardStep(NamedTuple):
	id: str
	title: str
	fields: Tuple[str, ...]


WIZARD_STEPS: List[WizardStep] = [
	WizardStep("intro", "Welcome", ("studentName", "className")),
	WizardStep("population", "Total Population", ("population",)),
	WizardStep("femalePopulation", "Females", ("femalePopulation",)),
	WizardStep("births", "Births", ("birthsPerCycle", "birthFrequency")),
	WizardStep("lifespan", "Lifespan", ("lifespan",)),
	WizardStep("firstBirth", "First Birth", ("ageAtFirstBirth",)),
	WizardStep("decline", "Decline Rate", ("declineRatePercent",)),
	WizardStep("story", "The Story", ("risks", "climateImpact", "actions")),
	WizardStep("review", "Review", ()),
]

_STEPS_BY_ID: Dict[str, WizardStep] = {s.id: s for s in WIZARD_STEPS}


class NarrativeInputs(CamelModel):
	risks: str = ""
	climate_impact: str = ""
	actions: str = ""
	scratchpad_notes: Optional[str] = None


class WizardForm(CamelModel):
	student_name: Optional[str] = Field(default=None, max_length=60)
	class_name: Optional[str] = Field(default=None, max_length=60)
	population: float = Field(ge=1, le=MAX_POPULATION, description="Enter at least 1")
	female_population: float = Field(ge=1, le=MAX_POPULATION, description="Enter at least 1")
	births_per_cycle: float = Field(ge=0.1, le=MAX_BIRTHS_PER_CYCLE, description="Enter a positive number")
	birth_frequency: Literal["1", "2", "3", "4", "custom"]
	custom_birth_cycle_years: Optional[float] = Field(default=None, ge=MIN_BIRTH_CYCLE_YEARS, le=MAX_YEARS_OF_LIFE)
	lifespan: float = Field(ge=1, le=MAX_YEARS_OF_LIFE, description="Enter at least 1 year")
	age_at_first_birth: float = Field(ge=0, le=MAX_YEARS_OF_LIFE, description="Enter 0 or more")
	decline_rate_percent: float = Field(ge=0, le=100)
	risks: str = Field(min_length=10, description="Tell us at least one risk.")
	climate_impact: str = Field(min_length=10, description="Describe the climate threat.")
	actions: str = Field(min_length=10, description="Share at least one action.")
	scratchpad_notes: Optional[str] = None

	@field_validator("birth_frequency", mode="before")
	@classmethod
	def _frequency_as_text(cls, value: Any) -> Any:
		# Clients may send the option as a number
		if isinstance(value, (int, float)) and not isinstance(value, bool):
			return str(int(value)) if float(value).is_integer() else str(value)
		return value

	@field_validator("female_population")
	@classmethod
	def _females_within_population(cls, value: float, info: ValidationInfo) -> float:
		population = info.data.get("population")
		if population is not None and value > population:
			raise ValueError("Cannot be more than the total population")
		return value

	@property
	def birth_cycle_years(self) -> float:
		if self.birth_frequency == "custom":
			return self.custom_birth_cycle_years or 1
		return float(self.birth_frequency)

	def to_math_inputs(self) -> MathInputs:
		return MathInputs(
			population=self.population,
			female_population=self.female_population,
			births_per_cycle=self.births_per_cycle,
			birth_cycle_years=self.birth_cycle_years,
			lifespan=self.lifespan,
			age_at_first_birth=self.age_at_first_birth,
			decline_rate=-self.decline_rate_percent / 100,
		)

	def narrative(self) -> NarrativeInputs:
		return NarrativeInputs(
			risks=self.risks,
			climate_impact=self.climate_impact,
			actions=self.actions,
			scratchpad_notes=self.scratchpad_notes,
		)


class FieldError(CamelModel):
	field: str
	message: str


class StepPreview(CamelModel):
	birth_cycle_years: float
	reproductive_years: float
	babies_per_year_per_mum: float
	lifetime_babies: float


_FRIENDLY_MESSAGES: Dict[str, str] = {
	(info.alias or to_camel(name)): info.description
	for name, info in WizardForm.model_fields.items()
	if info.description
}


def _message_for(field: str, err: Dict[str, Any]) -> str:
	# Range and length failures read better with the form's own wording
	if err.get("type") in ("greater_than_equal", "string_too_short", "missing") and field in _FRIENDLY_MESSAGES:
		return _FRIENDLY_MESSAGES[field]
	return str(err.get("msg", "Invalid value"))


def get_step(step_id: str) -> WizardStep:
	step = _STEPS_BY_ID.get(step_id)
	if step is None:
		raise UnknownStepError(step_id)
	return step


def step_fields(step_id: str, values: Dict[str, Any]) -> Tuple[str, ...]:
	step = get_step(step_id)
	fields = step.fields
	if step.id == "births" and str(values.get("birthFrequency")) == "custom":
		fields = fields + ("customBirthCycleYears",)
	return fields


def validate_step(step_id: str, values: Dict[str, Any]) -> List[FieldError]:
	"""Check only the fields a wizard step asks for.

	The whole form is validated and errors for fields outside the step are
	dropped, so cross-field rules see whatever earlier steps already filled in.
	"""
	fields = step_fields(step_id, values)
	if not fields:
		return []
	try:
		WizardForm.model_validate(values)
	except ValidationError as exc:
		errors: List[FieldError] = []
		for err in exc.errors():
			loc = err.get("loc") or ()
			field = str(loc[0]) if loc else ""
			if field in fields:
				errors.append(FieldError(field=field, message=_message_for(field, err)))
		return errors
	return []


def step_preview(values: Dict[str, Any]) -> StepPreview:
	"""Figures the wizard shows live while the student is typing."""

	def _number(key: str, default: float = 0) -> float:
		try:
			number = float(values.get(key) or default)
		except (TypeError, ValueError):
			return default
		return number if math.isfinite(number) else default

	frequency = str(values.get("birthFrequency") or "1")
	if frequency == "custom":
		birth_cycle_years = _number("customBirthCycleYears") or 1
	else:
		birth_cycle_years = _number("birthFrequency") or 1

	reproductive_years = max(_number("lifespan") - _number("ageAtFirstBirth"), 0)
	babies_per_year_per_mum = _number("birthsPerCycle") / birth_cycle_years
	return StepPreview(
		birth_cycle_years=birth_cycle_years,
		reproductive_years=reproductive_years,
		babies_per_year_per_mum=babies_per_year_per_mum,
		lifetime_babies=babies_per_year_per_mum * reproductive_years,
	)


def wizard_defaults(species: Species, student_name: Optional[str] = None) -> Dict[str, Any]:
	d = species.default_inputs
	is_standard = d.birth_cycle_years in _STANDARD_FREQUENCIES
	return {
		"studentName": student_name or "",
		"className": "",
		"population": d.population,
		"femalePopulation": default_female_population(species),
		"birthsPerCycle": d.births_per_cycle,
		"birthFrequency": str(int(d.birth_cycle_years)) if is_standard else "custom",
		"customBirthCycleYears": None if is_standard else d.birth_cycle_years,
		"lifespan": d.lifespan,
		"ageAtFirstBirth": d.age_at_first_birth,
		"declineRatePercent": abs(d.decline_rate * 100),
		"risks": "",
		"climateImpact": "",
		"actions": "",
	}
