from __future__ import annotations
from typing import Dict, List, Literal, Optional

from .calculations.eai import MathInputs, CamelModel, round_half_up


class SpeciesDefaults(CamelModel):
	population: int
	female_percentage: float
	births_per_cycle: float
	birth_cycle_years: float
	lifespan: float
	age_at_first_birth: float
	decline_rate: float


class Species(CamelModel):
	slug: str
	name: str
	scientific_name: str
	emoji: str
	summary: str
	region: str
	default_inputs: SpeciesDefaults
	character_image: Optional[str] = None
	nickname: Optional[str] = None
	status: Optional[Literal["Vulnerable", "Endangered", "Critically Endangered"]] = None


SPECIES_LIST: List[Species] = [
	Species(
		slug="snow-leopard",
		name="Snow Leopard",
		scientific_name="Panthera uncia",
		emoji="\U0001F406",
		summary="Mountain ghosts losing prey and range to climate change.",
		region="Himalaya & Central Asia",
		character_image="/animalcharacters/snow-leopard.png",
		nickname="Leo",
		status="Vulnerable",
		default_inputs=SpeciesDefaults(
			population=4000,
			female_percentage=0.48,
			births_per_cycle=2,
			birth_cycle_years=2,
			lifespan=18,
			age_at_first_birth=4,
			decline_rate=-0.03,
		),
	),
	Species(
		slug="hawksbill-sea-turtle",
		name="Hawksbill Sea Turtle",
		scientific_name="Eretmochelys imbricata",
		emoji="\U0001F422",
		summary="Coral reef guardians threatened by illegal shell trade and warming seas.",
		region="Tropical reefs worldwide",
		character_image="/animalcharacters/turtle.png",
		nickname="Nemo",
		status="Endangered",
		default_inputs=SpeciesDefaults(
			population=25000,
			female_percentage=0.55,
			births_per_cycle=160,
			birth_cycle_years=3,
			lifespan=40,
			age_at_first_birth=20,
			decline_rate=-0.08,
		),
	),
	Species(
		slug="mountain-gorilla",
		name="Mountain Gorilla",
		scientific_name="Gorilla beringei beringei",
		emoji="\U0001F98D",
		summary="Gentle giants making a slow comeback from near extinction.",
		region="Central Africa",
		character_image="/animalcharacters/gorilla.png",
		nickname="Kong",
		status="Endangered",
		default_inputs=SpeciesDefaults(
			population=1063,
			female_percentage=0.48,
			births_per_cycle=1,
			birth_cycle_years=4,
			lifespan=40,
			age_at_first_birth=10,
			decline_rate=-0.02,
		),
	),
	Species(
		slug="bengal-tiger",
		name="Bengal Tiger",
		scientific_name="Panthera tigris tigris",
		emoji="\U0001F405",
		summary="Majestic predator losing habitat to human expansion.",
		region="India & Southeast Asia",
		character_image="/animalcharacters/tiger.png",
		nickname="Indi",
		status="Endangered",
		default_inputs=SpeciesDefaults(
			population=2500,
			female_percentage=0.49,
			births_per_cycle=3,
			birth_cycle_years=2.5,
			lifespan=15,
			age_at_first_birth=4,
			decline_rate=-0.04,
		),
	),
	Species(
		slug="koala",
		name="Koala",
		scientific_name="Phascolarctos cinereus",
		emoji="\U0001F9F8",
		summary="Tree-dwelling marsupials facing habitat loss and climate-driven bushfires.",
		region="Eastern Australia",
		character_image="/animalcharacters/koala.png",
		nickname="Lucy",
		status="Vulnerable",
		default_inputs=SpeciesDefaults(
			population=92000,
			female_percentage=0.52,
			births_per_cycle=1,
			birth_cycle_years=1,
			lifespan=15,
			age_at_first_birth=3,
			decline_rate=-0.06,
		),
	),
]

_BY_SLUG: Dict[str, Species] = {s.slug: s for s in SPECIES_LIST}


def get_species_by_slug(slug: str) -> Optional[Species]:
	return _BY_SLUG.get(slug)


def default_female_population(species: Species) -> int:
	d = species.default_inputs
	return int(round_half_up(d.population * d.female_percentage))


def default_math_inputs(species: Species) -> MathInputs:
	d = species.default_inputs
	return MathInputs(
		population=d.population,
		female_population=default_female_population(species),
		births_per_cycle=d.births_per_cycle,
		birth_cycle_years=d.birth_cycle_years,
		lifespan=d.lifespan,
		age_at_first_birth=d.age_at_first_birth,
		decline_rate=d.decline_rate,
	)
