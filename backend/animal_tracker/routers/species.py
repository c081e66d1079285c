from typing import Any, Dict, List

from fastapi import APIRouter, HTTPException

from ..species import SPECIES_LIST, Species, get_species_by_slug
from ..wizard import wizard_defaults

router = APIRouter(prefix="/species", tags=["species"])


def require_species(slug: str) -> Species:
	species = get_species_by_slug(slug)
	if species is None:
		raise HTTPException(status_code=404, detail=f"Unknown species: {slug}")
	return species


@router.get("", response_model=List[Species])
def list_species():
	return SPECIES_LIST


@router.get("/{slug}", response_model=Species)
def get_species(slug: str):
	return require_species(slug)


@router.get("/{slug}/defaults")
def get_defaults(slug: str) -> Dict[str, Any]:
	# Prefilled wizard values; the student's name is filled in client side
	return wizard_defaults(require_species(slug))
