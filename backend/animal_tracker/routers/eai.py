from __future__ import annotations
from datetime import datetime
from typing import Optional

from fastapi import APIRouter
from pydantic import Field

from ..calculations.eai import CamelModel, EaiResult, MathInputs, calculate_eai
from ..calculations.projection import DEFAULT_MAX_YEARS, Projection, project_population


router = APIRouter(prefix="/eai", tags=["eai"])


class ProjectionRequest(CamelModel):
	start_population: float = Field(ge=0, le=1e12)
	# Birth rate minus decline rate, in percent per year
	net_change_rate_percent: float = Field(ge=-100, le=100)
	start_year: Optional[int] = None
	max_years: int = Field(default=DEFAULT_MAX_YEARS, ge=0, le=200)


@router.post("/calculate", response_model=EaiResult)
def calculate(inputs: MathInputs):
	return calculate_eai(inputs)


@router.post("/projection", response_model=Projection)
def projection(req: ProjectionRequest):
	start_year = req.start_year if req.start_year is not None else datetime.now().year
	return project_population(req.start_population, req.net_change_rate_percent, start_year, req.max_years)
