from __future__ import annotations
from datetime import datetime
from typing import List
import logging

from fastapi import APIRouter, Depends, HTTPException

from ..dashboard import Achievements, Dashboard, build_dashboard, summarize_achievements
from ..errors import BackendError
from ..settings import settings
from ..store import ProjectStore, ProjectSubmission, ProjectSubmissionPayload, create_project_submission, get_store
from ..wizard import WizardForm
from .auth import User, get_current_user
from .species import require_species

router = APIRouter(tags=["projects"])

logger = logging.getLogger(__name__)


def _backend_failure(exc: BackendError) -> HTTPException:
	logger.warning("Hosted backend call failed: %s", exc)
	return HTTPException(status_code=exc.status_code, detail=exc.detail)


@router.post("/projects/{slug}", response_model=Dashboard, status_code=201)
async def submit_project(
	slug: str,
	form: WizardForm,
	user: User = Depends(get_current_user),
	store: ProjectStore = Depends(get_store),
):
	species = require_species(slug)
	inputs = form.to_math_inputs()
	narrative = form.narrative()
	# Build first: every stored project must be displayable
	dashboard = build_dashboard(
		species,
		inputs,
		narrative,
		datetime.now().year,
		student_name=form.student_name or user.display_name,
		max_years=settings.projection_years,
	)
	payload = ProjectSubmissionPayload(
		species_slug=species.slug,
		math_inputs=inputs,
		narrative_inputs=narrative,
		score=dashboard.result.score,
		tipping_point_label=dashboard.result.tipping_point_label,
		student_name=form.student_name,
		class_name=form.class_name,
	)
	try:
		await create_project_submission(
			store, user.id, user.user_metadata, payload, access_token=user.access_token
		)
	except BackendError as e:
		raise _backend_failure(e)
	return dashboard


@router.get("/projects", response_model=List[ProjectSubmission])
async def list_projects(user: User = Depends(get_current_user), store: ProjectStore = Depends(get_store)):
	try:
		return await store.list_for_user(user.id, access_token=user.access_token)
	except BackendError as e:
		raise _backend_failure(e)


@router.get("/projects/{slug}", response_model=Dashboard)
async def project_dashboard(
	slug: str,
	user: User = Depends(get_current_user),
	store: ProjectStore = Depends(get_store),
):
	species = require_species(slug)
	try:
		existing = await store.latest_for_species(user.id, species.slug, access_token=user.access_token)
	except BackendError as e:
		raise _backend_failure(e)
	if existing is None:
		raise HTTPException(status_code=404, detail=f"No saved project for {species.name} yet")
	return build_dashboard(
		species,
		existing.math_inputs,
		existing.narrative_inputs,
		datetime.now().year,
		student_name=existing.student_name or user.display_name,
		max_years=settings.projection_years,
	)


@router.get("/achievements", response_model=Achievements)
async def achievements(user: User = Depends(get_current_user), store: ProjectStore = Depends(get_store)):
	try:
		projects = await store.list_for_user(user.id, access_token=user.access_token)
	except BackendError as e:
		raise _backend_failure(e)
	return summarize_achievements(user.display_name, [(p.species_slug, p.score) for p in projects])
