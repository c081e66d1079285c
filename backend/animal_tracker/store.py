from __future__ import annotations
import json
import logging
from datetime import datetime
from typing import Any, AsyncIterator, Dict, List, Optional

from pydantic import Field
from sqlalchemy.orm import sessionmaker

from .calculations.eai import CamelModel, MathInputs
from .db import SessionLocal, session_scope
from .models import ProjectSubmissionRow
from .settings import settings
from .supabase_client import SupabaseClient
from .wizard import NarrativeInputs

logger = logging.getLogger(__name__)

TABLE = "project_submissions"


class ProjectSubmissionPayload(CamelModel):
	species_slug: str
	math_inputs: MathInputs
	narrative_inputs: NarrativeInputs
	score: int = Field(ge=0, le=1000)
	tipping_point_label: str
	student_name: Optional[str] = None
	class_name: Optional[str] = None


class ProjectSubmission(CamelModel):
	id: str
	created_at: datetime
	updated_at: datetime
	user_id: str
	student_name: Optional[str] = None
	class_name: Optional[str] = None
	species_slug: str
	math_inputs: MathInputs
	narrative_inputs: NarrativeInputs
	score: int
	tipping_point_label: str


def _row_values(user_id: str, payload: ProjectSubmissionPayload) -> Dict[str, Any]:
	return {
		"user_id": user_id,
		"student_name": payload.student_name,
		"class_name": payload.class_name,
		"species_slug": payload.species_slug,
		"math_inputs": payload.math_inputs.model_dump(by_alias=True),
		"narrative_inputs": payload.narrative_inputs.model_dump(by_alias=True),
		"score": payload.score,
		"tipping_point_label": payload.tipping_point_label,
	}


class ProjectStore:
	"""Where finished wizard projects are kept."""

	async def create(self, user_id: str, payload: ProjectSubmissionPayload, *, access_token: Optional[str] = None) -> ProjectSubmission:
		raise NotImplementedError

	async def list_for_user(self, user_id: str, *, access_token: Optional[str] = None) -> List[ProjectSubmission]:
		raise NotImplementedError

	async def latest_for_species(self, user_id: str, species_slug: str, *, access_token: Optional[str] = None) -> Optional[ProjectSubmission]:
		raise NotImplementedError

	async def aclose(self) -> None:
		return None


class SqlProjectStore(ProjectStore):
	def __init__(self, session_factory: sessionmaker = SessionLocal) -> None:
		self._session_factory = session_factory

	@staticmethod
	def _to_model(row: ProjectSubmissionRow) -> ProjectSubmission:
		return ProjectSubmission(
			id=row.id,
			created_at=row.created_at,
			updated_at=row.updated_at,
			user_id=row.user_id,
			student_name=row.student_name,
			class_name=row.class_name,
			species_slug=row.species_slug,
			math_inputs=MathInputs.model_validate(json.loads(row.math_inputs)),
			narrative_inputs=NarrativeInputs.model_validate(json.loads(row.narrative_inputs)),
			score=row.score,
			tipping_point_label=row.tipping_point_label,
		)

	async def create(self, user_id: str, payload: ProjectSubmissionPayload, *, access_token: Optional[str] = None) -> ProjectSubmission:
		values = _row_values(user_id, payload)
		values["math_inputs"] = json.dumps(values["math_inputs"])
		values["narrative_inputs"] = json.dumps(values["narrative_inputs"])
		with session_scope(self._session_factory) as db:
			row = ProjectSubmissionRow(**values)
			db.add(row)
			# Flush fills the generated id and timestamps before the commit
			db.flush()
			db.refresh(row)
			return self._to_model(row)

	async def list_for_user(self, user_id: str, *, access_token: Optional[str] = None) -> List[ProjectSubmission]:
		with session_scope(self._session_factory) as db:
			rows = (
				db.query(ProjectSubmissionRow)
				.filter(ProjectSubmissionRow.user_id == user_id)
				.order_by(ProjectSubmissionRow.created_at.desc())
				.all()
			)
			return [self._to_model(r) for r in rows]

	async def latest_for_species(self, user_id: str, species_slug: str, *, access_token: Optional[str] = None) -> Optional[ProjectSubmission]:
		with session_scope(self._session_factory) as db:
			row = (
				db.query(ProjectSubmissionRow)
				.filter(ProjectSubmissionRow.user_id == user_id, ProjectSubmissionRow.species_slug == species_slug)
				.order_by(ProjectSubmissionRow.created_at.desc())
				.first()
			)
			return self._to_model(row) if row else None


class SupabaseProjectStore(ProjectStore):
	def __init__(self, client: Optional[SupabaseClient] = None) -> None:
		self._client = client or SupabaseClient()

	async def create(self, user_id: str, payload: ProjectSubmissionPayload, *, access_token: Optional[str] = None) -> ProjectSubmission:
		row = await self._client.insert(TABLE, _row_values(user_id, payload), access_token=access_token)
		return ProjectSubmission.model_validate(row)

	async def list_for_user(self, user_id: str, *, access_token: Optional[str] = None) -> List[ProjectSubmission]:
		rows = await self._client.select(
			TABLE,
			filters={"user_id": user_id},
			order="created_at.desc",
			access_token=access_token,
		)
		return [ProjectSubmission.model_validate(r) for r in rows]

	async def latest_for_species(self, user_id: str, species_slug: str, *, access_token: Optional[str] = None) -> Optional[ProjectSubmission]:
		rows = await self._client.select(
			TABLE,
			filters={"user_id": user_id, "species_slug": species_slug},
			order="created_at.desc",
			limit=1,
			access_token=access_token,
		)
		return ProjectSubmission.model_validate(rows[0]) if rows else None

	async def aclose(self) -> None:
		await self._client.aclose()


def build_store() -> ProjectStore:
	kind = (settings.project_store or "sql").lower()
	if kind == "supabase":
		return SupabaseProjectStore()
	if kind != "sql":
		raise ValueError(f"PROJECT_STORE must be 'sql' or 'supabase', got {settings.project_store!r}")
	return SqlProjectStore()


async def get_store() -> AsyncIterator[ProjectStore]:
	store = build_store()
	try:
		yield store
	finally:
		await store.aclose()


async def create_project_submission(
	store: ProjectStore,
	user_id: str,
	user_metadata: Dict[str, Any],
	payload: ProjectSubmissionPayload,
	*,
	access_token: Optional[str] = None,
) -> ProjectSubmission:
	"""Save a finished project, naming it after the student when the form sent no name.

	An empty name is kept as sent; only a missing one falls back to the metadata.
	"""
	payload = payload.model_copy(
		update={
			"student_name": payload.student_name if payload.student_name is not None else user_metadata.get("student_name"),
			"class_name": payload.class_name if payload.class_name is not None else user_metadata.get("class_name"),
		}
	)
	submission = await store.create(user_id, payload, access_token=access_token)
	logger.info("Saved %s project %s for user %s (score %s)", payload.species_slug, submission.id, user_id, payload.score)
	return submission
