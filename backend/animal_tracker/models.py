from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Integer, Text
from .db import Base


def _new_id() -> str:
	return str(uuid.uuid4())


class ProjectSubmissionRow(Base):
	__tablename__ = "project_submissions"
	id = Column(String(36), primary_key=True, default=_new_id)
	# Subject of the hosted auth provider's access token
	user_id = Column(String(64), nullable=False, index=True)
	student_name = Column(String(128), nullable=True)
	class_name = Column(String(128), nullable=True)
	species_slug = Column(String(64), nullable=False, index=True)
	math_inputs = Column(Text, nullable=False)  # JSON string, camelCase keys
	narrative_inputs = Column(Text, nullable=False)  # JSON string
	score = Column(Integer, nullable=False)
	tipping_point_label = Column(String(128), nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
