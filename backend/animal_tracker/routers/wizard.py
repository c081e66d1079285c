from typing import Any, Dict, List

from fastapi import APIRouter, Body, HTTPException

from ..errors import UnknownStepError
from ..wizard import BIRTH_FREQUENCY_OPTIONS, WIZARD_STEPS, FieldError, StepPreview, step_preview, validate_step

router = APIRouter(prefix="/wizard", tags=["wizard"])


@router.get("/steps")
def list_steps():
	return {
		"steps": [{"id": s.id, "title": s.title, "fields": list(s.fields)} for s in WIZARD_STEPS],
		"birthFrequencyOptions": BIRTH_FREQUENCY_OPTIONS,
	}


@router.post("/steps/{step_id}/validate")
def validate(step_id: str, values: Dict[str, Any] = Body(...)):
	try:
		errors: List[FieldError] = validate_step(step_id, values)
	except UnknownStepError as e:
		raise HTTPException(status_code=404, detail=str(e))
	return {"valid": not errors, "errors": [err.model_dump(by_alias=True) for err in errors]}


@router.post("/preview", response_model=StepPreview)
def preview(values: Dict[str, Any] = Body(...)):
	return step_preview(values)
