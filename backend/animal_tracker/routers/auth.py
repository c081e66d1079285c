from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel, Field
import logging

from ..settings import settings

router = APIRouter(prefix="/auth", tags=["auth"])

logger = logging.getLogger(__name__)
bearer_scheme = HTTPBearer(auto_error=False)


class User(BaseModel):
	"""The signed-in student, as described by the hosted auth provider's token."""

	id: str
	email: Optional[str] = None
	user_metadata: Dict[str, Any] = Field(default_factory=dict)
	# Raw bearer token, forwarded to the hosted backend for row level security
	access_token: Optional[str] = Field(default=None, exclude=True)

	@property
	def student_name(self) -> Optional[str]:
		return self.user_metadata.get("student_name")

	@property
	def display_name(self) -> str:
		return (
			self.user_metadata.get("student_name")
			or self.user_metadata.get("full_name")
			or self.email
			or "Explorer"
		)


def decode_access_token(token: str) -> Dict[str, Any]:
	return jwt.decode(
		token,
		settings.jwt_secret_key,
		algorithms=[settings.jwt_algorithm],
		audience=settings.jwt_audience,
	)


def get_current_user(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)) -> User:
	credentials_exception = HTTPException(
		status_code=401,
		detail="Could not validate credentials",
		headers={"WWW-Authenticate": "Bearer"},
	)
	if credentials is None or credentials.scheme.lower() != "bearer":
		raise credentials_exception
	token = credentials.credentials
	try:
		payload = decode_access_token(token)
	except JWTError as exc:
		logger.info("Rejected access token: %s", exc)
		raise credentials_exception
	user_id: str | None = payload.get("sub")
	if not user_id:
		raise credentials_exception
	metadata = payload.get("user_metadata")
	return User(
		id=user_id,
		email=payload.get("email"),
		user_metadata=metadata if isinstance(metadata, dict) else {},
		access_token=token,
	)


@router.get("/me", response_model=User)
async def me(user: User = Depends(get_current_user)):
	return user
