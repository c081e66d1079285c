from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from .db import Base, engine
from .settings import settings
from .routers import auth
from .routers import eai
from .routers import species
from .routers import wizard
from .routers import projects

logging.basicConfig(
	level=getattr(logging, settings.log_level.upper(), logging.INFO),
	format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logging.getLogger("httpx").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
	# Local project table; the hosted backend manages its own schema
	if settings.project_store.lower() == "sql":
		Base.metadata.create_all(bind=engine)
	logger.info("Project store: %s", settings.project_store)
	yield


app = FastAPI(title="Endangered Animal Tracker API", lifespan=lifespan)
app.include_router(auth.router)
app.include_router(eai.router)
app.include_router(species.router)
app.include_router(wizard.router)
app.include_router(projects.router)


@app.get("/", include_in_schema=False)
async def redirect_root_to_docs():
	return RedirectResponse(url="/docs")

@app.get("/info")
def root():
	return {
		"status": "ok",
		"project_store": settings.project_store,
		"supabase_configured": settings.supabase_configured,
	}
