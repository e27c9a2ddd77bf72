import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from database import init_db
from errors import ConfigurationError, DuplicateEventError, EngineError, ScoringUnavailableError, ValidationError
from routers import competency as competency_router
from routers import tools as tools_router

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
log = logging.getLogger(__name__)

ERROR_STATUS = {
    ValidationError: 422,
    ConfigurationError: 422,
    DuplicateEventError: 409,
    ScoringUnavailableError: 503,
}

@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield

app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(tools_router.router, prefix="/api")
app.include_router(competency_router.router, prefix="/api")

@app.exception_handler(EngineError)
async def engine_error_handler(request: Request, exc: EngineError):
    status_code = ERROR_STATUS.get(type(exc), 400)
    log.info("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
    return JSONResponse(status_code=status_code, content=exc.to_dict())

# --- API Endpoints ---
@app.get("/")
def read_root():
    return {"status": "Sales Enablement engine is running!"}
