from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError

from infra.database.connection import init_db, close_db
from api.routers import songs
from domain.exceptions import SongValidationError, SongNotFoundError
from utils.logger import get_logger

from config import settings

logger = get_logger(__name__)

# Lifespan event to handle startup/shutdown
@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()  # DuckDBの初期化 (Raw SQLによるSequence/Table作成 + Alembic)
    yield
    close_db()

app = FastAPI(title="Song Catalog API", lifespan=lifespan)

# CORS Configuration
origins = [
    f"http://localhost:{settings.PORT}",
    f"http://127.0.0.1:{settings.PORT}",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(SongValidationError)
async def song_validation_error_handler(request: Request, exc: SongValidationError):
    logger.warning(f"Rejected request {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=400, content={"detail": str(exc)})

@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    # 不正なIDやリクエストボディも 400 として返す
    logger.warning(f"Invalid request {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"detail": describe_errors(exc)})

@app.exception_handler(SongNotFoundError)
async def song_not_found_handler(request: Request, exc: SongNotFoundError):
    return JSONResponse(status_code=404, content={"detail": "Song not found"})

@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    # DBの内部情報はレスポンスに含めない
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})

def describe_errors(exc: RequestValidationError) -> str:
    # 例: path.song_id: Input should be a valid integer; body.group: Field required
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", []))
        parts.append(f"{loc}: {err.get('msg', '')}" if loc else err.get("msg", ""))
    return "; ".join(parts) or "Invalid request"

# Root endpoint for health check
@app.get("/")
async def root():
    return {"message": "Song Catalog API is running"}

# Include Routers
app.include_router(songs.router)
