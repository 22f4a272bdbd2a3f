# pokecatch/main.py
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError
import logging

from pokecatch import config
from pokecatch.deps import access_gate
from pokecatch.models import User, Pokemon, CaughtPokemon  # noqa: F401  (registers tables)
from pokecatch.routers import auth, collection, pokemon
from pokecatch.utils.database import Base, engine


logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger("pokecatch")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application Startup: Creating database tables...")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Application Startup: Tables created successfully.")
    yield
    await engine.dispose()
    logger.info("Application Shutdown: Goodbye!")


app = FastAPI(title="Pokecatch", lifespan=lifespan)

# --- Access gate: verifies bearer tokens for /protected/* before any handler runs ---
app.middleware("http")(access_gate)

# --- Standard CORS Middleware (outermost, so preflights and 401s carry CORS headers) ---
app.add_middleware(
    CORSMiddleware, allow_origins=config.ALLOWED_ORIGINS, allow_credentials=True,
    allow_methods=["*"], allow_headers=["*"],
)


# --- Error handlers: never leak internals to the caller ---
@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception(f"Database error on {request.method} {request.url.path}")
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": "Internal Server Error"})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": "Internal Server Error"})


# --- Include Routers ---
logger.info("Including routers...")
app.include_router(auth.router)        # /signup, /signin
app.include_router(pokemon.router)     # /pokemon/...
app.include_router(collection.router)  # /protected/...
logger.info("Routers included.")


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.get("/")
def read_root(): return {"message": "Pokecatch Backend Running."}
