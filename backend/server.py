from fastapi import FastAPI, APIRouter
from starlette.middleware.cors import CORSMiddleware
import logging

from config import CORS_ORIGINS, LOG_FORMAT, LOG_LEVEL, VIEW_CACHE_TTL_SECONDS, VIEW_CACHE_URL
from database import Base, engine, get_db
from bootstrap import ensure_default_config
from views import build_view_cache
from routers.admin_content import router as admin_content_router
from routers.admin_events import router as admin_events_router
from routers.auth_session import router as auth_session_router
from routers.profile import router as profile_router
from routers.public import router as public_router

# Configure logging
logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
logger = logging.getLogger(__name__)

app = FastAPI(title="Club Portal API", version="1.0.0")
api_router = APIRouter(prefix="/api")

app.state.view_cache = build_view_cache(VIEW_CACHE_URL, VIEW_CACHE_TTL_SECONDS)


# ==================== STARTUP ====================

@app.on_event("startup")
async def startup_event():
    Base.metadata.create_all(bind=engine)
    db = next(get_db())
    try:
        ensure_default_config(db)
    finally:
        db.close()
    logger.info("Club portal API started (view cache: %s)", type(app.state.view_cache).__name__)


api_router.include_router(public_router)
api_router.include_router(auth_session_router)
api_router.include_router(profile_router)
api_router.include_router(admin_events_router)
api_router.include_router(admin_content_router)

# Include router and add middleware
app.include_router(api_router)

app.add_middleware(
    CORSMiddleware,
    allow_credentials=True,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)
