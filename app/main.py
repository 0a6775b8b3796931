import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

# ✅ Import All API Routes
from app.api.routes import auth, admin, student, students, upload, interview, recruiter, storage, health

from app.core import config
from app.core.errors import validation_exception_handler
from app.core.logging_config import setup_logging, sanitize_log_data

logger = logging.getLogger(__name__)


# ============================================
# ✅ STARTUP
# ============================================

def prepare_database():
    if config.RUN_MIGRATIONS:
        from app.db.migrate import run_migrations
        run_migrations()
    else:
        from app.db.init_db import init_db
        init_db()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and bring the schema up to date before serving."""
    setup_logging(config.LOG_LEVEL, config.LOG_DIR)
    prepare_database()

    settings = sanitize_log_data({
        "database_url": config.DATABASE_URL,
        "app_url": config.APP_URL,
        "api_url": config.API_URL,
        "storage_dir": config.STORAGE_DIR,
        "smtp_host": config.SMTP_HOST,
        "report_receiver_email": config.REPORT_RECEIVER_EMAIL,
        "run_migrations": config.RUN_MIGRATIONS,
    })
    logger.info(f"Recruiting Portal API started: {settings}")
    yield
    logger.info("Recruiting Portal API shutting down")


# ============================================
# ✅ FASTAPI APP INIT
# ============================================

app = FastAPI(title="Recruiting Portal API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Authorization", "Content-Type"],
)

app.add_exception_handler(RequestValidationError, validation_exception_handler)


# ============================================
# ✅ REGISTER ALL ROUTERS
# ============================================

app.include_router(auth.router)
app.include_router(admin.router)
app.include_router(student.router)
app.include_router(students.router)
app.include_router(upload.router)
app.include_router(interview.router)
app.include_router(recruiter.router)
app.include_router(storage.router)
app.include_router(health.router)


# ============================================
# ✅ ROOT ENDPOINT
# ============================================

@app.get("/")
def root():
    return {"status": "Recruiting Portal API running"}
