import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

import models.tables  # noqa: F401  registers tables on Base.metadata
from api import analyses, auth, resumes
from api.router import limiter, router
from config import settings
from database import Base, engine

logging.basicConfig(
    level=logging.DEBUG if settings.debug else settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Create all tables on startup
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Jobly API",
    description="Tailor a resume to a job posting with AI suggestions",
    version="1.0.0",
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)
app.include_router(auth.router)
app.include_router(resumes.router)
app.include_router(analyses.router)
