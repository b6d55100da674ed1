"""
Alumni Network Platform - Main Application

FastAPI backend with:
- PostgreSQL for every resource (SQLAlchemy)
- MongoDB document mirror for universities, connections and admin users
- Polygon + IPFS for credential verification
- DeepSeek AI for newsletter drafts
- JWT authentication over stored sessions

Run: uvicorn alumni_network.main:app --reload
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from alumni_network import __version__
from alumni_network.api.routes import api_router
from alumni_network.core.config import get_settings
from alumni_network.core.errors import register_exception_handlers
from alumni_network.core.logging_config import setup_logging
from alumni_network.db.mongodb import init_mongo_indexes, test_mongo_connection
from alumni_network.db.postgres import init_db, test_postgres_connection

settings = get_settings()
setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Alumni Network Platform",
    description="""
    Multi-tenant alumni network API.

    ## Features
    - **Universities**: tenant registration and settings
    - **Profiles & Connections**: member directory and networking
    - **Credentials**: IPFS metadata and on-chain verification
    - **Jobs, Scholarships, Events**: postings, applications, registrations
    - **Messaging & Notifications**: encrypted messages, in-app notifications
    - **Recommendations & Gamification**: match scoring, points and levels

    ## Databases
    - PostgreSQL: every resource
    - MongoDB: document mirror under /api/mirror
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware (allow all for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(api_router, prefix="/api")


@app.on_event("startup")
async def startup_event():
    """Create missing tables and MongoDB indexes."""
    try:
        init_db()
        logger.info("Database tables initialized")
    except Exception as e:
        logger.warning("Database initialization failed: %s", e)

    try:
        init_mongo_indexes()
        logger.info("MongoDB indexes initialized")
    except Exception as e:
        logger.warning("MongoDB index initialization failed: %s", e)


@app.get("/", tags=["Health"])
async def root():
    return {"status": "healthy", "app": "Alumni Network Platform", "version": __version__}


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    database = test_postgres_connection()
    mongodb = test_mongo_connection()
    return {
        "status": "healthy" if database else "degraded",
        "database": "connected" if database else "disconnected",
        "mongodb": "connected" if mongodb else "disconnected"
    }
