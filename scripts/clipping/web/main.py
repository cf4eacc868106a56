"""
FastAPI application for the clipping service.
"""

from dotenv import load_dotenv
from fastapi import FastAPI

from clipping import __version__
from clipping.web.lifespan import lifespan

# Load .env before anything else
load_dotenv()

# Create app
app = FastAPI(
    title="Legal Clipping",
    description="Daily legal/regulatory clipping report",
    version=__version__,
    lifespan=lifespan,
)

# Import and register routes
from clipping.web.health import router as health_router
from clipping.web.routes import reports

app.include_router(health_router)
app.include_router(reports.router)
