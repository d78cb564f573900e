"""
FastAPI application for the Threadline API.

Serves the GraphQL endpoint for users and threaded messages, the
GraphiQL IDE, and a couple of service endpoints.

Responsibility: Main API application setup and configuration
"""

# Load .env BEFORE importing settings (critical for pydantic-settings)
from dotenv import load_dotenv
load_dotenv('.env', override=False)

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession
from strawberry.fastapi import GraphQLRouter
import logging

from src.config import settings
from src.db.session import db, get_db
from api.graphql import build_context, schema

# Configure logging
logging.basicConfig(
    level=settings.app.log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Threadline API",
    description="GraphQL API for users and threaded messages",
    version=settings.app.app_version,
    docs_url="/docs",
    redoc_url=None
)

logger.info(f"CORS Origins configured: {settings.app.cors_origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.app.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    max_age=3600,  # Cache preflight for 1 hour
)


@app.on_event("startup")
async def startup_event():
    """Initialize services on startup"""
    logger.info("Starting Threadline API...")
    logger.info(f"Environment: {settings.app.environment}")
    logger.info(f"Debug mode: {settings.app.debug}")
    if not db.initialized:
        await db.initialize()
    if settings.app.create_tables:
        await db.create_tables()


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown"""
    logger.info("Shutting down Threadline API...")
    await db.close()


@app.get("/")
async def root():
    """Root endpoint - API information."""
    endpoints_dict = {
        "graphql": "/graphql",
        "health": "/health",
    }
    if settings.app.graphiql:
        endpoints_dict["graphiql"] = "/graphiql"

    return {
        "name": settings.app.app_name,
        "version": settings.app.app_version,
        "status": "operational",
        "endpoints": endpoints_dict
    }


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {
        "status": "healthy",
        "service": "threadline-api"
    }


# Exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler."""
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "detail": str(exc) if settings.app.debug else "An unexpected error occurred"
        }
    )


# Mount GraphQL endpoint
async def get_context(request: Request, session: AsyncSession = Depends(get_db)):
    """Context for GraphQL requests"""
    return build_context(session, request=request)


graphql_app = GraphQLRouter(
    schema,
    context_getter=get_context,
    graphql_ide="graphiql" if settings.app.graphiql else None,
)
app.include_router(graphql_app, prefix="/graphql")
logger.info("GraphQL endpoint mounted at /graphql")

if settings.app.graphiql:

    @app.get("/graphiql", include_in_schema=False)
    async def graphiql():
        """Playground entry point; the IDE itself lives on GET /graphql."""
        return RedirectResponse(url="/graphql")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=settings.app.api_host,
        port=settings.app.api_port,
        reload=settings.app.debug
    )
