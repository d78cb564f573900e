"""
Start the Threadline API server.

Responsibility: Local development entry point
"""

import sys
import os

# Add project root to Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import uvicorn
from src.config import settings


if __name__ == "__main__":
    port = settings.app.api_port
    print("🚀 Starting Threadline API Server...")
    print(f"📍 GraphQL endpoint: http://localhost:{port}/graphql")
    if settings.app.graphiql:
        print(f"🔍 GraphiQL: http://localhost:{port}/graphiql")
    print("\nPress CTRL+C to stop\n")

    uvicorn.run(
        "api.main:app",
        host=settings.app.api_host,
        port=port,
        reload=settings.app.debug,
        log_level=settings.app.log_level.lower()
    )
