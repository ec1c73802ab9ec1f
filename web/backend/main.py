"""abilitygraph HTTP service - FastAPI application."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from abilitygraph import __version__ as core_version
from abilitygraph.nodes.registry import get_registry

from .routes import graphs_router, nodes_router

# Create FastAPI app
app = FastAPI(
    title="abilitygraph",
    description="Validate and compile ability node graphs",
    version="0.1.0",
)

# Configure CORS for the editor dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify exact origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(nodes_router, prefix="/api")
app.include_router(graphs_router, prefix="/api")


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    registry = get_registry()
    return {
        "status": "healthy",
        "service": "abilitygraph",
        "version": core_version,
        "nodeRegistryVersion": registry.version,
        "nodeTypes": len(registry),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "web.backend.main:app",
        host="0.0.0.0",
        port=8080,
        reload=True,
    )
