"""Backend API routes."""

from .graphs import router as graphs_router
from .nodes import router as nodes_router

__all__ = ["graphs_router", "nodes_router"]
