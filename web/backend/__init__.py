"""abilitygraph HTTP service.

Stateless FastAPI wrapper around the `abilitygraph` core: every request
carries the graph it operates on and nothing is persisted.
"""

__version__ = "0.1.0"
