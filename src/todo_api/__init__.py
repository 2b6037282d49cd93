"""
FastAPI Todo Backend package.

Modules:
- settings: environment-driven configuration
- db: asyncpg connection pool, schema initialization and PostgresRepository
- repositories: storage contract and the in-memory backend
- routers.todos: REST endpoints for todos
- main: application factory, health check and the ASGI `app`
"""

__version__ = "0.1.0"
