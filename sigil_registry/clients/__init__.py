"""
SIGIL Registry — External Service Clients

Connection management for PostgreSQL (required) and Redis (optional).
"""

from sigil_registry.clients.postgres import PostgresClient
from sigil_registry.clients.redis import RedisClient, connect_cache

__all__ = ["PostgresClient", "RedisClient", "connect_cache"]
