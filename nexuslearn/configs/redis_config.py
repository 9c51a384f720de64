"""
Redis connection settings shared by the job store, job queue and health check.

Clients created in one process share a single connection pool.
"""

from typing import Any

import redis.asyncio as redis

from nexuslearn.configs.config import config


class RedisConfig:
    _pool: redis.ConnectionPool | None = None

    @classmethod
    def get_pool(cls) -> redis.ConnectionPool:
        if cls._pool is None:
            # socket_timeout must stay above the worker's BLPOP timeout
            cls._pool = redis.ConnectionPool(
                host=config.redis_host,
                port=config.redis_port,
                db=config.redis_db,
                password=config.redis_password,
                decode_responses=True,
                socket_timeout=5.0,
            )
        return cls._pool

    @classmethod
    def get_redis_client(cls) -> redis.Redis:
        return redis.Redis(connection_pool=cls.get_pool())

    @classmethod
    def get_connection_info(cls) -> dict[str, Any]:
        """Connection details safe for startup logs (never the password)."""
        return {
            "host": config.redis_host,
            "port": config.redis_port,
            "db": config.redis_db,
            "password_set": bool(config.redis_password),
        }
