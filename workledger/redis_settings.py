"""
Redis cache configuration.

Single Redis instance via django-redis, with a LocMem fallback for tests and
local development.
"""

import sys
from urllib.parse import urlparse

from decouple import config


def get_redis_cache_config():
    """Build the django-redis cache configuration from REDIS_URL"""
    redis_url = urlparse(config("REDIS_URL", default="redis://localhost:6379/0"))
    host = redis_url.hostname or "localhost"
    port = redis_url.port or 6379
    db = int(redis_url.path.lstrip("/")) if redis_url.path.lstrip("/") else 0

    cache_config = {
        "default": {
            "BACKEND": "django_redis.cache.RedisCache",
            "LOCATION": f"redis://{host}:{port}/{db}",
            "OPTIONS": {
                "CLIENT_CLASS": "django_redis.client.DefaultClient",
                "CONNECTION_POOL_KWARGS": {
                    "max_connections": 20,
                    "retry_on_timeout": True,
                    "socket_connect_timeout": 5,
                    "socket_timeout": 5,
                },
            },
            "TIMEOUT": 300,
            "VERSION": 1,
            "KEY_PREFIX": "workledger",
        }
    }

    if redis_url.password:
        cache_config["default"]["OPTIONS"]["CONNECTION_POOL_KWARGS"][
            "password"
        ] = redis_url.password

    return cache_config


def get_cache_config_with_fallback():
    """
    Get cache configuration with fallback to LocMem for testing/development
    """
    testing = "test" in sys.argv
    use_locmem = config("USE_LOCMEM_CACHE", default=False, cast=bool)

    if testing or use_locmem or not config("REDIS_URL", default=""):
        return {
            "default": {
                "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
                "LOCATION": "workledger-cache",
                "TIMEOUT": 300,
                "OPTIONS": {
                    "MAX_ENTRIES": 10000,
                },
            }
        }

    return get_redis_cache_config()


# Cache key patterns
CACHE_KEYS = {
    "payroll_summary": "payroll:summary:{employee_id}:{start}:{end}:v{version}",
    "payroll_version": "payroll:version:{employee_id}",
    "health_check": "health:check",
}
