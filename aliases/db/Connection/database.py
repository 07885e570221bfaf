import logging
from redis.connection import BlockingConnectionPool
import redis
from aliases.core.config import settings

logger = logging.getLogger(__name__)

# Callers wait up to REDIS_POOL_TIMEOUT for a free connection instead of
# failing as soon as max_connections are checked out.
pool = BlockingConnectionPool(
    host=settings.REDIS_HOST,
    port=settings.REDIS_PORT,
    db=settings.REDIS_DB,
    password=settings.REDIS_PASSWORD or None,
    decode_responses=True,
    max_connections=settings.REDIS_MAX_CONNECTIONS,
    timeout=settings.REDIS_POOL_TIMEOUT,
    socket_connect_timeout=settings.REDIS_CONNECT_TIMEOUT,
    socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
    socket_keepalive=True,
    health_check_interval=settings.REDIS_HEALTH_CHECK_INTERVAL,
)

redis_client = redis.Redis(connection_pool=pool)


def get_redis():
    """
    FastAPI dependency: yield a client on the shared pool.
    Building it does not connect; each command or transaction borrows one
    pooled connection and returns it, so failures surface inside the
    service call that issued them.
    Usage: conn: redis.Redis = Depends(database.get_redis)
    """
    conn = redis.Redis(connection_pool=pool)
    try:
        yield conn
    finally:
        conn.close()


def verify_redis_connection():
    try:
        redis_client.ping()
        logger.info("Redis connection verified")
        return True
    except redis.exceptions.ConnectionError as e:
        logger.warning(f"Redis connection failed: {e}. Alias operations will fail until it is reachable.")
        return False
    except redis.exceptions.RedisError as e:
        logger.error(f"Unexpected Redis error: {e}")
        return False
