from fastapi import APIRouter, Depends
from aliases.db.Connection import database
import redis

router = APIRouter(tags=["health"])

# simple liveness
@router.get("/health")
def health():
    return {"status": "healthy", "service": "aliases"}

# readiness: check Redis connectivity
@router.get("/ready")
def readiness(conn: redis.Redis = Depends(database.get_redis)):
    details = {"redis": "unknown"}
    try:
        conn.ping()
        details["redis"] = "ok"
    except redis.exceptions.RedisError as e:
        details["redis"] = f"error: {str(e)}"

    return {"ready": details["redis"] == "ok", "details": details}
