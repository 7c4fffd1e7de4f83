"""
Health Check Service

Reports the status of the service dependencies. MongoDB is required for
every operation; Redis only backs sessions, so losing it degrades the
service instead of taking it down.
"""

import os
import time
from datetime import datetime
from typing import Any, Dict, List, Optional
from opentelemetry import trace

from .. import __version__
from .mongodb import MongoDBService
from .redis import RedisService

tracer = trace.get_tracer(__name__)


class HealthCheckService:
    """Dependency health aggregation."""

    def __init__(self, mongodb_service: MongoDBService, redis_service: Optional[RedisService] = None):
        self.mongodb_service = mongodb_service
        self.redis_service = redis_service

    def get_health(self) -> Dict[str, Any]:
        with tracer.start_as_current_span("health.check") as span:
            start_time = time.time()

            mongodb_health = self._timed(self.mongodb_service.health_check)
            if self.redis_service is not None:
                redis_health = self._timed(self.redis_service.health_check)
            else:
                redis_health = {"status": "not_configured"}

            overall_status = self._determine_overall_status(mongodb_health["status"], redis_health["status"])

            span.set_attributes({
                "health.overall_status": overall_status,
                "health.mongodb_status": mongodb_health["status"],
                "health.redis_status": redis_health["status"]
            })

            return {
                "status": overall_status,
                "service": "statusboard-api",
                "version": __version__,
                "environment": os.getenv('ENVIRONMENT', 'development'),
                "timestamp": datetime.utcnow().isoformat() + "Z",
                "response_time_ms": round((time.time() - start_time) * 1000, 2),
                "dependencies": {
                    "mongodb": mongodb_health,
                    "redis": redis_health
                }
            }

    def _timed(self, check) -> Dict[str, Any]:
        start_time = time.time()
        result = dict(check())
        result["response_time_ms"] = round((time.time() - start_time) * 1000, 2)
        return result

    def _determine_overall_status(self, mongodb_status: str, redis_status: str) -> str:
        if mongodb_status != "healthy":
            return "unhealthy"
        if redis_status == "unhealthy":
            return "degraded"
        return "healthy"
