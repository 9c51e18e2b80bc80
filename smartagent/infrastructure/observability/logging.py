import structlog
import logging
import sys
from typing import Dict, Any, Optional
from datetime import datetime, timezone
import os


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "console",
    service_name: str = "smart-agent"
) -> None:
    """Setup structured logging configuration"""

    # Configure Python logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO)
    )

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        add_service_context,
    ]

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.bind_contextvars(
        service=service_name,
        environment=os.getenv("ENVIRONMENT", "development"),
    )


def add_service_context(logger: logging.Logger, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Add conversation and task ids to all log entries"""

    if "timestamp" not in event_dict:
        event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()

    bound = structlog.contextvars.get_contextvars()
    for key in ("conversation_id", "task_id"):
        if key in bound and key not in event_dict:
            event_dict[key] = bound[key]

    return event_dict


class AgentLogger:
    """Specialized logger for engine events"""

    def __init__(self, name: str):
        self.logger = structlog.get_logger(name)

    def log_context_update(
        self,
        layer: str,
        action: str,
        details: Optional[Dict[str, Any]] = None
    ):
        """Log context layer changes and window builds"""

        self.logger.info(
            "context_update",
            layer=layer,
            action=action,
            details=details or {}
        )

    def log_task_transition(
        self,
        task_id: str,
        from_status: str,
        to_status: str,
        score: Optional[int] = None
    ):
        """Log task lifecycle transitions"""

        self.logger.info(
            "task_transition",
            task_id=task_id,
            from_status=from_status,
            to_status=to_status,
            score=score
        )

    def log_memory_event(
        self,
        tier: str,
        action: str,
        item_id: Optional[str] = None,
        **details: Any
    ):
        """Log insertions, evictions, consolidations and forgetting"""

        self.logger.info(
            "memory_event",
            tier=tier,
            action=action,
            item_id=item_id,
            **details
        )


agent_logger = AgentLogger("smartagent")


class MetricsCollector:
    """Collect counters and latencies and emit them as log events"""

    def __init__(self):
        self.metrics: Dict[str, Any] = {}

    def record_latency(self, operation: str, duration_ms: float, tags: Optional[Dict[str, str]] = None):
        """Record operation latency"""

        key = f"latency.{operation}"
        if key not in self.metrics:
            self.metrics[key] = {
                "count": 0,
                "sum": 0.0,
                "min": float('inf'),
                "max": 0.0
            }

        entry = self.metrics[key]
        entry["count"] += 1
        entry["sum"] += duration_ms
        entry["min"] = min(entry["min"], duration_ms)
        entry["max"] = max(entry["max"], duration_ms)

        agent_logger.logger.debug(
            "metric",
            metric_type="latency",
            operation=operation,
            duration_ms=duration_ms,
            tags=tags or {}
        )

    def increment_counter(self, name: str, value: int = 1, tags: Optional[Dict[str, str]] = None):
        """Increment a counter metric"""

        self.metrics[name] = self.metrics.get(name, 0) + value

        agent_logger.logger.debug(
            "metric",
            metric_type="counter",
            name=name,
            value=value,
            tags=tags or {}
        )

    def get_metrics_summary(self) -> Dict[str, Any]:
        """Get summary of all metrics"""

        summary = {}
        for key, value in self.metrics.items():
            if isinstance(value, dict) and "count" in value:
                summary[key] = {
                    "count": value["count"],
                    "avg": value["sum"] / value["count"] if value["count"] > 0 else 0,
                    "min": value["min"] if value["min"] != float('inf') else 0,
                    "max": value["max"]
                }
            else:
                summary[key] = value

        return summary
