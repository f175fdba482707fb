# connectlist/services/error_reporter.py
import logging
import os
from collections import deque
from datetime import datetime, timezone
from typing import Any, Deque, Dict, Optional

logger = logging.getLogger(__name__)

ENVIRONMENT = os.getenv("ENVIRONMENT", "development")


class ErrorReporter:
    """
    Punto único para reportar errores. Se construye en el startup de la app
    (init) y se cierra en el shutdown (teardown); no hay instancia global.
    Hoy todo termina en logging con el contexto adjunto.
    """

    def __init__(self, environment: str = ENVIRONMENT, max_breadcrumbs: int = 50):
        self.environment = environment
        self.is_initialized = False
        self.user: Dict[str, Any] = {}
        self.breadcrumbs: Deque[Dict[str, Any]] = deque(maxlen=max_breadcrumbs)
        self.captured = 0

    def init(self):
        self.is_initialized = True
        logger.info("ErrorReporter listo (environment=%s)", self.environment)

    def teardown(self):
        self.is_initialized = False
        self.breadcrumbs.clear()
        self.user = {}

    def set_user(self, user: Dict[str, Any]):
        self.user = {
            "id": user.get("sub") or user.get("id"),
            "email": user.get("email"),
        }

    def add_breadcrumb(self, message: str, category: str = "custom", data: Optional[dict] = None):
        self.breadcrumbs.append({
            "message": message,
            "category": category,
            "data": data or {},
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })

    def capture_exception(self, error: BaseException, context: Optional[dict] = None):
        self.captured += 1
        logger.error(
            "captured %s: %s | context=%s user=%s breadcrumbs=%d",
            type(error).__name__,
            error,
            context or {},
            self.user,
            len(self.breadcrumbs),
        )

    def capture_message(self, message: str, level: str = "info", context: Optional[dict] = None):
        level_no = logging.getLevelName(level.upper())
        if not isinstance(level_no, int):
            level_no = logging.INFO
        logger.log(level_no, "%s | context=%s", message, context or {})

    def capture_network_error(self, error: BaseException, url: str, method: str = "GET"):
        self.capture_exception(error, {"type": "network_error", "url": url, "method": method})

    def capture_auth_error(self, error: BaseException, action: str):
        self.capture_exception(error, {"type": "auth_error", "action": action})

    def capture_database_error(self, error: BaseException, query: str, table: str):
        self.capture_exception(error, {"type": "database_error", "query": query, "table": table})


def report_database_error(
    reporter: Optional[ErrorReporter], error: BaseException, query: str, table: str
):
    if reporter is not None:
        reporter.capture_database_error(error, query=query, table=table)
    else:
        logger.error("database error on %s (%s): %s", table, query, error)
