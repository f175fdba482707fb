# connectlist/api/deps.py
from fastapi import Request

from connectlist.services.error_reporter import ErrorReporter
from connectlist.services.websocket_manager import WebSocketManager


def get_ws_manager(request: Request) -> WebSocketManager:
    return request.app.state.ws_manager


def get_reporter(request: Request) -> ErrorReporter:
    return request.app.state.error_reporter
