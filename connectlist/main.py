# connectlist/main.py
import os
from dotenv import load_dotenv

# 1) cargar variables de entorno del .env antes de importar módulos que las leen
load_dotenv()

import asyncio
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from connectlist.api.follows import router as follows_router
from connectlist.api.lists import router as lists_router
from connectlist.api.notifications import router as notifications_router
from connectlist.api.profiles import router as profiles_router
from connectlist.api.websocket import router as ws_router
from connectlist.infra.servicebus_consumer import consume_notifications
from connectlist.services.error_reporter import ErrorReporter
from connectlist.services.websocket_manager import WebSocketManager

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("connectlist")

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

app = FastAPI(title="ConnectList API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(profiles_router)
app.include_router(lists_router)
app.include_router(follows_router)
app.include_router(notifications_router)
app.include_router(ws_router)


@app.on_event("startup")
async def startup_event():
    reporter = ErrorReporter()
    reporter.init()
    app.state.error_reporter = reporter
    app.state.ws_manager = WebSocketManager()
    # consumer de la cola en background
    app.state.consumer_task = asyncio.create_task(consume_notifications(app.state.ws_manager))
    logger.info("ConnectList API lista")


@app.on_event("shutdown")
async def shutdown_event():
    task = app.state.consumer_task
    if not task.done():
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
    await app.state.ws_manager.close_all()
    app.state.error_reporter.teardown()


@app.get("/health")
async def health():
    return {"status": "ok"}
