from __future__ import annotations

import uuid
from typing import Callable

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from magix.api.routes import admin, analytics, archivos, articulos, asistente, auth, eventos, health, registros, reservas
from magix.core.config import settings
from magix.core.logging import configure_logging

configure_logging()
limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])


app = FastAPI(title=settings.app_name)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=True,
)


@app.middleware("http")
async def add_request_id(request: Request, call_next: Callable[[Request], Response]) -> Response:
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


app.include_router(health.router)
app.include_router(auth.router)
app.include_router(registros.router)
app.include_router(eventos.router)
app.include_router(articulos.router)
app.include_router(reservas.router)
app.include_router(analytics.router)
app.include_router(archivos.router)
app.include_router(asistente.router)
app.include_router(admin.router)
