from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncEngine

from shikshan.api.v1.monitoring.router import router as monitoring_router
from shikshan.db.session import create_engine, create_session_factory


def create_app(engine: Optional[AsyncEngine] = None) -> FastAPI:
    app = FastAPI(title="Shikshan Data Service")

    engine = engine or create_engine()
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(monitoring_router)

    return app


app = create_app()
