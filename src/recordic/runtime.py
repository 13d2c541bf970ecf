"""
recordic.runtime  ──  A thin façade that owns the engine and the store.

Usage pattern in user code
--------------------------
    from recordic.runtime import Recordic

    app = Recordic.create_app("records", db_url="postgresql://...")

    # or, without HTTP:
    rt = Recordic.init(database_url="postgresql://...")
    await rt.start()
    await rt.store.add(type="login", sid="user-1")
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, ClassVar, Optional

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from .api import build_router
from .bootstrap import init_recordic
from .config import async_url
from .persistence.store import RecordStore


class Recordic:
    """
    Process-wide singleton so callers don't have to juggle engines and
    stores across modules.
    """

    _singleton: ClassVar[Optional["Recordic"]] = None

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self._store: Optional[RecordStore] = None

    # ---------- one-shot initialiser ----------
    @classmethod
    def init(cls, *, database_url: str, **engine_options: Any) -> "Recordic":
        if cls._singleton is None:
            engine_options.setdefault("pool_pre_ping", True)
            engine = create_async_engine(async_url(database_url), **engine_options)
            cls._singleton = cls(engine)
        return cls._singleton

    @classmethod
    def instance(cls) -> "Recordic":
        if cls._singleton is None:
            raise RuntimeError("Recordic.init() has not been called")
        return cls._singleton

    @property
    def store(self) -> RecordStore:
        if self._store is None:
            raise RuntimeError("Recordic.start() has not been awaited")
        return self._store

    async def start(self) -> RecordStore:
        if self._store is None:
            self._store = await init_recordic(self.engine)
        return self._store

    async def shutdown(self) -> None:
        await self.engine.dispose()
        self._store = None
        if type(self)._singleton is self:
            type(self)._singleton = None

    # ---------- convenience helpers ----------
    @classmethod
    def create_app(
        cls,
        name: str,
        *,
        db_url: str,
        engine_options: Optional[dict[str, Any]] = None,
        **fastapi_kwargs: Any,
    ) -> FastAPI:
        """
        One-liner for web apps:
            app = Recordic.create_app("svc-name", db_url=URL)
        """
        runtime = cls.init(database_url=db_url, **(engine_options or {}))

        @asynccontextmanager
        async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
            await runtime.start()
            yield
            await runtime.shutdown()

        fastapi_kwargs.setdefault("title", name)
        app = FastAPI(lifespan=lifespan, **fastapi_kwargs)
        app.include_router(build_router(lambda: runtime.store))
        return app
