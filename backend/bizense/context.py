"""
Process-wide collaborators, built once by create_app() and kept on
app.state.context. Handlers reach them through FastAPI dependencies.
"""
import tempfile
from dataclasses import dataclass
from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from bizense.config import Settings
from bizense.core.identity import IdentityClient
from bizense.db import build_engine, build_session_factory


@dataclass
class AppContext:
    settings: Settings
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    identity: IdentityClient
    staging_dir: Path

    @classmethod
    def from_settings(cls, settings: Settings) -> "AppContext":
        engine = build_engine(settings)
        staging_dir = (
            Path(settings.STAGING_DIR)
            if settings.STAGING_DIR
            else Path(tempfile.gettempdir()) / "bizense-uploads"
        )
        return cls(
            settings=settings,
            engine=engine,
            session_factory=build_session_factory(engine),
            identity=IdentityClient(settings),
            staging_dir=staging_dir,
        )

    async def close(self) -> None:
        await self.engine.dispose()
