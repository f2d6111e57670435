"""SQLAlchemy-backed endpoint store (SQLite by default)."""

import asyncio
import json
from datetime import datetime

from sqlalchemy import DateTime, String, Text, create_engine, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker

from endpoint_proxy.endpoints.models import EndpointConfig, EndpointStatus
from endpoint_proxy.endpoints.store import EndpointStore, ProxyIdConflict
from endpoint_proxy.security.secrets import KeyCipher


class Base(DeclarativeBase):
    pass


class EndpointRow(Base):
    __tablename__ = "endpoints"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    api_type: Mapped[str] = mapped_column(String(32), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    proxy_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    target_url: Mapped[str] = mapped_column(Text, nullable=False, default="")
    api_key: Mapped[str] = mapped_column(Text, nullable=False, default="")  # sealed
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    allowed_origins: Mapped[str] = mapped_column(Text, nullable=False, default="[]")  # JSON list
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=EndpointStatus.NOT_TESTED.value)
    last_tested: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class SQLEndpointStore(EndpointStore):
    """Blocking SQLAlchemy sessions, run off the event loop via asyncio.to_thread."""

    def __init__(self, database_url: str, cipher: KeyCipher | None = None):
        super().__init__(cipher)
        connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
        self._engine = create_engine(database_url, connect_args=connect_args)
        self._sessions = sessionmaker(self._engine, expire_on_commit=False)
        Base.metadata.create_all(self._engine)

    def _to_config(self, row: EndpointRow) -> EndpointConfig:
        return self._unseal({
            "id": row.id,
            "api_type": row.api_type,
            "name": row.name,
            "proxy_id": row.proxy_id,
            "target_url": row.target_url,
            "api_key": row.api_key,
            "description": row.description,
            "allowed_origins": json.loads(row.allowed_origins or "[]"),
            "status": row.status,
            "last_tested": row.last_tested,
            "created_at": row.created_at,
        })

    def _apply(self, row: EndpointRow, config: EndpointConfig) -> None:
        record = self._seal(config)
        row.api_type = record["api_type"]
        row.name = record["name"]
        row.proxy_id = record["proxy_id"]
        row.target_url = record["target_url"]
        row.api_key = record["api_key"]
        row.description = record["description"]
        row.allowed_origins = json.dumps(record["allowed_origins"])
        row.status = record["status"]
        row.last_tested = config.last_tested
        row.created_at = config.created_at

    # --- sync implementations ---

    def _list_all(self) -> list[EndpointConfig]:
        with self._sessions() as session:
            rows = session.scalars(select(EndpointRow).order_by(EndpointRow.created_at.desc()))
            return [self._to_config(row) for row in rows]

    def _get(self, endpoint_id: str) -> EndpointConfig | None:
        with self._sessions() as session:
            row = session.get(EndpointRow, endpoint_id)
            return self._to_config(row) if row is not None else None

    def _get_by_proxy_id(self, proxy_id: str) -> EndpointConfig | None:
        with self._sessions() as session:
            row = session.scalars(
                select(EndpointRow).where(EndpointRow.proxy_id == proxy_id)
            ).first()
            return self._to_config(row) if row is not None else None

    def _create(self, config: EndpointConfig) -> EndpointConfig:
        try:
            with self._sessions.begin() as session:
                if session.get(EndpointRow, config.id) is not None:
                    raise ValueError(f"Endpoint {config.id} already exists")
                taken = session.scalar(
                    select(EndpointRow.id).where(EndpointRow.proxy_id == config.proxy_id)
                )
                if taken is not None:
                    raise ProxyIdConflict(config.proxy_id)
                row = EndpointRow(id=config.id)
                self._apply(row, config)
                session.add(row)
        except IntegrityError as e:
            # A concurrent insert won the unique proxy_id index
            raise ProxyIdConflict(config.proxy_id) from e
        return config

    def _update(self, endpoint_id: str, changes: dict) -> EndpointConfig | None:
        with self._sessions.begin() as session:
            row = session.get(EndpointRow, endpoint_id, with_for_update=True)
            if row is None:
                return None
            for key, value in self._encode_changes(changes).items():
                if key == "allowed_origins":
                    value = json.dumps(value)
                elif key == "last_tested":
                    value = changes["last_tested"]
                setattr(row, key, value)
            session.flush()
            updated = self._to_config(row)
        return updated

    def _delete(self, endpoint_id: str) -> bool:
        with self._sessions.begin() as session:
            row = session.get(EndpointRow, endpoint_id)
            if row is None:
                return False
            session.delete(row)
        return True

    # --- async interface ---

    async def list_all(self) -> list[EndpointConfig]:
        return await asyncio.to_thread(self._list_all)

    async def get(self, endpoint_id: str) -> EndpointConfig | None:
        return await asyncio.to_thread(self._get, endpoint_id)

    async def get_by_proxy_id(self, proxy_id: str) -> EndpointConfig | None:
        return await asyncio.to_thread(self._get_by_proxy_id, proxy_id)

    async def create(self, config: EndpointConfig) -> EndpointConfig:
        return await asyncio.to_thread(self._create, config)

    async def update(self, endpoint_id: str, changes: dict) -> EndpointConfig | None:
        self._check_fields(changes)
        return await asyncio.to_thread(self._update, endpoint_id, changes)

    async def delete(self, endpoint_id: str) -> bool:
        return await asyncio.to_thread(self._delete, endpoint_id)
