"""
SQLAlchemy-backed implementation of the `ItemStore` interface.

Records live in the `crudimg` table. The engine keeps a single connection
(`pool_size=1`, no overflow), so every request talks to the datastore over the
same connection, one query at a time.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy import Column, Integer, Numeric, String, Text, create_engine, delete, select
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from inventory.database import ItemStore
from inventory.models import InventoryItem, InventoryItemCreate, InventoryItemUpdate

logger = logging.getLogger(__name__)

Base = declarative_base()


class CrudImg(Base):
    """
    ORM row for one inventory record.

    Attributes:
        id (int): Primary key, auto-incremented
        nombre (str): Item name
        descripcion (str): Item description
        cantidad (int): Units in stock
        marca (str): Brand
        precio (float): Unit price
        imagen (str | None): Object-store key of the image, if any
    """
    __tablename__ = "crudimg"

    id = Column(Integer, primary_key=True, autoincrement=True)
    nombre = Column(String(255))
    descripcion = Column(Text)
    cantidad = Column(Integer)
    marca = Column(String(255))
    precio = Column(Numeric(10, 2, asdecimal=False))
    imagen = Column(String(512), nullable=True)


def normalize_database_url(database_url: str) -> str:
    """Give bare `mysql://` URLs the PyMySQL driver."""
    url = make_url(database_url)
    if url.drivername == "mysql":
        url = url.set(drivername="mysql+pymysql")
    return url.render_as_string(hide_password=False)


def build_engine(database_url: str) -> Engine:
    """Create a single-connection engine for `database_url`."""
    url = normalize_database_url(database_url)
    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(url, pool_size=1, max_overflow=0, pool_pre_ping=True)


class SqlItemStore(ItemStore):
    """Relational implementation of ItemStore."""

    def __init__(self, database_url: str = None, *, engine: Engine = None, create_schema: bool = True):
        if engine is None:
            if not database_url:
                raise ValueError("Database URL is required")
            engine = build_engine(database_url)
        self.engine = engine
        self._sessions = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)
        if create_schema:
            try:
                Base.metadata.create_all(bind=engine)
            except SQLAlchemyError as exc:
                raise RuntimeError(f"Failed to initialize datastore schema: {exc}") from exc
        logger.info("✅ SQL store initialized (%s)", engine.url.get_backend_name())

    @contextmanager
    def _session(self, action: str) -> Iterator[Session]:
        session = self._sessions()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            raise RuntimeError(f"Failed to {action}: {exc}") from exc
        finally:
            session.close()

    def list_items(self) -> List[InventoryItem]:
        with self._session("list items") as session:
            rows = session.scalars(select(CrudImg).order_by(CrudImg.id)).all()
            return [InventoryItem.model_validate(row) for row in rows]

    def get_item(self, item_id: int) -> Optional[InventoryItem]:
        with self._session(f"get item {item_id}") as session:
            row = session.get(CrudImg, item_id)
            return InventoryItem.model_validate(row) if row is not None else None

    def list_image_keys(self) -> List[Optional[str]]:
        with self._session("list image keys") as session:
            return list(session.scalars(select(CrudImg.imagen)).all())

    def create_item(self, item: InventoryItemCreate) -> InventoryItem:
        with self._session("create item") as session:
            row = CrudImg(**item.model_dump())
            session.add(row)
            session.flush()
            return InventoryItem.model_validate(row)

    def update_item(self, item_id: int, item: InventoryItemUpdate) -> bool:
        with self._session(f"update item {item_id}") as session:
            row = session.get(CrudImg, item_id)
            if row is None:
                return False
            for field, value in item.model_dump().items():
                setattr(row, field, value)
            return True

    def delete_item(self, item_id: int) -> None:
        with self._session(f"delete item {item_id}") as session:
            session.execute(delete(CrudImg).where(CrudImg.id == item_id))

    def delete_all_items(self) -> int:
        with self._session("delete all items") as session:
            result = session.execute(delete(CrudImg))
            return result.rowcount

    def close(self) -> None:
        self.engine.dispose()
