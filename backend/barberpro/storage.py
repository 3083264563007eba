# barberpro/storage.py
"""
Entity Store: colección nombrada → lista ordenada de registros JSON.

Todas las operaciones son async aunque el medio sea local, para que un
backend remoto (Postgres, API HTTP) entre sin tocar a los llamadores.
"""

from __future__ import annotations

import abc
import asyncio
import copy
import enum
import json
import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from barberpro.models import KeyValueRecord

logger = logging.getLogger("storage")

Record = dict[str, Any]


class StorageFailure(Exception):
    """El medio durable no está disponible o rechazó la escritura."""


class Collection(str, enum.Enum):
    SERVICES = "services"
    PROFESSIONALS = "professionals"
    PRODUCTS = "products"
    APPOINTMENTS = "appointments"
    CLIENTS = "clients"
    EXPENSES = "expenses"


LOGO_KEY = "logo"

DEFAULT_SERVICES: list[Record] = [
    {
        "id": "1",
        "name": "Corte Clássico",
        "price": 50,
        "duration": 45,
        "description": "Um corte tradicional com tesoura e acabamento na navalha, incluindo lavagem e finalização.",
    },
    {
        "id": "2",
        "name": "Barba Terapia",
        "price": 40,
        "duration": 30,
        "description": "Ritual completo com toalha quente, esfoliação, hidratação e modelagem da barba.",
    },
    {
        "id": "3",
        "name": "Corte + Barba (Combo)",
        "price": 80,
        "duration": 75,
        "description": "A experiência completa para o homem moderno. Renovação total do visual.",
    },
]

DEFAULT_PROFESSIONALS: list[Record] = [
    {
        "id": "1",
        "name": 'Carlos "Navalha" Silva',
        "specialty": "Cortes Clássicos",
        "bio": "Mais de 10 anos de experiência transformando visuais com precisão cirúrgica.",
        "avatarUrl": "https://picsum.photos/200/200?random=1",
    },
    {
        "id": "2",
        "name": "André Fade",
        "specialty": "Degradê e Freestyle",
        "bio": "Especialista em cortes modernos e desenhos artísticos no cabelo.",
        "avatarUrl": "https://picsum.photos/200/200?random=2",
    },
]

SEEDS: dict[Collection, list[Record]] = {
    Collection.SERVICES: DEFAULT_SERVICES,
    Collection.PROFESSIONALS: DEFAULT_PROFESSIONALS,
}


def default_seed(collection: Collection) -> list[Record]:
    # copia profunda: nadie puede modificar el seed global
    return copy.deepcopy(SEEDS.get(collection, []))


def _encode(records: list[Record]) -> str:
    try:
        return json.dumps(list(records), ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise StorageFailure(f"registros no serializables: {exc}") from exc


def _decode(key: str, raw: str) -> list[Record]:
    try:
        data = json.loads(raw)
    except ValueError as exc:
        raise StorageFailure(f"contenido corrupto en {key!r}") from exc
    if not isinstance(data, list):
        raise StorageFailure(f"se esperaba una lista en {key!r}")
    return data


class EntityStore(abc.ABC):
    """Contrato del proveedor de almacenamiento.

    `write_lock` serializa los read-modify-write de los repositorios dentro
    del proceso; entre procesos no hay coordinación (last write wins).
    """

    def __init__(self, key_prefix: str = "barberpro_"):
        self.key_prefix = key_prefix
        self.write_lock = asyncio.Lock()

    def key_for(self, name: str) -> str:
        return f"{self.key_prefix}{name}"

    async def read(self, collection: Collection) -> list[Record]:
        raw = await self._get(self.key_for(collection.value))
        if raw is None:
            return default_seed(collection)
        return _decode(collection.value, raw)

    async def write(self, collection: Collection, records: list[Record]) -> None:
        payload = _encode(records)
        await self._set(self.key_for(collection.value), payload)
        logger.debug("write %s → %d registros", collection.value, len(records))

    async def read_logo(self) -> str | None:
        return await self._get(self.key_for(LOGO_KEY))

    async def write_logo(self, data_uri: str) -> None:
        await self._set(self.key_for(LOGO_KEY), data_uri)
        logger.debug("write logo (%d bytes)", len(data_uri))

    @abc.abstractmethod
    async def _get(self, key: str) -> str | None: ...

    @abc.abstractmethod
    async def _set(self, key: str, value: str) -> None: ...


class InMemoryEntityStore(EntityStore):
    """
    Store en memoria. Guarda texto JSON (no los objetos), así se comporta
    igual que el medio durable: lo leído nunca comparte referencias con lo
    escrito.
    """

    def __init__(self, key_prefix: str = "barberpro_", latency: float = 0.0):
        super().__init__(key_prefix)
        self.latency = latency
        self.data: dict[str, str] = {}

    async def _get(self, key: str) -> str | None:
        if self.latency:
            await asyncio.sleep(self.latency)
        return self.data.get(key)

    async def _set(self, key: str, value: str) -> None:
        if self.latency:
            await asyncio.sleep(self.latency)
        self.data[key] = value


class SqlEntityStore(EntityStore):
    """Una fila por clave en `kv_records`; cada escritura es un upsert en una transacción."""

    def __init__(
        self,
        sessionmaker: async_sessionmaker[AsyncSession],
        key_prefix: str = "barberpro_",
    ):
        super().__init__(key_prefix)
        self.sessionmaker = sessionmaker

    async def _get(self, key: str) -> str | None:
        try:
            async with self.sessionmaker() as session:
                row = await session.get(KeyValueRecord, key)
                return row.value if row is not None else None
        except SQLAlchemyError as exc:
            logger.exception("Error leyendo %s", key)
            raise StorageFailure(f"no se pudo leer {key!r}") from exc

    async def _set(self, key: str, value: str) -> None:
        try:
            async with self.sessionmaker() as session:
                async with session.begin():
                    await session.merge(KeyValueRecord(key=key, value=value))
        except SQLAlchemyError as exc:
            logger.exception("Error guardando %s", key)
            raise StorageFailure(f"no se pudo guardar {key!r}") from exc
