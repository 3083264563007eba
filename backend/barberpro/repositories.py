# barberpro/repositories.py
"""
Repositorios tipados sobre el Entity Store.

No hay mutación por ítem: cada alta/baja lee la colección completa,
arma la nueva lista y la vuelve a guardar entera (last write wins).

Concurrencia: dentro del proceso, cada read-modify-write corre bajo
`store.write_lock`, así dos requests simultáneos no se pisan. Entre
procesos (dos workers, dos servidores sobre la misma base) no hay lock:
dos `ClientRepository.add` con el mismo cpf pueden leer "cpf libre" a la
vez y ambos guardar. Se asume un solo proceso escritor.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, ClassVar, Generic, Iterable, Optional, TypeVar

from pydantic import ValidationError

from barberpro.schema import (
    UNKNOWN_LABEL,
    Appointment,
    AppointmentStatus,
    BookingIn,
    Client,
    ClientIn,
    Entity,
    Expense,
    ExpenseIn,
    Product,
    ProductIn,
    Professional,
    ProfessionalIn,
    Service,
    ServiceIn,
    normalize_cpf,
)
from barberpro.storage import Collection, EntityStore, StorageFailure

logger = logging.getLogger("repositories")

E = TypeVar("E", bound=Entity)


class InvalidRecord(ValueError):
    """Un registro no pasa la validación de borde (enum desconocido, precio negativo, ...)."""


def new_id() -> str:
    return str(uuid.uuid4())


class Repository(Generic[E]):
    collection: ClassVar[Collection]
    model: ClassVar[type[Entity]]

    def __init__(self, store: EntityStore):
        self.store = store

    def _coerce(self, item: Any) -> E:
        data = item.model_dump() if isinstance(item, Entity) else item
        try:
            return self.model.model_validate(data)  # type: ignore[return-value]
        except ValidationError as exc:
            raise InvalidRecord(f"{self.collection.value}: {exc}") from exc

    async def list(self) -> list[E]:
        records = await self.store.read(self.collection)
        try:
            return [self.model.model_validate(r) for r in records]  # type: ignore[misc]
        except ValidationError as exc:
            raise StorageFailure(f"registro inválido guardado en {self.collection.value}") from exc

    async def _save(self, items: Iterable[Any]) -> None:
        # el llamador ya tiene store.write_lock
        entities = [self._coerce(i) for i in items]
        ids = [e.id for e in entities]
        if len(ids) != len(set(ids)):
            raise InvalidRecord(f"{self.collection.value}: ids duplicados")
        await self.store.write(self.collection, [e.to_record() for e in entities])

    async def replace_all(self, items: Iterable[Any]) -> None:
        async with self.store.write_lock:
            await self._save(items)

    async def add(self, item: Any) -> E:
        entity = self._coerce(item)
        async with self.store.write_lock:
            current = await self.list()
            await self._save([*current, entity])
        logger.info("%s: alta %s", self.collection.value, entity.id)
        return entity

    async def get(self, entity_id: str) -> Optional[E]:
        return next((e for e in await self.list() if e.id == entity_id), None)

    async def remove(self, entity_id: str) -> bool:
        async with self.store.write_lock:
            current = await self.list()
            remaining = [e for e in current if e.id != entity_id]
            if len(remaining) == len(current):
                return False
            await self._save(remaining)
        logger.info("%s: baja %s", self.collection.value, entity_id)
        return True


class ServiceRepository(Repository[Service]):
    collection = Collection.SERVICES
    model = Service

    async def create(self, data: ServiceIn) -> Service:
        return await self.add({"id": new_id(), **data.model_dump()})


class ProfessionalRepository(Repository[Professional]):
    collection = Collection.PROFESSIONALS
    model = Professional

    async def create(self, data: ProfessionalIn) -> Professional:
        fields = data.model_dump()
        if not fields["avatar_url"]:
            fields["avatar_url"] = f"https://picsum.photos/200/200?random={uuid.uuid4().int % 10_000}"
        return await self.add({"id": new_id(), **fields})


class ProductRepository(Repository[Product]):
    collection = Collection.PRODUCTS
    model = Product

    async def create(self, data: ProductIn) -> Product:
        fields = data.model_dump()
        if not fields["image_url"]:
            fields["image_url"] = f"https://picsum.photos/200/200?random={uuid.uuid4().int % 10_000}"
        return await self.add({"id": new_id(), **fields})


class ExpenseRepository(Repository[Expense]):
    collection = Collection.EXPENSES
    model = Expense

    async def create(self, data: ExpenseIn) -> Expense:
        return await self.add({"id": new_id(), **data.model_dump()})


class AppointmentRepository(Repository[Appointment]):
    collection = Collection.APPOINTMENTS
    model = Appointment

    async def book(self, data: BookingIn) -> Appointment:
        fields = data.model_dump()
        fields["client_cpf"] = normalize_cpf(fields["client_cpf"]) or None
        return await self.add({"id": new_id(), "status": AppointmentStatus.PENDING, **fields})

    async def find_by_cpf(self, cpf: str) -> list[Appointment]:
        return [a for a in await self.list() if a.client_cpf == cpf]

    async def history_for_cpf(self, cpf: str) -> list[Appointment]:
        """Turnos del cliente, el más reciente primero."""
        appts = await self.find_by_cpf(cpf)
        return sorted(appts, key=lambda a: (a.date, a.time), reverse=True)

    async def list_by_status(self, status: AppointmentStatus | None = None) -> list[Appointment]:
        appts = await self.list()
        if status is None:
            return appts
        return [a for a in appts if a.status == status]

    async def set_status(self, appointment_id: str, status: AppointmentStatus) -> Optional[Appointment]:
        async with self.store.write_lock:
            current = await self.list()
            target = next((a for a in current if a.id == appointment_id), None)
            if target is None:
                return None
            updated = target.model_copy(update={"status": status})
            await self._save(updated if a.id == appointment_id else a for a in current)
        logger.info("appointments: %s → %s", appointment_id, status.value)
        return updated


class ClientRepository(Repository[Client]):
    collection = Collection.CLIENTS
    model = Client

    async def add(self, item: Any) -> bool:  # type: ignore[override]
        client = self._coerce(item)
        client = client.model_copy(update={"cpf": normalize_cpf(client.cpf)})
        async with self.store.write_lock:
            current = await self.list()
            # atómico solo dentro del proceso, ver docstring del módulo
            if any(normalize_cpf(c.cpf) == client.cpf for c in current):
                logger.info("clients: cpf duplicado, alta rechazada")
                return False
            await self._save([*current, client])
        logger.info("clients: alta %s", client.id)
        return True

    async def register(self, data: ClientIn) -> Optional[Client]:
        client = self._coerce({
            "id": new_id(),
            "name": data.name,
            "cpf": normalize_cpf(data.cpf),
            "phone": data.phone,
            "type": data.type,
            "joined_at": datetime.now(timezone.utc).isoformat(),
        })
        return client if await self.add(client) else None

    async def find_by_cpf(self, cpf: str) -> Optional[Client]:
        return next((c for c in await self.list() if c.cpf == cpf), None)


class LogoRepository:
    def __init__(self, store: EntityStore):
        self.store = store

    async def get(self) -> Optional[str]:
        return await self.store.read_logo()

    async def set(self, data_uri: str) -> None:
        if not data_uri.startswith("data:image/"):
            raise InvalidRecord("el logo debe ser un data URI de imagen")
        async with self.store.write_lock:
            await self.store.write_logo(data_uri)


class Barbershop:
    """Todos los repositorios sobre un mismo store."""

    def __init__(self, store: EntityStore):
        self.store = store
        self.services = ServiceRepository(store)
        self.professionals = ProfessionalRepository(store)
        self.products = ProductRepository(store)
        self.appointments = AppointmentRepository(store)
        self.clients = ClientRepository(store)
        self.expenses = ExpenseRepository(store)
        self.logo = LogoRepository(store)

    async def service_name(self, service_id: str) -> str:
        service = await self.services.get(service_id)
        return service.name if service else UNKNOWN_LABEL

    async def professional_name(self, professional_id: str) -> str:
        pro = await self.professionals.get(professional_id)
        return pro.name if pro else UNKNOWN_LABEL
