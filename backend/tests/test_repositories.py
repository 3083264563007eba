# tests/test_repositories.py
import asyncio

import pytest
from pydantic import ValidationError

from barberpro.repositories import Barbershop, InvalidRecord
from barberpro.schema import (
    AppointmentStatus,
    BookingIn,
    ClientIn,
    ClientType,
    ExpenseCategory,
    ExpenseIn,
    ProductIn,
    ProfessionalIn,
    ServiceIn,
    normalize_cpf,
)
from barberpro.storage import Collection, InMemoryEntityStore

CPF = "123.456.789-00"


def client_record(id_="c1", cpf="12345678900", name="João"):
    return {
        "id": id_, "name": name, "cpf": cpf, "phone": "11999",
        "type": "avulso", "joinedAt": "2024-01-01T00:00:00+00:00",
    }


def booking(**overrides):
    data = {
        "client_name": "João", "client_phone": "11999", "client_cpf": CPF,
        "service_id": "1", "professional_id": "1", "date": "2024-10-05", "time": "10:00",
    }
    data.update(overrides)
    return BookingIn(**data)


# ---------------------------------------------------------------------------
# Clientes
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_client_add_new_cpf_appends_one(shop):
    assert await shop.clients.add(client_record()) is True
    clients = await shop.clients.list()
    assert [c.id for c in clients] == ["c1"]


@pytest.mark.asyncio
async def test_client_add_duplicate_cpf_returns_false(shop, store):
    await shop.clients.add(client_record())
    before = await store.read(Collection.CLIENTS)

    # mismo cpf con formato distinto
    assert await shop.clients.add(client_record(id_="c2", cpf=CPF, name="Outro")) is False
    assert await store.read(Collection.CLIENTS) == before


@pytest.mark.asyncio
async def test_client_cpf_stored_normalized(shop):
    await shop.clients.add(client_record(cpf=CPF))
    assert (await shop.clients.list())[0].cpf == "12345678900"


@pytest.mark.asyncio
async def test_find_by_cpf_is_exact_match(shop):
    await shop.clients.add(client_record())
    assert (await shop.clients.find_by_cpf("12345678900")).id == "c1"
    # el llamador tiene que normalizar
    assert await shop.clients.find_by_cpf(CPF) is None
    assert await shop.clients.find_by_cpf(normalize_cpf(CPF)) is not None
    assert await shop.clients.find_by_cpf("00000000000") is None


@pytest.mark.asyncio
async def test_register_assigns_id_and_joined_at(shop):
    client = await shop.clients.register(ClientIn(name="Ana", cpf=CPF, phone="11", type=ClientType.MENSALISTA))
    assert client is not None
    assert client.id and client.joined_at
    assert client.cpf == "12345678900"
    assert await shop.clients.register(ClientIn(name="Ana 2", cpf="12345678900")) is None
    assert len(await shop.clients.list()) == 1


@pytest.mark.asyncio
async def test_client_with_short_cpf_is_rejected(shop):
    with pytest.raises(InvalidRecord):
        await shop.clients.add(client_record(cpf="123"))
    assert await shop.clients.list() == []


# ---------------------------------------------------------------------------
# Turnos
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_book_creates_pending_with_fresh_id(shop):
    a1 = await shop.appointments.book(booking())
    a2 = await shop.appointments.book(booking(time="11:00"))
    assert a1.status == AppointmentStatus.PENDING
    assert a1.id != a2.id
    assert a1.client_cpf == "12345678900"


@pytest.mark.asyncio
async def test_book_without_cpf(shop):
    appt = await shop.appointments.book(booking(client_cpf=None))
    assert appt.client_cpf is None
    stored = await shop.store.read(Collection.APPOINTMENTS)
    assert "clientCpf" not in stored[0]


@pytest.mark.asyncio
async def test_book_rejects_bad_time(shop):
    with pytest.raises(ValidationError):
        booking(time="9:00")
    with pytest.raises(InvalidRecord):
        await shop.appointments.add({**booking().model_dump(), "id": "a1", "time": "25:00"})
    assert await shop.appointments.list() == []


@pytest.mark.asyncio
async def test_stored_unpadded_time_is_still_readable(shop, store):
    await store.write(Collection.APPOINTMENTS, [{
        "id": "old", "clientName": "Legado", "serviceId": "1", "professionalId": "1",
        "date": "2024-10-05", "time": "9:00", "status": "completed",
    }])
    assert (await shop.appointments.list())[0].time == "9:00"
    await shop.appointments.book(booking())
    assert len(await shop.appointments.list()) == 2


@pytest.mark.asyncio
async def test_find_appointments_by_cpf(shop):
    await shop.appointments.book(booking())
    await shop.appointments.book(booking(client_cpf="98765432100"))
    found = await shop.appointments.find_by_cpf("12345678900")
    assert len(found) == 1
    assert await shop.appointments.find_by_cpf("11111111111") == []


@pytest.mark.asyncio
async def test_history_newest_first(shop):
    await shop.appointments.book(booking(date="2024-09-01", time="10:00"))
    await shop.appointments.book(booking(date="2024-10-01", time="09:00"))
    await shop.appointments.book(booking(date="2024-10-01", time="15:00"))
    history = await shop.appointments.history_for_cpf("12345678900")
    assert [(a.date, a.time) for a in history] == [
        ("2024-10-01", "15:00"),
        ("2024-10-01", "09:00"),
        ("2024-09-01", "10:00"),
    ]


@pytest.mark.asyncio
async def test_set_status_and_filter(shop):
    a1 = await shop.appointments.book(booking())
    await shop.appointments.book(booking(time="11:00"))

    updated = await shop.appointments.set_status(a1.id, AppointmentStatus.COMPLETED)
    assert updated.status == AppointmentStatus.COMPLETED

    completed = await shop.appointments.list_by_status(AppointmentStatus.COMPLETED)
    assert [a.id for a in completed] == [a1.id]
    assert len(await shop.appointments.list_by_status(None)) == 2
    assert await shop.appointments.set_status("nope", AppointmentStatus.CANCELLED) is None


@pytest.mark.asyncio
async def test_unknown_status_rejected_on_replace(shop):
    appt = await shop.appointments.book(booking())
    raw = appt.to_record() | {"status": "archived"}
    with pytest.raises(InvalidRecord):
        await shop.appointments.replace_all([raw])
    assert (await shop.appointments.list())[0].status == AppointmentStatus.PENDING


# ---------------------------------------------------------------------------
# Catálogo, gastos, logo
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_services_start_from_seed_and_append(shop):
    created = await shop.services.create(ServiceIn(name="Pigmentação", price=60, duration=40))
    services = await shop.services.list()
    assert [s.id for s in services][:3] == ["1", "2", "3"]
    assert services[-1] == created


@pytest.mark.asyncio
async def test_remove(shop):
    assert await shop.services.remove("2") is True
    assert [s.id for s in await shop.services.list()] == ["1", "3"]
    assert await shop.services.remove("2") is False


@pytest.mark.asyncio
async def test_professional_gets_default_avatar(shop):
    pro = await shop.professionals.create(ProfessionalIn(name="Bia", specialty="Navalha"))
    assert pro.avatar_url.startswith("https://picsum.photos/")


@pytest.mark.asyncio
async def test_product_gets_default_image(shop):
    product = await shop.products.create(ProductIn(name="Pomada", price=35, stock=4))
    assert product.image_url.startswith("https://picsum.photos/")
    assert (await shop.products.get(product.id)).image_url == product.image_url


@pytest.mark.asyncio
async def test_negative_price_rejected(shop):
    with pytest.raises(InvalidRecord):
        await shop.products.add({"id": "x", "name": "Pente", "price": -1, "stock": 1})


@pytest.mark.asyncio
async def test_unknown_expense_category_rejected(shop):
    with pytest.raises(InvalidRecord):
        await shop.expenses.add(
            {"id": "e1", "description": "Festa", "amount": 10, "category": "lazer", "date": "2024-10-01"}
        )
    expense = await shop.expenses.create(ExpenseIn(description="Luz", amount=200, category="contas", date="2024-10-02"))
    assert expense.category == ExpenseCategory.CONTAS


@pytest.mark.asyncio
async def test_duplicate_ids_rejected(shop):
    with pytest.raises(InvalidRecord):
        await shop.clients.replace_all([client_record(), client_record(cpf="98765432100")])


@pytest.mark.asyncio
async def test_logo(shop):
    assert await shop.logo.get() is None
    await shop.logo.set("data:image/png;base64,AAAA")
    assert await shop.logo.get() == "data:image/png;base64,AAAA"
    with pytest.raises(InvalidRecord):
        await shop.logo.set("https://example.com/logo.png")


@pytest.mark.asyncio
async def test_name_resolution_falls_back(shop):
    assert await shop.service_name("1") == "Corte Clássico"
    assert await shop.service_name("nope") == "Desconhecido"
    assert await shop.professional_name("nope") == "Desconhecido"


@pytest.mark.asyncio
async def test_sql_backed_barbershop(sql_store):
    shop = Barbershop(sql_store)
    assert await shop.clients.register(ClientIn(name="Ana", cpf=CPF)) is not None
    assert await shop.clients.register(ClientIn(name="Ana", cpf=CPF)) is None
    assert len(await shop.clients.list()) == 1


# ---------------------------------------------------------------------------
# Escrituras concurrentes en el mismo proceso
# ---------------------------------------------------------------------------
@pytest.fixture
def slow_shop():
    # la latencia fuerza que los read-modify-write se intercalen
    return Barbershop(InMemoryEntityStore(latency=0.001))


@pytest.mark.asyncio
async def test_concurrent_bookings_are_all_persisted(slow_shop):
    created = await asyncio.gather(
        *(slow_shop.appointments.book(booking(time=f"1{i}:00")) for i in range(5))
    )
    stored_ids = {a.id for a in await slow_shop.appointments.list()}
    assert stored_ids == {a.id for a in created}
    assert len(stored_ids) == 5


@pytest.mark.asyncio
async def test_concurrent_register_same_cpf_only_one_wins(slow_shop):
    results = await asyncio.gather(
        slow_shop.clients.register(ClientIn(name="Ana", cpf=CPF)),
        slow_shop.clients.register(ClientIn(name="Ana bis", cpf="12345678900")),
    )
    assert sum(r is not None for r in results) == 1
    assert len(await slow_shop.clients.list()) == 1

    added = await asyncio.gather(
        slow_shop.clients.add(client_record(id_="c8", cpf="98765432100")),
        slow_shop.clients.add(client_record(id_="c9", cpf="987.654.321-00")),
    )
    assert sorted(added) == [False, True]


@pytest.mark.asyncio
async def test_concurrent_create_and_remove_keep_each_other(slow_shop):
    created, removed = await asyncio.gather(
        slow_shop.services.create(ServiceIn(name="Sobrancelha", price=20, duration=15)),
        slow_shop.services.remove("1"),
    )
    assert removed is True
    ids = [s.id for s in await slow_shop.services.list()]
    assert ids == ["2", "3", created.id]


@pytest.mark.asyncio
async def test_concurrent_status_updates_keep_both(slow_shop):
    a1 = await slow_shop.appointments.book(booking())
    a2 = await slow_shop.appointments.book(booking(time="11:00"))
    await asyncio.gather(
        slow_shop.appointments.set_status(a1.id, AppointmentStatus.COMPLETED),
        slow_shop.appointments.set_status(a2.id, AppointmentStatus.CANCELLED),
        slow_shop.appointments.book(booking(time="12:00")),
    )
    by_id = {a.id: a.status for a in await slow_shop.appointments.list()}
    assert by_id[a1.id] == AppointmentStatus.COMPLETED
    assert by_id[a2.id] == AppointmentStatus.CANCELLED
    assert len(by_id) == 3
