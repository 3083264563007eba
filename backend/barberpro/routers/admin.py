# barberpro/routers/admin.py
import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from barberpro import analytics, llm_client
from barberpro.config import get_settings
from barberpro.deps import get_shop, require_admin
from barberpro.repositories import Barbershop
from barberpro.schema import (
    Appointment,
    AppointmentStatus,
    Client,
    CopyRequest,
    Expense,
    ExpenseIn,
    LogoIn,
    LogoPrompt,
    Product,
    ProductIn,
    Professional,
    ProfessionalIn,
    Service,
    ServiceIn,
    StatusUpdate,
)

settings = get_settings()
logger = logging.getLogger("api")
router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


def _gone(removed: bool, what: str) -> dict:
    if not removed:
        raise HTTPException(404, f"{what} não encontrado")
    return {"status": "ok"}


# ---------------------------------------------------------------------------
# Catálogo
# ---------------------------------------------------------------------------
@router.post("/services", response_model=Service, status_code=201)
async def add_service(data: ServiceIn, shop: Barbershop = Depends(get_shop)):
    return await shop.services.create(data)


@router.delete("/services/{service_id}")
async def remove_service(service_id: str, shop: Barbershop = Depends(get_shop)):
    return _gone(await shop.services.remove(service_id), "Serviço")


@router.post("/professionals", response_model=Professional, status_code=201)
async def add_professional(data: ProfessionalIn, shop: Barbershop = Depends(get_shop)):
    return await shop.professionals.create(data)


@router.delete("/professionals/{professional_id}")
async def remove_professional(professional_id: str, shop: Barbershop = Depends(get_shop)):
    return _gone(await shop.professionals.remove(professional_id), "Profissional")


@router.post("/products", response_model=Product, status_code=201)
async def add_product(data: ProductIn, shop: Barbershop = Depends(get_shop)):
    return await shop.products.create(data)


@router.delete("/products/{product_id}")
async def remove_product(product_id: str, shop: Barbershop = Depends(get_shop)):
    return _gone(await shop.products.remove(product_id), "Produto")


# ---------------------------------------------------------------------------
# Agenda y clientes
# ---------------------------------------------------------------------------
@router.get("/appointments", response_model=list[Appointment])
async def list_appointments(
    status: Optional[AppointmentStatus] = None,
    shop: Barbershop = Depends(get_shop),
):
    return await shop.appointments.list_by_status(status)


@router.put("/appointments/{appointment_id}/status", response_model=Appointment)
async def update_status(appointment_id: str, data: StatusUpdate, shop: Barbershop = Depends(get_shop)):
    updated = await shop.appointments.set_status(appointment_id, data.status)
    if updated is None:
        raise HTTPException(404, "Agendamento não encontrado")
    return updated


@router.delete("/appointments/{appointment_id}")
async def remove_appointment(appointment_id: str, shop: Barbershop = Depends(get_shop)):
    return _gone(await shop.appointments.remove(appointment_id), "Agendamento")


@router.get("/clients", response_model=list[Client])
async def list_clients(shop: Barbershop = Depends(get_shop)):
    return await shop.clients.list()


# ---------------------------------------------------------------------------
# Finanzas
# ---------------------------------------------------------------------------
@router.get("/expenses", response_model=list[Expense])
async def list_expenses(shop: Barbershop = Depends(get_shop)):
    return await shop.expenses.list()


@router.post("/expenses", response_model=Expense, status_code=201)
async def add_expense(data: ExpenseIn, shop: Barbershop = Depends(get_shop)):
    return await shop.expenses.create(data)


@router.delete("/expenses/{expense_id}")
async def remove_expense(expense_id: str, shop: Barbershop = Depends(get_shop)):
    return _gone(await shop.expenses.remove(expense_id), "Despesa")


@router.get("/analytics", response_model=analytics.Dashboard)
async def get_analytics(shop: Barbershop = Depends(get_shop)):
    appointments, services, expenses = await asyncio.gather(
        shop.appointments.list(),
        shop.services.list(),
        shop.expenses.list(),
    )
    return analytics.dashboard(appointments, services, expenses, settings.MONTH_LOCALE)


# ---------------------------------------------------------------------------
# Marca e IA
# ---------------------------------------------------------------------------
@router.put("/logo")
async def save_logo(data: LogoIn, shop: Barbershop = Depends(get_shop)):
    await shop.logo.set(data.data_uri)
    return {"status": "ok"}


@router.post("/ai/copy")
async def generate_copy(data: CopyRequest):
    text = await llm_client.generate_copy(data.kind, data.name, data.keywords)  # type: ignore[arg-type]
    return {"text": text}


@router.post("/ai/logo")
async def generate_logo(data: LogoPrompt):
    image = await llm_client.generate_image(data.prompt)
    if image is None:
        logger.info("Logo no generado, se informa como no disponible")
    return {"image": image, "available": image is not None}
