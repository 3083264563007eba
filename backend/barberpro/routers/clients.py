# barberpro/routers/clients.py
import logging

from fastapi import APIRouter, Depends, HTTPException

from barberpro.deps import get_shop
from barberpro.repositories import Barbershop
from barberpro.schema import Appointment, Client, ClientIn, is_valid_cpf, normalize_cpf

logger = logging.getLogger("api")
router = APIRouter(prefix="/clients", tags=["clients"])


@router.post("", response_model=Client, status_code=201)
async def register_client(data: ClientIn, shop: Barbershop = Depends(get_shop)):
    if not is_valid_cpf(data.cpf):
        raise HTTPException(422, "CPF deve conter 11 dígitos")
    client = await shop.clients.register(data)
    if client is None:
        raise HTTPException(409, "CPF já cadastrado")
    return client


@router.get("/{cpf}", response_model=Client)
async def login_client(cpf: str, shop: Barbershop = Depends(get_shop)):
    client = await shop.clients.find_by_cpf(normalize_cpf(cpf))
    if client is None:
        raise HTTPException(404, "CPF não encontrado")
    return client


@router.get("/{cpf}/appointments", response_model=list[Appointment])
async def client_history(cpf: str, shop: Barbershop = Depends(get_shop)):
    return await shop.appointments.history_for_cpf(normalize_cpf(cpf))
