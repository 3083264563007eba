# barberpro/routers/public.py
from fastapi import APIRouter, Depends

from barberpro.deps import get_shop
from barberpro.repositories import Barbershop
from barberpro.schema import Appointment, BookingIn, Product, Professional, Service

router = APIRouter(tags=["public"])


@router.get("/services", response_model=list[Service])
async def list_services(shop: Barbershop = Depends(get_shop)):
    return await shop.services.list()


@router.get("/professionals", response_model=list[Professional])
async def list_professionals(shop: Barbershop = Depends(get_shop)):
    return await shop.professionals.list()


@router.get("/products", response_model=list[Product])
async def list_products(shop: Barbershop = Depends(get_shop)):
    return await shop.products.list()


@router.get("/logo")
async def get_logo(shop: Barbershop = Depends(get_shop)):
    return {"logo": await shop.logo.get()}


@router.post("/appointments", response_model=Appointment, status_code=201)
async def book_appointment(data: BookingIn, shop: Barbershop = Depends(get_shop)):
    """Reserva pública; queda en `pending` hasta que el admin la confirme."""
    return await shop.appointments.book(data)
