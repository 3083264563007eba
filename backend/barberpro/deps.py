# barberpro/deps.py
from fastapi import Depends, Header, HTTPException

from barberpro.config import get_settings
from barberpro.db import SessionLocal
from barberpro.repositories import Barbershop
from barberpro.storage import EntityStore, SqlEntityStore

settings = get_settings()

_store = SqlEntityStore(SessionLocal, key_prefix=settings.STORE_KEY_PREFIX)


def get_store() -> EntityStore:
    return _store


def get_shop(store: EntityStore = Depends(get_store)) -> Barbershop:
    return Barbershop(store)


async def require_admin(x_admin_passphrase: str | None = Header(default=None)) -> None:
    # Clave estática compartida: es una limitación conocida, no control de acceso real
    if x_admin_passphrase != settings.ADMIN_PASSPHRASE:
        raise HTTPException(401, "Senha de administrador inválida")
