# barberpro/schema.py
from __future__ import annotations

import enum
import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

UNKNOWN_LABEL = "Desconhecido"

_NON_DIGITS = re.compile(r"\D")
_TIME = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
# registros ya guardados: se acepta la hora sin cero ("9:00")
_STORED_TIME = re.compile(r"^([01]?\d|2[0-3]):[0-5]\d$")


def normalize_cpf(value: str) -> str:
    """Deja solo los dígitos: '123.456.789-00' → '12345678900'."""
    return _NON_DIGITS.sub("", value or "")


def is_valid_cpf(value: str) -> bool:
    return len(normalize_cpf(value)) == 11


# -------- Enums --------
class AppointmentStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ClientType(str, enum.Enum):
    AVULSO = "avulso"
    FIDELIDADE = "fidelidade"
    MENSALISTA = "mensalista"


class ExpenseCategory(str, enum.Enum):
    ALUGUEL = "aluguel"
    CONTAS = "contas"
    PRODUTOS = "produtos"
    MANUTENCAO = "manutencao"
    MARKETING = "marketing"
    OUTROS = "outros"


class Entity(BaseModel):
    """Base de todos los registros persistidos.

    Los atributos son snake_case en Python y camelCase en el JSON guardado,
    así el layout del store no cambia respecto del frontend.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str

    def to_record(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Service(Entity):
    name: str
    price: float = Field(ge=0)
    duration: int = Field(gt=0)          # minutos
    description: str = ""


class Professional(Entity):
    name: str
    specialty: str
    bio: str = ""
    avatar_url: str = ""


class Product(Entity):
    name: str
    price: float = Field(ge=0)
    stock: int = Field(ge=0)
    description: str = ""
    image_url: Optional[str] = None


class Appointment(Entity):
    client_name: str
    client_phone: str = ""
    client_cpf: Optional[str] = None
    service_id: str
    professional_id: str
    date: str                            # YYYY-MM-DD, puede venir roto de datos viejos
    time: str                            # HH:MM
    status: AppointmentStatus = AppointmentStatus.PENDING

    @field_validator("time")
    @classmethod
    def _check_time(cls, v: str) -> str:
        if not _STORED_TIME.match(v):
            raise ValueError("time debe tener formato H:MM")
        return v


class Client(Entity):
    name: str
    cpf: str
    phone: str = ""
    type: ClientType = ClientType.AVULSO
    joined_at: str                       # ISO-8601

    @field_validator("cpf")
    @classmethod
    def _check_cpf(cls, v: str) -> str:
        if not is_valid_cpf(v):
            raise ValueError("CPF deve conter 11 dígitos")
        return v


class Expense(Entity):
    description: str
    amount: float = Field(ge=0)
    category: ExpenseCategory = ExpenseCategory.OUTROS
    date: str


# ---------------------------------------------------------------------------
# Schemas de entrada (sin id: lo asigna el repositorio)
# ---------------------------------------------------------------------------
class _Input(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ServiceIn(_Input):
    name: str
    price: float = Field(ge=0)
    duration: int = Field(default=30, gt=0)
    description: str = ""


class ProfessionalIn(_Input):
    name: str
    specialty: str
    bio: str = ""
    avatar_url: str = ""


class ProductIn(_Input):
    name: str
    price: float = Field(ge=0)
    stock: int = Field(default=0, ge=0)
    description: str = ""
    image_url: Optional[str] = None


class ExpenseIn(_Input):
    description: str
    amount: float = Field(ge=0)
    category: ExpenseCategory = ExpenseCategory.OUTROS
    date: str


class BookingIn(_Input):
    client_name: str
    client_phone: str = ""
    client_cpf: Optional[str] = None
    service_id: str
    professional_id: str
    date: str
    time: str

    @field_validator("time")
    @classmethod
    def _check_time(cls, v: str) -> str:
        if not _TIME.match(v):
            raise ValueError("time debe tener formato HH:MM")
        return v


class ClientIn(_Input):
    name: str
    cpf: str
    phone: str = ""
    type: ClientType = ClientType.AVULSO


class StatusUpdate(_Input):
    status: AppointmentStatus


class LogoIn(_Input):
    data_uri: str


class CopyRequest(_Input):
    kind: str = Field(pattern="^(service|bio)$")
    name: str
    keywords: str = ""


class LogoPrompt(_Input):
    prompt: str
