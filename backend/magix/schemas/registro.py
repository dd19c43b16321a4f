from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator, model_validator

from magix.models.registro import TOTAL_MAX, TipoRegistro


class RegistroBase(BaseModel):
    fecha: date
    beo: str = Field(default="", max_length=60)
    salon: str = Field(min_length=1, max_length=120)
    compania: str = Field(min_length=1, max_length=160)
    item: str = Field(min_length=1, max_length=250)
    tipo: TipoRegistro = TipoRegistro.VENTA
    valor: Decimal = Field(ge=0, max_digits=14, decimal_places=2)
    cantidad: Decimal = Field(gt=0, max_digits=12, decimal_places=2)

    @field_validator("beo", "salon", "compania", "item", mode="before")
    @classmethod
    def strip_texto(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("salon", "compania")
    @classmethod
    def sin_separador(cls, v: str) -> str:
        # el separador arma la clave del evento
        if "|" in v:
            raise ValueError("No puede contener el carácter '|'")
        return v

    @model_validator(mode="after")
    def total_en_rango(self):
        if self.valor * self.cantidad > TOTAL_MAX:
            raise ValueError("El total (valor x cantidad) excede el máximo permitido")
        return self


class RegistroCreate(RegistroBase):
    pass


class RegistroUpdate(RegistroBase):
    pass


class RegistroRead(RegistroBase):
    id: int
    total: Decimal
    created_at: datetime

    model_config = {
        "from_attributes": True,
    }
