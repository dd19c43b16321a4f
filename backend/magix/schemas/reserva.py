from datetime import datetime

from pydantic import BaseModel, Field


class ReservaBase(BaseModel):
    articulo_id: int
    evento_key: str = Field(min_length=5, max_length=400)
    cantidad_reservada: int


class ReservaCreate(ReservaBase):
    pass


class ReservaUpdate(BaseModel):
    cantidad_reservada: int


class ReservaRead(ReservaBase):
    id: int
    created_at: datetime

    model_config = {
        "from_attributes": True,
    }
