from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class ArticuloBase(BaseModel):
    codigo_articulo: str = Field(min_length=1, max_length=60)
    grupo: str = Field(min_length=1, max_length=120)
    subgrupo: str = Field(min_length=1, max_length=120)
    descripcion: str = Field(min_length=1, max_length=500)
    en_stock: int = Field(ge=0)

    @field_validator("codigo_articulo", "grupo", "subgrupo", "descripcion", mode="before")
    @classmethod
    def strip_texto(cls, v):
        return v.strip() if isinstance(v, str) else v


class ArticuloCreate(ArticuloBase):
    pass


class ArticuloUpdate(ArticuloBase):
    pass


class ArticuloRead(ArticuloBase):
    id: int
    created_at: datetime

    model_config = {
        "from_attributes": True,
    }


class ArticuloStock(ArticuloRead):
    reservado: int
    disponible: int


class DisponibilidadRead(BaseModel):
    articulo_id: int
    en_stock: int
    reservado: int
    disponible: int
