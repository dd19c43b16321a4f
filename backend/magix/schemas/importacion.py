from typing import List

from pydantic import BaseModel


class FilaOmitidaRead(BaseModel):
    fila: int
    motivo: str


class ImportacionResultado(BaseModel):
    message: str
    insertados: int
    omitidas: List[FilaOmitidaRead]
