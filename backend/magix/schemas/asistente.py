from pydantic import BaseModel, Field, field_validator


class ChatRequest(BaseModel):
    mensaje: str = Field(min_length=1, max_length=4000)

    @field_validator("mensaje", mode="before")
    @classmethod
    def strip_mensaje(cls, v):
        return v.strip() if isinstance(v, str) else v


class ChatResponse(BaseModel):
    respuesta: str
