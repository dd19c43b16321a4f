from fastapi import APIRouter, Depends

from magix.api.deps import get_current_active_user
from magix.schemas.asistente import ChatRequest, ChatResponse
from magix.services.asistente import SALUDO, asistente_client

router = APIRouter(prefix="/asistente", tags=["asistente"])


@router.get("", response_model=ChatResponse)
def saludo(current_user=Depends(get_current_active_user)):
    return ChatResponse(respuesta=SALUDO)


@router.post("", response_model=ChatResponse)
def chat(payload: ChatRequest, current_user=Depends(get_current_active_user)):
    return ChatResponse(respuesta=asistente_client.responder(payload.mensaje))
