# services/asistente.py
from typing import Optional

import requests

from magix.core.config import settings
from magix.core.logging import get_logger

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "Eres un asistente de IA experto y amigable para la aplicación 'Magix Data Analyzer'. "
    "Tu rol principal es ayudar a los usuarios a entender y utilizar las funcionalidades de la aplicación: "
    "registro de ítems por evento, inventario y reservas de artículos, importación y exportación de planillas "
    "y paneles de análisis. También puedes responder preguntas generales sobre bases de datos y Microsoft Excel "
    "para ofrecer un soporte más completo. Proporciona respuestas claras, útiles y concisas."
)

SALUDO = "¡Hola! Soy el asistente de Magix. ¿Cómo puedo ayudarte a analizar tus datos hoy?"
RESPUESTA_ERROR = (
    "Lo siento, no pude procesar tu solicitud en este momento. "
    "Por favor, inténtalo de nuevo más tarde."
)


class AsistenteClient:
    """Un turno de chat = un POST al servicio de generación de texto."""

    def __init__(
        self,
        url: Optional[str] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.url = url if url is not None else settings.asistente_url
        self.api_key = api_key if api_key is not None else settings.asistente_api_key
        self.model = model or settings.asistente_model
        self.timeout = timeout or settings.asistente_timeout

    def _payload(self, mensaje: str) -> dict:
        return {
            "model": self.model,
            "system": SYSTEM_PROMPT,
            "messages": [{"role": "user", "content": mensaje}],
        }

    def responder(self, mensaje: str) -> str:
        if not self.url:
            logger.warning("Asistente sin URL configurada")
            return RESPUESTA_ERROR

        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        try:
            resp = requests.post(self.url, json=self._payload(mensaje), headers=headers, timeout=self.timeout)
            resp.raise_for_status()
            texto = (resp.json() or {}).get("text")
        except (requests.RequestException, ValueError) as exc:
            logger.error(f"Error al contactar el servicio de IA: {exc}")
            return RESPUESTA_ERROR

        if not isinstance(texto, str) or not texto.strip():
            logger.error("Respuesta del servicio de IA sin texto")
            return RESPUESTA_ERROR
        return texto.strip()


asistente_client = AsistenteClient()
