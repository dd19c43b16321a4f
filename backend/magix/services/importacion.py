# services/importacion.py
"""
Importación de registros desde planillas (.xlsx, .xls, .csv).

Los encabezados se comparan sin mayúsculas ni tildes contra un juego de
variantes conocidas; las fechas aceptan DD-MM-AAAA, DD/MM/AAAA o ISO; valor y
cantidad se redondean a centavos. Las filas incompletas, con valor/cantidad no
positivos o que no caben en las columnas se omiten y se informan.
"""
from __future__ import annotations

import io
import math
import re
import unicodedata
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from magix.core.logging import get_logger
from magix.models.registro import CANTIDAD_MAX, CENTAVOS, TOTAL_MAX, VALOR_MAX, TipoRegistro

logger = get_logger(__name__)

EXTENSIONES = (".xlsx", ".xls", ".csv")

# encabezado normalizado -> campo de Registro
COLUMNAS = {
    "fecha": "fecha",
    "beo": "beo",
    "codigo evento": "beo",
    "codigo_evento": "beo",
    "salon": "salon",
    "compania": "compania",
    "item": "item",
    "tipo": "tipo",
    "valor": "valor",
    "cantidad": "cantidad",
}

REQUERIDOS = ("salon", "compania", "item", "tipo")


def _sin_tildes(s: str) -> str:
    return "".join(c for c in unicodedata.normalize("NFD", s) if unicodedata.category(c) != "Mn")


def normalizar_encabezado(h: Any) -> str:
    return _sin_tildes(str(h).strip().lower())


_TIPOS = {normalizar_encabezado(t.value): t for t in TipoRegistro}


def normalizar_tipo(valor: Any) -> Optional[TipoRegistro]:
    if _vacio(valor):
        return None
    return _TIPOS.get(normalizar_encabezado(valor))


def _vacio(v: Any) -> bool:
    if v is None:
        return True
    if isinstance(v, float) and math.isnan(v):
        return True
    if v is pd.NaT:
        return True
    return isinstance(v, str) and not v.strip()


def _texto(v: Any) -> str:
    if _vacio(v):
        return ""
    if isinstance(v, float) and v.is_integer():
        v = int(v)
    return str(v).strip()


def parse_fecha(valor: Any) -> Optional[date]:
    """
    - celdas de fecha (datetime/Timestamp/date) se usan tal cual
    - texto con 3 partes separadas por - o / se prueba como día-mes-año
      (año > 2000, mes 1..12, día 1..31)
    - si no calza, se intenta un parseo general (AAAA-MM-DD y similares)
    """
    if _vacio(valor):
        return None
    if isinstance(valor, datetime):
        return valor.date()
    if isinstance(valor, date):
        return valor
    if not isinstance(valor, str):
        return None

    s = valor.strip()
    partes = [p.strip() for p in re.split(r"[-/]", s)]
    if len(partes) == 3 and all(p.isdigit() for p in partes):
        dia, mes, anio = (int(p) for p in partes)
        if anio > 2000 and 0 < mes <= 12 and 0 < dia <= 31:
            try:
                return date(anio, mes, dia)
            except ValueError:
                pass  # p.ej. 31-02-2024: probamos el parser general

    ts = pd.to_datetime(s, errors="coerce")
    if pd.isna(ts):
        return None
    return ts.date()


def parse_numero(valor: Any) -> Decimal:
    """Número o 0 si no se puede interpretar."""
    if _vacio(valor) or isinstance(valor, bool):
        return Decimal(0)
    try:
        d = Decimal(str(valor).strip())
    except InvalidOperation:
        return Decimal(0)
    return d if d.is_finite() else Decimal(0)


def a_centavos(numero: Decimal, maximo: Decimal) -> Optional[Decimal]:
    """
    Redondea a 2 decimales (como las columnas valor/cantidad).
    None si no cabe en la columna.
    """
    if abs(numero) > maximo:
        return None
    redondeado = numero.quantize(CENTAVOS, rounding=ROUND_HALF_UP)
    return None if abs(redondeado) > maximo else redondeado


# ===================== Estructuras de salida =====================

@dataclass
class FilaOmitida:
    fila: int
    motivo: str


@dataclass
class ResultadoImportacion:
    registros: List[Dict[str, Any]] = field(default_factory=list)
    omitidas: List[FilaOmitida] = field(default_factory=list)


# ===================== Lectura =====================

def leer_planilla(content: bytes, filename: str) -> pd.DataFrame:
    ext = Path(filename or "").suffix.lower()
    if ext not in EXTENSIONES:
        raise ValueError(f"Formato no soportado: {ext or 'sin extensión'} (usar .xlsx, .xls o .csv)")
    buf = io.BytesIO(content)
    if ext == ".csv":
        try:
            return pd.read_csv(buf, dtype=object, sep=None, engine="python", encoding="utf-8-sig")
        except UnicodeDecodeError:
            buf.seek(0)
            return pd.read_csv(buf, dtype=object, sep=None, engine="python", encoding="latin-1")
    engine = "openpyxl" if ext == ".xlsx" else "xlrd"
    return pd.read_excel(buf, sheet_name=0, dtype=object, engine=engine)


def _mapear_fila(raw: Dict[Any, Any]) -> Dict[str, Any]:
    fila: Dict[str, Any] = {"beo": ""}
    for header, valor in raw.items():
        campo = COLUMNAS.get(normalizar_encabezado(header))
        if campo:
            fila[campo] = valor
    return fila


def normalizar_filas(rows: Iterable[Dict[Any, Any]]) -> ResultadoImportacion:
    res = ResultadoImportacion()
    for index, raw in enumerate(rows):
        nro = index + 2  # fila 1 = encabezados
        fila = _mapear_fila(raw)

        fecha = parse_fecha(fila.get("fecha"))
        valor = a_centavos(parse_numero(fila.get("valor")), VALOR_MAX)
        cantidad = a_centavos(parse_numero(fila.get("cantidad")), CANTIDAD_MAX)
        textos = {c: _texto(fila.get(c)) for c in REQUERIDOS}
        tipo = normalizar_tipo(fila.get("tipo"))

        motivo = None
        faltantes = [c for c in REQUERIDOS if not textos[c]]
        if fecha is None:
            motivo = "fecha faltante o inválida"
        elif faltantes:
            motivo = f"faltan datos requeridos: {', '.join(faltantes)}"
        elif tipo is None:
            motivo = f"tipo desconocido: {textos['tipo']}"
        elif "|" in textos["salon"] or "|" in textos["compania"]:
            motivo = "salón o compañía contienen '|'"
        elif valor is None or cantidad is None:
            motivo = "valor o cantidad exceden el máximo permitido"
        elif valor <= 0 or cantidad <= 0:
            motivo = "valor y cantidad deben ser mayores a 0"
        elif valor * cantidad > TOTAL_MAX:
            motivo = "el total (valor x cantidad) excede el máximo permitido"

        if motivo:
            logger.warning(f"Omitiendo fila {nro}: {motivo}")
            res.omitidas.append(FilaOmitida(fila=nro, motivo=motivo))
            continue

        res.registros.append({
            "fecha": fecha,
            "beo": _texto(fila.get("beo")),
            "salon": textos["salon"],
            "compania": textos["compania"],
            "item": textos["item"],
            "tipo": tipo,
            "valor": valor,
            "cantidad": cantidad,
            "total": valor * cantidad,
        })
    return res


def parse_planilla(content: bytes, filename: str) -> ResultadoImportacion:
    try:
        df = leer_planilla(content, filename)
    except ValueError as exc:
        raise ValueError(f"Error al procesar el archivo: {exc}") from exc
    except Exception as exc:  # noqa: BLE001
        logger.error(f"No se pudo leer la planilla {filename}: {exc}")
        raise ValueError(f"Error al procesar el archivo: {exc}") from exc

    res = normalizar_filas(df.to_dict(orient="records"))
    logger.info(f"Planilla {filename} procesada: {len(res.registros)} válidas, {len(res.omitidas)} omitidas")
    return res
