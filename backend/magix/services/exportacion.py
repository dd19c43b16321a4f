# services/exportacion.py
import io
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

import pandas as pd

from magix.models.registro import TipoRegistro
from magix.services.analytics import SPANISH_MONTHS
from magix.services.importacion import normalizar_encabezado

COLUMNAS_REGISTROS = ["Fecha", "BEO", "Salón", "Compañía", "Ítem", "Tipo", "Valor", "Cantidad", "Total"]
COLUMNAS_RESUMEN = ["Mes", "Total Venta", "Venta Iluminación", "Subarriendo Iluminación"]
FORMATO_MONEDA = '"$"#,##0'


def _as_decimal(x) -> Decimal:
    if x is None: return Decimal(0)
    if isinstance(x, Decimal): return x
    return Decimal(str(x))


def nombre_archivo(prefijo: str, hoy: Optional[date] = None) -> str:
    return f"{prefijo}_{(hoy or date.today()).isoformat()}.xlsx"


def _es_iluminacion(item: str) -> bool:
    return "iluminacion" in normalizar_encabezado(item or "")


def _anchos(df: pd.DataFrame, extra: int = 0) -> List[int]:
    anchos = []
    for col in df.columns:
        largos = [len(str(v)) for v in df[col]] or [10]
        anchos.append(max(max(largos), len(str(col))) + extra)
    return anchos


def registros_dataframe(registros: Iterable) -> pd.DataFrame:
    filas = [
        (
            r.fecha.isoformat(),
            r.beo or "",
            r.salon,
            r.compania,
            r.item,
            getattr(r.tipo, "value", r.tipo),
            float(_as_decimal(r.valor)),
            float(_as_decimal(r.cantidad)),
            float(_as_decimal(r.total)),
        )
        for r in registros
    ]
    return pd.DataFrame(filas, columns=COLUMNAS_REGISTROS)


def resumen_mensual(registros: Iterable) -> List[Dict]:
    """
    Una fila por mes (más reciente primero):
    - Total Venta: suma de registros tipo Venta
    - Venta Iluminación / Subarriendo Iluminación: ítems que mencionan iluminación
    """
    meses: Dict[str, Dict] = {}
    for r in registros:
        key = f"{r.fecha.year:04d}-{r.fecha.month:02d}"
        fila = meses.get(key)
        if fila is None:
            fila = {
                "Mes": f"{SPANISH_MONTHS[r.fecha.month]} {r.fecha.year}",
                "Total Venta": Decimal(0),
                "Venta Iluminación": Decimal(0),
                "Subarriendo Iluminación": Decimal(0),
            }
            meses[key] = fila

        total = _as_decimal(r.total)
        if r.tipo == TipoRegistro.VENTA:
            fila["Total Venta"] += total
            if _es_iluminacion(r.item):
                fila["Venta Iluminación"] += total
        elif r.tipo == TipoRegistro.SUBARRIENDO and _es_iluminacion(r.item):
            fila["Subarriendo Iluminación"] += total

    return [meses[k] for k in sorted(meses, reverse=True)]


def exportar_registros(registros: Iterable) -> bytes:
    df = registros_dataframe(registros)
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="xlsxwriter") as writer:
        df.to_excel(writer, index=False, sheet_name="Registros")
        ws = writer.sheets["Registros"]
        for idx, ancho in enumerate(_anchos(df)):
            ws.set_column(idx, idx, ancho)
    return buf.getvalue()


def exportar_resumen_mensual(registros: Iterable) -> bytes:
    filas = resumen_mensual(registros)
    df = pd.DataFrame(filas, columns=COLUMNAS_RESUMEN)
    for col in COLUMNAS_RESUMEN[1:]:
        df[col] = df[col].astype(float)

    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="xlsxwriter") as writer:
        df.to_excel(writer, index=False, sheet_name="Resumen Mensual")
        wb = writer.book
        ws = writer.sheets["Resumen Mensual"]
        fmt_moneda = wb.add_format({"num_format": FORMATO_MONEDA})
        for idx, ancho in enumerate(_anchos(df, extra=2)):
            ws.set_column(idx, idx, ancho)
        # to_excel deja formato propio en cada celda: se reescriben los montos
        for r, fila in enumerate(df.itertuples(index=False), start=1):
            for c, val in enumerate(fila[1:], start=1):
                ws.write_number(r, c, val, fmt_moneda)
    return buf.getvalue()
