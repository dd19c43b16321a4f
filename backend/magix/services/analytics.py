# services/analytics.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional

# ===================== Constantes =====================

SPANISH_MONTHS = [
    "", "Enero", "Febrero", "Marzo", "Abril", "Mayo", "Junio",
    "Julio", "Agosto", "Septiembre", "Octubre", "Noviembre", "Diciembre"
]

SIN_ESPECIFICAR = "Sin especificar"
CAMPOS_GRUPO = ("salon", "compania", "tipo", "mes")
UMBRAL_PARETO = Decimal("0.8")

# ===================== Util =====================

def _as_decimal(x) -> Decimal:
    if x is None: return Decimal(0)
    if isinstance(x, Decimal): return x
    return Decimal(str(x))


def _tipo_to_str(t) -> str:
    return getattr(t, "value", t) or ""


def _mes_key(fecha: date) -> str:
    return f"{fecha.year:04d}-{fecha.month:02d}"


def etiqueta_mes(mes_key: str) -> str:
    anio, mes = mes_key.split("-")
    return f"{SPANISH_MONTHS[int(mes)]} {anio}"


def rango_anio_actual(hoy: Optional[date] = None) -> tuple[date, date]:
    hoy = hoy or date.today()
    return date(hoy.year, 1, 1), date(hoy.year, 12, 31)

# ===================== Estructuras de salida =====================

@dataclass
class Kpis:
    total_facturado: Decimal
    promedio_valor: Decimal
    companias_unicas: int
    salones_unicos: int
    variacion_mensual: Optional[float]  # % último mes vs anterior


@dataclass
class Grupo:
    nombre: str
    total: Decimal
    cantidad: int = 0

# ===================== Cálculos =====================

def filtrar_por_rango(registros: Iterable, desde: Optional[date], hasta: Optional[date]) -> list:
    out = list(registros)
    if desde:
        out = [r for r in out if r.fecha >= desde]
    if hasta:
        out = [r for r in out if r.fecha <= hasta]
    return out


def total_general(registros: Iterable) -> Decimal:
    return sum((_as_decimal(r.total) for r in registros), Decimal(0))


def totales_por_mes(registros: Iterable) -> dict[str, Decimal]:
    out: dict[str, Decimal] = {}
    for r in registros:
        k = _mes_key(r.fecha)
        out[k] = out.get(k, Decimal(0)) + _as_decimal(r.total)
    return out


def variacion_mensual(registros: Iterable) -> Optional[float]:
    por_mes = totales_por_mes(registros)
    meses = sorted(por_mes, reverse=True)
    if len(meses) < 2:
        return None
    ultimo, anterior = por_mes[meses[0]], por_mes[meses[1]]
    if anterior == 0:
        return None
    pct = (ultimo - anterior) / anterior * 100
    return float(pct.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def calcular_kpis(registros: Iterable) -> Optional[Kpis]:
    """None si no hay registros en el rango."""
    registros = list(registros)
    if not registros:
        return None
    total = total_general(registros)
    promedio = sum((_as_decimal(r.valor) for r in registros), Decimal(0)) / len(registros)
    return Kpis(
        total_facturado=total,
        promedio_valor=promedio.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP),
        companias_unicas=len({r.compania for r in registros}),
        salones_unicos=len({r.salon for r in registros}),
        variacion_mensual=variacion_mensual(registros),
    )


def serie_temporal(registros: Iterable) -> List[Grupo]:
    """Total facturado por día, en orden cronológico."""
    por_dia: dict[date, Grupo] = {}
    for r in registros:
        g = por_dia.setdefault(r.fecha, Grupo(nombre=r.fecha.isoformat(), total=Decimal(0)))
        g.total += _as_decimal(r.total)
        g.cantidad += 1
    return [por_dia[d] for d in sorted(por_dia)]


def agrupar_por(registros: Iterable, campo: str) -> List[Grupo]:
    """
    Suma de totales agrupada por salon | compania | tipo | mes.
    Orden: total descendente. Las claves vacías van como 'Sin especificar'.
    """
    if campo not in CAMPOS_GRUPO:
        raise ValueError(f"Campo de agrupación inválido: {campo}")

    grupos: dict[str, Grupo] = {}
    for r in registros:
        if campo == "mes":
            key = _mes_key(r.fecha)
            nombre = etiqueta_mes(key)
        else:
            valor = getattr(r, campo)
            nombre = (_tipo_to_str(valor) if campo == "tipo" else (valor or "")).strip() or SIN_ESPECIFICAR
            key = nombre
        g = grupos.setdefault(key, Grupo(nombre=nombre, total=Decimal(0)))
        g.total += _as_decimal(r.total)
        g.cantidad += 1

    return sorted(grupos.values(), key=lambda g: g.total, reverse=True)


def items_pareto(registros: Iterable, umbral: Decimal = UMBRAL_PARETO) -> List[Grupo]:
    """
    Ítems que explican el ~80% de los ingresos: se recorren de mayor a menor
    y se incluye cada uno mientras el acumulado previo sea < umbral.
    """
    por_item: dict[str, Grupo] = {}
    for r in registros:
        g = por_item.setdefault(r.item, Grupo(nombre=r.item, total=Decimal(0)))
        g.total += _as_decimal(r.total)
        g.cantidad += 1
    ordenados = sorted(por_item.values(), key=lambda g: g.total, reverse=True)

    total = sum((g.total for g in ordenados), Decimal(0))
    if total <= 0:
        return []
    acumulado = Decimal(0)
    out: List[Grupo] = []
    for g in ordenados:
        if acumulado / total >= umbral:
            break
        acumulado += g.total
        out.append(g)
    return out
