from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest

from magix.models.registro import TipoRegistro
from magix.services.analytics import (
    agrupar_por,
    calcular_kpis,
    etiqueta_mes,
    filtrar_por_rango,
    items_pareto,
    rango_anio_actual,
    serie_temporal,
    variacion_mensual,
)


def reg(fecha, total, salon="Salón A", compania="Acme", item="Luz", tipo=TipoRegistro.VENTA, valor=None):
    total = Decimal(str(total))
    return SimpleNamespace(
        fecha=fecha,
        total=total,
        valor=Decimal(str(valor)) if valor is not None else total,
        salon=salon,
        compania=compania,
        item=item,
        tipo=tipo,
    )


def test_etiqueta_mes_y_rango():
    assert etiqueta_mes("2024-03") == "Marzo 2024"
    assert rango_anio_actual(date(2024, 6, 1)) == (date(2024, 1, 1), date(2024, 12, 31))


def test_filtrar_por_rango_inclusive():
    registros = [reg(date(2024, 1, 1), 1), reg(date(2024, 1, 31), 1), reg(date(2024, 2, 1), 1)]
    assert len(filtrar_por_rango(registros, date(2024, 1, 1), date(2024, 1, 31))) == 2


def test_calcular_kpis():
    registros = [
        reg(date(2024, 2, 10), 100, compania="Acme", valor=50),
        reg(date(2024, 3, 10), 150, compania="Beta", salon="Terraza", valor=150),
    ]
    kpis = calcular_kpis(registros)
    assert kpis.total_facturado == Decimal("250")
    assert kpis.promedio_valor == Decimal("100.00")
    assert kpis.companias_unicas == 2
    assert kpis.salones_unicos == 2
    assert kpis.variacion_mensual == 50.0
    assert calcular_kpis([]) is None


def test_variacion_mensual_needs_two_months_and_nonzero_previous():
    assert variacion_mensual([reg(date(2024, 3, 1), 10)]) is None
    assert variacion_mensual([reg(date(2024, 2, 1), 0), reg(date(2024, 3, 1), 10)]) is None
    assert variacion_mensual([reg(date(2024, 2, 1), 300), reg(date(2024, 3, 1), 200)]) == -33.3


def test_serie_temporal_ascending():
    serie = serie_temporal([reg(date(2024, 3, 2), 5), reg(date(2024, 3, 1), 10), reg(date(2024, 3, 2), 5)])
    assert [(g.nombre, g.total) for g in serie] == [("2024-03-01", Decimal("10")), ("2024-03-02", Decimal("10"))]


def test_agrupar_por():
    registros = [
        reg(date(2024, 3, 1), 10, salon="A"),
        reg(date(2024, 3, 2), 30, salon="B"),
        reg(date(2024, 4, 2), 5, salon=""),
        reg(date(2024, 4, 3), 15, salon="A", tipo=TipoRegistro.ESTANDAR),
    ]
    por_salon = agrupar_por(registros, "salon")
    assert [(g.nombre, g.total, g.cantidad) for g in por_salon] == [
        ("B", Decimal("30"), 1),
        ("A", Decimal("25"), 2),
        ("Sin especificar", Decimal("5"), 1),
    ]
    assert [g.nombre for g in agrupar_por(registros, "mes")] == ["Marzo 2024", "Abril 2024"]
    assert [g.nombre for g in agrupar_por(registros, "tipo")] == ["Venta", "Estándar"]
    with pytest.raises(ValueError):
        agrupar_por(registros, "item")


def test_items_pareto():
    registros = [
        reg(date(2024, 3, 1), 50, item="A"),
        reg(date(2024, 3, 1), 30, item="B"),
        reg(date(2024, 3, 1), 15, item="C"),
        reg(date(2024, 3, 1), 5, item="D"),
    ]
    # A (0%) y B (50%) entran; C arranca con 80% acumulado
    assert [g.nombre for g in items_pareto(registros)] == ["A", "B"]
    assert items_pareto([]) == []
