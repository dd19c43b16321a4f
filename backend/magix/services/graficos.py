# services/graficos.py
# -*- coding: utf-8 -*-
import io
from typing import List

import matplotlib
matplotlib.use("Agg")
import pandas as pd
from matplotlib.figure import Figure
from matplotlib.patches import Circle
from matplotlib.ticker import FuncFormatter

from magix.services.analytics import Grupo

TIPOS = ("temporal", "compania", "salon", "pareto")
COLORS = ["#0088FE", "#00C49F", "#FFBB28", "#FF8042", "#AF19FF"]


def _figure() -> Figure:
    # Figure sin pyplot: no depende de un backend interactivo ni de estado global
    return Figure(figsize=(9, 5))


def _df(grupos: List[Grupo]) -> pd.DataFrame:
    df = pd.DataFrame(
        [(g.nombre, float(g.total), g.cantidad) for g in grupos],
        columns=["nombre", "total", "cantidad"],
    )
    return df


def _compacto(valor, _pos=None) -> str:
    v = abs(valor)
    if v >= 1_000_000:
        return f"${valor / 1_000_000:.1f}M"
    if v >= 1_000:
        return f"${valor / 1_000:.0f}K"
    return f"${valor:.0f}"


def _sin_datos(fig: Figure, titulo: str) -> Figure:
    ax = fig.add_subplot(111)
    ax.set_title(f"{titulo} (sin datos)")
    ax.set_axis_off()
    return fig

# -----------------------------
# 1) Evolución temporal (línea)
# -----------------------------
def fig_temporal(serie: List[Grupo]) -> Figure:
    fig = _figure()
    df = _df(serie)
    if df.empty:
        return _sin_datos(fig, "Total Facturado por Día")
    df["nombre"] = pd.to_datetime(df["nombre"])

    ax = fig.add_subplot(111)
    ax.plot(df["nombre"], df["total"], color="#3B82F6", linewidth=2, label="Total Facturado")
    ax.set_title("Total Facturado por Día")
    ax.yaxis.set_major_formatter(FuncFormatter(_compacto))
    ax.grid(linestyle="--", alpha=0.4)
    ax.legend()
    fig.autofmt_xdate(rotation=45)
    fig.tight_layout()
    return fig

# ------------------------------------------
# 2) Por compañía (barras horizontales, top 15)
# ------------------------------------------
def fig_compania(grupos: List[Grupo], top: int = 15) -> Figure:
    fig = _figure()
    df = _df(grupos[:top])
    if df.empty:
        return _sin_datos(fig, "Total Facturado por Compañía")

    ax = fig.add_subplot(111)
    ax.barh(df["nombre"][::-1], df["total"][::-1], color="#00C49F", label="Total Facturado")
    ax.set_title("Total Facturado por Compañía")
    ax.xaxis.set_major_formatter(FuncFormatter(_compacto))
    ax.legend()
    fig.tight_layout()
    return fig

# ------------------------------------------------------
# 3) Por salón: ingresos y cantidad de registros (top 10)
# ------------------------------------------------------
def fig_salon(grupos: List[Grupo], top: int = 10) -> Figure:
    fig = _figure()
    df = _df(grupos)
    if df.empty:
        return _sin_datos(fig, "Análisis por Salón")

    por_total = df.sort_values("total", ascending=False, kind="stable").head(top)
    por_cantidad = df.sort_values("cantidad", ascending=False, kind="stable").head(top)

    ax1 = fig.add_subplot(121)
    ax1.bar(por_total["nombre"], por_total["total"], color="#FFBB28")
    ax1.set_title("Total Ingresos")
    ax1.yaxis.set_major_formatter(FuncFormatter(_compacto))
    ax1.tick_params(axis="x", labelrotation=45)

    ax2 = fig.add_subplot(122)
    ax2.bar(por_cantidad["nombre"], por_cantidad["cantidad"], color="#FF8042")
    ax2.set_title("Cantidad de Eventos")
    ax2.tick_params(axis="x", labelrotation=45)

    fig.tight_layout()
    return fig

# ----------------------------------
# 4) Ítems Pareto (donut + leyenda)
# ----------------------------------
def fig_pareto(items: List[Grupo]) -> Figure:
    fig = _figure()
    df = _df(items)
    if df.empty:
        return _sin_datos(fig, "Ítems que explican el 80% de los ingresos")

    ax = fig.add_subplot(111)
    colores = [COLORS[i % len(COLORS)] for i in range(len(df))]
    wedges, _texts, _autotexts = ax.pie(df["total"], labels=None, colors=colores, autopct="%1.0f%%", startangle=90)
    ax.add_artist(Circle((0, 0), 0.55, fc="white"))
    ax.set_title("Ítems que explican el 80% de los ingresos")
    ax.legend(
        wedges,
        [n if len(n) <= 15 else f"{n[:15]}..." for n in df["nombre"]],
        title="Ítem",
        loc="center left",
        bbox_to_anchor=(1.02, 0.5),
        borderaxespad=0.0,
    )
    fig.tight_layout()
    return fig


def figura_png(fig: Figure) -> bytes:
    buf = io.BytesIO()
    fig.savefig(buf, format="png", dpi=120, bbox_inches="tight")
    return buf.getvalue()
