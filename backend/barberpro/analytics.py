# barberpro/analytics.py
"""
Agregaciones del panel: facturación, popularidad de servicios y gastos.

Funciones puras sobre snapshots de los repositorios; se recalcula todo en
cada llamada. Ojo con la asimetría de filtros (se mantiene tal cual):

  • facturación  → solo `confirmed` y `completed`
  • popularidad  → todo menos `cancelled` (incluye `pending`)
"""

from __future__ import annotations

from datetime import date
from typing import Sequence

from babel.dates import format_date
from pydantic import BaseModel

from barberpro.schema import UNKNOWN_LABEL, Appointment, AppointmentStatus, Expense, Service

PALETTE = ("#d4af37", "#a18323", "#7a6112", "#f3d97f", "#4a3b0b", "#8c701c")
NEUTRAL_COLOR = "#2d2d2d"

REVENUE_STATUSES = frozenset({AppointmentStatus.CONFIRMED, AppointmentStatus.COMPLETED})


class BarEntry(BaseModel):
    name: str
    value: float


class Segment(BaseModel):
    color: str
    start: float      # grados
    end: float


class PieSlice(BaseModel):
    name: str
    value: float
    percentage: float
    color: str
    start: float
    end: float


class RevenueSummary(BaseModel):
    total_revenue: float
    revenue_by_month: dict[str, float]
    bar_data: list[BarEntry]
    max_revenue: float


class PopularitySummary(BaseModel):
    services_count: dict[str, int]
    total_services: int
    pie_data: list[PieSlice]
    segments: list[Segment]
    conic_gradient: str


class FinancialSummary(BaseModel):
    total_expenses: float
    net_profit: float
    expenses_by_category: dict[str, float]
    expense_pie_data: list[PieSlice]
    segments: list[Segment]
    conic_gradient: str


class Dashboard(BaseModel):
    revenue: RevenueSummary
    popularity: PopularitySummary
    financial: FinancialSummary


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def month_label(raw_date: str, locale: str = "pt_BR") -> str | None:
    """Nombre corto del mes ('out.'), o None si la fecha no se puede parsear."""
    try:
        parsed = date.fromisoformat((raw_date or "")[:10])
    except ValueError:
        return None
    return format_date(parsed, "MMM", locale=locale)


def angular_partition(weights: Sequence[float], whole: float) -> list[tuple[float, float]]:
    """
    Reparte 360° proporcionalmente a `weights`.

    Cada inicio sale de la suma acumulada de pesos crudos, no de los grados
    ya redondeados del tramo anterior; el último tramo cierra en 360 exacto.
    """
    if whole <= 0:
        return []
    spans: list[tuple[float, float]] = []
    cumulative = 0.0
    for i, weight in enumerate(weights):
        start = 360.0 * (cumulative / whole)
        cumulative += weight
        end = 360.0 if i == len(weights) - 1 else 360.0 * (cumulative / whole)
        spans.append((start, end))
    return spans


def _neutral() -> list[Segment]:
    return [Segment(color=NEUTRAL_COLOR, start=0.0, end=360.0)]


def conic_gradient(segments: Sequence[Segment]) -> str:
    if not segments:
        segments = _neutral()
    parts = ", ".join(f"{s.color} {s.start:g}deg {s.end:g}deg" for s in segments)
    return f"conic-gradient({parts})"


def _ranked(totals: dict[str, float]) -> list[tuple[str, float]]:
    # sort estable: empates respetan el orden de primera aparición
    return sorted(totals.items(), key=lambda kv: kv[1], reverse=True)


# ---------------------------------------------------------------------------
# Agregaciones
# ---------------------------------------------------------------------------
def revenue_summary(
    appointments: Sequence[Appointment],
    services: Sequence[Service],
    locale: str = "pt_BR",
) -> RevenueSummary:
    prices = {s.id: s.price for s in services}
    revenue_by_month: dict[str, float] = {}
    total = 0.0

    for appt in appointments:
        if appt.status not in REVENUE_STATUSES:
            continue
        price = prices.get(appt.service_id, 0)
        total += price
        label = month_label(appt.date, locale)
        if label is None:
            continue           # cuenta en el total, no en las barras
        revenue_by_month[label] = revenue_by_month.get(label, 0) + price

    bar_data = [BarEntry(name=k, value=v) for k, v in revenue_by_month.items()]
    max_revenue = max([1, *(b.value for b in bar_data)])
    return RevenueSummary(
        total_revenue=total,
        revenue_by_month=revenue_by_month,
        bar_data=bar_data,
        max_revenue=max_revenue,
    )


def service_popularity(
    appointments: Sequence[Appointment],
    services: Sequence[Service],
) -> PopularitySummary:
    names = {s.id: s.name for s in services}
    counts: dict[str, int] = {}
    for appt in appointments:
        if appt.status == AppointmentStatus.CANCELLED:
            continue
        name = names.get(appt.service_id, UNKNOWN_LABEL)
        counts[name] = counts.get(name, 0) + 1

    total = sum(counts.values())
    ranked = _ranked(counts)
    spans = angular_partition([v for _, v in ranked], total)

    pie_data = [
        PieSlice(
            name=name,
            value=value,
            percentage=100 * value / total if total else 0,
            color=PALETTE[i % len(PALETTE)],
            start=start,
            end=end,
        )
        for i, ((name, value), (start, end)) in enumerate(zip(ranked, spans))
    ]
    segments = [Segment(color=p.color, start=p.start, end=p.end) for p in pie_data] or _neutral()
    return PopularitySummary(
        services_count=counts,
        total_services=total,
        pie_data=pie_data,
        segments=segments,
        conic_gradient=conic_gradient(segments),
    )


def net_profit(total_revenue: float, total_expenses: float) -> float:
    # puede ser negativo, no se recorta
    return total_revenue - total_expenses


def financial_summary(expenses: Sequence[Expense], total_revenue: float) -> FinancialSummary:
    total_expenses = sum(e.amount for e in expenses)

    by_category: dict[str, float] = {}
    for exp in expenses:
        key = exp.category.value
        by_category[key] = by_category.get(key, 0) + exp.amount

    ranked = _ranked(by_category)
    percentages = [100 * v / total_expenses if total_expenses > 0 else 0 for _, v in ranked]
    if total_expenses > 0:
        spans = angular_partition(percentages, 100.0)
    else:
        spans = [(0.0, 0.0)] * len(ranked)

    expense_pie_data = [
        PieSlice(
            name=name,
            value=value,
            percentage=pct,
            color=PALETTE[i % len(PALETTE)],
            start=start,
            end=end,
        )
        for i, ((name, value), pct, (start, end)) in enumerate(zip(ranked, percentages, spans))
    ]
    segments = (
        [Segment(color=p.color, start=p.start, end=p.end) for p in expense_pie_data]
        if total_expenses > 0
        else _neutral()
    )
    return FinancialSummary(
        total_expenses=total_expenses,
        net_profit=net_profit(total_revenue, total_expenses),
        expenses_by_category=by_category,
        expense_pie_data=expense_pie_data,
        segments=segments,
        conic_gradient=conic_gradient(segments),
    )


def dashboard(
    appointments: Sequence[Appointment],
    services: Sequence[Service],
    expenses: Sequence[Expense],
    locale: str = "pt_BR",
) -> Dashboard:
    revenue = revenue_summary(appointments, services, locale)
    return Dashboard(
        revenue=revenue,
        popularity=service_popularity(appointments, services),
        financial=financial_summary(expenses, revenue.total_revenue),
    )
