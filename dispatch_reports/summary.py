"""Aggregates and section composers for multi-record summary reports."""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Union

import numpy as np

from . import labels, layout
from .models import Priority, ReportKind, ServiceRecord, ServiceStatus, TeamMember
from .pagination import PaginationController
from .primitives import section_title, table
from .text import display_value, fold, format_date, parse_datetime, sanitize

KeyFn = Callable[[ServiceRecord], object]


def group_count(records: Sequence[ServiceRecord], key: Union[str, KeyFn],
                order: Sequence[str] = (), empty_label: str = labels.UNSPECIFIED_TYPE) -> Dict[str, int]:
    """Count records per key value; keys listed in ``order`` come first, even at zero."""
    counts: Dict[str, int] = OrderedDict((str(k), 0) for k in order)
    for record in records:
        raw = key(record) if callable(key) else getattr(record, key, "")
        name = sanitize(raw) or empty_label
        counts[name] = counts.get(name, 0) + 1
    return dict(counts)


def percentages(counts: Mapping[str, int]) -> Dict[str, float]:
    """Exact share of each group; every group is 0.0 when the total is zero."""
    keys = list(counts)
    if not keys:
        return {}
    values = np.asarray([max(0, int(counts[k])) for k in keys], dtype=float)
    total = float(values.sum())
    if total <= 0.0:
        return {k: 0.0 for k in keys}
    share = values / total * 100.0
    return {k: float(v) for k, v in zip(keys, share)}


def rounded_percentages(counts: Mapping[str, int], digits: int = 0) -> Dict[str, float]:
    """Largest-remainder rounding so displayed shares add up to exactly 100."""
    keys = list(counts)
    if not keys:
        return {}
    values = np.asarray([max(0, int(counts[k])) for k in keys], dtype=float)
    total = float(values.sum())
    if total <= 0.0:
        return {k: 0.0 for k in keys}
    scale = 10 ** int(digits)
    raw = values / total * 100.0 * scale
    floors = np.floor(raw)
    missing = int(round(100.0 * scale - float(floors.sum())))
    if missing > 0:
        order = np.argsort(-(raw - floors), kind="stable")
        floors[order[:missing]] += 1.0
    return {k: float(v) / scale for k, v in zip(keys, floors)}


def format_percent(value: float, digits: int = 0) -> str:
    return f"{float(value):.{int(digits)}f}%".replace(".", ",")


def _safe_mean(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return float(np.mean(np.asarray(values, dtype=float)))


@dataclass(frozen=True)
class ServiceStats:
    total: int
    completed: int
    in_progress: int
    pending: int
    cancelled: int

    @property
    def completion_rate(self) -> float:
        return percentages({"completed": self.completed, "other": self.total - self.completed})["completed"]

    def to_dict(self) -> Dict[str, object]:
        return {
            "total": self.total,
            "completed": self.completed,
            "in_progress": self.in_progress,
            "pending": self.pending,
            "cancelled": self.cancelled,
            "completion_rate": self.completion_rate,
        }


def compute_stats(records: Sequence[ServiceRecord]) -> ServiceStats:
    counts = group_count(records, "status", order=ServiceStatus.ALL)
    return ServiceStats(
        total=len(records),
        completed=counts.get(ServiceStatus.COMPLETED, 0),
        in_progress=counts.get(ServiceStatus.IN_PROGRESS, 0),
        pending=counts.get(ServiceStatus.PENDING, 0),
        cancelled=counts.get(ServiceStatus.CANCELLED, 0),
    )


def derive_team(records: Sequence[ServiceRecord]) -> List[TeamMember]:
    """Build per-technician stats from the records' assignment lists."""
    tally: Dict[str, Dict[str, object]] = OrderedDict()
    for record in records:
        for name in record.technicians:
            clean = sanitize(name)
            if not clean:
                continue
            entry = tally.setdefault(clean, {"completed": 0, "pending": 0, "ratings": []})
            if record.status == ServiceStatus.COMPLETED:
                entry["completed"] += 1
            elif record.status in (ServiceStatus.PENDING, ServiceStatus.IN_PROGRESS):
                entry["pending"] += 1
            if record.feedback is not None and record.feedback.rating is not None:
                entry["ratings"].append(float(record.feedback.rating))
    return [
        TeamMember(
            name=name,
            completed=int(entry["completed"]),
            pending=int(entry["pending"]),
            avg_rating=_safe_mean(entry["ratings"]),
        )
        for name, entry in tally.items()
    ]


def top_performers(team: Sequence[TeamMember], limit: Optional[int] = layout.TOP_PERFORMERS_LIMIT) -> List[TeamMember]:
    ranked = sorted(team, key=lambda m: (-int(m.completed), -float(m.avg_rating), sanitize(m.name).lower()))
    return ranked if limit is None else ranked[: max(0, int(limit))]


def _rating(value: float) -> str:
    return f"{float(value):.1f}".replace(".", ",")


def _role(value: str) -> str:
    clean = sanitize(value)
    return labels.ROLE_LABELS.get(fold(clean), clean or labels.NOT_INFORMED)


def _distribution_table(pager: PaginationController, title: str, counts: Mapping[str, int],
                        names: Optional[Mapping[str, str]] = None, header: str = "Categoria",
                        tag: str = "distribution") -> float:
    section_title(pager, title)
    shares = rounded_percentages(counts)
    rows = [
        [(names or {}).get(key, key), str(int(count)), format_percent(shares.get(key, 0.0))]
        for key, count in counts.items()
    ]
    return table(pager, [header, "Quantidade", "Percentual"], rows, ratios=[0.5, 0.25, 0.25],
                 aligns=("left", "right", "right"), tag=tag)


def _by_count(counts: Mapping[str, int]) -> Dict[str, int]:
    return dict(sorted(counts.items(), key=lambda kv: (-int(kv[1]), kv[0].lower())))


def compose_executive_summary(records: Sequence[ServiceRecord], pager: PaginationController,
                              team: Sequence[TeamMember]) -> float:
    stats = compute_stats(records)
    section_title(pager, labels.SECTION_EXECUTIVE)
    rows = [
        ["Total de Serviços", str(stats.total)],
        ["Serviços Concluídos", str(stats.completed)],
        ["Em Andamento", str(stats.in_progress)],
        ["Pendentes", str(stats.pending)],
        ["Cancelados", str(stats.cancelled)],
        ["Taxa de Conclusão", format_percent(round(stats.completion_rate))],
        ["Equipe Ativa", str(len(team))],
    ]
    table(pager, ["Métrica", "Valor"], rows, ratios=[0.65, 0.35], aligns=("left", "right"), tag="aggregate")
    _distribution_table(pager, labels.SECTION_STATUS, group_count(records, "status", order=ServiceStatus.ALL),
                        names=labels.STATUS_LABELS, header="Status", tag="status-distribution")
    section_title(pager, labels.SECTION_TOP_PERFORMERS)
    rows = [[m.name, _role(m.role), str(m.completed), _rating(m.avg_rating)] for m in top_performers(team)]
    return table(pager, ["Técnico", "Função", "Concluídos", "Avaliação"], rows, ratios=[0.4, 0.25, 0.17, 0.18],
                 aligns=("left", "left", "right", "right"), tag="top-entities")


def compose_operational_detail(records: Sequence[ServiceRecord], pager: PaginationController,
                               team: Sequence[TeamMember]) -> float:
    _distribution_table(pager, labels.SECTION_TYPE, _by_count(group_count(records, "service_type")),
                        header="Tipo de Serviço", tag="type-distribution")
    section_title(pager, labels.SECTION_DETAILS)
    rows = [
        [
            display_value(r.reference, placeholder="-"),
            display_value(r.title),
            labels.STATUS_LABELS.get(r.status, r.status),
            display_value(r.client),
            display_value(r.location or r.city),
        ]
        for r in records
    ]
    return table(pager, ["OS", "Título", "Status", "Cliente", "Local"], rows,
                 ratios=[0.12, 0.3, 0.16, 0.21, 0.21], tag="top-entities")


def compose_team_performance(records: Sequence[ServiceRecord], pager: PaginationController,
                             team: Sequence[TeamMember]) -> float:
    section_title(pager, labels.SECTION_TEAM_METRICS)
    roles = group_count(team, lambda m: fold(m.role))
    rows = [
        ["Média de Serviços Concluídos", _rating(_safe_mean([m.completed for m in team]))],
        ["Avaliação Média da Equipe", _rating(_safe_mean([m.avg_rating for m in team]))],
        ["Serviços Pendentes da Equipe", str(sum(int(m.pending) for m in team))],
        ["Total de Técnicos", str(roles.get("tecnico", 0))],
        ["Total de Gestores", str(roles.get("gestor", 0))],
        ["Total de Administradores", str(roles.get("administrador", 0))],
    ]
    table(pager, ["Métrica", "Valor"], rows, ratios=[0.65, 0.35], aligns=("left", "right"), tag="aggregate")
    section_title(pager, labels.SECTION_TEAM)
    rows = [
        [m.name, _role(m.role), str(m.completed), str(m.pending), _rating(m.avg_rating), format_date(m.joined_at)]
        for m in top_performers(team, limit=None)
    ]
    return table(pager, ["Nome", "Função", "Concluídos", "Pendentes", "Avaliação", "Entrada"], rows,
                 ratios=[0.28, 0.16, 0.13, 0.13, 0.13, 0.17],
                 aligns=("left", "left", "right", "right", "right", "left"), tag="top-entities")


def compose_service_type_analysis(records: Sequence[ServiceRecord], pager: PaginationController,
                                  team: Sequence[TeamMember]) -> float:
    _distribution_table(pager, labels.SECTION_STATUS, group_count(records, "status", order=ServiceStatus.ALL),
                        names=labels.STATUS_LABELS, header="Status", tag="status-distribution")
    _distribution_table(pager, labels.SECTION_PRIORITY, group_count(records, "priority", order=Priority.ALL),
                        names=labels.PRIORITY_LABELS, header="Prioridade", tag="priority-distribution")
    _distribution_table(pager, labels.SECTION_TYPE, _by_count(group_count(records, "service_type")),
                        header="Tipo de Serviço", tag="type-distribution")
    clients = _by_count(group_count(records, "client", empty_label=labels.NOT_INFORMED))
    completed = group_count([r for r in records if r.status == ServiceStatus.COMPLETED], "client",
                            empty_label=labels.NOT_INFORMED)
    shares = rounded_percentages(clients, digits=1)
    section_title(pager, labels.SECTION_TOP_CLIENTS)
    rows = [
        [name, str(count), str(completed.get(name, 0)), format_percent(shares[name], digits=1)]
        for name, count in list(clients.items())[: layout.TOP_CLIENTS_LIMIT]
    ]
    return table(pager, ["Cliente", "Serviços", "Concluídos", "Percentual"], rows,
                 ratios=[0.46, 0.18, 0.18, 0.18], aligns=("left", "right", "right", "right"), tag="top-entities")


SUMMARY_COMPOSERS = {
    ReportKind.EXECUTIVE_SUMMARY: compose_executive_summary,
    ReportKind.OPERATIONAL_DETAIL: compose_operational_detail,
    ReportKind.TEAM_PERFORMANCE: compose_team_performance,
    ReportKind.SERVICE_TYPE_ANALYSIS: compose_service_type_analysis,
}


def period_label(records: Sequence[ServiceRecord]) -> str:
    """'dd/mm/yyyy a dd/mm/yyyy' over the records' creation dates, or empty."""
    stamps = [parse_datetime(r.created_at) for r in records]
    dates = sorted(s.date() for s in stamps if s is not None)
    if not dates:
        return ""
    first, last = dates[0], dates[-1]
    if first == last:
        return f"Período: {first.strftime('%d/%m/%Y')}"
    return f"Período: {first.strftime('%d/%m/%Y')} a {last.strftime('%d/%m/%Y')}"
