"""Input data model for report generation.

Records arrive fully hydrated from the persistence layer; ``from_mapping``
constructors accept the JSON shapes it hands over and never raise on missing
optional fields.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

log = logging.getLogger(__name__)


class ServiceStatus:
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    ALL = (COMPLETED, IN_PROGRESS, PENDING, CANCELLED)


class Priority:
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"
    ALL = (URGENT, HIGH, MEDIUM, LOW)


FIELD_TYPES = ("text", "boolean", "select")

_STATUS_ALIASES = {
    "pending": ServiceStatus.PENDING,
    "pendente": ServiceStatus.PENDING,
    "agendado": ServiceStatus.PENDING,
    "scheduled": ServiceStatus.PENDING,
    "in-progress": ServiceStatus.IN_PROGRESS,
    "in progress": ServiceStatus.IN_PROGRESS,
    "em-andamento": ServiceStatus.IN_PROGRESS,
    "em andamento": ServiceStatus.IN_PROGRESS,
    "andamento": ServiceStatus.IN_PROGRESS,
    "completed": ServiceStatus.COMPLETED,
    "complete": ServiceStatus.COMPLETED,
    "done": ServiceStatus.COMPLETED,
    "concluido": ServiceStatus.COMPLETED,
    "concluído": ServiceStatus.COMPLETED,
    "cancelled": ServiceStatus.CANCELLED,
    "canceled": ServiceStatus.CANCELLED,
    "cancelado": ServiceStatus.CANCELLED,
}

_PRIORITY_ALIASES = {
    "low": Priority.LOW,
    "baixa": Priority.LOW,
    "medium": Priority.MEDIUM,
    "media": Priority.MEDIUM,
    "média": Priority.MEDIUM,
    "normal": Priority.MEDIUM,
    "high": Priority.HIGH,
    "alta": Priority.HIGH,
    "urgent": Priority.URGENT,
    "urgente": Priority.URGENT,
}


def _key(value: object) -> str:
    return str(value or "").strip().lower().replace("_", "-")


def normalize_status(value: object) -> str:
    key = _key(value)
    status = _STATUS_ALIASES.get(key) or _STATUS_ALIASES.get(key.replace("-", " "))
    if status is None:
        if key:
            log.warning("Unknown service status %r; counting it as pending.", value)
        return ServiceStatus.PENDING
    return status


def normalize_priority(value: object) -> str:
    return _PRIORITY_ALIASES.get(_key(value), Priority.MEDIUM)


def _pick(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


def _text(data: Mapping[str, Any], *keys: str) -> str:
    value = _pick(data, *keys)
    return "" if value is None else str(value)


def _to_float(value) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        out = float(value)
    else:
        try:
            out = float(str(value).strip().replace(",", "."))
        except ValueError:
            return None
    return out if math.isfinite(out) else None


def _to_int(value) -> int:
    out = _to_float(value)
    return int(out) if out is not None else 0


def _names(value: object) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        parts = [p.strip() for p in value.split(",")]
        return tuple(p for p in parts if p)
    if isinstance(value, Mapping):
        name = str(_pick(value, "name", "full_name", "nome") or "").strip()
        return (name,) if name else ()
    out: List[str] = []
    if isinstance(value, Iterable):
        for item in value:
            out.extend(_names(item))
    return tuple(out)


@dataclass(frozen=True)
class ChecklistEntry:
    label: str
    field_type: str = "text"
    value: Any = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ChecklistEntry":
        field_type = _key(_pick(data, "type", "field_type", "tipo")) or "text"
        value = _pick(data, "value", "valor", "answer")
        if field_type not in FIELD_TYPES:
            field_type = "boolean" if isinstance(value, bool) else "text"
        return cls(label=_text(data, "label", "name", "nome"), field_type=field_type, value=value)


@dataclass(frozen=True)
class Photo:
    source: str
    caption: str = ""

    @classmethod
    def from_value(cls, value: object) -> "Photo":
        if isinstance(value, Mapping):
            return cls(
                source=_text(value, "source", "url", "src", "data"),
                caption=_text(value, "caption", "title", "legenda"),
            )
        return cls(source=str(value or ""))


@dataclass(frozen=True)
class SignaturePair:
    client: Optional[str] = None
    technician: Optional[str] = None
    client_name: str = ""
    technician_name: str = ""

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SignaturePair":
        return cls(
            client=_pick(data, "client", "client_signature", "cliente") or None,
            technician=_pick(data, "technician", "technician_signature", "tecnico") or None,
            client_name=_text(data, "client_name", "cliente_nome"),
            technician_name=_text(data, "technician_name", "tecnico_nome"),
        )


@dataclass(frozen=True)
class Message:
    sender_name: str
    body: str
    sender_role: str = ""
    timestamp: Any = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Message":
        return cls(
            sender_name=_text(data, "sender_name", "sender", "author", "autor"),
            sender_role=_text(data, "sender_role", "role", "funcao"),
            body=_text(data, "body", "message", "text", "mensagem"),
            timestamp=_pick(data, "timestamp", "created_at", "sent_at", "data"),
        )


@dataclass(frozen=True)
class Feedback:
    rating: Optional[float] = None
    comment: str = ""
    submitted_at: Any = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Feedback":
        return cls(
            rating=_to_float(_pick(data, "rating", "nota", "score")),
            comment=_text(data, "comment", "comments", "comentario"),
            submitted_at=_pick(data, "submitted_at", "created_at", "date"),
        )


@dataclass(frozen=True)
class TeamMember:
    name: str
    role: str = "tecnico"
    completed: int = 0
    pending: int = 0
    avg_rating: float = 0.0
    joined_at: Any = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TeamMember":
        stats = data.get("stats") if isinstance(data.get("stats"), Mapping) else data
        return cls(
            name=_text(data, "name", "nome"),
            role=_text(data, "role", "funcao") or "tecnico",
            completed=_to_int(_pick(stats, "completed", "completedServices", "completed_services")),
            pending=_to_int(_pick(stats, "pending", "pendingServices", "pending_services")),
            avg_rating=_to_float(_pick(stats, "avg_rating", "avgRating", "rating")) or 0.0,
            joined_at=_pick(stats, "joined_at", "joinDate", "join_date"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "role": self.role,
            "completed": int(self.completed),
            "pending": int(self.pending),
            "avg_rating": float(self.avg_rating),
            "joined_at": None if self.joined_at is None else str(self.joined_at),
        }


def _checklist(value: object) -> Tuple[ChecklistEntry, ...]:
    if isinstance(value, Mapping):
        out = []
        for label, item in value.items():
            if isinstance(item, Mapping):
                out.append(ChecklistEntry.from_mapping({"label": label, **item}))
            else:
                kind = "boolean" if isinstance(item, bool) else "text"
                out.append(ChecklistEntry(label=str(label), field_type=kind, value=item))
        return tuple(out)
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        return tuple(
            item if isinstance(item, ChecklistEntry) else ChecklistEntry.from_mapping(item)
            for item in value
            if isinstance(item, (ChecklistEntry, Mapping))
        )
    return ()


@dataclass(frozen=True)
class ServiceRecord:
    id: str = ""
    number: str = ""
    title: str = ""
    status: str = ServiceStatus.PENDING
    client: str = ""
    address: str = ""
    city: str = ""
    location: str = ""
    technicians: Tuple[str, ...] = ()
    description: str = ""
    notes: str = ""
    technical_comments: str = ""
    checklist: Tuple[ChecklistEntry, ...] = ()
    photos: Tuple[Photo, ...] = ()
    signatures: Optional[SignaturePair] = None
    messages: Tuple[Message, ...] = ()
    priority: str = Priority.MEDIUM
    service_type: str = ""
    created_at: Any = None
    due_date: Any = None
    completed_at: Any = None
    feedback: Optional[Feedback] = None

    def __post_init__(self):
        object.__setattr__(self, "status", normalize_status(self.status))
        object.__setattr__(self, "priority", normalize_priority(self.priority))
        object.__setattr__(self, "technicians", _names(self.technicians))
        object.__setattr__(self, "checklist", tuple(self.checklist or ()))
        object.__setattr__(self, "photos", tuple(self.photos or ()))
        object.__setattr__(self, "messages", tuple(self.messages or ()))

    @property
    def reference(self) -> str:
        number = str(self.number or "").strip()
        if number:
            return number
        return str(self.id or "").strip()[:8]

    @property
    def reference_label(self) -> str:
        """Badge text for the reference; numbers already prefixed with "OS" are kept as is."""
        reference = self.reference
        if not reference or reference[:2].upper() == "OS":
            return reference
        return f"OS {reference}"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ServiceRecord":
        sig_obj = _pick(data, "signatures", "assinaturas")
        if isinstance(sig_obj, Mapping):
            signatures: Optional[SignaturePair] = SignaturePair.from_mapping(sig_obj)
        elif _pick(data, "client_signature", "technician_signature") is not None:
            signatures = SignaturePair.from_mapping(data)
        else:
            signatures = None

        feedback_obj = _pick(data, "feedback", "avaliacao")
        photos_obj = _pick(data, "photos", "fotos", "images") or ()
        messages_obj = _pick(data, "messages", "mensagens") or ()
        return cls(
            id=_text(data, "id"),
            number=_text(data, "number", "service_number", "numero"),
            title=_text(data, "title", "titulo"),
            status=_text(data, "status"),
            client=_text(data, "client", "client_name", "cliente"),
            address=_text(data, "address", "endereco"),
            city=_text(data, "city", "cidade"),
            location=_text(data, "location", "local"),
            technicians=_names(_pick(data, "technicians", "team", "technician", "tecnicos", "tecnico")),
            description=_text(data, "description", "descricao"),
            notes=_text(data, "notes", "observacoes"),
            technical_comments=_text(data, "technical_comments", "comentarios_tecnicos"),
            checklist=_checklist(_pick(data, "checklist", "technical_fields", "custom_fields")),
            photos=tuple(Photo.from_value(p) for p in photos_obj if p),
            signatures=signatures,
            messages=tuple(Message.from_mapping(m) for m in messages_obj if isinstance(m, Mapping)),
            priority=_text(data, "priority", "prioridade"),
            service_type=_text(data, "service_type", "type", "tipo"),
            created_at=_pick(data, "created_at"),
            due_date=_pick(data, "due_date"),
            completed_at=_pick(data, "completed_at"),
            feedback=Feedback.from_mapping(feedback_obj) if isinstance(feedback_obj, Mapping) else None,
        )


def coerce_record(value: object) -> ServiceRecord:
    if isinstance(value, ServiceRecord):
        return value
    if isinstance(value, Mapping):
        return ServiceRecord.from_mapping(value)
    raise TypeError(f"Unsupported service record type: {type(value).__name__}")


def coerce_team(values: Optional[Iterable[object]]) -> List[TeamMember]:
    out: List[TeamMember] = []
    for item in values or ():
        if isinstance(item, TeamMember):
            out.append(item)
        elif isinstance(item, Mapping):
            out.append(TeamMember.from_mapping(item))
    return out


class ReportKind:
    SINGLE_SERVICE_DETAILED = "single-service-detailed"
    EXECUTIVE_SUMMARY = "executive-summary"
    OPERATIONAL_DETAIL = "operational-detail"
    TEAM_PERFORMANCE = "team-performance"
    SERVICE_TYPE_ANALYSIS = "service-type-analysis"
    SINGLE_RECORD = (SINGLE_SERVICE_DETAILED,)
    SUMMARY = (EXECUTIVE_SUMMARY, OPERATIONAL_DETAIL, TEAM_PERFORMANCE, SERVICE_TYPE_ANALYSIS)
    ALL = SINGLE_RECORD + SUMMARY
