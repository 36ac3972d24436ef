"""Header to field mapping for source sheets.

Headers are domain-language labels. Each table kind has an ordered label
dictionary; designer share/bonus columns are detected separately through the
pattern families in :data:`DESIGNER_PATTERNS`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from settlepy.domain.model import TableKind

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence


COLUMN_LABELS: Mapping[TableKind, Mapping[str, tuple[str, ...]]] = MappingProxyType(
    {
        TableKind.PROJECTS: MappingProxyType(
            {
                "client_name": ("클라이언트명", "클라이언트", "고객명"),
                "channel": ("채널",),
                "category": ("카테고리",),
                "title": ("프로젝트명", "제목", "프로젝트"),
                "qty": ("수량", "개수"),
                "list_price_net": ("정가_net", "정가"),
                "discount_net": ("할인_net", "할인금액", "할인"),
                "gross_t": ("입금액_T", "deposit_gross_T", "입금액"),
                "net_b": ("실입금_B", "net_B", "실입금"),
                "settle_date": ("정산일", "정산날짜"),
                "work_date": ("작업일", "작업날짜"),
                "invoice_requested": ("세금계산서요청", "세금계산서"),
                "notes": ("비고", "메모"),
                "status": ("상태",),
            }
        ),
        TableKind.CONTACTS: MappingProxyType(
            {
                "date": ("날짜", "일자"),
                "member": ("멤버", "담당자"),
                "event_type": ("이벤트타입", "이벤트", "타입"),
                "amount": ("금액", "단가"),
                "project": ("연관프로젝트", "프로젝트"),
                "notes": ("비고", "메모"),
            }
        ),
        TableKind.FEEDS: MappingProxyType(
            {
                "date": ("날짜", "일자"),
                "member": ("멤버", "담당자"),
                "fee_type": ("피드타입", "피드유형", "타입"),
                "amount": ("금액", "단가"),
                "notes": ("비고", "메모"),
            }
        ),
        TableKind.TEAM_TASKS: MappingProxyType(
            {
                "date": ("날짜", "일자"),
                "member": ("멤버", "담당자"),
                "project": ("연관프로젝트", "프로젝트"),
                "notes": ("업무내용", "내용", "업무"),
                "amount": ("금액",),
            }
        ),
        TableKind.MILEAGE: MappingProxyType(
            {
                "date": ("날짜", "일자"),
                "member": ("멤버", "담당자"),
                "reason": ("사유", "내용"),
                "points": ("마일리지", "포인트"),
                "amount": ("금액",),
                "consumed_now": ("현금화", "사용여부"),
                "notes": ("비고", "메모"),
            }
        ),
        TableKind.FUNDS: MappingProxyType(
            {
                "date": ("날짜", "일자"),
                "item": ("항목", "내용"),
                "amount": ("금액",),
                "memo": ("메모", "비고"),
                "type": ("타입", "구분"),
                "member": ("멤버", "담당자"),
            }
        ),
    }
)


@dataclass(frozen=True, slots=True)
class DesignerPattern:
    """A named family of header shapes that embed a member token."""

    name: str
    attribute: str
    patterns: tuple[re.Pattern[str], ...]

    def match(self, header: str) -> str | None:
        """Return the embedded member token when ``header`` fits this family."""

        for pattern in self.patterns:
            found = pattern.match(header.strip())
            if found:
                token = found.group("member").strip(" _")
                if token:
                    return token
        return None


def _suffix_family(name: str, attribute: str, suffixes: Iterable[str]) -> DesignerPattern:
    return DesignerPattern(
        name=name,
        attribute=attribute,
        patterns=tuple(
            re.compile(rf"^(?P<member>.+?){re.escape(suffix)}$", re.IGNORECASE)
            for suffix in suffixes
        ),
    )


DESIGNER_PATTERNS: tuple[DesignerPattern, ...] = (
    _suffix_family("share", "percent", ("_지분", "지분", "_share", "_percent")),
    _suffix_family("bonus", "bonus_pct", ("_인센티브", "인센티브", "_bonus_pct", "_bonus")),
)


_KIND_KEYWORDS: tuple[tuple[TableKind, tuple[str, ...]], ...] = (
    (TableKind.PROJECTS, ("project", "프로젝트")),
    (TableKind.CONTACTS, ("contact", "컨택", "상담")),
    (TableKind.FEEDS, ("feed", "피드")),
    (TableKind.TEAM_TASKS, ("team", "팀", "업무")),
    (TableKind.MILEAGE, ("mileage", "마일리지", "포인트")),
    (TableKind.FUNDS, ("fund", "공금", "자금")),
)


def detect_table_kind(name: str) -> TableKind | None:
    """Guess the table kind from a file or sheet name."""

    lowered = name.casefold()
    for kind, keywords in _KIND_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return kind
    return None


def is_designer_column(
    header: str, patterns: Sequence[DesignerPattern] = DESIGNER_PATTERNS
) -> bool:
    return any(pattern.match(header) is not None for pattern in patterns)


@dataclass(frozen=True, slots=True)
class ColumnPlan:
    """Resolved field to header assignment for one sheet."""

    kind: TableKind
    fields: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    def extract(self, raw: Mapping[str, str | None]) -> dict[str, str | None]:
        """Return ``{field: cell}`` for every known field of the kind."""

        extracted: dict[str, str | None] = {}
        for name in COLUMN_LABELS[self.kind]:
            header = self.fields.get(name)
            value = raw.get(header) if header is not None else None
            extracted[name] = value.strip() if isinstance(value, str) else value
        return extracted

    @property
    def unmapped(self) -> tuple[str, ...]:
        return tuple(name for name in COLUMN_LABELS[self.kind] if name not in self.fields)


def plan_columns(
    kind: TableKind,
    headers: Iterable[str],
    *,
    patterns: Sequence[DesignerPattern] = DESIGNER_PATTERNS,
) -> ColumnPlan:
    """Assign a header to every field of ``kind``.

    Exact matches (against the field name or any label) win. Otherwise the
    first label with a case-insensitive or substring match is taken. A header
    that is only part of a label counts for labels alone, never for the
    field name itself.
    """

    skip_designers = kind is TableKind.PROJECTS
    candidates = [
        header
        for header in headers
        if header.strip() and not (skip_designers and is_designer_column(header, patterns))
    ]
    assigned: dict[str, str] = {}
    for name, labels in COLUMN_LABELS[kind].items():
        ordered = (name, *labels)
        exact = next(
            (header for label in ordered for header in candidates if header.strip() == label),
            None,
        )
        if exact is not None:
            assigned[name] = exact
            continue
        fuzzy = next(
            (
                header
                for label in ordered
                for header in candidates
                if _similar(header, label, partial_header=label != name)
            ),
            None,
        )
        if fuzzy is not None:
            assigned[name] = fuzzy
    return ColumnPlan(kind=kind, fields=MappingProxyType(assigned))


def _similar(header: str, label: str, *, partial_header: bool = True) -> bool:
    cleaned = header.strip().casefold()
    wanted = label.casefold()
    if cleaned == wanted or wanted in cleaned:
        return True
    return partial_header and len(cleaned) >= 2 and cleaned in wanted
