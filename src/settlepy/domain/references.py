"""Reference resolution: human tokens (names, codes, aliases) to row ids.

A :class:`ReferenceSnapshot` is built once per run from the reference tables
and is immutable afterwards; each pipeline invocation receives its own
snapshot, so two runs never share lookup state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from settlepy.domain.errors import MappingError
from settlepy.domain.model import Category, Channel, Member, ReferenceKind, Table

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from settlepy.domain.ports import RowStore

log = logging.getLogger(__name__)

type AliasTable = Mapping[ReferenceKind, Mapping[str, str]]

DEFAULT_ALIASES: AliasTable = MappingProxyType(
    {
        ReferenceKind.MEMBER: MappingProxyType(
            {
                "Oh Yutaek": "OY",
                "Lee Yecheon": "LE",
                "Kim Yeonji": "KY",
                "Kim Haneul": "KH",
                "Lee Jungsu": "IJ",
                "Park Jiyoon": "PJ",
            }
        ),
        ReferenceKind.CHANNEL: MappingProxyType(
            {
                "크몽": "kmong",
                "KMONG": "kmong",
                "계좌입금": "direct",
                "직접입금": "direct",
                "은행입금": "direct",
                "DIRECT": "direct",
            }
        ),
        ReferenceKind.CATEGORY: MappingProxyType(
            {
                "카드뉴스": "card_news",
                "포스터": "poster",
                "현수막": "banner",
                "배너": "banner",
                "현수막/배너": "banner",
                "메뉴판": "menu",
                "블로그스킨": "blog_skin",
                "블로그": "blog_skin",
                "웹디자인": "web_design",
                "로고": "logo",
                "브랜딩": "branding",
                "패키지디자인": "package",
                "UI/UX": "ui_ux",
                "앱디자인": "app_design",
                "편집디자인": "editorial",
                "인쇄물": "print",
                "기타": "others",
            }
        ),
    }
)


def normalize_key(token: str) -> str:
    """Collapse internal whitespace and casefold."""

    return " ".join(token.split()).casefold()


type _Index = Mapping[str, str]


@dataclass(frozen=True, slots=True)
class ReferenceSnapshot:
    """Immutable name/code/alias to id lookup tables."""

    members: tuple[Member, ...] = ()
    channels: tuple[Channel, ...] = ()
    categories: tuple[Category, ...] = ()
    fuzzy: bool = True
    indexes: Mapping[ReferenceKind, _Index] = field(
        default_factory=lambda: MappingProxyType({})
    )
    # names, titles and aliases; ids and codes only ever match exactly
    fuzzy_keys: Mapping[ReferenceKind, frozenset[str]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @classmethod
    def build(
        cls,
        *,
        members: Iterable[Member] = (),
        channels: Iterable[Channel] = (),
        categories: Iterable[Category] = (),
        projects: Iterable[tuple[str, str]] = (),
        aliases: AliasTable = DEFAULT_ALIASES,
        fuzzy: bool = True,
    ) -> ReferenceSnapshot:
        """Build a snapshot; ``projects`` are ``(id, title)`` pairs."""

        member_list = tuple(members)
        channel_list = tuple(channels)
        category_list = tuple(categories)

        names: dict[ReferenceKind, set[str]] = {kind: set() for kind in ReferenceKind}

        member_index: dict[str, str] = {}
        for member in member_list:
            _add(member_index, member.id, member.id)
            _add(member_index, member.code, member.id)
            _add(member_index, member.name, member.id, names[ReferenceKind.MEMBER])

        channel_index: dict[str, str] = {}
        for channel in channel_list:
            _add(channel_index, channel.id, channel.id)
            _add(channel_index, channel.name, channel.id, names[ReferenceKind.CHANNEL])

        category_index: dict[str, str] = {}
        for category in category_list:
            _add(category_index, category.id, category.id)
            _add(category_index, category.name, category.id, names[ReferenceKind.CATEGORY])
            if category.code:
                _add(category_index, category.code, category.id)

        project_index: dict[str, str] = {}
        for project_id, title in projects:
            _add(project_index, project_id, project_id)
            _add(project_index, title, project_id, names[ReferenceKind.PROJECT])

        indexes: dict[ReferenceKind, dict[str, str]] = {
            ReferenceKind.MEMBER: member_index,
            ReferenceKind.CHANNEL: channel_index,
            ReferenceKind.CATEGORY: category_index,
            ReferenceKind.PROJECT: project_index,
        }
        for kind, table in aliases.items():
            index = indexes[kind]
            known_ids = set(index.values())
            for alias, target in table.items():
                # aliases only point at ids that exist in this snapshot
                if target in known_ids:
                    _add(index, alias, target, names[kind])

        return cls(
            members=member_list,
            channels=channel_list,
            categories=category_list,
            fuzzy=fuzzy,
            indexes=MappingProxyType(
                {kind: MappingProxyType(index) for kind, index in indexes.items()}
            ),
            fuzzy_keys=MappingProxyType({kind: frozenset(keys) for kind, keys in names.items()}),
        )

    def resolve(self, kind: ReferenceKind, token: str | None) -> str | None:
        """Return the id ``token`` refers to, or ``None`` when unresolved."""

        if token is None:
            return None
        key = normalize_key(token)
        if not key:
            return None
        index = self.indexes.get(kind, {})
        exact = index.get(key)
        if exact is not None:
            return exact
        if not self.fuzzy:
            return None
        fuzzy_keys = self.fuzzy_keys.get(kind, frozenset())
        candidates = {
            ref_id
            for name, ref_id in index.items()
            if name in fuzzy_keys and (key in name or name in key)
        }
        if len(candidates) == 1:
            (match,) = candidates
            log.debug("Fuzzy %s match: %r -> %s", kind, token, match)
            return match
        if candidates:
            log.debug("Ambiguous %s token %r matches %s", kind, token, sorted(candidates))
        return None

    def require(self, kind: ReferenceKind, token: str | None) -> str:
        resolved = self.resolve(kind, token)
        if resolved is None:
            raise MappingError(kind, (token or "").strip())
        return resolved

    def channel(self, channel_id: str | None) -> Channel | None:
        for channel in self.channels:
            if channel.id == channel_id:
                return channel
        return None

    def member_name(self, member_id: str) -> str:
        for member in self.members:
            if member.id == member_id:
                return member.name
        return "Unknown"


def _add(
    index: dict[str, str], token: str, ref_id: str, names: set[str] | None = None
) -> None:
    key = normalize_key(token)
    if key:
        index.setdefault(key, ref_id)
        if names is not None:
            names.add(key)


def load_reference_snapshot(
    store: RowStore,
    *,
    aliases: AliasTable = DEFAULT_ALIASES,
    fuzzy: bool = True,
) -> ReferenceSnapshot:
    """Read the reference tables (and project titles) into a new snapshot."""

    members = [Member.from_row(row) for row in store.select(Table.MEMBERS)]
    channels = [Channel.from_row(row) for row in store.select(Table.CHANNELS)]
    categories = [Category.from_row(row) for row in store.select(Table.CATEGORIES)]
    projects = [
        (str(row["id"]), str(row.get("title") or ""))
        for row in store.select(Table.PROJECTS, order_by=("id",))
    ]
    log.debug(
        "Loaded references: members=%s, channels=%s, categories=%s, projects=%s",
        len(members),
        len(channels),
        len(categories),
        len(projects),
    )
    return ReferenceSnapshot.build(
        members=members,
        channels=channels,
        categories=categories,
        projects=projects,
        aliases=aliases,
        fuzzy=fuzzy,
    )
