"""
Listing filters and project tab state.

Filter values arrive as query-string parameters and are parsed into closed
enums; anything unknown falls back to the default choice.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from models.property_model import Property, PropertyType
from url_utils import build_project_path


class TypeFilter(Enum):
    ALL = "all"
    RENT = "rent"
    BUY = "buy"


class BedroomFilter(Enum):
    ALL = "all"
    STUDIO = "0"
    ONE = "1"
    TWO = "2"
    THREE_PLUS = "3+"


class SortKey(Enum):
    CREATED_AT_DESC = "created_at_desc"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"

    @property
    def field(self) -> str:
        return self.value.rpartition("_")[0]

    @property
    def descending(self) -> bool:
        direction = self.value.rpartition("_")[2]
        if direction == "desc":
            return True
        if direction == "asc":
            return False
        raise ValueError(f"Unknown sort direction in {self.value!r}")


# Labels for the filter form
TYPE_LABELS = {
    TypeFilter.ALL: "All",
    TypeFilter.RENT: "Rent",
    TypeFilter.BUY: "Buy",
}
BEDROOM_LABELS = {
    BedroomFilter.ALL: "Any",
    BedroomFilter.STUDIO: "Studio",
    BedroomFilter.ONE: "1",
    BedroomFilter.TWO: "2",
    BedroomFilter.THREE_PLUS: "3+",
}
SORT_LABELS = {
    SortKey.CREATED_AT_DESC: "Newest",
    SortKey.PRICE_ASC: "Price: Low to High",
    SortKey.PRICE_DESC: "Price: High to Low",
}


def _parse_enum(enum_cls, raw: Optional[str], default):
    try:
        return enum_cls(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class ListingFilters:
    type: TypeFilter = TypeFilter.ALL
    bedrooms: BedroomFilter = BedroomFilter.ALL
    sort: SortKey = SortKey.CREATED_AT_DESC

    @classmethod
    def from_args(cls, args: Mapping[str, str]) -> "ListingFilters":
        return cls(
            type=_parse_enum(TypeFilter, args.get("type"), TypeFilter.ALL),
            bedrooms=_parse_enum(BedroomFilter, args.get("bedrooms"), BedroomFilter.ALL),
            sort=_parse_enum(SortKey, args.get("sort"), SortKey.CREATED_AT_DESC),
        )

    def apply(self, query):
        """Add this filter state's predicates and ordering to a query builder."""
        if self.type is TypeFilter.RENT or self.type is TypeFilter.BUY:
            query = query.eq("type", self.type.value)
        elif self.type is not TypeFilter.ALL:
            raise ValueError(f"Unhandled type filter {self.type!r}")

        if self.bedrooms is BedroomFilter.THREE_PLUS:
            query = query.gte("bedrooms", 3)
        elif self.bedrooms in (BedroomFilter.STUDIO, BedroomFilter.ONE, BedroomFilter.TWO):
            query = query.eq("bedrooms", int(self.bedrooms.value))
        elif self.bedrooms is not BedroomFilter.ALL:
            raise ValueError(f"Unhandled bedroom filter {self.bedrooms!r}")

        return query.order(self.sort.field, desc=self.sort.descending)

    def matches(self, prop: Property) -> bool:
        """Same predicate as `apply`, evaluated in memory."""
        if self.type is not TypeFilter.ALL and prop.type.value != self.type.value:
            return False
        if self.bedrooms is BedroomFilter.ALL:
            return True
        if prop.bedrooms is None:
            return False
        if self.bedrooms is BedroomFilter.THREE_PLUS:
            return prop.bedrooms >= 3
        return prop.bedrooms == int(self.bedrooms.value)


# ======================
#  Project tabs
# ======================

class Tab(Enum):
    ALL = "all"
    RENT = "rent"
    BUY = "buy"


def active_tab(segment: Optional[str]) -> Tab:
    if segment == "rent":
        return Tab.RENT
    if segment == "buy":
        return Tab.BUY
    return Tab.ALL


def filter_for_tab(properties: Iterable[Property], tab: Tab) -> List[Property]:
    if tab is Tab.ALL:
        return list(properties)
    return [prop for prop in properties if prop.type.value == tab.value]


def count_by_tab(properties: Iterable[Property]) -> Dict[str, int]:
    counts = {Tab.ALL.value: 0, PropertyType.RENT.value: 0, PropertyType.BUY.value: 0}
    for prop in properties:
        counts[Tab.ALL.value] += 1
        counts[prop.type.value] += 1
    return counts


def tab_links(project_slug: str) -> List[Tuple[Tab, str]]:
    return [(tab, build_project_path(project_slug, tab.value)) for tab in Tab]
