from dataclasses import dataclass, field
from enum import Enum
import math
from typing import Any, Dict, List, Mapping, Optional

from exceptions import NotFoundError, ValidationError
from models import backend
from models.project_model import Project

TABLE = "properties"
RELATION = "projects"

# Select strings used by the different pages
LIST_SELECT = "*, projects(name_th, name_en)"
DETAIL_SELECT = "*, projects(*)"
DASHBOARD_SELECT = (
    "id, created_at, project_slug, title_th, title_en, slug_en, price, type, status, "
    "projects(id, created_at, slug, name_th, name_en)"
)
SITEMAP_SELECT = "id, created_at, project_slug, type, slug_en, title_en, title_th"

REQUIRED_FORM_FIELDS = ("project_slug", "title_th", "price", "bedrooms", "bathrooms", "size_sqm")
STATUSES = ("available", "unavailable")


class PropertyType(Enum):
    RENT = "rent"
    BUY = "buy"


def normalize_join(row: Dict[str, Any], relation: str = RELATION) -> Dict[str, Any]:
    """
    Collapse an embedded relation to a single object.

    PostgREST may hand the related project back as an object or as a list
    depending on the query; after this the field is either a dict or None.
    Extra list elements are dropped (a property has at most one project).
    """
    shaped = dict(row)
    related = shaped.get(relation)
    if isinstance(related, (list, tuple)):
        related = related[0] if related else None
    shaped[relation] = related
    return shaped


@dataclass
class Property:
    """Listing for rent or sale inside a project."""

    id: int
    project_slug: str
    type: PropertyType
    title_th: str = ""
    created_at: Optional[str] = None
    title_en: Optional[str] = None
    slug_en: Optional[str] = None
    price: Optional[float] = None
    price_unit: Optional[str] = None
    size_sqm: Optional[float] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    floor: Optional[int] = None
    furnished: Optional[str] = None
    bts_distance_m: Optional[int] = None
    mrt_distance_m: Optional[int] = None
    badges: List[str] = field(default_factory=list)
    images: List[str] = field(default_factory=list)
    status: Optional[str] = None
    project: Optional[Project] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Property":
        """Build from a raw backend row (the relation is normalized here)."""
        row = normalize_join(row)
        related = row.get(RELATION)
        return cls(
            id=row["id"],
            project_slug=row.get("project_slug") or "",
            type=PropertyType(row.get("type")),
            title_th=row.get("title_th") or "",
            created_at=row.get("created_at"),
            title_en=row.get("title_en"),
            slug_en=row.get("slug_en"),
            price=row.get("price"),
            price_unit=row.get("price_unit"),
            size_sqm=row.get("size_sqm"),
            bedrooms=row.get("bedrooms"),
            bathrooms=row.get("bathrooms"),
            floor=row.get("floor"),
            furnished=row.get("furnished"),
            bts_distance_m=row.get("bts_distance_m"),
            mrt_distance_m=row.get("mrt_distance_m"),
            badges=list(row.get("badges") or []),
            images=list(row.get("images") or []),
            status=row.get("status"),
            project=Project.from_row(related) if related else None,
        )

    # -------------------
    # Display helpers
    # -------------------
    @property
    def is_rent(self) -> bool:
        return self.type is PropertyType.RENT

    @property
    def price_label(self) -> str:
        """THB price without decimals, e.g. ฿12,000."""
        if self.price is None:
            return "-"
        return f"฿{float(self.price):,.0f}"

    @property
    def cover_image(self) -> Optional[str]:
        return self.images[0] if self.images else None

    @property
    def project_name(self) -> str:
        if self.project is None:
            return "Unknown Project"
        return self.project.display_name

    def __repr__(self) -> str:
        return (
            f"<Property id={self.id} project={self.project_slug!r} "
            f"type={self.type.value}>"
        )


# ======================
#  Queries
# ======================

def _to_properties(rows) -> List[Property]:
    return [Property.from_row(row) for row in rows]


def list_properties(filters) -> List[Property]:
    """Listing page query; `filters` composes the predicates and ordering."""
    query = backend.table(TABLE).select(LIST_SELECT)
    return _to_properties(backend.execute(filters.apply(query)))


def list_latest_properties(limit: int) -> List[Property]:
    rows = backend.execute(
        backend.table(TABLE)
        .select(LIST_SELECT)
        .order("created_at", desc=True)
        .limit(limit)
    )
    return _to_properties(rows)


def list_project_properties(project_slug: str) -> List[Property]:
    rows = backend.execute(
        backend.table(TABLE)
        .select(LIST_SELECT)
        .eq("project_slug", project_slug)
        .order("created_at", desc=True)
    )
    return _to_properties(rows)


def list_dashboard_properties() -> List[Property]:
    rows = backend.execute(
        backend.table(TABLE).select(DASHBOARD_SELECT).order("created_at", desc=True)
    )
    return _to_properties(rows)


def list_property_timestamps() -> List[Property]:
    """Minimal projection used by the sitemap."""
    return _to_properties(backend.execute(backend.table(TABLE).select(SITEMAP_SELECT)))


def get_property(property_id: int, select: str = DETAIL_SELECT) -> Property:
    rows = backend.execute(
        backend.table(TABLE).select(select).eq("id", property_id).limit(1)
    )
    if not rows:
        raise NotFoundError(f"Property {property_id} not found.")
    return Property.from_row(rows[0])


def create_property(values: Dict[str, Any]) -> Optional[int]:
    """Insert a new listing; returns the new id when the backend echoes it."""
    rows = backend.execute(backend.table(TABLE).insert(values))
    return rows[0].get("id") if rows else None


def delete_property(property_id: int) -> None:
    """Hard delete, there is no undo."""
    backend.execute(backend.table(TABLE).delete().eq("id", property_id))


# ======================
#  Form parsing
# ======================

def _parse_number(raw: str, name: str, cast=float, allow_negative=False):
    try:
        value = cast(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid value for {name}.")

    # float() accepts "nan" and "inf"
    if not math.isfinite(value) or (value < 0 and not allow_negative):
        raise ValidationError(f"Invalid value for {name}.")
    return value


def parse_property_form(form: Mapping[str, str]) -> Dict[str, Any]:
    """
    Validate the add-property form and build the insert payload.

    Raises `ValidationError` before anything reaches the backend.
    """
    values = {key: (form.get(key) or "").strip() for key in REQUIRED_FORM_FIELDS}
    if any(not values[key] for key in REQUIRED_FORM_FIELDS):
        raise ValidationError("Please fill in all required fields.")

    try:
        property_type = PropertyType(form.get("type") or PropertyType.RENT.value)
    except ValueError:
        raise ValidationError("Invalid listing type.")

    status = form.get("status") or "available"
    if status not in STATUSES:
        raise ValidationError("Invalid status.")

    floor_raw = (form.get("floor") or "").strip()

    return {
        "title_th": values["title_th"],
        "project_slug": values["project_slug"],
        "type": property_type.value,
        "price": _parse_number(values["price"], "price"),
        "bedrooms": _parse_number(values["bedrooms"], "bedrooms", int),
        "bathrooms": _parse_number(values["bathrooms"], "bathrooms", int),
        "size_sqm": _parse_number(values["size_sqm"], "size_sqm"),
        "floor": (
            _parse_number(floor_raw, "floor", int, allow_negative=True)
            if floor_raw
            else None
        ),
        "status": status,
    }
