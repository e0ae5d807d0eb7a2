from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from exceptions import NotFoundError
from models import backend

TABLE = "projects"


@dataclass
class Project:
    """Condominium project (building) that listings belong to."""

    slug: str
    name_th: str = ""
    name_en: str = ""
    id: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    developer: Optional[str] = None
    year_built: Optional[int] = None
    floors: Optional[int] = None
    units: Optional[int] = None
    facilities: List[str] = field(default_factory=list)
    highlights: List[str] = field(default_factory=list)
    bts: Optional[str] = None
    mrt: Optional[str] = None
    landmark: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Project":
        return cls(
            slug=row.get("slug") or "",
            name_th=row.get("name_th") or "",
            name_en=row.get("name_en") or "",
            id=row.get("id"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
            developer=row.get("developer"),
            year_built=row.get("year_built"),
            floors=row.get("floors"),
            units=row.get("units"),
            facilities=list(row.get("facilities") or []),
            highlights=list(row.get("highlights") or []),
            bts=row.get("bts"),
            mrt=row.get("mrt"),
            landmark=row.get("landmark"),
            lat=row.get("lat"),
            lng=row.get("lng"),
        )

    @property
    def display_name(self) -> str:
        return self.name_th or self.name_en or self.slug

    def __repr__(self) -> str:
        return f"<Project id={self.id} slug={self.slug!r}>"


# ======================
#  Queries
# ======================

def list_projects() -> List[Project]:
    """All projects, ordered by Thai name."""
    rows = backend.execute(
        backend.table(TABLE).select("*").order("name_th", desc=False)
    )
    return [Project.from_row(row) for row in rows]


def get_project(slug: str) -> Project:
    rows = backend.execute(
        backend.table(TABLE).select("*").eq("slug", slug).limit(1)
    )
    if not rows:
        raise NotFoundError(f"Project {slug!r} not found.")
    return Project.from_row(rows[0])


def list_project_options() -> List[Project]:
    """Slug + name pairs for the add-property form."""
    rows = backend.execute(backend.table(TABLE).select("slug, name_th"))
    return [Project.from_row(row) for row in rows]


def list_project_timestamps() -> List[Project]:
    """Minimal projection used by the sitemap."""
    rows = backend.execute(
        backend.table(TABLE).select("slug, created_at, updated_at")
    )
    return [Project.from_row(row) for row in rows]
