"""
sitemap.xml generation.

Entry order is fixed: static pages, then project pages (overview, /rent,
/buy), then one entry per property at its canonical path.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, List, Optional
from xml.sax.saxutils import escape

from models.project_model import Project, list_project_timestamps
from models.property_model import Property, list_property_timestamps
from url_utils import build_project_path, build_property_path

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"


@dataclass
class SitemapUrl:
    loc: str
    changefreq: str
    priority: str
    lastmod: Optional[str] = None


# (path, priority, changefreq)
STATIC_ROUTES = (
    ("/", "1.0", "daily"),
    ("/projects", "0.9", "daily"),
    ("/properties", "0.7", "daily"),
    ("/login", "0.5", "monthly"),
)


def iso_date(value: Optional[str]) -> Optional[str]:
    """UTC calendar date (YYYY-MM-DD) of a backend timestamp, or None."""
    if not value:
        return None
    try:
        moment = datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return None
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.date().isoformat()


def sitemap_urls(
    origin: str,
    properties: Iterable[Property],
    projects: Iterable[Project],
) -> List[SitemapUrl]:
    origin = origin.rstrip("/")
    urls = [
        SitemapUrl(loc=f"{origin}{path}", priority=priority, changefreq=changefreq)
        for path, priority, changefreq in STATIC_ROUTES
    ]

    for project in projects:
        lastmod = iso_date(project.updated_at or project.created_at)
        for tab, priority in (("all", "0.8"), ("rent", "0.7"), ("buy", "0.7")):
            urls.append(
                SitemapUrl(
                    loc=f"{origin}{build_project_path(project.slug, tab)}",
                    changefreq="weekly",
                    priority=priority,
                    lastmod=lastmod,
                )
            )

    for prop in properties:
        urls.append(
            SitemapUrl(
                loc=f"{origin}{build_property_path(prop)}",
                changefreq="weekly",
                priority="0.7",
                lastmod=iso_date(prop.created_at),
            )
        )

    return urls


def render_sitemap(urls: Iterable[SitemapUrl]) -> str:
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<urlset xmlns="{SITEMAP_NS}">',
    ]
    for url in urls:
        lines.append("  <url>")
        lines.append(f"    <loc>{escape(url.loc)}</loc>")
        if url.lastmod:
            lines.append(f"    <lastmod>{url.lastmod}</lastmod>")
        lines.append(f"    <changefreq>{url.changefreq}</changefreq>")
        lines.append(f"    <priority>{url.priority}</priority>")
        lines.append("  </url>")
    lines.append("</urlset>")
    return "\n".join(lines)


def build_sitemap(
    origin: str,
    properties: Iterable[Property],
    projects: Iterable[Project],
) -> str:
    return render_sitemap(sitemap_urls(origin, properties, projects))


def collect_sitemap(origin: str) -> str:
    """Fetch every property and project and render the sitemap.

    Any `BackendError` propagates; there is no partial sitemap.
    """
    properties = list_property_timestamps()
    projects = list_project_timestamps()
    return build_sitemap(origin, properties, projects)
