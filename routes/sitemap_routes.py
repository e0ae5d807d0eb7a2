from flask import Blueprint, Response, current_app

from exceptions import BackendError
from sitemap import collect_sitemap
from url_utils import site_origin

sitemap_bp = Blueprint("sitemap", __name__, url_prefix="")


@sitemap_bp.route("/sitemap.xml")
def sitemap():
    """sitemap.xml, generated on demand; no partial output on failure."""
    try:
        xml = collect_sitemap(site_origin())
    except BackendError as exc:
        current_app.logger.exception("Sitemap generation failed: %s", exc)
        return Response(
            f"Error generating sitemap: {exc.message}",
            status=500,
            mimetype="text/plain",
        )

    return Response(xml, mimetype="application/xml")
