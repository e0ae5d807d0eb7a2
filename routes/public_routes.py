from flask import (
    Blueprint,
    render_template,
    redirect,
    current_app,
    request,
)

from exceptions import BackendError, NotFoundError
from listing_filters import (
    BEDROOM_LABELS,
    SORT_LABELS,
    TYPE_LABELS,
    ListingFilters,
    Tab,
    active_tab,
    count_by_tab,
    filter_for_tab,
    tab_links,
)
from models.project_model import get_project, list_projects
from models.property_model import (
    LIST_SELECT,
    get_property,
    list_latest_properties,
    list_project_properties,
    list_properties,
)
from url_utils import build_project_path, build_property_path, parse_room_slug_id

public_bp = Blueprint("public", __name__, url_prefix="")

LISTING_NOT_FOUND = "ไม่พบประกาศที่ต้องการ"
PROJECT_NOT_FOUND = "ไม่พบข้อมูลโครงการ"


def _not_found(message: str):
    return render_template("not_found.html", message=message), 404


# ======================
#  HOME + LISTINGS
# ======================

@public_bp.route("/")
def index():
    """Home page with the latest listings."""
    properties, error = [], None
    try:
        properties = list_latest_properties(current_app.config["HOME_LATEST_LIMIT"])
    except BackendError as exc:
        current_app.logger.exception("Latest listings could not be loaded: %s", exc)
        error = exc.message

    return render_template(
        "home.html", properties=properties, error=error, canonical_path="/"
    )


@public_bp.route("/properties")
def properties():
    """All listings with type / bedroom / sort filters."""
    filters = ListingFilters.from_args(request.args)

    results, error = [], None
    try:
        results = list_properties(filters)
    except BackendError as exc:
        current_app.logger.exception("Listings could not be loaded: %s", exc)
        error = exc.message

    return render_template(
        "properties.html",
        properties=results,
        error=error,
        filters=filters,
        type_labels=TYPE_LABELS,
        bedroom_labels=BEDROOM_LABELS,
        sort_labels=SORT_LABELS,
        canonical_path="/properties",
    )


@public_bp.route("/properties/<int:property_id>")
def legacy_property(property_id: int):
    """Old flat links: look the listing up and move to its canonical path."""
    try:
        prop = get_property(property_id, select=LIST_SELECT)
    except NotFoundError:
        return _not_found(LISTING_NOT_FOUND)
    except BackendError as exc:
        current_app.logger.exception("Legacy lookup failed for %s: %s", property_id, exc)
        return _not_found(LISTING_NOT_FOUND)

    return redirect(build_property_path(prop), code=301)


# ======================
#  PROJECTS
# ======================

@public_bp.route("/projects")
def projects():
    """Project index."""
    results, error = [], None
    try:
        results = list_projects()
    except BackendError as exc:
        current_app.logger.exception("Projects could not be loaded: %s", exc)
        error = exc.message

    return render_template(
        "projects.html", projects=results, error=error, canonical_path="/projects"
    )


@public_bp.route("/projects/<slug>")
@public_bp.route("/projects/<slug>/<any(rent, buy):listing_type>")
def project(slug: str, listing_type=None):
    """Project page; /rent and /buy only switch the active tab."""
    tab = active_tab(listing_type)
    canonical_path = build_project_path(slug, tab.value)

    try:
        project_obj = get_project(slug)
        listings = list_project_properties(slug)
    except NotFoundError:
        return (
            render_template(
                "project.html", project=None, canonical_path=canonical_path
            ),
            404,
        )
    except BackendError as exc:
        current_app.logger.exception("Project %s could not be loaded: %s", slug, exc)
        return render_template(
            "project.html",
            project=None,
            error=exc.message,
            canonical_path=canonical_path,
        )

    return render_template(
        "project.html",
        project=project_obj,
        active_tab=tab,
        tabs=tab_links(slug),
        counts=count_by_tab(listings),
        properties=filter_for_tab(listings, tab),
        canonical_path=canonical_path,
        Tab=Tab,
    )


@public_bp.route("/projects/<slug>/<any(rent, buy):listing_type>/<room_slug_id>")
def property_detail(slug: str, listing_type: str, room_slug_id: str):
    """Listing detail; anything but the canonical path is redirected."""
    property_id = parse_room_slug_id(room_slug_id)
    if property_id is None:
        return _not_found(LISTING_NOT_FOUND)

    try:
        prop = get_property(property_id)
    except NotFoundError:
        return _not_found(LISTING_NOT_FOUND)
    except BackendError as exc:
        current_app.logger.exception("Listing %s could not be loaded: %s", property_id, exc)
        return render_template("property_detail.html", prop=None, error=exc.message)

    canonical_path = build_property_path(prop)
    if request.path != canonical_path:
        return redirect(canonical_path, code=301)

    selected = request.args.get("image", 0, type=int) or 0
    if prop.images:
        selected = min(max(selected, 0), len(prop.images) - 1)
    else:
        selected = 0

    return render_template(
        "property_detail.html",
        prop=prop,
        selected_image=prop.images[selected] if prop.images else None,
        selected_index=selected,
        canonical_path=canonical_path,
    )
