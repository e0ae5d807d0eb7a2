from flask import (
    Blueprint,
    render_template,
    redirect,
    url_for,
    flash,
    current_app,
    request,
)

from audit_logging import log_action
from auth_context import login_required
from exceptions import BackendError, NotFoundError, ValidationError
from models.project_model import list_project_options
from models.property_model import (
    DASHBOARD_SELECT,
    STATUSES,
    PropertyType,
    create_property,
    delete_property,
    get_property,
    list_dashboard_properties,
    parse_property_form,
)

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="")


# ======================
#  LISTINGS TABLE
# ======================

@dashboard_bp.route("/dashboard")
@login_required
def dashboard():
    """Every listing, newest first."""
    properties, error = [], None
    try:
        properties = list_dashboard_properties()
    except BackendError as exc:
        current_app.logger.exception("Dashboard listings could not be loaded: %s", exc)
        error = exc.message

    return render_template("dashboard.html", properties=properties, error=error)


@dashboard_bp.route("/dashboard/properties/<int:property_id>/delete", methods=["GET", "POST"])
@login_required
def delete_listing(property_id: int):
    """
    GET  -> confirmation page
    POST -> delete, only when confirm=yes; anything else touches nothing
    """
    if request.method == "GET":
        try:
            prop = get_property(property_id, select=DASHBOARD_SELECT)
        except NotFoundError:
            flash("Listing not found.", "error")
            return redirect(url_for("dashboard.dashboard"))
        except BackendError as exc:
            current_app.logger.exception("Listing %s could not be loaded: %s", property_id, exc)
            flash(f"Error loading listing: {exc.message}", "error")
            return redirect(url_for("dashboard.dashboard"))
        return render_template("confirm_delete.html", prop=prop)

    # POST
    if request.form.get("confirm") != "yes":
        flash("Deletion cancelled.", "info")
        return redirect(url_for("dashboard.dashboard"))

    try:
        delete_property(property_id)
    except BackendError as exc:
        current_app.logger.exception("Listing %s could not be deleted: %s", property_id, exc)
        log_action(
            "DELETE",
            "Property",
            entity_id=property_id,
            status="failure",
            error_message=exc.message,
        )
        flash(f"Error deleting property: {exc.message}", "error")
        return redirect(url_for("dashboard.dashboard"))

    log_action("DELETE", "Property", entity_id=property_id)
    flash("Property deleted successfully.", "success")
    return redirect(url_for("dashboard.dashboard"))


# ======================
#  ADD LISTING
# ======================

def _render_form(form, error=None, projects=None):
    if projects is None:
        try:
            projects = list_project_options()
        except BackendError as exc:
            current_app.logger.exception("Project options could not be loaded: %s", exc)
            projects = []
            error = error or "Could not load projects. Please try again later."

    return render_template(
        "add_property.html",
        form=form,
        error=error,
        projects=projects,
        property_types=list(PropertyType),
        statuses=STATUSES,
    )


@dashboard_bp.route("/add-property", methods=["GET", "POST"])
@login_required
def add_property():
    """Create-listing form."""
    if request.method == "GET":
        return _render_form({})

    form = request.form
    try:
        values = parse_property_form(form)
    except ValidationError as exc:
        return _render_form(form, error=str(exc))

    try:
        new_id = create_property(values)
    except BackendError as exc:
        current_app.logger.exception("Listing could not be created: %s", exc)
        log_action(
            "CREATE",
            "Property",
            new_values=values,
            status="failure",
            error_message=exc.message,
        )
        return _render_form(form, error=exc.message)

    log_action("CREATE", "Property", entity_id=new_id, new_values=values)
    flash("Property added successfully!", "success")
    return redirect(url_for("dashboard.dashboard"))
