from flask import (
    Blueprint,
    render_template,
    request,
    redirect,
    url_for,
    flash,
    current_app,
)

from audit_logging import log_login
from auth_context import get_auth
from exceptions import AuthenticationError, ConfigurationError

auth_bp = Blueprint("auth", __name__, url_prefix="")

# Password sign-in only; accounts are managed in the hosted auth service.


@auth_bp.route("/login", methods=["GET", "POST"])
def login():
    """Sign-in form and its submission."""
    auth = get_auth()

    if request.method == "GET":
        # Already signed in -> straight to the dashboard
        if auth.current is not None:
            return redirect(url_for("dashboard.dashboard"))
        return render_template("login.html", canonical_path="/login")

    # POST
    email = request.form.get("email", "").strip().lower()
    password = request.form.get("password", "")

    if not email or not password:
        return render_template(
            "login.html",
            email=email,
            error="Email and password are required.",
            canonical_path="/login",
        )

    try:
        auth.sign_in(email, password)
    except AuthenticationError as exc:
        current_app.logger.info("Sign-in rejected for %s: %s", email, exc.message)
        log_login(email, success=False, error_msg=exc.message)
        return render_template(
            "login.html", email=email, error=exc.message, canonical_path="/login"
        )
    except ConfigurationError as exc:
        current_app.logger.exception("Sign-in unavailable: %s", exc)
        return render_template(
            "login.html",
            email=email,
            error="An unexpected error occurred.",
            canonical_path="/login",
        )

    flash("Signed in successfully.", "success")
    return redirect(url_for("dashboard.dashboard"))


@auth_bp.route("/logout")
def logout():
    """Sign out."""
    get_auth().sign_out()
    flash("You have been signed out.", "info")
    return redirect(url_for("auth.login"))
