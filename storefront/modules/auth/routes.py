from __future__ import annotations

import logging

from flask import Blueprint, flash, redirect, render_template, request, url_for

from storefront.app.common.auth import end_session, start_session
from storefront.app.common.errors import BackendError, BackendUnavailable, RequestRejected
from storefront.app.common.validation import validate_credentials
from storefront.app.extensions import backend
from storefront.modules.cart.service import merge_session_cart

logger = logging.getLogger(__name__)

bp = Blueprint("auth", __name__)

ACCOUNT_UNAVAILABLE = (
    "Something went wrong. Check that the backend is running, "
    "reachable and returns valid JSON."
)


def _account_error(err: BackendError) -> str:
    if isinstance(err, BackendUnavailable) or not err.message:
        return ACCOUNT_UNAVAILABLE
    return err.message


@bp.get("/login")
def login():
    return render_template("pages/login.html")


@bp.post("/login")
def login_post():
    username = (request.form.get("username") or "").strip()
    password = request.form.get("password") or ""

    problems = validate_credentials(username, password)
    if problems:
        flash(problems[0], "warning")
        return render_template("pages/login.html", username=username), 400

    try:
        payload = backend.login(username, password)
    except BackendError as e:
        flash(_account_error(e), "error")
        return render_template("pages/login.html", username=username), 400

    start_session(payload)

    # guests can build a cart before logging in; push it to their account
    try:
        merge_session_cart(payload.get("token"))
    except BackendError as e:
        logger.warning("Could not merge guest cart for %s: %r", username, e)

    flash("Logged in successfully", "success")
    return redirect(url_for("catalog.products"))


@bp.get("/register")
def register():
    return render_template("pages/register.html")


@bp.post("/register")
def register_post():
    username = (request.form.get("username") or "").strip()
    password = request.form.get("password") or ""
    confirm = request.form.get("confirm_password") or ""

    problems = validate_credentials(username, password, confirm)
    if problems:
        flash(problems[0], "warning")
        return render_template("pages/register.html", username=username), 400

    try:
        backend.register(username, password)
    except RequestRejected as e:
        # e.g. "Username is already taken"
        flash(_account_error(e), "error")
        return render_template("pages/register.html", username=username), 400
    except BackendError as e:
        flash(_account_error(e), "error")
        return render_template("pages/register.html", username=username), 502

    flash("Registered successfully", "success")
    return redirect(url_for("auth.login"))


@bp.post("/logout")
def logout():
    end_session()
    flash("Logged out.", "success")
    return redirect(url_for("catalog.products"))
