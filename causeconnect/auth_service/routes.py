"""
Authentication route handlers.

Provides routes for:
- Signup (form + submit)
- Login (form + submit)
- Logout

Every submit validates its form first. Failures are flashed as one message
and the browser is redirected back to the form it came from.
"""

import logging

from argon2.exceptions import HashingError
from flask import Blueprint, Response, flash, redirect, render_template, request, url_for
from pydantic import ValidationError

from causeconnect.auth_service.forms import LoginForm, SignupForm, error_message
from causeconnect.auth_service.session import login_user, logout_user
from causeconnect.auth_service.utils import AuthenticationError, authenticate, hash_password
from causeconnect.database.registry import get_stores
from causeconnect.database.stores import DuplicateEmailError, StoreError

auth_bp = Blueprint("auth", __name__)

GENERIC_ERROR = "Something went wrong, please try again"


# --- REQUEST LOGGING ---
@auth_bp.before_request
def before_request() -> None:
    """
    Log the method and path of every request to the authentication routes.
    Headers are left out since the cookie carries the session.
    """
    logging.info(f"[Auth] Incoming {request.method} {request.path}")


@auth_bp.after_request
def after_request(response: Response) -> Response:
    logging.info(f"[Auth] Response {response.status}")
    return response


# --- SIGNUP ---
@auth_bp.route("/signup", methods=["GET"])
def signup_form():
    return render_template("signup.html")


@auth_bp.route("/signup", methods=["POST"])
def signup() -> Response:
    """
    Register a new user.

    Expects form fields:
    - email (str): Valid, unused email address.
    - password (str): At least 5 characters.

    Redirects:
        /login: Account created.
        /signup: Validation error, duplicate email, or store failure.
    """
    try:
        form = SignupForm.model_validate(request.form.to_dict())
    except ValidationError as exc:
        flash(error_message(exc), "error")
        return redirect(url_for("auth.signup_form"))

    # Hash before it ever reaches the store
    try:
        password_hash = hash_password(form.password)
    except HashingError:
        logging.exception("[Auth] Password hashing failed")
        flash(GENERIC_ERROR, "error")
        return redirect(url_for("auth.signup_form"))

    try:
        user = get_stores().users.create_user(form.email, password_hash)
    except DuplicateEmailError:
        logging.warning("[Auth] Signup rejected: email already registered")
        flash("Email is already registered", "error")
        return redirect(url_for("auth.signup_form"))
    except StoreError:
        logging.exception("[Auth] Signup failed")
        flash(GENERIC_ERROR, "error")
        return redirect(url_for("auth.signup_form"))

    logging.info(f"[Auth] Registered user {user.id}")
    flash("You are now registered and can log in", "success")
    return redirect(url_for("auth.login_form"))


# --- LOGIN ---
@auth_bp.route("/login", methods=["GET"])
def login_form():
    return render_template("login.html")


@auth_bp.route("/login", methods=["POST"])
def login() -> Response:
    """
    Authenticate a user and establish a session.

    Expects form fields:
    - email (str)
    - password (str)

    Redirects:
        /dashboard: Session established.
        /login: Validation error, bad credentials, or store failure.
    """
    try:
        form = LoginForm.model_validate(request.form.to_dict())
    except ValidationError as exc:
        flash(error_message(exc), "error")
        return redirect(url_for("auth.login_form"))

    try:
        user = authenticate(get_stores().users, form.email, form.password)
    except AuthenticationError as exc:
        logging.warning("[Auth] Login denied")
        flash(str(exc), "error")
        return redirect(url_for("auth.login_form"))
    except StoreError:
        logging.exception("[Auth] Login failed")
        flash(GENERIC_ERROR, "error")
        return redirect(url_for("auth.login_form"))

    try:
        login_user(user)
    except StoreError:
        logging.exception("[Auth] Could not open session")
        flash(GENERIC_ERROR, "error")
        return redirect(url_for("auth.login_form"))
    logging.info(f"[Auth] User {user.id} logged in")
    return redirect(url_for("pages.dashboard"))


# --- LOGOUT ---
@auth_bp.route("/logout", methods=["GET", "POST"])
def logout() -> Response:
    try:
        logout_user()
    except StoreError:
        # The cookie is already cleared; only the stored record is left behind
        logging.exception("[Auth] Could not delete session record")
    logging.info("[Auth] Session cleared")
    flash("You have been logged out", "success")
    return redirect(url_for("auth.login_form"))
