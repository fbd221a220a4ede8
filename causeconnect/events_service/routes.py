"""
Events service routes: list events and post new ones.
Posting requires a logged-in user; listing is public.
"""

import logging

from flask import Blueprint, Response, flash, redirect, render_template, request, url_for
from flask_login import current_user, login_required
from pydantic import ValidationError

from causeconnect.auth_service.forms import error_message
from causeconnect.auth_service.routes import GENERIC_ERROR
from causeconnect.database.registry import get_stores
from causeconnect.database.stores import StoreError
from causeconnect.events_service.forms import PostEventForm

events_bp = Blueprint("events", __name__)


@events_bp.before_request
def before_request() -> None:
    logging.info(f"[Events] Incoming {request.method} {request.path}")


@events_bp.after_request
def after_request(response: Response) -> Response:
    logging.info(f"[Events] Response {response.status}")
    return response


@events_bp.route("/events", methods=["GET"])
def list_events():
    """
    Render every posted event, soonest first.

    A store failure renders the page with an empty list and an error
    notice instead of failing the request.
    """
    try:
        events = get_stores().events.list_events()
    except StoreError:
        logging.exception("[Events] Could not list events")
        flash(GENERIC_ERROR, "error")
        events = []
    return render_template("events.html", events=events)


@events_bp.route("/post_event", methods=["GET"])
@login_required
def post_event_form():
    return render_template("post_event.html", user=current_user.user)


@events_bp.route("/post_event", methods=["POST"])
@login_required
def post_event() -> Response:
    """
    Create an event.

    Expects form fields:
    - name (str)
    - organization (str)
    - location (str)
    - time (str): ISO-8601 date or datetime.

    Redirects:
        /events: Event created.
        /post_event: Validation error or store failure.
        /login: No authenticated session (handled by login_required).
    """
    user = current_user.user
    try:
        form = PostEventForm.model_validate(request.form.to_dict())
    except ValidationError as exc:
        flash(error_message(exc), "error")
        return redirect(url_for("events.post_event_form"))

    try:
        event = get_stores().events.create_event(
            name=form.name,
            organization=form.organization,
            location=form.location,
            time=form.time,
            created_by=user.id,
        )
    except StoreError:
        logging.exception("[Events] Failed to create event")
        flash(GENERIC_ERROR, "error")
        return redirect(url_for("events.post_event_form"))

    logging.info(f"[Events] User {user.id} posted event {event.id}")
    return redirect(url_for("events.list_events"))
