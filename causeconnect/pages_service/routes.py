"""
Static site pages.

Public pages render for anyone; dashboard and notification require a
logged-in user.
"""

from flask import Blueprint, render_template
from flask_login import current_user, login_required

pages_bp = Blueprint("pages", __name__)


@pages_bp.route("/")
def index():
    return render_template("index.html")


@pages_bp.route("/about")
def about():
    return render_template("about.html")


@pages_bp.route("/faqs")
def faqs():
    return render_template("faqs.html")


@pages_bp.route("/dashboard")
@login_required
def dashboard():
    return render_template("dashboard.html", user=current_user.user)


@pages_bp.route("/notification")
@login_required
def notification():
    return render_template("notification.html", user=current_user.user)
