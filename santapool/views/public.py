from __future__ import annotations

from flask import Blueprint, flash, redirect, render_template, request, url_for
from flask.views import MethodView

from ..policies import recent_pool_ids, remember_pool
from ..services.pools import InvalidName, create_pool, get_pools_full


public_bp = Blueprint("public", __name__)


class LandingView(MethodView):
    def get(self):
        return render_template("landing.html", pools=get_pools_full(recent_pool_ids()))


class CreatePoolView(MethodView):
    def post(self):
        try:
            pool = create_pool(request.form.get("name"))
        except InvalidName as e:
            flash(str(e), "error")
            return redirect(url_for("public.landing"))

        remember_pool(pool.id)
        flash("Pool created. Keep this page's link: it is the only way back in.", "success")
        return redirect(url_for("pools.admin", pool_id=pool.id))


public_bp.add_url_rule("/", view_func=LandingView.as_view("landing"))
public_bp.add_url_rule("/pools", view_func=CreatePoolView.as_view("create_pool"), methods=["POST"])
