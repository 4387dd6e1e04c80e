from __future__ import annotations

from flask import Blueprint, flash, redirect, render_template, request, url_for

from ..draw import DrawError
from ..policies import (
    PoolViewMixin,
    RosterFrozenMixin,
    forget_pool,
    group_in_pool_or_404,
    participant_in_pool_or_404,
    remember_pool,
)
from ..services.pools import (
    PoolError,
    create_group,
    create_participant,
    delete_group,
    delete_participant,
    delete_pool,
    draw_pool,
    get_pool_full,
    move_participant,
    update_pool_name,
)

pools_bp = Blueprint("pools", __name__, url_prefix="/pool")


def _back(pool):
    return redirect(url_for("pools.admin", pool_id=pool.id))


class AdminView(PoolViewMixin):
    def get(self, pool):
        pool = get_pool_full(pool.id)
        remember_pool(pool.id)
        participants = pool.participants
        names = {p.id: p.name for p in participants}
        results = [(p.name, names.get(p.to_id, "Unknown")) for p in participants if p.to_id]
        return render_template(
            "pools/admin.html",
            pool=pool,
            participants=participants,
            is_drawn=pool.is_drawn,
            results=results,
        )


class RenameView(PoolViewMixin):
    def post(self, pool):
        try:
            update_pool_name(pool.id, request.form.get("name"))
            flash("Pool renamed.", "success")
        except PoolError as e:
            flash(str(e), "error")
        return _back(pool)


class AddGroupView(RosterFrozenMixin):
    def post(self, pool):
        create_group(pool.id)
        return _back(pool)


class DeleteGroupView(RosterFrozenMixin):
    def post(self, pool, group_id: int):
        group = group_in_pool_or_404(pool, group_id)
        delete_group(group.id)
        flash("Group deleted.", "success")
        return _back(pool)


class AddParticipantView(RosterFrozenMixin):
    def post(self, pool, group_id: int):
        group = group_in_pool_or_404(pool, group_id)
        try:
            create_participant(group.id, request.form.get("name"))
        except PoolError as e:
            flash(str(e), "error")
        return _back(pool)


class MoveParticipantView(RosterFrozenMixin):
    def post(self, pool, participant_id: str):
        participant = participant_in_pool_or_404(pool, participant_id)
        try:
            group_id = int(request.form.get("group_id") or "")
        except ValueError:
            flash("Pick a group to move to.", "error")
            return _back(pool)

        if move_participant(participant.id, group_id) is None:
            flash("Could not move participant to that group.", "error")
        return _back(pool)


class DeleteParticipantView(RosterFrozenMixin):
    def post(self, pool, participant_id: str):
        participant = participant_in_pool_or_404(pool, participant_id)
        name = participant.name
        delete_participant(participant.id)
        flash(f"Deleted participant: {name}", "success")
        return _back(pool)


class DrawView(PoolViewMixin):
    def post(self, pool):
        try:
            draw_pool(pool.id)
            flash("The draw is done. Send everyone their link.", "success")
        except (DrawError, PoolError) as e:
            flash(f"Failed to draw: {e}", "error")
        return _back(pool)


class DeletePoolView(PoolViewMixin):
    def post(self, pool):
        pool_id = pool.id
        delete_pool(pool_id)
        forget_pool(pool_id)
        flash("Pool deleted.", "success")
        return redirect(url_for("public.landing"))


# Register routes
pools_bp.add_url_rule("/<pool_id>", view_func=AdminView.as_view("admin"))
pools_bp.add_url_rule("/<pool_id>/rename", view_func=RenameView.as_view("rename"), methods=["POST"])
pools_bp.add_url_rule("/<pool_id>/draw", view_func=DrawView.as_view("draw"), methods=["POST"])
pools_bp.add_url_rule("/<pool_id>/delete", view_func=DeletePoolView.as_view("delete"), methods=["POST"])

pools_bp.add_url_rule("/<pool_id>/groups", view_func=AddGroupView.as_view("add_group"), methods=["POST"])
pools_bp.add_url_rule(
    "/<pool_id>/groups/<int:group_id>/delete",
    view_func=DeleteGroupView.as_view("delete_group"),
    methods=["POST"],
)
pools_bp.add_url_rule(
    "/<pool_id>/groups/<int:group_id>/participants",
    view_func=AddParticipantView.as_view("add_participant"),
    methods=["POST"],
)
pools_bp.add_url_rule(
    "/<pool_id>/participants/<participant_id>/move",
    view_func=MoveParticipantView.as_view("move_participant"),
    methods=["POST"],
)
pools_bp.add_url_rule(
    "/<pool_id>/participants/<participant_id>/delete",
    view_func=DeleteParticipantView.as_view("delete_participant"),
    methods=["POST"],
)
