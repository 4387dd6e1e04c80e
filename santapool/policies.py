from __future__ import annotations

from flask import abort, flash, redirect, request, session, url_for
from flask.views import MethodView

from .extensions import db
from .models import Group, Participant, Pool


RECENT_POOLS_KEY = "recent_pool_ids"


def remember_pool(pool_id: str) -> None:
    """Keep the pools this browser created, newest first."""
    ids = [i for i in session.get(RECENT_POOLS_KEY, []) if i != pool_id]
    session[RECENT_POOLS_KEY] = [pool_id] + ids


def forget_pool(pool_id: str) -> None:
    session[RECENT_POOLS_KEY] = [i for i in session.get(RECENT_POOLS_KEY, []) if i != pool_id]


def recent_pool_ids() -> list[str]:
    return list(session.get(RECENT_POOLS_KEY, []))


def pool_or_404(pool_id: str) -> Pool:
    pool = db.session.get(Pool, pool_id)
    if pool is None:
        abort(404)
    return pool


# --------- Class-based view Mixins ----------

class PoolViewMixin(MethodView):
    """Resolves <pool_id> to a Pool (404 when unknown) and passes it on as ``pool``."""
    def dispatch_request(self, pool_id: str, **kwargs):
        return super().dispatch_request(pool=pool_or_404(pool_id), **kwargs)


class RosterFrozenMixin(PoolViewMixin):
    """
    Allows GET always.
    Blocks POST/PUT/PATCH/DELETE on groups and participants once the pool is drawn.
    """
    def dispatch_request(self, pool_id: str, **kwargs):
        pool = pool_or_404(pool_id)
        if request.method in {"POST", "PUT", "PATCH", "DELETE"} and pool.is_drawn:
            flash("The draw is done: groups and participants can no longer change.", "info")
            return redirect(url_for("pools.admin", pool_id=pool.id))
        return super().dispatch_request(pool_id, **kwargs)


def group_in_pool_or_404(pool: Pool, group_id: int) -> Group:
    group = db.session.get(Group, group_id)
    if group is None or group.pool_id != pool.id:
        abort(404)
    return group


def participant_in_pool_or_404(pool: Pool, participant_id: str) -> Participant:
    participant = db.session.get(Participant, participant_id)
    if participant is None or participant.group.pool_id != pool.id:
        abort(404)
    return participant
