from __future__ import annotations

from flask import Blueprint, abort, render_template
from flask.views import MethodView

from ..services.pools import get_participant


play_bp = Blueprint("play", __name__, url_prefix="/play")


class ParticipantView(MethodView):
    def get(self, participant_id: str):
        participant = get_participant(participant_id)
        if participant is None:
            abort(404)
        return render_template(
            "play/participant.html",
            participant=participant,
            pool=participant.group.pool,
            assigned_to=participant.assigned_to,
        )


play_bp.add_url_rule("/<participant_id>", view_func=ParticipantView.as_view("participant"))
