from __future__ import annotations

import logging
import time
from functools import wraps

from flask import Blueprint, jsonify, request
from pydantic import BaseModel, ValidationError

from ..draw import DrawError
from ..extensions import csrf
from ..models import Group, Participant, Pool
from ..schemas import (
    GroupCreateIn,
    GroupIdIn,
    ParticipantCreateIn,
    ParticipantIdIn,
    ParticipantMoveIn,
    PoolCreateIn,
    PoolIdIn,
    PoolListIn,
    PoolRenameIn,
)
from ..security import AssignmentTokenError
from ..services.pools import (
    InvalidName,
    PoolAlreadyDrawn,
    PoolError,
    PoolNotFound,
    create_group,
    create_participant,
    create_pool,
    delete_group,
    delete_participant,
    delete_pool,
    draw_pool,
    get_participant,
    get_pool_full,
    get_pools_full,
    move_participant,
    update_pool_name,
)

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__, url_prefix="/api")
csrf.exempt(api_bp)


_ERROR_STATUS = (
    (ValidationError, "BAD_REQUEST", 400),
    (InvalidName, "BAD_REQUEST", 400),
    (PoolNotFound, "NOT_FOUND", 404),
    (PoolAlreadyDrawn, "CONFLICT", 409),
    (DrawError, "BAD_REQUEST", 400),
    (PoolError, "BAD_REQUEST", 400),
    (AssignmentTokenError, "INTERNAL_SERVER_ERROR", 500),
)


def _error(code: str, message: str, status: int):
    return jsonify({"error": {"code": code, "message": message}}), status


def _message(e: Exception) -> str:
    if isinstance(e, ValidationError):
        return "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'body'}: {err['msg']}" for err in e.errors()
        )
    return str(e)


def procedure(fn):
    """Logs every call with its duration and turns domain errors into JSON errors."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        start = time.perf_counter()
        path = fn.__name__
        logger.info("[api] %s %s", request.method, path)
        try:
            result = fn(*args, **kwargs)
        except (ValidationError, PoolError, DrawError, AssignmentTokenError) as e:
            duration_ms = (time.perf_counter() - start) * 1000
            code, status = next((c, s) for cls, c, s in _ERROR_STATUS if isinstance(e, cls))
            message = _message(e)
            if status >= 500:
                logger.error("[api] %s %s - ERROR %s: %s (%.1fms)", request.method, path, code, message, duration_ms)
            else:
                logger.warning("[api] %s %s - ERROR %s: %s (%.1fms)", request.method, path, code, message, duration_ms)
            return _error(code, message, status)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info("[api] %s %s - SUCCESS (%.1fms)", request.method, path, duration_ms)
        return jsonify(result)
    return wrapper


def _body(model: type[BaseModel]):
    return model.model_validate(request.get_json(silent=True))


def _participant_json(p: Participant) -> dict:
    return {"id": p.id, "name": p.name, "groupId": p.group_id, "toId": p.to_id}


def _group_json(g: Group) -> dict:
    return {"id": g.id, "poolId": g.pool_id, "participants": [_participant_json(p) for p in g.participants]}


def _pool_json(pool: Pool, full: bool = True) -> dict:
    data = {"id": pool.id, "name": pool.name, "createdAt": pool.created_at.isoformat()}
    if full:
        data["groups"] = [_group_json(g) for g in pool.groups]
    return data


@api_bp.route("/pool_list", methods=["GET"])
@procedure
def pool_list():
    query = PoolListIn.model_validate({"id": request.args.getlist("id")})
    return [_pool_json(p) for p in get_pools_full(query.id)]


@api_bp.route("/pool_get_full", methods=["POST"])
@procedure
def pool_get_full():
    pool = get_pool_full(_body(PoolIdIn).id)
    if pool is None:
        raise PoolNotFound("Pool not found.")
    return _pool_json(pool)


@api_bp.route("/pool_create", methods=["POST"])
@procedure
def pool_create():
    pool = create_pool(_body(PoolCreateIn).name)
    return _pool_json(pool, full=False)


@api_bp.route("/pool_update_name", methods=["POST"])
@procedure
def pool_update_name():
    data = _body(PoolRenameIn)
    pool = update_pool_name(data.id, data.name)
    return _pool_json(pool, full=False)


@api_bp.route("/pool_draw", methods=["POST"])
@procedure
def pool_draw():
    assignments = draw_pool(_body(PoolIdIn).id)
    return {"success": True, "assignments": assignments}


@api_bp.route("/pool_delete", methods=["POST"])
@procedure
def pool_delete():
    delete_pool(_body(PoolIdIn).id)
    return {"success": True}


@api_bp.route("/group_create", methods=["POST"])
@procedure
def group_create():
    group = create_group(_body(GroupCreateIn).poolId)
    return _group_json(group)


@api_bp.route("/group_delete", methods=["POST"])
@procedure
def group_delete():
    delete_group(_body(GroupIdIn).id)
    return {"success": True}


@api_bp.route("/participant_create", methods=["POST"])
@procedure
def participant_create():
    data = _body(ParticipantCreateIn)
    participant = create_participant(data.groupId, data.name)
    return _participant_json(participant)


@api_bp.route("/participant_update_group", methods=["POST"])
@procedure
def participant_update_group():
    data = _body(ParticipantMoveIn)
    participant = move_participant(data.participantId, data.groupId)
    return _participant_json(participant) if participant is not None else None


@api_bp.route("/participant_get", methods=["POST"])
@procedure
def participant_get():
    participant = get_participant(_body(ParticipantIdIn).id)
    if participant is None:
        raise PoolNotFound("Participant not found.")
    data = _participant_json(participant)
    assigned_to = participant.assigned_to
    data["assignedTo"] = _participant_json(assigned_to) if assigned_to is not None else None
    return data


@api_bp.route("/participant_delete", methods=["POST"])
@procedure
def participant_delete():
    delete_participant(_body(ParticipantIdIn).id)
    return {"success": True}
