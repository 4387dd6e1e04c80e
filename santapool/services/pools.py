from __future__ import annotations

import logging
import random

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from ..draw import draw, validate_assignment
from ..extensions import db
from ..models import Group, Participant, Pool
from ..security import encrypt_assignment_recipient

logger = logging.getLogger(__name__)


class PoolError(RuntimeError):
    pass


class PoolNotFound(PoolError):
    pass


class PoolAlreadyDrawn(PoolError):
    pass


class InvalidName(PoolError):
    pass


def _clean_name(name: str | None) -> str:
    name = (name or "").strip()
    if not name:
        raise InvalidName("Name is required.")
    return name


def _full_pool_query():
    return Pool.query.options(
        selectinload(Pool.groups).selectinload(Group.participants)
    )


def _require_pool(pool_id: str) -> Pool:
    pool = db.session.get(Pool, pool_id)
    if pool is None:
        raise PoolNotFound("Pool not found.")
    return pool


def _require_group(group_id: int) -> Group:
    group = db.session.get(Group, group_id)
    if group is None:
        raise PoolNotFound("Group not found.")
    return group


def _ensure_not_drawn(pool: Pool) -> None:
    if pool.is_drawn:
        raise PoolAlreadyDrawn("This pool has already been drawn.")


def is_drawn(pool: Pool) -> bool:
    return pool.is_drawn


def create_pool(name: str) -> Pool:
    pool = Pool(name=_clean_name(name))
    db.session.add(pool)
    db.session.commit()
    logger.info("Created pool %s", pool.id)
    return pool


def update_pool_name(pool_id: str, name: str) -> Pool:
    pool = _require_pool(pool_id)
    pool.name = _clean_name(name)
    db.session.commit()
    return pool


def get_pool_full(pool_id: str) -> Pool | None:
    """Pool with its groups (by id) and each group's participants (by name)."""
    return _full_pool_query().filter(Pool.id == pool_id).first()


def get_pools_full(pool_ids: list[str]) -> list[Pool]:
    if not pool_ids:
        return []
    return (
        _full_pool_query()
        .filter(Pool.id.in_(pool_ids))
        .order_by(Pool.created_at.desc())
        .all()
    )


def create_group(pool_id: str) -> Group:
    pool = _require_pool(pool_id)
    _ensure_not_drawn(pool)
    group = Group(pool=pool)
    db.session.add(group)
    db.session.commit()
    return group


def create_participant(group_id: int, name: str) -> Participant:
    group = _require_group(group_id)
    _ensure_not_drawn(group.pool)
    participant = Participant(group=group, name=_clean_name(name))
    db.session.add(participant)
    db.session.commit()
    return participant


def move_participant(participant_id: str, group_id: int) -> Participant | None:
    """
    Moves a participant to another group of the same pool.

    Returns None (and changes nothing) when either side is missing or the
    target group belongs to another pool.
    """
    participant = db.session.get(Participant, participant_id)
    target = db.session.get(Group, group_id)
    if participant is None or target is None:
        return None
    if participant.group.pool_id != target.pool_id:
        return None
    _ensure_not_drawn(target.pool)

    participant.group = target
    db.session.commit()
    return participant


def get_participant(participant_id: str) -> Participant | None:
    """Participant by id; ``assigned_to`` resolves their recipient once drawn."""
    return db.session.get(Participant, participant_id)


def draw_pool(pool_id: str, rng: random.Random | None = None) -> dict[str, str]:
    """
    Draws a pool and persists every recipient in one transaction.

    Engine errors (TooFewParticipants, InfeasibleConstraints) propagate
    unchanged; nothing is written in that case.
    """
    pool = (
        _full_pool_query()
        .filter(Pool.id == pool_id)
        .with_for_update()
        .first()
    )
    if pool is None:
        raise PoolNotFound("Pool not found.")
    _ensure_not_drawn(pool)

    people = pool.participants
    max_attempts = current_app.config["SANTA_DRAW_MAX_ATTEMPTS"]
    assignment = draw(people, rng=rng, max_attempts=max_attempts)
    validate_assignment(people, assignment)

    id_map = {p.id: p for p in people}
    try:
        for giver_id, receiver_id in assignment.items():
            id_map[giver_id].to_ciphertext = encrypt_assignment_recipient(receiver_id)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to persist draw for pool %s", pool_id)
        raise

    logger.info("Drew pool %s (%d participants)", pool_id, len(assignment))
    return assignment


def delete_pool(pool_id: str) -> None:
    pool = _require_pool(pool_id)
    db.session.delete(pool)
    db.session.commit()
    logger.info("Deleted pool %s", pool_id)


def delete_group(group_id: int) -> None:
    group = _require_group(group_id)
    _ensure_not_drawn(group.pool)
    db.session.delete(group)
    db.session.commit()


def delete_participant(participant_id: str) -> None:
    participant = db.session.get(Participant, participant_id)
    if participant is None:
        raise PoolNotFound("Participant not found.")
    _ensure_not_drawn(participant.group.pool)
    db.session.delete(participant)
    db.session.commit()
