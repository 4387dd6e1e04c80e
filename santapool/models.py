import uuid
from datetime import datetime

from .extensions import db
from .security import decrypt_assignment_recipient


def _new_uuid() -> str:
    return str(uuid.uuid4())


class Pool(db.Model):
    __tablename__ = "pools"

    # The id doubles as the secret admin link, so it is a random UUID.
    id = db.Column(db.String(36), primary_key=True, default=_new_uuid)
    name = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    groups = db.relationship(
        "Group",
        back_populates="pool",
        order_by="Group.id",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def participants(self) -> list["Participant"]:
        return [p for g in self.groups for p in g.participants]

    @property
    def is_drawn(self) -> bool:
        return any(p.to_ciphertext is not None for p in self.participants)


class Group(db.Model):
    """
    Partition key over participants. Nobody gives to someone of their own group
    unless the pool only has one group.
    """
    __tablename__ = "groups"

    id = db.Column(db.Integer, primary_key=True)
    pool_id = db.Column(db.String(36), db.ForeignKey("pools.id", ondelete="CASCADE"), nullable=False, index=True)

    pool = db.relationship("Pool", back_populates="groups")
    participants = db.relationship(
        "Participant",
        back_populates="group",
        order_by="Participant.name",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Participant(db.Model):
    __tablename__ = "participants"

    # The id doubles as the participant's secret "play" link.
    id = db.Column(db.String(36), primary_key=True, default=_new_uuid)
    name = db.Column(db.String(255), nullable=False)
    group_id = db.Column(db.Integer, db.ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True)

    # Encrypted recipient id (Fernet token string), NULL until the pool is drawn.
    to_ciphertext = db.Column(db.Text, nullable=True)

    group = db.relationship("Group", back_populates="participants")

    @property
    def to_id(self) -> str | None:
        if self.to_ciphertext is None:
            return None
        return decrypt_assignment_recipient(self.to_ciphertext)

    @property
    def assigned_to(self) -> "Participant | None":
        to_id = self.to_id
        if to_id is None:
            return None
        return db.session.get(Participant, to_id)
