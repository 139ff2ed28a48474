"""
Ship or Sink: Change
Coaching domain models.

Models:
    - ConversationScript: saved talk-track snippet with tags and usage counter
    - ChatMessage: append-only AI chat transcript, per user (+ optional project)
    - ChatInsight: append-only insight log derived from AI chats
    - ScheduledFollowup: a dated reminder to reconnect with a stakeholder
"""

from datetime import datetime, timezone

from app.models import db


SCRIPT_TAGS = (
    "opener", "objection", "question", "follow-up",
    "empathy", "motivation", "closing", "escalation",
)
CHAT_ROLES = {"user", "assistant"}


def _utcnow():
    return datetime.now(timezone.utc)


def _iso(value):
    return value.isoformat() if value else None


class ConversationScript(db.Model):
    __tablename__ = "conversation_scripts"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    project_id = db.Column(
        db.Integer,
        db.ForeignKey("change_projects.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    title = db.Column(db.String(300), nullable=False)
    content = db.Column(db.Text, nullable=False)
    tags = db.Column(db.JSON, default=list)
    stakeholder_type = db.Column(db.String(20), nullable=True)
    times_used = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "project_id": self.project_id,
            "title": self.title,
            "content": self.content,
            "tags": list(self.tags or []),
            "stakeholder_type": self.stakeholder_type,
            "times_used": self.times_used,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }

    def __repr__(self):
        return f"<ConversationScript {self.id}: {self.title[:40]}>"


class ChatMessage(db.Model):
    __tablename__ = "chat_messages"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    project_id = db.Column(
        db.Integer,
        db.ForeignKey("change_projects.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    role = db.Column(db.String(20), nullable=False, comment="user | assistant")
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow, index=True)

    def to_dict(self):
        return {
            "id": self.id,
            "project_id": self.project_id,
            "role": self.role,
            "content": self.content,
            "created_at": _iso(self.created_at),
        }


class ChatInsight(db.Model):
    __tablename__ = "chat_insights"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    project_id = db.Column(
        db.Integer,
        db.ForeignKey("change_projects.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    stakeholder_id = db.Column(
        db.Integer,
        db.ForeignKey("global_stakeholders.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    insight = db.Column(db.Text, nullable=False)
    insight_type = db.Column(db.String(50), nullable=False, default="general")
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow, index=True)

    def to_dict(self):
        return {
            "id": self.id,
            "project_id": self.project_id,
            "stakeholder_id": self.stakeholder_id,
            "insight": self.insight,
            "insight_type": self.insight_type,
            "created_at": _iso(self.created_at),
        }


class ScheduledFollowup(db.Model):
    __tablename__ = "scheduled_followups"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    project_id = db.Column(
        db.Integer,
        db.ForeignKey("change_projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    stakeholder_id = db.Column(
        db.Integer,
        db.ForeignKey("project_stakeholders.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    scheduled_date = db.Column(db.Date, nullable=False, index=True)
    title = db.Column(db.String(300), nullable=False)
    notes = db.Column(db.Text, nullable=True)
    completed = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    stakeholder = db.relationship("ProjectStakeholder", lazy="joined")

    def to_dict(self):
        link = self.stakeholder
        person = link.stakeholder if link else None
        return {
            "id": self.id,
            "project_id": self.project_id,
            "stakeholder_id": self.stakeholder_id,
            "scheduled_date": _iso(self.scheduled_date),
            "title": self.title,
            "notes": self.notes,
            "completed": bool(self.completed),
            "stakeholder": {
                "id": link.id,
                "name": person.name if person else "",
                "role": (person.role if person else "") or "",
                "stakeholder_type": link.stakeholder_type,
            } if link else None,
            "created_at": _iso(self.created_at),
        }
