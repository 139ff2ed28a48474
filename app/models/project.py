"""
Ship or Sink: Change
Project domain models.

Models:
    - Project: a change-management project owned by exactly one user
    - ProjectMember: invite-by-email join row granting read access
    - Milestone: project-scoped date-stamped event (kickoff, training, go-live...)
"""

from datetime import datetime, timezone

from app.models import db


PROJECT_STATUSES = {"active", "completed", "on_hold", "cancelled"}
MILESTONE_TYPES = {"kickoff", "training", "golive", "review", "other"}
MILESTONE_STATUSES = {"upcoming", "in_progress", "completed"}


def _utcnow():
    return datetime.now(timezone.utc)


# ── Project ──────────────────────────────────────────────────────────────────


class Project(db.Model):
    """
    Represents an organizational-change project.
    Maps to the hosted datastore's 'change_projects' table.
    """

    __tablename__ = "change_projects"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.String(64), nullable=False, index=True,
        comment="Owner: subject id issued by the hosted auth provider",
    )
    name = db.Column(db.String(200), nullable=False)
    status = db.Column(
        db.String(30),
        nullable=False,
        default="active",
        comment="active | completed | on_hold | cancelled",
    )
    description = db.Column(db.Text, default="")
    logo_url = db.Column(db.String(500), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    # ── Relationships ────────────────────────────────────────────────────
    members = db.relationship(
        "ProjectMember", backref="project", lazy="dynamic",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    milestones = db.relationship(
        "Milestone", backref="project", lazy="dynamic",
        cascade="all, delete-orphan", passive_deletes=True,
        order_by="Milestone.date",
    )
    stakeholder_links = db.relationship(
        "ProjectStakeholder", backref="project", lazy="dynamic",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    group_links = db.relationship(
        "ProjectGroup", backref="project", lazy="dynamic",
        cascade="all, delete-orphan", passive_deletes=True,
    )

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "status": self.status,
            "description": self.description,
            "logo_url": self.logo_url,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<Project {self.id}: {self.name}>"


# ── ProjectMember ────────────────────────────────────────────────────────────


class ProjectMember(db.Model):
    """Invited collaborator. Read access only; ownership stays with Project.user_id."""

    __tablename__ = "change_project_members"
    __table_args__ = (
        db.UniqueConstraint("project_id", "invited_email", name="uq_project_member_email"),
    )

    id = db.Column(db.Integer, primary_key=True)
    project_id = db.Column(
        db.Integer,
        db.ForeignKey("change_projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    invited_email = db.Column(db.String(255), nullable=False, index=True)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "project_id": self.project_id,
            "invited_email": self.invited_email,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


# ── Milestone ────────────────────────────────────────────────────────────────


class Milestone(db.Model):
    """Date-stamped project event shown on the timeline."""

    __tablename__ = "milestones"

    id = db.Column(db.Integer, primary_key=True)
    project_id = db.Column(
        db.Integer,
        db.ForeignKey("change_projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = db.Column(db.String(200), nullable=False)
    date = db.Column(db.Date, nullable=False)
    type = db.Column(
        db.String(20), nullable=False, default="other",
        comment="kickoff | training | golive | review | other",
    )
    status = db.Column(
        db.String(20), nullable=False, default="upcoming",
        comment="upcoming | in_progress | completed",
    )
    description = db.Column(db.Text, nullable=True)
    meeting_notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "project_id": self.project_id,
            "name": self.name,
            "date": self.date.isoformat() if self.date else None,
            "type": self.type,
            "status": self.status,
            "description": self.description,
            "meeting_notes": self.meeting_notes,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<Milestone {self.id}: {self.name} ({self.type})>"
