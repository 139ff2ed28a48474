"""
Ship or Sink: Change
Stakeholder domain models.

Models:
    - StakeholderGroup: a named team/department in the user's directory
    - GlobalStakeholder: a person in the user's directory, independent of projects
    - ProjectStakeholder: links a GlobalStakeholder to a Project with project scores
    - ScoreHistory: append-only score snapshot per ProjectStakeholder
    - ProjectGroup: group-level mirror of ProjectStakeholder (sentiment + ADKAR)

The ADKAR columns (awareness .. reinforcement) hold 0-100 integers. Range is a
caller precondition; nothing below the service layer clamps them.
"""

from datetime import datetime, timezone

from app.models import db


STAKEHOLDER_TYPES = ("champion", "early_adopter", "neutral", "skeptic", "resistant")
GROUP_SENTIMENTS = ("positive", "neutral", "negative")
ADKAR_FIELDS = ("awareness", "desire", "knowledge", "ability", "reinforcement")

DEFAULT_GROUP_COLOR = "#6b7280"


def _utcnow():
    return datetime.now(timezone.utc)


def _iso(value):
    return value.isoformat() if value else None


# ── StakeholderGroup ─────────────────────────────────────────────────────────


class StakeholderGroup(db.Model):
    __tablename__ = "stakeholder_groups"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, default="")
    color = db.Column(db.String(20), default=DEFAULT_GROUP_COLOR)

    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    members = db.relationship("GlobalStakeholder", backref="group", lazy="dynamic")
    project_links = db.relationship(
        "ProjectGroup", backref="group", lazy="dynamic",
        cascade="all, delete-orphan", passive_deletes=True,
    )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "color": self.color,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }

    def __repr__(self):
        return f"<StakeholderGroup {self.id}: {self.name}>"


# ── GlobalStakeholder ────────────────────────────────────────────────────────


class GlobalStakeholder(db.Model):
    """
    A person in the owner's organization directory.

    ``reports_to_id`` is a plain self-referential FK. Only one-hop lookups
    (manager / direct reports) are ever performed on it.
    """

    __tablename__ = "global_stakeholders"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    name = db.Column(db.String(200), nullable=False)
    email = db.Column(db.String(255), default="")
    phone = db.Column(db.String(50), default="")
    role = db.Column(db.String(200), default="")
    title = db.Column(db.String(200), default="")
    department = db.Column(db.String(200), default="")
    location = db.Column(db.String(200), default="")
    notes = db.Column(db.Text, default="")
    avatar_url = db.Column(db.String(500), nullable=True)
    group_id = db.Column(
        db.Integer,
        db.ForeignKey("stakeholder_groups.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    org_level = db.Column(db.String(50), nullable=True)
    reports_to_id = db.Column(
        db.Integer,
        db.ForeignKey("global_stakeholders.id", ondelete="SET NULL"),
        nullable=True,
    )
    is_me = db.Column(
        db.Boolean, nullable=False, default=False,
        comment="Marks the logged-in user's own profile (at most one per user)",
    )

    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    project_links = db.relationship(
        "ProjectStakeholder", backref="stakeholder", lazy="dynamic",
        cascade="all, delete-orphan", passive_deletes=True,
    )

    def to_dict(self):
        group = self.group
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "role": self.role,
            "title": self.title,
            "department": self.department,
            "location": self.location,
            "notes": self.notes,
            "avatar_url": self.avatar_url,
            "group_id": self.group_id,
            "group_name": group.name if group else None,
            "group_color": group.color if group else None,
            "org_level": self.org_level,
            "reports_to_id": self.reports_to_id,
            "is_me": bool(self.is_me),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }

    def __repr__(self):
        return f"<GlobalStakeholder {self.id}: {self.name}>"


# ── ProjectStakeholder ───────────────────────────────────────────────────────


class ProjectStakeholder(db.Model):
    """Project-specific scores for one person."""

    __tablename__ = "project_stakeholders"
    __table_args__ = (
        db.UniqueConstraint("project_id", "stakeholder_id", name="uq_project_stakeholder"),
    )

    id = db.Column(db.Integer, primary_key=True)
    project_id = db.Column(
        db.Integer,
        db.ForeignKey("change_projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    stakeholder_id = db.Column(
        db.Integer,
        db.ForeignKey("global_stakeholders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    stakeholder_type = db.Column(
        db.String(20), nullable=True, default="neutral",
        comment="champion | early_adopter | neutral | skeptic | resistant",
    )
    influence_level = db.Column(db.Integer, default=5)
    support_level = db.Column(db.Integer, default=5)
    awareness = db.Column(db.Integer, default=50)
    desire = db.Column(db.Integer, default=50)
    knowledge = db.Column(db.Integer, default=50)
    ability = db.Column(db.Integer, default=50)
    reinforcement = db.Column(db.Integer, default=50)
    engagement_score = db.Column(db.Integer, default=0)
    performance_score = db.Column(db.Integer, default=0)
    last_contact_date = db.Column(db.Date, nullable=True)
    project_notes = db.Column(db.Text, default="")

    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    history = db.relationship(
        "ScoreHistory", backref="project_stakeholder", lazy="dynamic",
        cascade="all, delete-orphan", passive_deletes=True,
        order_by="ScoreHistory.recorded_at",
    )

    def adkar_scores(self) -> dict:
        return {field: getattr(self, field) for field in ADKAR_FIELDS}

    def to_dict(self):
        """Flattened view: person fields from the directory + project scores.

        The ``*_score`` ADKAR keys and ``comments`` are aliases kept for
        older clients.
        """
        gs = self.stakeholder
        group = gs.group if gs else None
        result = {
            "id": self.id,
            "stakeholder_id": self.stakeholder_id,
            "project_id": self.project_id,
            # Directory info
            "name": gs.name if gs else "",
            "email": (gs.email if gs else "") or "",
            "phone": (gs.phone if gs else "") or "",
            "role": (gs.role if gs else "") or "",
            "title": (gs.title if gs else "") or "",
            "department": (gs.department if gs else "") or "",
            "notes": (gs.notes if gs else "") or "",
            "avatar_url": (gs.avatar_url if gs else "") or "",
            "group_id": gs.group_id if gs else None,
            "group_name": group.name if group else None,
            "group_color": group.color if group else None,
            # Project scores
            "stakeholder_type": self.stakeholder_type,
            "influence_level": self.influence_level,
            "support_level": self.support_level,
            "engagement_score": self.engagement_score,
            "performance_score": self.performance_score,
            "last_contact_date": _iso(self.last_contact_date),
            "project_notes": self.project_notes,
            "comments": self.project_notes,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }
        for field in ADKAR_FIELDS:
            value = getattr(self, field)
            result[field] = value
            result[f"{field}_score"] = value
        return result

    def __repr__(self):
        return f"<ProjectStakeholder {self.id}: project={self.project_id} person={self.stakeholder_id}>"


# ── ScoreHistory ─────────────────────────────────────────────────────────────


class ScoreHistory(db.Model):
    """Append-only snapshot written whenever engagement or ADKAR scores change."""

    __tablename__ = "score_history"

    id = db.Column(db.Integer, primary_key=True)
    project_stakeholder_id = db.Column(
        db.Integer,
        db.ForeignKey("project_stakeholders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    engagement_score = db.Column(db.Integer, default=0)
    performance_score = db.Column(db.Integer, default=0)
    awareness = db.Column(db.Integer, default=0)
    desire = db.Column(db.Integer, default=0)
    knowledge = db.Column(db.Integer, default=0)
    ability = db.Column(db.Integer, default=0)
    reinforcement = db.Column(db.Integer, default=0)
    recorded_at = db.Column(db.DateTime(timezone=True), default=_utcnow, index=True)

    def to_dict(self):
        return {
            "id": self.id,
            "project_stakeholder_id": self.project_stakeholder_id,
            "engagement_score": self.engagement_score,
            "performance_score": self.performance_score,
            "awareness": self.awareness,
            "desire": self.desire,
            "knowledge": self.knowledge,
            "ability": self.ability,
            "reinforcement": self.reinforcement,
            "recorded_at": _iso(self.recorded_at),
        }


# ── ProjectGroup ─────────────────────────────────────────────────────────────


class ProjectGroup(db.Model):
    __tablename__ = "project_groups"
    __table_args__ = (
        db.UniqueConstraint("project_id", "group_id", name="uq_project_group"),
    )

    id = db.Column(db.Integer, primary_key=True)
    project_id = db.Column(
        db.Integer,
        db.ForeignKey("change_projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    group_id = db.Column(
        db.Integer,
        db.ForeignKey("stakeholder_groups.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    group_sentiment = db.Column(
        db.String(20), default="neutral",
        comment="positive | neutral | negative",
    )
    influence_level = db.Column(db.Integer, default=5)
    awareness = db.Column(db.Integer, default=50)
    desire = db.Column(db.Integer, default=50)
    knowledge = db.Column(db.Integer, default=50)
    ability = db.Column(db.Integer, default=50)
    reinforcement = db.Column(db.Integer, default=50)
    project_notes = db.Column(db.Text, default="")

    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    def to_dict(self):
        group = self.group
        result = {
            "id": self.id,
            "project_id": self.project_id,
            "group_id": self.group_id,
            "name": group.name if group else "",
            "description": (group.description if group else "") or "",
            "color": (group.color if group else None) or DEFAULT_GROUP_COLOR,
            "group_sentiment": self.group_sentiment,
            "influence_level": self.influence_level,
            "project_notes": self.project_notes,
            "created_at": _iso(self.created_at),
        }
        for field in ADKAR_FIELDS:
            result[field] = getattr(self, field)
        return result
