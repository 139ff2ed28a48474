"""
Cross-project context for the AI coach.

Joins one user's projects, directory people, groups and per-project score
rows into per-entity histories, then derives plain-language pattern strings
that go straight into the LLM prompt.

Input rows are plain dicts, already scoped to a single owner. Dangling ids
are skipped, never raised on.
"""

import logging

logger = logging.getLogger(__name__)

_ADKAR_KEYS = ("awareness", "desire", "knowledge", "ability", "reinforcement")
_RESISTANT_TYPES = {"resistant", "skeptic"}
_CHAMPION_TYPES = {"champion", "early_adopter"}
PATTERN_THRESHOLD = 2


def _adkar(row: dict) -> dict:
    return {key: row.get(key) for key in _ADKAR_KEYS}


def _lt(value, limit) -> bool:
    return value is not None and value < limit


# ── History assembly ─────────────────────────────────────────────────────────


def _stakeholder_history(project_map: dict, project_stakeholders: list[dict]) -> dict:
    history: dict = {}
    for ps in project_stakeholders:
        entries = history.setdefault(ps.get("stakeholder_id"), [])
        project = project_map.get(ps.get("project_id"))
        if project is None:
            continue
        entries.append({
            "projectId": ps.get("project_id"),
            "projectName": project.get("name"),
            "projectStatus": project.get("status"),
            "stakeholderType": ps.get("stakeholder_type"),
            "adkarScores": _adkar(ps),
            "engagementScore": ps.get("engagement_score"),
            "notes": ps.get("project_notes"),
        })
    return history


def _group_history(project_map: dict, group_map: dict, project_groups: list[dict]) -> dict:
    history: dict = {}
    for pg in project_groups:
        entries = history.setdefault(pg.get("group_id"), [])
        project = project_map.get(pg.get("project_id"))
        if project is None or pg.get("group_id") not in group_map:
            continue
        entries.append({
            "projectId": pg.get("project_id"),
            "projectName": project.get("name"),
            "projectStatus": project.get("status"),
            "sentiment": pg.get("group_sentiment"),
            "influenceLevel": pg.get("influence_level"),
            "adkarScores": _adkar(pg),
        })
    return history


# ── Pattern detection ────────────────────────────────────────────────────────


def find_resistance_patterns(stakeholders: list[dict], groups: list[dict]) -> list[str]:
    patterns = []

    for s in stakeholders:
        hits = [h for h in s["projectHistory"] if h["stakeholderType"] in _RESISTANT_TYPES]
        if len(hits) >= PATTERN_THRESHOLD:
            names = ", ".join(str(h["projectName"]) for h in hits)
            patterns.append(
                f"{s['name']} has been resistant/skeptical in {len(hits)} projects: {names}"
            )

    for g in groups:
        hits = [
            h for h in g["projectHistory"]
            if h["sentiment"] == "negative"
            or (_lt(h["adkarScores"]["awareness"], 40) and _lt(h["adkarScores"]["desire"], 40))
        ]
        if len(hits) >= PATTERN_THRESHOLD:
            patterns.append(f"{g['name']} group has shown resistance in {len(hits)} projects")

    return patterns


def find_champion_patterns(stakeholders: list[dict]) -> list[str]:
    patterns = []
    for s in stakeholders:
        hits = [h for h in s["projectHistory"] if h["stakeholderType"] in _CHAMPION_TYPES]
        if len(hits) >= PATTERN_THRESHOLD:
            patterns.append(
                f"{s['name']} has been a champion/early adopter in {len(hits)} projects"
                " - consider leveraging them"
            )
    return patterns


def find_org_hierarchy_patterns(stakeholders: list[dict]) -> list[str]:
    """One-hop facts around the ``is_me`` profile: department peers, reports, manager."""
    me = next((s for s in stakeholders if s["is_me"]), None)
    if me is None:
        return []

    patterns = []
    peers = [
        s for s in stakeholders
        if not s["is_me"] and s["department"] and s["department"] == me["department"]
    ]
    if peers:
        patterns.append(f"{len(peers)} stakeholder(s) in your department ({me['department']})")

    reports = [s for s in stakeholders if s["reports_to_id"] == me["id"]]
    if reports:
        patterns.append(f"Your direct reports: {', '.join(s['name'] for s in reports)}")

    if me["reports_to_name"]:
        patterns.append(f"Your manager: {me['reports_to_name']}")

    return patterns


# ── Entry point ──────────────────────────────────────────────────────────────


def build_cross_project_context(
    projects: list[dict],
    stakeholders: list[dict],
    project_stakeholders: list[dict],
    project_groups: list[dict],
    groups: list[dict],
) -> dict:
    """Assemble ``{projects, stakeholders, groups, insights}`` for one owner.

    Args:
        projects: ``{id, name, status, ...}`` rows.
        stakeholders: directory rows; ``group`` may hold ``{id, name, color}``.
        project_stakeholders: per-project score rows for those people.
        project_groups: per-project group score rows.
        groups: ``{id, name, description, color}`` rows.
    """
    project_map = {p["id"]: p for p in projects}
    group_map = {g["id"]: g for g in groups}

    s_history = _stakeholder_history(project_map, project_stakeholders)
    g_history = _group_history(project_map, group_map, project_groups)

    formatted = []
    for gs in stakeholders:
        group = gs.get("group")
        formatted.append({
            "id": gs["id"],
            "name": gs.get("name"),
            "email": gs.get("email"),
            "role": gs.get("role"),
            "title": gs.get("title"),
            "department": gs.get("department"),
            "notes": gs.get("notes"),
            "org_level": gs.get("org_level") or None,
            "reports_to_id": gs.get("reports_to_id") or None,
            "is_me": bool(gs.get("is_me")),
            "group": {
                "id": group.get("id"),
                "name": group.get("name"),
                "color": group.get("color"),
            } if group else None,
            "projectHistory": s_history.get(gs["id"], []),
        })

    names = {s["id"]: s["name"] for s in formatted}
    for s in formatted:
        s["reports_to_name"] = names.get(s["reports_to_id"]) if s["reports_to_id"] else None

    formatted_groups = [
        {
            "id": g["id"],
            "name": g.get("name"),
            "description": g.get("description"),
            "color": g.get("color"),
            "memberCount": sum(
                1 for s in formatted if s["group"] and s["group"]["id"] == g["id"]
            ),
            "projectHistory": g_history.get(g["id"], []),
        }
        for g in groups
    ]

    me_profile = next((s for s in formatted if s["is_me"]), None)
    insights = {
        "totalProjects": len(projects),
        "activeProjects": sum(1 for p in projects if p.get("status") == "active"),
        "totalStakeholders": len(formatted),
        "totalGroups": len(formatted_groups),
        "resistantPatterns": find_resistance_patterns(formatted, formatted_groups),
        "championPatterns": find_champion_patterns(formatted),
        "orgHierarchyPatterns": find_org_hierarchy_patterns(formatted),
        "meProfile": me_profile,
    }

    return {
        "projects": projects,
        "stakeholders": formatted,
        "groups": formatted_groups,
        "insights": insights,
    }


def render_context_prompt(context: dict, project: dict | None = None) -> str:
    """Flatten a built context into the text block placed in the chat system prompt."""
    insights = context["insights"]
    lines = [
        f"The user manages {insights['totalProjects']} change project(s), "
        f"{insights['activeProjects']} active, with {insights['totalStakeholders']} "
        f"stakeholder(s) in {insights['totalGroups']} group(s).",
    ]

    me = insights.get("meProfile")
    if me:
        who = me["name"]
        if me.get("title") or me.get("role"):
            who += f" ({me.get('title') or me.get('role')})"
        lines.append(f"The user is {who}.")

    if project:
        lines.append(f"Current project: {project.get('name')} (status: {project.get('status')}).")
        current = [
            s for s in context["stakeholders"]
            if any(h["projectId"] == project.get("id") for h in s["projectHistory"])
        ]
        for s in current:
            entry = next(h for h in s["projectHistory"] if h["projectId"] == project.get("id"))
            scores = ", ".join(f"{k} {v}" for k, v in entry["adkarScores"].items())
            lines.append(
                f"- {s['name']} [{entry['stakeholderType'] or 'unknown'}], "
                f"engagement {entry['engagementScore']}, ADKAR: {scores}"
            )

    for title, key in (
        ("Resistance patterns", "resistantPatterns"),
        ("Champion patterns", "championPatterns"),
        ("Org structure", "orgHierarchyPatterns"),
    ):
        if insights[key]:
            lines.append(f"{title}:")
            lines.extend(f"- {p}" for p in insights[key])

    return "\n".join(lines)
