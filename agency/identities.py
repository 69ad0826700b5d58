"""Agent identity registry: agent id -> immutable display descriptor."""

from dataclasses import dataclass

FALLBACK_EMOJI = "🤖"


@dataclass(frozen=True)
class AgentIdentity:
    id: str
    name: str
    emoji: str = FALLBACK_EMOJI
    role: str = "Unknown"
    personality: str = ""
    skills: str = ""


AGENT_IDENTITIES: dict[str, AgentIdentity] = {
    identity.id: identity
    for identity in (
        AgentIdentity("henry", "Henry", "🦉", "Team Lead", "Wise, strategic facilitator",
                      "planning, coordination, team management"),
        AgentIdentity("scout", "Scout", "🔍", "Researcher", "Curious, detail-oriented",
                      "monitoring, analysis, QA testing"),
        AgentIdentity("pixel", "Pixel", "🎨", "Creative", "Visual, enthusiastic",
                      "design, aesthetics, UI/UX"),
        AgentIdentity("echo", "Echo", "💾", "Memory", "Reliable, organized",
                      "state management, logs, archiving"),
        AgentIdentity("quill", "Quill", "✍️", "Copywriter", "Wordsmith, storyteller",
                      "writing, documentation, editing"),
        AgentIdentity("codex", "Codex", "🏗️", "Architect", "Systematic, big-picture thinker",
                      "systems design, architecture, strategy"),
        AgentIdentity("alex", "Alex", "🛡️", "Security Lead", "Vigilant, protective, uncompromising",
                      "security, compliance, oversight, policy enforcement"),
        AgentIdentity("vega", "Vega", "📊", "Data Analyst", "Data-driven, analytical",
                      "metrics, analytics, reporting, visualization"),
    )
}

# Agents seeded into a fresh usage baseline.
TRACKED_AGENTS = ("henry", "scout", "pixel", "echo", "quill", "codex", "alex")


def find_identity(agent_id: str) -> AgentIdentity | None:
    return AGENT_IDENTITIES.get(agent_id.lower())


def get_identity(agent_id: str) -> AgentIdentity:
    """Return the registered identity, falling back to a generic descriptor."""
    return find_identity(agent_id) or AgentIdentity(id=agent_id.lower(), name=agent_id)
