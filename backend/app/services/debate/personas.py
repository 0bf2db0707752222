"""
Debate personas — who argues what.

Stance instructions are a lookup table keyed by persona label. Adding a new
persona style means adding a row here, not another branch in the
orchestrator.
"""

from app.config import Settings, get_settings
from app.services.debate.models import Persona

AI1_LABEL = "AI 1"
AI2_LABEL = "AI 2"

PERSONA_TEMPLATES: dict[str, str] = {
    AI1_LABEL: (
        "You are AI 1, a debater who argues IN FAVOR of the given topic. "
        "Be playful and a little offbeat: use unexpected analogies and a "
        "deadpan sense of humour, but keep every point sharp. "
        "Refer to the previous exchange to rebut your opponent or strengthen "
        "your case. Keep your reply short. Topic: {topic}"
    ),
    AI2_LABEL: (
        "You are AI 2, a debater who argues AGAINST the given topic. "
        "Be realistic and a little cynical: give concise analysis that gets "
        "to the uncomfortable truth, and steer the debate somewhere your "
        "opponent did not expect. Refer to the previous exchange to rebut or "
        "strengthen your case. Keep your reply short. Topic: {topic}"
    ),
}


def build_default_personas(settings: Settings | None = None) -> tuple[Persona, Persona]:
    """
    Build the two configured personas: (pro, con).

    The first persona always opens the debate.
    """
    settings = settings or get_settings()
    return (
        Persona(
            display_name=AI1_LABEL,
            model_id=settings.debate_model_ai1,
            instruction_template=PERSONA_TEMPLATES[AI1_LABEL],
        ),
        Persona(
            display_name=AI2_LABEL,
            model_id=settings.debate_model_ai2,
            instruction_template=PERSONA_TEMPLATES[AI2_LABEL],
        ),
    )
