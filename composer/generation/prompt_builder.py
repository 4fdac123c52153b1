"""Renders a request into the prompt the engine consumes.

This is the only place request text is assembled, so prompt wording changes
stay local to this module.
"""

import textwrap
from typing import Any, Dict

from ..models import Audience, RequestContext, Tone
from ..models.result import MAX_FORMALITY_SCORE, MIN_FORMALITY_SCORE

_PROMPT_TEMPLATE = textwrap.dedent("""\
    Generate a {tone} response for a {audience} audience.
    Requirements:
    - Match the tone: {tone}
    - Write for the audience: {audience}
    - Preserve key information
    - Be concise, professional and clear
    Original message:
    {message}""")


def build_prompt(message: str, context: RequestContext) -> str:
    """Render the generation prompt.

    The message is embedded exactly as given. Overlong input is left for the
    engine to reject rather than being clipped here.

    Args:
        message: Raw user text.
        context: Tone and audience of the requested response.

    Returns:
        The prompt string; identical inputs always give identical output.
    """
    return _PROMPT_TEMPLATE.format(
        tone=context.tone.value,
        audience=context.audience.value,
        message=message,
    )


def build_response_schema() -> Dict[str, Any]:
    """JSON schema for engines that support structured output."""
    return {
        "type": "object",
        "properties": {
            "tone": {"type": "string", "enum": Tone.values()},
            "audience": {"type": "string", "enum": Audience.values()},
            "text": {"type": "string"},
            "formality_score": {
                "type": "integer",
                "minimum": MIN_FORMALITY_SCORE,
                "maximum": MAX_FORMALITY_SCORE,
            },
        },
        "required": ["tone", "audience", "text", "formality_score"],
    }
