"""
System prompt templates for the maintenance assistant.

Templates are keyed by the `promptId` the browser sends. The built-in set
below can be extended or overridden with a JSON object in PROMPTS_FILE; it is
read once at startup and never reloaded.
"""
import json
import logging
from pathlib import Path

logger = logging.getLogger("maintenance-api.prompts")

DEFAULT_PROMPT = """You are a maintenance assistant for an A400M transport squadron. You answer questions about aircraft health using only the component data provided below.

## Data
- Each aircraft (flight) has a list of components.
- Each component has a status: **Good**, **Warning** or **Critical**, and usually a maintenanceDue date.
- An aircraft is **deployable** while none of its components is Critical.

## Your Behavior
- NEVER invent components, statuses or dates that are not in the provided data
- Be specific: name the component, its status and when maintenance is due
- If the data doesn't answer the question, say so
- Keep answers short and factual — a few sentences or a short list
"""

BRIEFING_PROMPT = """You are preparing a pre-mission briefing for an A400M squadron maintenance officer. Using only the provided dataset, list aircraft that are not deployable first, then aircraft with warnings and their nearest maintenance dates. Finish with a one-line readiness statement."""

TECHNICIAN_PROMPT = """You are assisting a line maintenance technician working on a single A400M. Using only the provided component data, explain the status of the components the technician asks about, what is due next, and which items block deployment. Use plain, direct language."""

SQUADRON_INSTRUCTION = (
    "When the user asks for overall or squadron-level health, provide a concise squadron-level "
    "summary first using only the provided dataset. If the user later requests per-flight details, "
    "provide them on follow-up. Keep the initial reply short and factual."
)

PROMPTS: dict[str, str] = {
    "default": DEFAULT_PROMPT,
    "briefing": BRIEFING_PROMPT,
    "technician": TECHNICIAN_PROMPT,
}


def load_prompts(path: Path | None = None) -> dict[str, str]:
    """Built-in templates merged with the optional JSON file at `path`."""
    prompts = dict(PROMPTS)
    if path is None:
        return prompts
    try:
        with open(path, encoding="utf-8") as f:
            extra = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Could not load prompts from %s: %s", path, e)
        return prompts
    if not isinstance(extra, dict):
        logger.warning("Ignoring %s: expected a JSON object of templates", path)
        return prompts
    prompts.update({k: v for k, v in extra.items() if isinstance(v, str)})
    return prompts


def select_prompt(prompts: dict[str, str], prompt_id: str | None) -> str:
    """Template for `prompt_id`, falling back to the default (or nothing)."""
    return prompts.get(prompt_id or "") or prompts.get("default") or ""
