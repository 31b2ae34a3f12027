"""Prompt templates for shot analysis.

Copyright (C) 2024 Gaggiuino MCP

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.

This program is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
GNU General Public License for more details.

You should have received a copy of the GNU General Public License
along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""

from typing import Dict, List, Optional

import mcp.types as types

ANALYZE_SHOT_CONTEXT = """You are an expert espresso analyst for a Gaggiuino-modded machine.

Use the available tools:
- get_shot: time-series curves of pressure (bar), pump flow (ml/s), weight flow (g/s), temperature (C),
  weight (g) and the profile's target curves, all indexed by time in seconds
- get_status: current temperature, pressure and selected profile
- get_profiles / select_profile: list and activate brewing profiles

**Reading the curves**:
1. Compare pressureBar and flowMlPerSec against targets.pressureBar and targets.flowMlPerSec phase by phase
2. A pressure peak far below target with high flow points to a coarse grind or channeling
3. Pressure at target with very low flow points to a fine grind (choking)
4. temperatureC drifting more than 2C from targets.temperatureC points to a thermal problem
5. Ratio = final weightG / dose; classic espresso lands around 1:2 in 25-35 seconds

Recommend one change at a time: grind first, then profile, then temperature."""


ANALYZE_SHOT = types.Prompt(
    name="analyze_shot",
    description="Analyze a pulled shot's curves and suggest what to change for the next one.",
    arguments=[
        types.PromptArgument(
            name="shot_id",
            description="Shot ID to analyze. Omit to analyze the latest shot.",
            required=False,
        ),
        types.PromptArgument(
            name="taste_notes",
            description="How the shot tasted, e.g. 'sour and thin' or 'bitter'",
            required=False,
        ),
    ],
)

PROMPTS: List[types.Prompt] = [ANALYZE_SHOT]


def _taste_hint(taste_notes: str) -> str:
    notes = taste_notes.lower()
    if any(word in notes for word in ["sour", "thin", "salty", "under"]):
        return "(likely under-extracted: look for low pressure, fast flow or a short shot)"
    if any(word in notes for word in ["bitter", "astringent", "dry", "over"]):
        return "(likely over-extracted: look for a long shot, choking or a temperature overshoot)"
    return ""


def analyze_shot_prompt(shot_id: Optional[str] = None, taste_notes: Optional[str] = None) -> types.GetPromptResult:
    """Build the analyze_shot prompt.

    Args:
        shot_id: Optional shot ID
        taste_notes: Optional tasting notes

    Returns:
        GetPromptResult with a single user message
    """
    if shot_id:
        prompt_parts = [f"Analyze shot {shot_id} (call get_shot with id={shot_id})"]
    else:
        prompt_parts = ["Analyze my latest shot (call get_shot without an id)"]

    if taste_notes:
        prompt_parts.append(f"which tasted: {taste_notes}")
        hint = _taste_hint(taste_notes)
        if hint:
            prompt_parts.append(hint)

    prompt_text = ANALYZE_SHOT_CONTEXT + "\n\n" + " ".join(prompt_parts) + "."
    prompt_text += "\n\nReport:"
    prompt_text += "\n- Shot duration and final yield"
    prompt_text += "\n- Where actual pressure/flow departed from target"
    prompt_text += "\n- The single most useful change for the next shot"

    return types.GetPromptResult(
        description=ANALYZE_SHOT.description,
        messages=[
            types.PromptMessage(
                role="user",
                content=types.TextContent(type="text", text=prompt_text),
            )
        ],
    )


def get_prompt(name: str, arguments: Optional[Dict[str, str]]) -> types.GetPromptResult:
    """Render a prompt by name."""
    arguments = arguments or {}
    if name == ANALYZE_SHOT.name:
        return analyze_shot_prompt(arguments.get("shot_id"), arguments.get("taste_notes"))
    raise ValueError(f"Unknown prompt: {name}")
