"""JSON phase plan parser."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from phaseguard.plan.models import PhasePlan


def parse_plan(path: Path) -> PhasePlan:
    """Parse a plan file into a validated PhasePlan model."""
    if not path.exists():
        raise FileNotFoundError(f"Plan file not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Plan is not valid JSON: {e}") from None

    if not isinstance(raw, dict):
        raise ValueError("Plan must be a JSON object")
    if not raw.get("name"):
        raise ValueError("Plan must include 'name'")
    if not isinstance(raw.get("phases", []), list):
        raise ValueError("'phases' must be a list")

    try:
        return PhasePlan.model_validate(raw)
    except ValidationError as e:
        raise ValueError(f"Invalid plan: {e}") from None
