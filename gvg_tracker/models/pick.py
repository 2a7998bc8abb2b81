# gvg_tracker/models/pick.py
from pydantic import BaseModel, ConfigDict

PICK_SEPARATOR = ":"


class SkillPick(BaseModel):
    """One chosen skill option for one character on one side of a match."""

    model_config = ConfigDict(frozen=True)

    character: str  # Canonical character name
    option: str  # Skill option label, e.g. "S1"

    def __str__(self) -> str:
        return f"{self.character}{PICK_SEPARATOR}{self.option}"
