import re
from typing import Any, Dict, Iterable, List, Optional, Union

from loguru import logger

from gvg_tracker.config.settings import settings
from gvg_tracker.models.pick import PICK_SEPARATOR, SkillPick

TEAM_KEY_SEPARATOR = "|"
PICK_SET_KEY_SEPARATOR = " + "
TEAM_SIZE = 3

_WHITESPACE_RE = re.compile(r"\s+")

# Key: lowercased title-cased name, Value: desired canonical name
CHARACTER_ALIASES: Dict[str, str] = {
    "vane": "Vanessa",
    "van": "Vanessa",
    "blk rose": "Black Rose",
    "bk rose": "Black Rose",
    "blackrose": "Black Rose",
    "yeonhee": "Yeonhee",
    "yoonhee": "Yeonhee",
    "yu-shin": "Yu Shin",
    "yushin": "Yu Shin",
    "bi-dam": "Bi Dam",
    "bidam": "Bi Dam",
    "fengyan": "Feng Yan",
    "silvesta": "Silvesta",
    "ork": "Orkah",
}

# Playable roster used for name suggestions. Names outside it are still accepted.
KNOWN_CHARACTERS: List[str] = sorted(
    [
        "Ace", "Alice", "Aragon", "Ariel", "Aris", "Asura", "Ballista", "Bane",
        "Bi Dam", "Biscuit", "Black Rose", "Catty", "Chancellor", "Chloe",
        "Cleo", "Colt", "Daisy", "Dellons", "Eileene", "Espada", "Evan", "Fai",
        "Feng Yan", "Heavenia", "Hellenia", "Hokin", "Jane", "Jave", "Jin",
        "Joker", "Jupy", "Juri", "Karin", "Karma", "Karon", "Knox", "Kris",
        "Kyle", "Kyrielle", "Lania", "Leo", "Li", "Lina", "Lucy", "May",
        "Mercure", "Nia", "Noho", "Orkah", "Orly", "Pascal", "Platin",
        "Rachel", "Rahkun", "Rei", "Rin", "Rook", "Rosie", "Rudy", "Ruri",
        "Sarah", "Sera", "Shane", "Sieg", "Silvesta", "Snipper", "Soi",
        "Spike", "Sylvia", "Taka", "Teo", "Vanessa", "Velika", "Victoria",
        "Yeonhee", "Yu Shin", "Yui", "Yuri", "Irene", "Kagura",
    ]
)


def clean_whitespace(text: Any) -> str:
    """Collapses runs of whitespace to single spaces and trims the ends."""
    if not isinstance(text, str):
        return ""
    return _WHITESPACE_RE.sub(" ", text).strip()


def unique(items: Iterable[Any]) -> List[Any]:
    """Deduplicates while keeping first-seen order."""
    return list(dict.fromkeys(items))


def parse_tags(raw: Union[str, Iterable[str], None]) -> List[str]:
    """Splits comma-separated tag input (or cleans a tag list), dropping blanks."""
    if raw is None:
        return []
    parts = raw.split(",") if isinstance(raw, str) else raw
    return unique(t for t in (clean_whitespace(p) for p in parts) if t)


def _title_case_once(text: str) -> str:
    lowered = clean_whitespace(text).lower()
    return " ".join(word.capitalize() for word in lowered.split(" ") if word)


def _title_case(text: str) -> str:
    # Some code points (e.g. "\u0149") only settle after a second pass
    titled = _title_case_once(text)
    for _ in range(4):
        again = _title_case_once(titled)
        if again == titled:
            break
        titled = again
    return titled


def normalize_character_name(raw: Any) -> str:
    """Returns the canonical display form of a character name.

    Whitespace is collapsed, every word is title-cased and the result is
    resolved through CHARACTER_ALIASES. Blank input yields an empty string,
    which callers treat as "name not provided".
    """
    titled = _title_case(raw) if isinstance(raw, str) else ""
    if not titled:
        return ""
    return CHARACTER_ALIASES.get(titled.lower(), titled)


def normalize_team(names: Optional[Iterable[Any]]) -> List[str]:
    """Normalizes every member, drops blanks and sorts by code point."""
    return sorted(n for n in (normalize_character_name(x) for x in names or []) if n)


def team_key(names: Optional[Iterable[Any]]) -> str:
    """Order-insensitive identity of a team."""
    return TEAM_KEY_SEPARATOR.join(normalize_team(names))


def is_complete_team(names: Optional[Iterable[Any]]) -> bool:
    """True when the names resolve to exactly TEAM_SIZE distinct characters."""
    team = normalize_team(names)
    return len(team) == TEAM_SIZE and len(set(team)) == TEAM_SIZE


def normalize_pick(raw: Union[str, SkillPick, Dict[str, Any], None]) -> str:
    """Normalizes a skill pick to its "Name:OPTION" string form.

    Accepts a "name:option" string, a SkillPick or a mapping with
    ``character`` and ``option`` keys. Returns "" when either part is blank.
    """
    if isinstance(raw, SkillPick):
        character, option = raw.character, raw.option
    elif isinstance(raw, dict):
        character, option = raw.get("character"), raw.get("option")
    elif isinstance(raw, str) and PICK_SEPARATOR in raw:
        character, _, option = raw.rpartition(PICK_SEPARATOR)
    else:
        return ""

    name = normalize_character_name(character)
    label = clean_whitespace(option).upper() if isinstance(option, str) else ""
    if not name or not label:
        return ""
    return f"{name}{PICK_SEPARATOR}{label}"


def normalize_picks(raw_picks: Optional[Iterable[Any]]) -> List[str]:
    """Normalizes a pick collection, dropping blanks and exact duplicates."""
    return unique(p for p in (normalize_pick(x) for x in raw_picks or []) if p)


def pick_character(pick: str) -> str:
    """Character part of a normalized "Name:OPTION" pick string."""
    return pick.rpartition(PICK_SEPARATOR)[0]


def pick_set_key(picks: Optional[Iterable[str]]) -> str:
    """Order-insensitive grouping key for a pick set."""
    return PICK_SET_KEY_SEPARATOR.join(sorted(picks or []))


def suggest_characters(text: Any, limit: Optional[int] = None) -> List[str]:
    """Roster names matching typed text: prefix matches first, then substring matches."""
    limit = limit or settings.suggestion_limit
    needle = clean_whitespace(text).lower()
    if not needle:
        return KNOWN_CHARACTERS[:limit]

    starts = [c for c in KNOWN_CHARACTERS if c.lower().startswith(needle)]
    contains = [
        c
        for c in KNOWN_CHARACTERS
        if not c.lower().startswith(needle) and needle in c.lower()
    ]
    suggestions = (starts + contains)[:limit]
    logger.debug(f"Suggestions for '{needle}': {len(suggestions)} match(es)")
    return suggestions
