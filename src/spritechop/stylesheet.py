"""Parsing of pokesprite-style stylesheets.

Only single-line rules of this shape are recognised, everything else in the
file is ignored::

    .pkicon.pkicon-025.form-cap.game-family-legends_arceus.color-shiny { width: 21px; height: 20px; background-position: -67px -56px; }
    .pkicon.pkicon-ball-love { width: 18px; height: 18px; background-position: 0px 0px; }
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .models import ResolvedIdentity, StyleRule

RULE_RE = re.compile(
    r"\.pkicon\.pkicon-(?P<selector>[^\s{]+)"
    r"\s*\{\s*width:\s*(?P<width>\d+)px;"
    r"\s*height:\s*(?P<height>\d+)px;"
    r"\s*background-position:\s*(?P<x>-?\d+)px\s+(?P<y>-?\d+)px;"
    r"\s*\}"
)

FORM_PREFIX = "form-"
GAME_FAMILY_PREFIX = "game-family-"
COLOR_PREFIX = "color-"


@dataclass(frozen=True)
class SpritePosition:
    width: int
    height: int
    background_position: str


def parse_line(line: str) -> Optional[StyleRule]:
    match = RULE_RE.search(line)
    if match is None:
        return None

    token = ""
    modifiers = {"form": None, "game_family": None, "color": None}
    for segment in match.group("selector").split("."):
        if segment.startswith(GAME_FAMILY_PREFIX):
            modifiers["game_family"] = segment[len(GAME_FAMILY_PREFIX):] or None
        elif segment.startswith(FORM_PREFIX):
            modifiers["form"] = segment[len(FORM_PREFIX):] or None
        elif segment.startswith(COLOR_PREFIX):
            modifiers["color"] = segment[len(COLOR_PREFIX):] or None
        elif segment:
            token = segment

    if not token:
        return None

    return StyleRule(
        token=token,
        width=int(match.group("width")),
        height=int(match.group("height")),
        offset_x=int(match.group("x")),
        offset_y=int(match.group("y")),
        **modifiers
    )


def parse_stylesheet(text: str) -> List[StyleRule]:
    rules = []
    for line in text.splitlines():
        rule = parse_line(line)
        if rule is not None:
            rules.append(rule)
    return rules


def identity_for_rule(rule: StyleRule) -> ResolvedIdentity:
    return ResolvedIdentity(
        base_token=rule.token,
        form=rule.form,
        game_family=rule.game_family,
        shiny=rule.shiny,
    )


def position_key(rule: StyleRule) -> Optional[str]:
    """Key used by the web position table, e.g. ``pokemon-25-cap-legends_arceus-shiny``.

    Only numeric tokens have a key.
    """
    if not rule.token.isdigit():
        return None

    key = f"pokemon-{int(rule.token)}"
    if rule.form is not None:
        key += f"-{rule.form}"
    if rule.game_family is not None:
        key += f"-{rule.game_family}"
    if rule.shiny:
        key += "-shiny"
    return key


def extract_positions(text: str) -> Tuple[Dict[str, SpritePosition], List[str]]:
    """Map position keys to sprite positions, plus keys in first-seen order.

    A later rule for the same key replaces the position but not its place in
    the order.
    """
    positions: Dict[str, SpritePosition] = {}
    order: List[str] = []

    for rule in parse_stylesheet(text):
        key = position_key(rule)
        if key is None:
            continue
        if key not in positions:
            order.append(key)
        positions[key] = SpritePosition(
            width=rule.width,
            height=rule.height,
            background_position=f"{rule.offset_x}px {rule.offset_y}px",
        )

    return positions, order
