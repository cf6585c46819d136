"""Output filenames for extracted sprites.

Suffix order is part of the output contract: ``<base>[-shiny][-suffix][-gameFamily][-form].png``.
Stylesheet identities never carry a sheet suffix and grid identities never
carry shiny/game family, so in practice stylesheet sprites are named
``shiny, gameFamily, form`` and grid sprites ``suffix, form``.
"""

from typing import Dict

from .models import Emit, ResolvedIdentity

EXTENSION = ".png"

# Icons whose names don't follow the generic pattern
SPECIAL_FILENAMES: Dict[str, str] = {
    "ball-love": "love-ball.png",
}


def sprite_filename(identity: ResolvedIdentity) -> str:
    if not identity.base_token:
        raise ValueError("Cannot name a sprite without a base token")

    special = SPECIAL_FILENAMES.get(identity.base_token)
    if special is not None:
        return special

    name = identity.base_token
    if identity.shiny:
        name += "-shiny"
    for part in (identity.suffix, identity.game_family, identity.form):
        if part is not None:
            name += f"-{part}"
    return name + EXTENSION


def grid_identity(entry: Emit, suffix=None) -> ResolvedIdentity:
    return ResolvedIdentity(base_token=f"{entry.id:03d}", suffix=suffix, form=entry.form)
