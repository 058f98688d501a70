from __future__ import annotations

import hashlib

from dice_or_die.core.summary import RunSummary


ENDING_LINES = {
    "bribed_everything": [
        "Not a single boss felt your dice. Every one of them felt your wallet.",
        "You bought your way through the realm, one sealed purse at a time.",
        "The Dark God Cat counts your coins and lets you pass with a yawn.",
    ],
    "fought_everything": [
        "Every boss fell to the roll of your dice.",
        "No bribes, no shortcuts. The bag never left your hand.",
        "The realm remembers a challenger who paid in pips, not gold.",
    ],
    "perfect_fighter": [
        "Each boss dropped to the exact last point. The dice obeyed you.",
        "Not one wasted pip. Legends will argue whether it was luck.",
    ],
    "mixed": [
        "Some bosses you fought, some you paid. The road is the road.",
        "Dice when they rolled well, coins when they did not.",
        "A practical hero: half blade, half bribe.",
    ],
    "none": [
        "The realm is quiet. Nobody stood in your way.",
    ],
    "fallen": [
        "The dice ran dry and the boss did not.",
        "Your bag emptied one throw too early.",
        "The board keeps turning without you.",
    ],
    "aborted": [
        "The road ahead simply ended. There was nowhere left to go.",
    ],
    "in_progress": [
        "The dice are still warm. Keep rolling.",
    ],
}


def _pick(options: list[str], seed: int | str, channel: str) -> str:
    if not options:
        return ""
    token = f"{seed}:{channel}".encode("utf-8")
    digest = hashlib.sha256(token).hexdigest()
    idx = int(digest[:8], 16) % len(options)
    return options[idx]


def ending_line(summary: RunSummary) -> str:
    options = ENDING_LINES.get(summary.ending_tag, ENDING_LINES["in_progress"])
    return _pick(options, summary.seed, summary.ending_tag)
