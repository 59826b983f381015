"""Lookup tables shared by the market-name helpers.

Ordered collections are tuples so that lookups that stop at the first
match always give the same answer.
"""

SPECIAL: tuple[str, ...] = ("souvenir", "stattrak")

WEARS: tuple[str, ...] = (
    "factory new",
    "minimal wear",
    "field-tested",
    "well-worn",
    "battle-scarred",
    "battle green",
    "bazooka pink",
    "blood red",
    "brick red",
    "cash green",
    "desert amber",
    "dust brown",
    "frog green",
    "jungle green",
    "monarch blue",
    "monster purple",
    "princess pink",
    "shark white",
    "swat blue",
    "tiger orange",
    "tracer yellow",
    "violent violet",
    "war pig pink",
    "wire blue",
)

FINISHES: tuple[str, ...] = ("glitter", "holo-foil", "foil", "holo", "gold", "lenticular")

WEAR_ABBREVIATIONS: dict[str, str] = {
    "stattrak": "st",
    "souvenir": "sv",
    "minimal wear": "mw",
    "factory new": "fn",
    "field-tested": "ft",
    "well-worn": "ww",
    "battle-scarred": "bs",
}

WEAPON_ABBREVIATIONS: dict[str, str] = {
    "desert eagle": "deagle",
    "dual berettas": "dualies",
    "galil ar": "galil",
    "mp5-sd": "mp5",
    "r8 revolver": "r8",
    "pp-bizon": "bizon",
    "scar-20": "scar",
    "sg 553": "sg",
    "ssg 08": "ssg",
    "usp-s": "usp",
    "m4a1-s": "m4a1",
    "glock-18": "glock",
    "xm1014": "xm",
    "ump-45": "ump",
    "zeus x27": "zeus",
    "ak-47": "ak",
    "tec-9": "tec9",
    "m9 bayonet": "m9",
    "cz-75 auto": "cz",
    "g3sg1": "g3",
    "sealed graffiti": "graffiti",
}