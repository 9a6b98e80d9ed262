from panelstore.config import settings
from panelstore.constants import FRACTION_LABELS


def money(v: float) -> str:
    return f"{v:.{settings.decimals}f} {settings.currency}"


def lf(v: float) -> str:
    return f"{v:.2f} LF"


def length_label(feet: int, inches: int, fraction: int) -> str:
    out = f"{feet}'"
    if inches > 0 or fraction > 0:
        out += f" {inches}"
        if fraction > 0:
            out += f" {FRACTION_LABELS[fraction]}"
        out += '"'
    return out
