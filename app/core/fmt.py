from __future__ import annotations

CURRENCY_SYMBOLS = {"inr": "₹", "usd": "$"}


def _trim_decimals(value: float, digits: int = 2) -> tuple[str, str]:
    """Split a rounded value into integer and (trailing-zero-free) fractional parts."""
    text = f"{value:.{digits}f}"
    whole, _, frac = text.partition(".")
    return whole, frac.rstrip("0")


def group_indian(value: float) -> str:
    """12,34,567.89 style grouping: last three digits, then pairs."""
    whole, frac = _trim_decimals(abs(value))
    head, tail = whole[:-3], whole[-3:]
    groups: list[str] = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    grouped = ",".join(groups + [tail]) if groups else tail
    sign = "-" if value < 0 else ""
    return f"{sign}{grouped}.{frac}" if frac else f"{sign}{grouped}"


def group_western(value: float) -> str:
    whole, frac = _trim_decimals(abs(value))
    grouped = f"{int(whole):,}"
    sign = "-" if value < 0 else ""
    return f"{sign}{grouped}.{frac}" if frac else f"{sign}{grouped}"


def fmt_inr(v: float | None) -> str:
    """₹1.23T, ₹4.56B, ₹7.89Cr, ₹1.20L, ₹99,999.5, ₹0.000123"""
    if v is None:
        return "N/A"
    v = float(v)
    if v >= 1e12:
        return f"₹{v / 1e12:.2f}T"
    if v >= 1e9:
        return f"₹{v / 1e9:.2f}B"
    if v >= 1e7:
        return f"₹{v / 1e7:.2f}Cr"
    if v >= 1e5:
        return f"₹{v / 1e5:.2f}L"
    if v >= 1:
        return f"₹{group_indian(v)}"
    return f"₹{v:.6f}"


def fmt_usd(v: float | None) -> str:
    if v is None:
        return "N/A"
    v = float(v)
    if v >= 1e12:
        return f"${v / 1e12:.2f}T"
    if v >= 1e9:
        return f"${v / 1e9:.2f}B"
    if v >= 1e6:
        return f"${v / 1e6:.2f}M"
    if v >= 1:
        return f"${group_western(v)}"
    return f"${v:.6f}"


def fmt_money(v: float | None, currency: str = "inr") -> str:
    if currency.lower() == "usd":
        return fmt_usd(v)
    return fmt_inr(v)


def fmt_pct(v: float | None) -> str:
    if v is None:
        return "N/A"
    v = float(v)
    sign = "+" if v >= 0 else ""
    return f"{sign}{v:.2f}%"


def fmt_supply(v: float | None, fallback: str = "N/A") -> str:
    if v is None:
        return fallback
    return group_western(float(v))
