"""
Number rounding and rendering for module results

Trace lines, assumptions and warnings embed numbers the way the web front-end
renders them, so every calculator goes through these helpers:
- round_to: fixed-decimal rounding, half away from zero, never returns -0
- to_fixed: fixed-decimal string with the same rounding rule
- format_number: shortest round-trip rendering (60 not 60.0, 1e-7, 1.5e+22)
"""

import json
import math
from decimal import Context, Decimal, ROUND_HALF_UP

# Wide enough to quantize any finite float without overflowing the precision
_EXACT = Context(prec=400)


def round_to(value, precision):
    """Round a finite number to `precision` decimals, half away from zero.

    The rounding works on the exact binary value, so 1.005 rounds to 1.0
    (1.005 is stored as 1.00499999...).
    """
    if value is None or not math.isfinite(value):
        return 0.0
    quantum = Decimal(1).scaleb(-precision)
    rounded = float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP, context=_EXACT))
    if rounded == 0:
        return 0.0
    return rounded


def to_fixed(value, digits):
    if not math.isfinite(value):
        return format_number(value)
    if value == 0:
        value = 0.0
    quantum = Decimal(1).scaleb(-digits)
    return format(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP, context=_EXACT), "f")


def format_number(value):
    """Render a value the way it appears in trace lines and messages."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, sort_keys=True)
    if isinstance(value, int) and abs(value) < 10 ** 21:
        return str(value)

    value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"

    sign = "-" if value < 0 else ""
    _, digit_tuple, exponent = Decimal(repr(abs(value))).normalize().as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    k = len(digits)
    n = k + exponent

    if k <= n <= 21:
        return sign + digits + "0" * (n - k)
    if 0 < n <= 21:
        return sign + digits[:n] + "." + digits[n:]
    if -6 < n <= 0:
        return sign + "0." + "0" * (-n) + digits

    e = n - 1
    exponent_text = f"e+{e}" if e >= 0 else f"e-{-e}"
    if k == 1:
        return sign + digits + exponent_text
    return sign + digits[0] + "." + digits[1:] + exponent_text


def percent_label(rate):
    """0.85 -> '85' for 'Reduktion ...: 85%' style assumptions."""
    return format_number(js_round(rate * 100))


def js_round(value):
    """Round to the nearest integer, ties toward positive infinity."""
    if not math.isfinite(value):
        return value
    return math.floor(value + 0.5)


def round_scaled(value, precision):
    """Scale, round half up to an integer and scale back.

    Used by the E1 insight overlay, which rounds on the scaled value rather
    than on the exact decimal expansion.
    """
    if value is None or not math.isfinite(value):
        return 0.0
    factor = 10 ** precision
    scaled = value * factor
    if not math.isfinite(scaled):
        return value
    rounded = js_round(scaled) / factor
    if rounded == 0:
        return 0.0
    return rounded
