"""
Field sanitisers shared by every module calculator

Each helper turns one raw, optional form value into a safe number or choice
and appends a Danish warning for every correction it makes:
- missing value -> default (warned only when the record had other values)
- negative value -> 0
- above the maximum -> maximum
- unknown choice -> fallback
"""

import math

from esg_engine.calculations.formatting import format_number, js_round, round_scaled

MISSING_FIELD = "Feltet {field} mangler og behandles som 0."
NEGATIVE_FIELD = "Feltet {field} kan ikke være negativt. 0 anvendes i stedet."
MISSING_PERCENT_FIELD = "Feltet {field} mangler og behandles som 0%."
NEGATIVE_PERCENT_FIELD = "Feltet {field} kan ikke være negativt. 0% anvendes i stedet."
CAPPED_PERCENT_FIELD = "Feltet {field} er begrænset til {maximum}%."


def as_number(value):
    """Return a finite number for a raw form value, or None when unusable."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


def is_numeric_like(value):
    """True for anything a browser form would coerce to a number."""
    if value is None:
        return False
    if isinstance(value, bool):
        return True
    if isinstance(value, (int, float)):
        return not math.isnan(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return True
        try:
            return not math.isnan(float(text))
        except ValueError:
            return False
    return False


def has_any_value(raw):
    """Does the record carry at least one numeric-looking field?"""
    if not isinstance(raw, dict):
        return False
    return any(is_numeric_like(value) for value in raw.values())


def has_any_field(raw, fields):
    """Does the row set at least one of `fields` to a non-null value?"""
    if not isinstance(raw, dict):
        return False
    return any(raw.get(field) is not None for field in fields)


def section(input_data, key):
    """Module sub-record from the full input, or an empty dict."""
    if not isinstance(input_data, dict):
        return {}
    value = input_data.get(key)
    return value if isinstance(value, dict) else {}


def rows(raw, key):
    value = raw.get(key) if isinstance(raw, dict) else None
    return value if isinstance(value, list) else []


def clamp_number(value, warnings, emit_missing=True, default=0, maximum=None,
                 missing=None, negative=None, capped=None):
    """Core clamp used by every field helper.

    `missing`, `negative` and `capped` are ready-made messages; a None message
    means that correction is silent.
    """
    number = as_number(value)
    if number is None:
        if emit_missing and missing:
            warnings.append(missing)
        return default
    if number < 0:
        if negative:
            warnings.append(negative)
        return 0
    if maximum is not None and number > maximum:
        if capped:
            warnings.append(capped)
        return maximum
    return number


def field_number(raw, field, warnings, emit_missing):
    """Non-negative numeric field with the standard 'Feltet' messages."""
    return clamp_number(
        raw.get(field),
        warnings,
        emit_missing,
        missing=MISSING_FIELD.format(field=field),
        negative=NEGATIVE_FIELD.format(field=field),
    )


def field_percent(raw, field, maximum, warnings, emit_missing):
    """Percent field capped at `maximum` with the standard 'Feltet' messages."""
    return clamp_number(
        raw.get(field),
        warnings,
        emit_missing,
        maximum=maximum,
        missing=MISSING_PERCENT_FIELD.format(field=field),
        negative=NEGATIVE_PERCENT_FIELD.format(field=field),
        capped=CAPPED_PERCENT_FIELD.format(field=field, maximum=format_number(maximum)),
    )


def coerce_number(value):
    """Browser-style number coercion: '' -> 0, True -> 1, junk -> None."""
    if value is None:
        return None
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, str) and not value.strip():
        return 0
    return as_number(value)


def floor_zero(value):
    """Coerced number floored at 0, or None."""
    number = coerce_number(value)
    return None if number is None else max(0, number)


def bounded_percent(value, decimals=1):
    """Coerced percentage clamped to [0, 100] and rounded, or None."""
    number = coerce_number(value)
    if number is None:
        return None
    if number < 0:
        return 0
    if number > 100:
        return 100
    return round_scaled(number, decimals)


def coerce_boolean(value):
    if isinstance(value, bool):
        return value
    if value in ("true", "1"):
        return True
    if value in ("false", "0"):
        return False
    return None


def coerce_year(value, earliest=1900, latest=2100):
    number = coerce_number(value)
    if number is None or number < earliest or number > latest:
        return None
    return js_round(number)


def clamp_ratio(value):
    return max(0, min(1, value))


def resolve_choice(value, options, fallback):
    """Return (choice, recognised) for an enum-like field."""
    if isinstance(value, str) and value in options:
        return value, True
    return fallback, False


def text_value(value):
    """Trimmed string or None for blank/non-string values."""
    if not isinstance(value, str):
        return None
    text = value.strip()
    return text or None


def is_blank(value):
    """True when a record holds nothing but nulls, blank text and empty lists."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, dict):
        return all(is_blank(item) for item in value.values())
    if isinstance(value, list):
        return all(is_blank(item) for item in value)
    return False
