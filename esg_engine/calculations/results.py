"""
Module result records

Every calculator returns a plain dict with the same five core keys
(value, unit, assumptions, trace, warnings) plus optional enrichment keys
such as metrics, tables, narratives or esrsFacts. Keys use the camelCase
names the front-end and report exporters consume.
"""

import math

from esg_engine.calculations.formatting import format_number


def build_result(value, unit, assumptions, trace, warnings, **extra):
    if value is None or not math.isfinite(value):
        value = 0
    elif value == 0:
        value = abs(value)
    result = {
        "value": value,
        "unit": unit,
        "assumptions": list(assumptions),
        "trace": list(trace),
        "warnings": list(warnings),
    }
    for key, payload in extra.items():
        if payload is not None:
            result[key] = payload
    return result


def trace_line(key, value):
    return f"{key}={format_number(value)}"


def trace_lines(pairs):
    """[('a', 1), ('b', 2.5)] -> ['a=1', 'b=2.5']"""
    return [trace_line(key, value) for key, value in pairs]
