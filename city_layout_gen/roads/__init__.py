"""
Street network: the traced border graph and the L-system secondary streets.
"""

from .border_tracer import Border, BorderToTrace, BorderTracer, NoStartPointError, SplitKind, trace, trace_map
from .secondary import generate_secondary_roads

__all__ = [
    "Border",
    "BorderToTrace",
    "BorderTracer",
    "NoStartPointError",
    "SplitKind",
    "trace",
    "trace_map",
    "generate_secondary_roads",
]
