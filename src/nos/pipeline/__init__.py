"""Request-resolution pipeline.

Handlers decide, in order, how to answer a request. Each returns
``Complete(body)`` or ``CONTINUE``; the first ``Complete`` wins.
"""

from nos.pipeline.context import CONTINUE, HTML, Complete, Context, Continue, Outcome
from nos.pipeline.engine import Pipeline
from nos.pipeline.protocol import Handler

__all__ = [
    "CONTINUE",
    "HTML",
    "Complete",
    "Context",
    "Continue",
    "Handler",
    "Outcome",
    "Pipeline",
]
