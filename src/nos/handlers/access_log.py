"""Access log handler — first in every pipeline, never completes."""

import logging

from nos.pipeline.context import CONTINUE, Context, Outcome

logger = logging.getLogger("nos.access")


def access_log(ctx: Context) -> Outcome:
    """Log ``access: <url>`` and defer."""
    logger.info("access: %s", ctx.request.url)
    return CONTINUE
