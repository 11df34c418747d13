"""Background jobs on arq.

The worker runs periodic cleanup of sessions and invite codes.
"""

from tbsa.core.jobs.registry import close_arq_pool, enqueue, get_arq_pool, init_arq_pool


__all__ = [
    "close_arq_pool",
    "enqueue",
    "get_arq_pool",
    "init_arq_pool",
]
