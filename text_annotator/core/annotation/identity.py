"""
Id override requests handed to the host application.

Annotations and relations get a local id as soon as they are created. The
host may later replace it with a permanent one by calling ``apply`` on the
request it received together with the creation notice.
"""

import logging
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class IdOverride:
    """Binds an entity now, resolves its permanent id later."""

    def __init__(
        self,
        original_id: str,
        apply_fn: Callable[[str, str], Any],
        target: Optional[Any] = None,
    ):
        self.original_id = original_id
        self.target = target
        self._apply_fn = apply_fn

    def apply(self, forced_id: str):
        """Replace the local id with ``forced_id``."""
        logger.debug("Overriding id %s with %s", self.original_id, forced_id)
        return self._apply_fn(self.original_id, forced_id)

    __call__ = apply

    def __repr__(self):
        return f"IdOverride(original_id={self.original_id!r})"
