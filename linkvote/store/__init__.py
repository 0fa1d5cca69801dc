"""Redis store handle and key layout.

The engine keeps no state of its own: every article, voter set, ranking view
and group lives in Redis under keys derived by ``KeySpace``. The handle is
created once with ``connect`` and passed explicitly to each component.
"""

from linkvote.store.connection import connect
from linkvote.store.keys import KeySpace
from linkvote.store.namespace import reset_namespace


__all__ = [
    "KeySpace",
    "connect",
    "reset_namespace",
]
