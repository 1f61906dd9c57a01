"""Cache key encoding.

Two key shapes address records in the store:

* a bare string -- a game's domain slug such as ``skyrimspecialedition``,
  or a fixed sentinel such as ``tracked`` or ``endorsements``;
* a :class:`CompoundKey` of ``(domain_name, mod_id)``, encoded as
  ``"{domain_name}/{mod_id}"``.

Compound keys share their game's prefix (``"skyrimspecialedition/"``), which
is what lets :meth:`~modcache.store.CacheStore.iter_prefix` list every
cached mod for one game. Domain slugs are assumed never to contain ``/``;
this is not enforced.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

SEPARATOR = "/"


@dataclass(frozen=True)
class CompoundKey:
    """A key made of a game's domain slug and a numeric mod id."""

    domain_name: str
    mod_id: int

    def __str__(self) -> str:
        return f"{self.domain_name}{SEPARATOR}{self.mod_id}"

    @classmethod
    def parse(cls, text: str) -> "CompoundKey":
        """Parse an encoded ``"{domain_name}/{mod_id}"`` key.

        The split happens on the last separator, so the id is always the
        trailing segment.

        Raises:
            ValueError: If *text* has no separator or the id is not an integer.
        """
        domain, sep, raw_id = text.rpartition(SEPARATOR)
        if not sep or not domain:
            raise ValueError(f"Not a compound key: {text!r}")
        return cls(domain, int(raw_id))


CacheKey = Union[str, CompoundKey]


def encode_key(key: CacheKey) -> str:
    """Serialise *key* to the string used as its storage address."""
    return str(key)


def game_prefix(domain_name: str) -> str:
    """Return the prefix shared by every compound key for *domain_name*."""
    return f"{domain_name}{SEPARATOR}"
