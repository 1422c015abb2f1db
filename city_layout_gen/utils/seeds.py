"""
Per-stage seeds for one city run.

Every stage draws from its own ``random.Random``, so adding draws to the
sampler leaves placement, distortion and street starts where they were.
Seeds come from blake2s rather than ``hash()``, whose string hashing is salted
per interpreter.
"""

from hashlib import blake2s

SEED_BYTES = 4
# blake2s personalisation, keeps these seeds apart from other blake2s users
PERSON = b"citylay"


def derive_seed(master: int, *path: str) -> int:
    """Unsigned seed for ``master`` and a stage path, e.g. ``("roads", "secondary")``."""
    h = blake2s(digest_size=SEED_BYTES, person=PERSON)
    h.update(str(int(master)).encode("ascii"))
    for part in path:
        h.update(b"/")
        h.update(part.encode("utf-8"))
    return int.from_bytes(h.digest(), "big")
