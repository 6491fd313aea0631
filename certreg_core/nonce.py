"""Transaction nonce generation.

A nonce makes every transaction header unique, so two transactions with
the same payload and signer still get distinct ids (header signatures)
and a submitted transaction cannot be replayed as a new one.

Format: <monotonic clock, ns>-<32 bits of OS randomness, hex>

The clock reading orders nonces produced by one process; the random
suffix keeps them distinct when two readings collide (coarse clocks,
separate processes). Not meant to be unguessable.
"""

from __future__ import annotations

import os
import time


def create_nonce() -> str:
    return f"{time.monotonic_ns()}-{os.urandom(4).hex()}"
