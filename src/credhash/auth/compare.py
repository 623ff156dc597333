# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import hmac


def constant_time_equal(a: bytes, b: bytes) -> bool:
    """Return True if ``a`` and ``b`` hold the same bytes.

    Runtime does not depend on the position of the first differing byte.
    Different lengths compare unequal.
    """
    if isinstance(a, str) or isinstance(b, str):
        raise TypeError("constant_time_equal expects bytes, not str")
    return hmac.compare_digest(bytes(a), bytes(b))
