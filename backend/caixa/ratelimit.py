"""
In-process request rate limiting.

Requests are counted per key (client address, plus user id on authenticated
routes) in a sliding window. Each route group has a policy: auth routes,
destructive deletes, resource creation and heavy processing.
"""

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from caixa.config import Settings

AUTH = "auth"
STRICT = "strict"
MODERATE = "moderate"
HEAVY = "heavy"


@dataclass(frozen=True)
class RateLimitPolicy:
    name: str
    max_requests: int
    message: str


def build_policies(config: Settings) -> Dict[str, RateLimitPolicy]:
    return {
        AUTH: RateLimitPolicy(
            AUTH, config.rate_limit_auth,
            "Muitas tentativas de autenticação. Tente novamente em alguns minutos.",
        ),
        STRICT: RateLimitPolicy(
            STRICT, config.rate_limit_strict,
            "Limite de operações destrutivas atingido. Aguarde um minuto antes de tentar novamente.",
        ),
        MODERATE: RateLimitPolicy(
            MODERATE, config.rate_limit_moderate,
            "Limite de criação de recursos atingido. Aguarde um minuto antes de tentar novamente.",
        ),
        HEAVY: RateLimitPolicy(
            HEAVY, config.rate_limit_heavy,
            "Operação pesada limitada. Aguarde um minuto antes de processar novamente.",
        ),
    }


class RateLimiter:
    """Sliding-window counter shared by every request of one process."""

    def __init__(self, window_seconds: float = 60, clock: Callable[[], float] = time.monotonic):
        self.window = window_seconds
        self._clock = clock
        self._guard = threading.Lock()
        self._hits: Dict[str, List[float]] = {}
        self._last_sweep = clock()

    def hit(self, key: str, limit: int) -> Optional[int]:
        """
        Record one request for ``key``.

        Returns ``None`` when the request is allowed, otherwise the number of
        seconds until the oldest request in the window expires.
        """
        now = self._clock()
        window_start = now - self.window

        with self._guard:
            self._sweep(now, window_start)
            hits = [ts for ts in self._hits.get(key, ()) if ts > window_start]
            if len(hits) >= limit:
                self._hits[key] = hits
                return max(1, math.ceil(hits[0] + self.window - now))
            hits.append(now)
            self._hits[key] = hits
        return None

    def _sweep(self, now: float, window_start: float) -> None:
        # Drop idle keys once per window so the table tracks active clients only
        if now - self._last_sweep < self.window:
            return
        self._hits = {k: v for k, v in self._hits.items() if v and v[-1] > window_start}
        self._last_sweep = now
