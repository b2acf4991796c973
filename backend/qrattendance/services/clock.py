"""Source de temps injectée dans la session de scan (remplacée par une horloge factice en test)."""

import time
from datetime import datetime
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...

    def monotonic(self) -> float: ...


class SystemClock:
    def now(self) -> datetime:
        """Date et heure locales, utilisées pour dater les présences."""
        return datetime.now()

    def monotonic(self) -> float:
        """Secondes monotones, utilisées pour la fenêtre anti-rebond."""
        return time.monotonic()
