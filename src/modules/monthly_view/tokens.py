"""Sequence tokens used to drop results of superseded async calls."""

from dataclasses import dataclass
from itertools import count


@dataclass(frozen=True)
class RequestToken:
    kind: str
    seq: int
    month: str


class RequestTokens:
    """
    Issues monotonically increasing tokens per operation kind.

    A result is current when its month is still the view's month and, for
    kinds where only the newest call matters, when its seq is the latest
    issued for that kind.
    """

    def __init__(self) -> None:
        self._counter = count(1)
        self._latest: dict[str, int] = {}
        self._in_flight: dict[str, set[int]] = {}

    def issue(self, kind: str, month: str) -> RequestToken:
        token = RequestToken(kind=kind, seq=next(self._counter), month=month)
        self._latest[kind] = token.seq
        self._in_flight.setdefault(kind, set()).add(token.seq)
        return token

    def finish(self, token: RequestToken) -> None:
        self._in_flight.get(token.kind, set()).discard(token.seq)

    def is_latest(self, token: RequestToken) -> bool:
        return self._latest.get(token.kind) == token.seq

    def is_current(self, token: RequestToken, month: str, latest_only: bool = True) -> bool:
        if token.month != month:
            return False
        return self.is_latest(token) if latest_only else True

    def busy(self, kind: str) -> bool:
        return bool(self._in_flight.get(kind))
