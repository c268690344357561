from __future__ import annotations

from dataclasses import dataclass

from landed_cost.services.currency import ExchangeRateSnapshot


@dataclass
class FetchError:
    code: str
    message: str


@dataclass
class ExchangeRateFetchResult:
    success: bool
    source: str
    data: ExchangeRateSnapshot | None = None
    error: FetchError | None = None
    # last good snapshot, kept for display when a refetch fails
    stale_data: ExchangeRateSnapshot | None = None

    @property
    def usable_snapshot(self) -> ExchangeRateSnapshot | None:
        if self.data is not None:
            return self.data
        if self.stale_data is not None:
            return self.stale_data.as_stale()
        return None
