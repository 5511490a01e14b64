from __future__ import annotations

from types import TracebackType

import httpx

from taskledger.models.rollup import FinishStatus, OutputPayload, RollupRequest
from taskledger.rollup.codec import str_to_hex


class RollupClient:
    """HTTP client for the rollup server API.

    - ``POST /finish`` returns 202 when no request is pending, else the next request
    - ``POST /notice`` and ``POST /report`` carry a hex-encoded payload
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.Client(base_url=base_url, timeout=timeout)

    def __enter__(self) -> RollupClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def finish(self, status: FinishStatus) -> RollupRequest | None:
        resp = self._client.post("/finish", json={"status": status})
        if resp.status_code == 202:
            return None
        resp.raise_for_status()
        return RollupRequest.model_validate(resp.json())

    def add_notice(self, text: str) -> None:
        self._post_output("/notice", text)

    def add_report(self, text: str) -> None:
        self._post_output("/report", text)

    def _post_output(self, path: str, text: str) -> None:
        body = OutputPayload(payload=str_to_hex(text))
        resp = self._client.post(path, json=body.model_dump())
        resp.raise_for_status()


__all__ = ["RollupClient"]
