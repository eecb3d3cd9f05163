"""Klever DEX contract reader - getPairInfo queries via the node REST API."""

from __future__ import annotations

import base64
import binascii
from typing import Any

import httpx
import structlog

from poolprice.graph.builder import normalize_symbol
from poolprice.models import RawPairRecord

log = structlog.get_logger(__name__)

SC_QUERY_PATH = "/v1.0/sc/query"
PAIR_INFO_FUNC = "getPairInfo"
# returnData layout: token_a, token_b, _, _, reserve_a, reserve_b, _, is_active
_MIN_RETURN_ITEMS = 8


def encode_pair_id(pair_id: int) -> list[int]:
    """Big-endian byte list for a contract argument (0 -> [0])."""
    if pair_id <= 0:
        return [0]
    return list(pair_id.to_bytes((pair_id.bit_length() + 7) // 8, "big"))


def decode_b64_int(value: str | None) -> int:
    """Base64 big-endian unsigned integer; empty or invalid input is 0."""
    if not value:
        return 0
    try:
        raw = base64.b64decode(value)
    except (binascii.Error, ValueError):
        return 0
    return int.from_bytes(raw, "big") if raw else 0


def decode_b64_str(value: str | None) -> str:
    if not value:
        return ""
    try:
        return base64.b64decode(value).decode("utf-8", errors="replace")
    except (binascii.Error, ValueError):
        return ""


def parse_pair_info(
    pair_id: int,
    payload: dict[str, Any],
    precision: dict[str, int] | None = None,
    default_precision: int = 1_000_000,
    separator: str = "-",
) -> RawPairRecord | None:
    """Turn a getPairInfo query response into a RawPairRecord. None if the query did not succeed."""
    data = payload.get("data") or {}
    if payload.get("code") != "successful" or data.get("returnCode") != "Ok":
        return None
    items = data.get("returnData") or []
    if len(items) < _MIN_RETURN_ITEMS:
        return None
    token_a = decode_b64_str(items[0])
    token_b = decode_b64_str(items[1])
    if not token_a or not token_b:
        return None
    precision = precision or {}
    prec_a = precision.get(normalize_symbol(token_a, separator), default_precision)
    prec_b = precision.get(normalize_symbol(token_b, separator), default_precision)
    return RawPairRecord(
        pair_id=pair_id,
        token_a=token_a,
        token_b=token_b,
        reserve_a=decode_b64_int(items[4]) / prec_a,
        reserve_b=decode_b64_int(items[5]) / prec_b,
        is_active=decode_b64_int(items[7]) == 1,
    )


class KleverPairSource:
    """PairSource backed by the Klever node smart-contract query endpoint."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        node_api_base: str,
        contract_address: str,
        precision: dict[str, int] | None = None,
        default_precision: int = 1_000_000,
        timeout: float = 10.0,
        separator: str = "-",
    ) -> None:
        self._client = client
        self.url = node_api_base.rstrip("/") + SC_QUERY_PATH
        self.contract_address = contract_address
        self.precision = precision or {}
        self.default_precision = default_precision
        self.timeout = timeout
        self.separator = separator

    async def fetch_pair(self, pair_id: int) -> RawPairRecord | None:
        body = {
            "scAddress": self.contract_address,
            "funcName": PAIR_INFO_FUNC,
            "arguments": [encode_pair_id(pair_id)],
        }
        try:
            resp = await self._client.post(self.url, json=body, timeout=self.timeout)
            resp.raise_for_status()
            payload = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            log.debug("pair_query_failed", pair_id=pair_id, error=str(e))
            return None
        if not isinstance(payload, dict):
            return None
        record = parse_pair_info(
            pair_id, payload, self.precision, self.default_precision, self.separator
        )
        if record is not None:
            log.debug(
                "pair_read",
                pair_id=pair_id,
                pair=f"{record.token_a}/{record.token_b}",
                reserve_a=record.reserve_a,
                reserve_b=record.reserve_b,
                active=record.is_active,
            )
        return record
