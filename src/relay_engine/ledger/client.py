"""Sui JSON-RPC client

Thin wrapper over the full node JSON-RPC API. Transport failures, HTTP error
statuses (including rate limiting) and JSON-RPC errors are all raised as
``LedgerError`` so callers deal with a single failure type.
"""

import itertools
import logging
from typing import Any, Dict, List, Optional

import httpx

from ..errors import LedgerError
from .models import EventPage

logger = logging.getLogger(__name__)


class SuiClient:
    """JSON-RPC client for one full node"""

    def __init__(self, url: str, timeout: Optional[float] = 30.0,
                 transport: Optional[httpx.BaseTransport] = None):
        self.url = url
        self._ids = itertools.count(1)
        self._http = httpx.Client(timeout=timeout, transport=transport)

    def close(self) -> None:
        self._http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def call(self, method: str, params: List[Any]) -> Any:
        """Invoke a JSON-RPC method and return its ``result``

        Raises:
            LedgerError: transport error, non-2xx status or RPC error
        """
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        try:
            response = self._http.post(self.url, json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            raise LedgerError(
                f"{method} failed with HTTP {e.response.status_code}",
                code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise LedgerError(f"{method} failed: {e}") from e
        except ValueError as e:
            raise LedgerError(f"{method} returned invalid JSON: {e}") from e

        if body.get("error"):
            error = body["error"]
            raise LedgerError(
                f"{method} failed: {error.get('message', error)}",
                code=error.get("code"),
            )
        return body.get("result")

    # ===================== Queries =====================

    def query_events(self, query: Dict[str, Any], cursor: Optional[Dict[str, str]] = None,
                     limit: Optional[int] = None, descending: bool = False) -> EventPage:
        """List events matching a filter, starting after ``cursor``"""
        result = self.call("suix_queryEvents", [query, cursor, limit, descending])
        return EventPage.model_validate(result or {})

    def get_dynamic_field_object(self, parent_id: str, name_type: str,
                                 name_value: Any) -> Optional[Dict[str, Any]]:
        """Fetch a dynamic field object, ``None`` if the field does not exist"""
        result = self.call(
            "suix_getDynamicFieldObject",
            [parent_id, {"type": name_type, "value": name_value}],
        )
        if not result or not result.get("data"):
            return None
        return result["data"]

    # ===================== Transactions =====================

    def unsafe_move_call(self, signer: str, package_id: str, module: str, function: str,
                         type_arguments: List[str], arguments: List[Any],
                         gas_budget: int, gas: Optional[str] = None) -> str:
        """Have the full node build a Move call transaction

        Returns:
            base64 transaction bytes, ready to be signed
        """
        result = self.call(
            "unsafe_moveCall",
            [signer, package_id, module, function, type_arguments, arguments,
             gas, str(gas_budget)],
        )
        try:
            return result["txBytes"]
        except (KeyError, TypeError) as e:
            raise LedgerError(f"unsafe_moveCall returned no transaction bytes: {result}") from e

    def execute_transaction_block(self, tx_bytes: str, signatures: List[str],
                                  options: Optional[Dict[str, bool]] = None,
                                  request_type: str = "WaitForLocalExecution") -> Dict[str, Any]:
        """Submit a signed transaction"""
        return self.call(
            "sui_executeTransactionBlock",
            [tx_bytes, signatures, options or {}, request_type],
        )


def fullnode_client(settings) -> SuiClient:
    """Build a client from ``LedgerSettings``"""
    return SuiClient(settings.fullnode_url(), timeout=settings.request_timeout)
