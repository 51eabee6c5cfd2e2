import asyncio
import base64
import json
import logging
from typing import Any, Dict, List, Optional

import aiohttp

from ..core.exceptions import NetworkError, RemoteError


def describe_rpc_error(error: Any) -> str:
    """Human readable message for a JSON-RPC error object"""
    if not isinstance(error, dict):
        return str(error)
    cause = error.get("cause")
    name = cause.get("name") if isinstance(cause, dict) else None
    name = name or error.get("name") or "RPC_ERROR"
    detail = error.get("data") or error.get("message") or ""
    if isinstance(detail, (dict, list)):
        detail = json.dumps(detail)
    return f"{name}: {detail}" if detail else name


class NearRpcClient:
    """
    Read-side JSON-RPC client for a NEAR node.

    Transport problems surface as NetworkError, errors reported by the node
    as RemoteError carrying the node's error object.
    """

    def __init__(self, node_url: str, timeout: float = 10.0,
                 session: Optional[aiohttp.ClientSession] = None):
        self.node_url = node_url
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None
        self._request_id = 0
        self.logger = logging.getLogger(f"{__name__}.NearRpcClient")

    async def __aenter__(self) -> 'NearRpcClient':
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
        return self._session

    async def close(self):
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None

    async def request(self, method: str, params: Any) -> Any:
        """Send one JSON-RPC request and return its ``result``"""
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": f"cardstore-{self._request_id}",
            "method": method,
            "params": params,
        }
        self.logger.debug(f"RPC {method} -> {self.node_url}")

        try:
            async with self._get_session().post(self.node_url, json=payload) as response:
                try:
                    body = await response.json(content_type=None)
                except (aiohttp.ContentTypeError, json.JSONDecodeError, ValueError):
                    body = None
                status = response.status
        except asyncio.TimeoutError as e:
            raise NetworkError(
                f"RPC {method} timed out after {self.timeout}s",
                context={"node_url": self.node_url, "method": method},
            ) from e
        except aiohttp.ClientError as e:
            raise NetworkError(
                f"RPC {method} failed: {e}",
                context={"node_url": self.node_url, "method": method},
            ) from e

        if not isinstance(body, dict):
            raise NetworkError(
                f"RPC {method} returned an unreadable response (HTTP {status})",
                context={"node_url": self.node_url, "method": method, "status": status},
            )

        if body.get("error") is not None:
            error = body["error"]
            raise RemoteError(describe_rpc_error(error), payload=error,
                              context={"method": method})

        result = body.get("result")
        # Some query failures come back as a successful envelope with an error field
        if isinstance(result, dict) and isinstance(result.get("error"), str):
            raise RemoteError(result["error"], payload=result, context={"method": method})
        return result

    async def query(self, request_type: str, finality: str = "final", **params) -> Dict[str, Any]:
        return await self.request("query", {"request_type": request_type, "finality": finality, **params})

    async def view_account(self, account_id: str) -> Dict[str, Any]:
        return await self.query("view_account", account_id=account_id)

    async def view_access_keys(self, account_id: str) -> List[Dict[str, Any]]:
        result = await self.query("view_access_key_list", account_id=account_id)
        return result.get("keys", [])

    async def view_function(self, contract_id: str, method_name: str,
                            args: Optional[Dict[str, Any]] = None) -> Any:
        """Call a read-only contract method; JSON results are decoded"""
        encoded = base64.b64encode(json.dumps(args or {}).encode("utf-8")).decode("ascii")
        result = await self.query(
            "call_function",
            account_id=contract_id,
            method_name=method_name,
            args_base64=encoded,
        )
        raw = bytes(result.get("result", []))
        if not raw:
            return None
        try:
            return json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            return raw

    async def protocol_config(self, finality: str = "final") -> Dict[str, Any]:
        return await self.request("EXPERIMENTAL_protocol_config", {"finality": finality})

    async def status(self) -> Dict[str, Any]:
        return await self.request("status", [])
