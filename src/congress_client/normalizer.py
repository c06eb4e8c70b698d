"""
Maps raw dispatcher outcomes onto Envelopes or CongressApiErrors.

Everything here is a pure function of its inputs so it can be exercised with
literal fixture payloads. Classification lives here and nowhere else: the retry
engine asks ``classify`` whether a failure is retryable, and the same error
object is what the caller eventually receives.
"""
from __future__ import annotations

import email.utils as eut
import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Union
from urllib.parse import parse_qsl, urlparse
from xml.parsers.expat import ExpatError

import xmltodict

from .dispatcher import RawFailure, RawOutcome, RawResponse
from .envelope import Envelope, PaginationInfo, RequestDescriptor
from .errors import CongressApiError, ErrorKind

META_KEYS = ("pagination", "request")
# forced again at dispatch, never carried inside a descriptor
LINK_PARAMS_DROPPED = frozenset({"api_key", "format"})
REQUEST_ID_HEADERS = ("X-Api-Umbrella-Request-Id", "X-Request-Id")

GENERIC_DETAIL = {
    400: "Bad request",
    401: "Missing or invalid API key",
    403: "API key is not authorized for this resource",
    404: "Resource not found",
    422: "Request parameters failed validation",
    429: "Rate limit exceeded",
    500: "Internal server error",
    502: "Bad gateway",
    503: "Service unavailable",
    504: "Gateway timeout",
}


def parse_retry_after(value: Optional[str]) -> float:
    """Return seconds to sleep from a Retry-After header (seconds or HTTP-date)."""
    if not value:
        return 0.0
    try:
        return max(0.0, float(value))
    except ValueError:
        try:
            dt = eut.parsedate_to_datetime(value)
        except (TypeError, ValueError):
            return 0.0
        if dt is None:
            return 0.0
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return max(0.0, (dt - datetime.now(timezone.utc)).total_seconds())


def parse_body(text: str) -> Any:
    """
    Parse a Congress.gov payload that may be JSON or XML.
    Try JSON first, then XML via xmltodict; return plain dicts/lists.
    Raises ValueError when the body is neither.
    """
    if not text or not text.strip():
        return None
    try:
        return json.loads(text)
    except ValueError:
        pass

    if not text.lstrip().startswith("<"):
        raise ValueError("Body is neither JSON nor XML")
    try:
        parsed = xmltodict.parse(text)
    except ExpatError as e:
        raise ValueError(f"Body is neither JSON nor XML: {e}") from e
    # plain dicts instead of xmltodict's mapping types
    parsed = json.loads(json.dumps(parsed))
    if isinstance(parsed, dict) and isinstance(parsed.get("root"), dict):
        return parsed["root"]
    return parsed


def extract_items(block: Any) -> list:
    """
    Normalize Congress.gov list payloads:
    - {"item": [...]} -> [...]
    - {"item": {...}} -> [{...}]
    - [...]            -> [...]
    - {"items": [...]} -> [...]
    - {"items": {...}} -> [{...}]
    - None/other       -> []
    """
    if block is None:
        return []
    if isinstance(block, list):
        return block
    if isinstance(block, dict):
        for key in ("item", "items"):
            inner = block.get(key)
            if isinstance(inner, list):
                return inner
            if isinstance(inner, dict):
                return [inner]
    return []


def _header(headers: Mapping[str, str], name: str) -> Optional[str]:
    lowered = name.lower()
    for k, v in headers.items():
        if k.lower() == lowered:
            return v
    return None


def _coerce(value: str) -> Union[str, int]:
    # "0012" stays a string so identifiers with leading zeros survive
    if value.isdigit() and (value == "0" or not value.startswith("0")):
        return int(value)
    return value


def parse_link(link: str, base_url: str) -> RequestDescriptor:
    """
    Turn a pagination link into a descriptor relative to ``base_url``.

    ``https://api.congress.gov/v3/bill?offset=250&limit=250&format=json`` with
    base ``https://api.congress.gov/v3`` becomes ``("bill", {"offset": 250,
    "limit": 250})``.
    """
    u = urlparse(link)
    base_path = urlparse(base_url).path.rstrip("/")
    path = u.path
    if base_path and (path == base_path or path.startswith(base_path + "/")):
        path = path[len(base_path):]
    params: Dict[str, Any] = {}
    for k, v in parse_qsl(u.query, keep_blank_values=True):
        if k in LINK_PARAMS_DROPPED:
            continue
        value = _coerce(v)
        if k not in params:
            params[k] = value
        elif isinstance(params[k], list):
            params[k].append(value)
        else:
            # repeated key; requests sends list values as repeated pairs again
            params[k] = [params[k], value]
    return RequestDescriptor(path.lstrip("/"), params)


def parse_pagination(block: Any, data: Any, base_url: str) -> Optional[PaginationInfo]:
    if not isinstance(block, dict) or not block:
        return None
    try:
        count = int(block.get("count"))
    except (TypeError, ValueError):
        count = len(data) if isinstance(data, list) else 0
    nxt = block.get("next")
    prev = block.get("previous") or block.get("prev")
    return PaginationInfo(
        count=count,
        next=parse_link(nxt, base_url) if isinstance(nxt, str) and nxt else None,
        previous=parse_link(prev, base_url) if isinstance(prev, str) and prev else None,
    )


def _request_id(headers: Mapping[str, str], body: Any) -> Optional[str]:
    for name in REQUEST_ID_HEADERS:
        value = _header(headers, name)
        if value:
            return value
    if isinstance(body, dict):
        for holder in (body, body.get("error"), body.get("request")):
            if isinstance(holder, dict) and holder.get("requestId"):
                return str(holder["requestId"])
    return None


def _error_detail(body: Any) -> Optional[str]:
    if not isinstance(body, dict):
        return None
    err = body.get("error")
    if isinstance(err, dict) and err.get("message"):
        return str(err["message"])
    if isinstance(err, str) and err:
        return err
    for key in ("message", "detail"):
        if body.get(key):
            return str(body[key])
    return None


def kind_for_status(status: Optional[int]) -> ErrorKind:
    if status is None:
        return ErrorKind.NETWORK_ERROR
    if status in (401, 403):
        return ErrorKind.UNAUTHORIZED
    if status == 404:
        return ErrorKind.NOT_FOUND
    if status == 429:
        return ErrorKind.RATE_LIMITED
    if status in (400, 422):
        return ErrorKind.VALIDATION_ERROR
    if status >= 500:
        return ErrorKind.SERVER_ERROR
    return ErrorKind.UNKNOWN_ERROR


def classify(failure: RawFailure) -> CongressApiError:
    """The single mapping from a raw failure to a typed error."""
    kind = kind_for_status(failure.status)
    if kind is ErrorKind.NETWORK_ERROR:
        return CongressApiError(kind, failure.network_error or "Network error", status=None)

    try:
        body = parse_body(failure.text)
    except ValueError:
        body = None

    retryable = kind is ErrorKind.RATE_LIMITED or (
        kind is ErrorKind.SERVER_ERROR and failure.status is not None and failure.status >= 500)
    retry_after = None
    if retryable:
        retry_after = parse_retry_after(_header(failure.headers, "Retry-After")) or None

    return CongressApiError(
        kind,
        _error_detail(body) or GENERIC_DETAIL.get(failure.status, f"HTTP {failure.status}"),
        status=failure.status,
        request_id=_request_id(failure.headers, body),
        retryable=retryable,
        retry_after=retry_after,
    )


def normalize(raw: RawOutcome, *, base_url: str,
              data_key: Optional[str] = None) -> Union[Envelope[Any], CongressApiError]:
    """
    Build the success Envelope for a RawResponse, or classify a RawFailure.

    ``data_key`` names the top-level field holding the payload; when omitted
    the first field that is not ``pagination`` or ``request`` is used.
    """
    if isinstance(raw, RawFailure):
        return classify(raw)

    try:
        payload = parse_body(raw.text)
    except ValueError:
        return CongressApiError(
            ErrorKind.UNKNOWN_ERROR,
            "Response body is neither JSON nor XML",
            status=raw.status,
            request_id=_request_id(raw.headers, None),
        )

    if not isinstance(payload, dict):
        return Envelope(data=payload)

    if data_key is None or data_key not in payload:
        data_key = next((k for k in payload if k not in META_KEYS), None)
    data = payload.get(data_key) if data_key is not None else None
    meta = {k: v for k, v in payload.items() if k != data_key and k != "pagination"}

    return Envelope(
        data=data,
        pagination=parse_pagination(payload.get("pagination"), data, base_url),
        meta=meta,
        data_key=data_key,
    )


def as_collection(envelope: Envelope[Any]) -> Envelope[List[Any]]:
    """
    Make ``data`` a list: ``{"item": [...]}`` style wrappers are flattened, a
    missing or empty payload becomes ``[]`` and any other single value is wrapped as
    ``[value]``.
    """
    data = envelope.data
    if isinstance(data, list):
        return envelope
    if data is None or data == {}:
        return envelope.with_data([])
    if isinstance(data, dict) and ("item" in data or "items" in data):
        return envelope.with_data(extract_items(data))
    return envelope.with_data([data])
