"""Value types passed between the request engine and its callers."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Generic, List, Mapping, Optional, TypeVar, Union

T = TypeVar("T")
U = TypeVar("U")

QueryValue = Optional[Union[str, int, List[Union[str, int]]]]


@dataclass(frozen=True)
class RequestDescriptor:
    """One logical remote call: a path below the base URL and its query params."""
    path: str
    params: Mapping[str, QueryValue] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "params", MappingProxyType(dict(self.params or {})))

    def __hash__(self):
        return hash((self.path, tuple(sorted((k, str(v)) for k, v in self.params.items()))))

    def with_params(self, **params: QueryValue) -> "RequestDescriptor":
        merged = dict(self.params)
        merged.update(params)
        return RequestDescriptor(self.path, merged)


@dataclass(frozen=True)
class PaginationInfo:
    count: int
    next: Optional[RequestDescriptor] = None
    previous: Optional[RequestDescriptor] = None


@dataclass(frozen=True)
class Envelope(Generic[T]):
    """
    Uniform success wrapper.

    ``data`` is the remote's primary object or collection, already unwrapped
    from the top-level key named by ``data_key``. ``meta`` holds the remaining
    top-level fields (e.g. ``request``) exactly as received.
    """
    data: T
    pagination: Optional[PaginationInfo] = None
    meta: Mapping[str, Any] = field(default_factory=dict)
    data_key: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "meta", MappingProxyType(dict(self.meta or {})))

    def with_data(self, data: U) -> "Envelope[U]":
        """Same pagination and meta around a reshaped payload."""
        return replace(self, data=data)
