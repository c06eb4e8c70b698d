from .client import CongressClient  # re-export public class
from .config import ClientConfig
from .envelope import Envelope, PaginationInfo, RequestDescriptor
from .errors import CongressApiError, ConfigError, ErrorKind
from .models import (Bill, Committee, Hearing, HearingFormat, Member,
                     MemberRole, Nomination, Subcommittee)
from .pagination import (fetch_next, fetch_previous, has_next, has_previous,
                         iter_items, iter_pages)

__all__ = [
    "CongressClient",
    "ClientConfig",
    "CongressApiError",
    "ConfigError",
    "ErrorKind",
    "Envelope",
    "PaginationInfo",
    "RequestDescriptor",
    "fetch_next",
    "fetch_previous",
    "has_next",
    "has_previous",
    "iter_items",
    "iter_pages",
    "Bill",
    "Committee",
    "Hearing",
    "HearingFormat",
    "Member",
    "MemberRole",
    "Nomination",
    "Subcommittee",
]
