from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


@dataclass
class Subcommittee:
    system_code: Optional[str]
    name: Optional[str]
    raw: Dict[str, Any] = field(default_factory=dict)

@dataclass
class Committee:
    system_code: Optional[str]
    name: Optional[str]
    chamber: Optional[str]                    # present on list payloads
    committee_type: Optional[str]             # committeeTypeCode on list payloads
    parent_system_code: Optional[str] = None
    parent_name: Optional[str] = None
    subcommittees: List[Subcommittee] = field(default_factory=list)
    api_url: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)

@dataclass
class HearingFormat:
    type: Optional[str]
    url: Optional[str]


@dataclass
class Hearing:
    jacket_number: Union[int, str]  # Can be either integer or string
    title: Optional[str] = None
    congress: Optional[int] = None
    chamber: Optional[str] = None
    citation: Optional[str] = None
    committees: List[Dict[str, str]] = field(default_factory=list)  # {"name","systemCode"}
    dates: List[str] = field(default_factory=list)                  # ISO dates
    formats: List[HearingFormat] = field(default_factory=list)      # PDF/Formatted Text
    api_url: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)


@dataclass
class MemberRole:
    congress: Optional[int] = None
    chamber: Optional[str] = None
    state: Optional[str] = None
    district: Optional[str] = None
    start: Optional[str] = None
    end: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Member:
    bioguide_id: Optional[str]
    first_name: Optional[str] = None
    middle_name: Optional[str] = None
    last_name: Optional[str] = None
    full_name: Optional[str] = None
    party: Optional[str] = None
    state: Optional[str] = None
    district: Optional[str] = None  # House members only
    is_current: Optional[bool] = None
    roles: List[MemberRole] = field(default_factory=list)
    api_url: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Bill:
    congress: Optional[int]
    bill_type: Optional[str]
    bill_number: Optional[Union[int, str]]
    title: Optional[str] = None
    introduced_date: Optional[str] = None
    origin_chamber: Optional[str] = None  # "House" or "Senate"
    origin_chamber_code: Optional[str] = None  # "H" or "S"
    latest_action: Optional[str] = None
    latest_action_date: Optional[str] = None
    sponsors: List[Member] = field(default_factory=list)
    policy_area: Optional[str] = None
    cosponsors_count: Optional[int] = None
    laws: List[Dict[str, Any]] = field(default_factory=list)  # If bill became law
    update_date: Optional[str] = None
    api_url: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Nomination:
    congress: Optional[int]
    number: Optional[Union[int, str]]
    part_number: Optional[str] = None      # "00" unless the nomination was split
    citation: Optional[str] = None         # e.g. "PN1234"
    description: Optional[str] = None
    organization: Optional[str] = None
    nomination_type: Dict[str, Any] = field(default_factory=dict)  # {"isCivilian": True}
    received_date: Optional[str] = None
    latest_action: Optional[str] = None
    latest_action_date: Optional[str] = None
    nominees: List[Dict[str, Any]] = field(default_factory=list)
    update_date: Optional[str] = None
    api_url: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)
