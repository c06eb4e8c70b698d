"""
Typed operations over the request engine.

Each function takes the shared CongressClient explicitly, issues one request
and reshapes the Envelope's raw payload into dataclasses from ``models``. The
returned Envelope keeps the pagination descriptors, so ``next_page`` can keep
walking a typed listing.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from .client import CongressClient
from .envelope import Envelope, RequestDescriptor
from .models import (Bill, Committee, Hearing, HearingFormat, Member,
                     MemberRole, Nomination, Subcommittee)
from .normalizer import extract_items
from .pagination import fetch_next


# ------------- mapping helpers -------------
def _latest_action(d: Dict[str, Any]):
    la = d.get("latestAction") or {}
    return la.get("text"), la.get("actionDate")


def member_from_dict(m: Dict[str, Any]) -> Member:
    """Convert a member dictionary (list item, detail, or bill sponsor) to Member."""
    roles = [
        MemberRole(
            congress=t.get("congress"),
            chamber=t.get("chamber"),
            state=t.get("stateCode") or t.get("stateName"),
            district=t.get("district"),
            start=t.get("startYear"),
            end=t.get("endYear"),
            raw=t,
        )
        for t in extract_items(m.get("terms"))
    ]
    party = m.get("partyName") or m.get("party")
    if party is None:
        history = extract_items(m.get("partyHistory"))
        party = history[-1].get("partyName") if history else None
    return Member(
        bioguide_id=m.get("bioguideId"),
        first_name=m.get("firstName"),
        middle_name=m.get("middleName"),
        last_name=m.get("lastName"),
        full_name=m.get("name") or m.get("fullName") or m.get("directOrderName"),
        party=party,
        state=m.get("state"),
        district=m.get("district"),
        is_current=m.get("currentMember"),
        roles=roles,
        api_url=m.get("url"),
        raw=m,
    )


def bill_from_dict(b: Dict[str, Any]) -> Bill:
    latest_action_text, latest_action_date = _latest_action(b)

    # 'sponsors' is a list on detail payloads, older payloads carry a single 'sponsor'
    sponsors_list = extract_items(b.get("sponsors"))
    sponsors = [member_from_dict(s) for s in sponsors_list]
    sponsor_obj = b.get("sponsor")
    if sponsor_obj and sponsor_obj not in sponsors_list:
        sponsors.append(member_from_dict(sponsor_obj))

    policy_area = b.get("policyArea") or {}
    return Bill(
        congress=b.get("congress"),
        bill_type=b.get("type") or b.get("billType"),
        bill_number=b.get("number"),
        title=b.get("title"),
        introduced_date=b.get("introducedDate"),
        origin_chamber=b.get("originChamber"),
        origin_chamber_code=b.get("originChamberCode"),
        latest_action=latest_action_text,
        latest_action_date=latest_action_date,
        sponsors=sponsors,
        policy_area=policy_area.get("name"),
        cosponsors_count=(b.get("cosponsors") or {}).get("count"),
        laws=extract_items(b.get("laws")),
        update_date=b.get("updateDate"),
        api_url=b.get("url"),
        raw=b,
    )


def committee_from_dict(c: Dict[str, Any]) -> Committee:
    subs = [
        Subcommittee(system_code=sc.get("systemCode"), name=sc.get("name"), raw=sc)
        for sc in extract_items(c.get("subcommittees"))
    ]
    parent = c.get("parent") or {}
    name = c.get("name")
    if name is None:
        # detail payloads only carry names inside the history entries
        history = extract_items(c.get("history"))
        name = next((h.get("libraryOfCongressName") or h.get("officialName")
                     for h in history if h.get("startDate") and not h.get("endDate")), None)
    return Committee(
        system_code=c.get("systemCode"),
        name=name,
        chamber=c.get("chamber"),
        committee_type=c.get("committeeTypeCode") or c.get("type"),
        parent_system_code=parent.get("systemCode"),
        parent_name=parent.get("name"),
        subcommittees=subs,
        api_url=c.get("url"),
        raw=c,
    )


def nomination_from_dict(n: Dict[str, Any]) -> Nomination:
    latest_action_text, latest_action_date = _latest_action(n)
    return Nomination(
        congress=n.get("congress"),
        number=n.get("number"),
        part_number=n.get("partNumber"),
        citation=n.get("citation"),
        description=n.get("description"),
        organization=n.get("organization"),
        nomination_type=n.get("nominationType") or {},
        received_date=n.get("receivedDate"),
        latest_action=latest_action_text,
        latest_action_date=latest_action_date,
        nominees=extract_items(n.get("nominees")),
        update_date=n.get("updateDate"),
        api_url=n.get("url"),
        raw=n,
    )


def hearing_from_dict(h: Dict[str, Any]) -> Hearing:
    formats = [HearingFormat(type=f.get("type"), url=f.get("url"))
               for f in extract_items(h.get("formats"))]
    try:
        jacket_number = int(h.get("jacketNumber"))
    except (ValueError, TypeError):
        jacket_number = str(h.get("jacketNumber"))
    return Hearing(
        jacket_number=jacket_number,
        title=h.get("title"),
        congress=h.get("congress"),
        chamber=h.get("chamber"),
        citation=h.get("citation"),
        committees=[{"name": x.get("name"), "systemCode": x.get("systemCode")}
                    for x in extract_items(h.get("committees"))],
        dates=[d.get("date") for d in extract_items(h.get("dates"))],
        formats=formats,
        api_url=h.get("url"),
        raw=h,
    )


# list payload key -> item mapper, used by next_page
MAPPERS: Dict[str, Callable[[Dict[str, Any]], Any]] = {
    "bills": bill_from_dict,
    "members": member_from_dict,
    "committees": committee_from_dict,
    "nominations": nomination_from_dict,
    "hearings": hearing_from_dict,
}


async def _list(client: CongressClient, path: str, data_key: str, params: Dict[str, Any]) -> Envelope[list]:
    envelope = await client.get_collection(path, params, data_key=data_key)
    mapper = MAPPERS[data_key]
    return envelope.with_data([mapper(it) for it in envelope.data])


async def _detail(client: CongressClient, path: str, data_key: str,
                  mapper: Callable[[Dict[str, Any]], Any]) -> Envelope[Any]:
    envelope = await client.request(RequestDescriptor(path), data_key=data_key)
    return envelope.with_data(mapper(envelope.data or {}))


async def next_page(client: CongressClient, envelope: Envelope[list]) -> Envelope[list]:
    """Fetch the next page of a typed listing and map it the same way."""
    page = await fetch_next(client, envelope)
    mapper = MAPPERS.get(page.data_key or "")
    if mapper is None:
        return page
    return page.with_data([mapper(it) for it in page.data])


# ------------- bills -------------
async def list_bills(
    client: CongressClient,
    congress: Optional[int] = None,
    bill_type: Optional[str] = None,       # "hr", "s", "sjres", etc.
    *,
    offset: Optional[int] = None,
    limit: Optional[int] = None,
    from_date_time: Optional[str] = None,  # "2024-01-01T00:00:00Z"
    to_date_time: Optional[str] = None,
    sort: Optional[str] = None,            # "updateDate+asc" / "updateDate+desc"
) -> Envelope[List[Bill]]:
    if bill_type and not congress:
        raise ValueError("bill_type requires congress")
    path = "bill"
    if congress:
        path = f"bill/{congress}"
        if bill_type:
            path = f"{path}/{bill_type.lower()}"
    return await _list(client, path, "bills", {
        "offset": offset,
        "limit": limit,
        "fromDateTime": from_date_time,
        "toDateTime": to_date_time,
        "sort": sort,
    })


async def get_bill(client: CongressClient, congress: int, bill_type: str, number: int) -> Envelope[Bill]:
    return await _detail(client, f"bill/{congress}/{bill_type.lower()}/{number}", "bill", bill_from_dict)


# ------------- members -------------
async def list_members(
    client: CongressClient,
    congress: Optional[int] = None,
    state: Optional[str] = None,           # two-letter state code
    district: Optional[int] = None,
    *,
    current_member: Optional[bool] = None,
    offset: Optional[int] = None,
    limit: Optional[int] = None,
) -> Envelope[List[Member]]:
    if district is not None and not state:
        raise ValueError("district requires state")
    if congress and state and district is not None:
        path = f"member/congress/{congress}/{state.upper()}/{district}"
    elif congress:
        path = f"member/congress/{congress}"
    elif state:
        path = f"member/{state.upper()}" + (f"/{district}" if district is not None else "")
    else:
        path = "member"
    return await _list(client, path, "members", {
        "currentMember": str(current_member).lower() if isinstance(current_member, bool) else None,
        "offset": offset,
        "limit": limit,
    })


async def get_member(client: CongressClient, bioguide_id: str) -> Envelope[Member]:
    return await _detail(client, f"member/{bioguide_id}", "member", member_from_dict)


# ------------- committees -------------
async def list_committees(
    client: CongressClient,
    congress: Optional[int] = None,
    chamber: Optional[str] = None,         # "house", "senate", "joint"
    *,
    offset: Optional[int] = None,
    limit: Optional[int] = None,
) -> Envelope[List[Committee]]:
    if congress and chamber:
        path = f"committee/{congress}/{chamber.lower()}"
    elif congress:
        path = f"committee/{congress}"
    elif chamber:
        path = f"committee/{chamber.lower()}"
    else:
        path = "committee"
    return await _list(client, path, "committees", {"offset": offset, "limit": limit})


async def get_committee(client: CongressClient, chamber: str, system_code: str) -> Envelope[Committee]:
    return await _detail(client, f"committee/{chamber.lower()}/{system_code}", "committee",
                         committee_from_dict)


# ------------- nominations -------------
async def list_nominations(
    client: CongressClient,
    congress: Optional[int] = None,
    *,
    offset: Optional[int] = None,
    limit: Optional[int] = None,
) -> Envelope[List[Nomination]]:
    path = f"nomination/{congress}" if congress else "nomination"
    return await _list(client, path, "nominations", {"offset": offset, "limit": limit})


async def get_nomination(client: CongressClient, congress: int, number: int) -> Envelope[Nomination]:
    return await _detail(client, f"nomination/{congress}/{number}", "nomination", nomination_from_dict)


# ------------- hearings -------------
async def list_hearings(
    client: CongressClient,
    congress: Optional[int] = None,
    chamber: Optional[str] = None,
    *,
    offset: Optional[int] = None,
    limit: Optional[int] = None,
) -> Envelope[List[Hearing]]:
    if chamber and not congress:
        raise ValueError("chamber requires congress")
    path = "hearing"
    if congress:
        path = f"hearing/{congress}" + (f"/{chamber.lower()}" if chamber else "")
    return await _list(client, path, "hearings", {"offset": offset, "limit": limit})


async def get_hearing(client: CongressClient, congress: int, chamber: str,
                      jacket_number: int) -> Envelope[Hearing]:
    return await _detail(client, f"hearing/{congress}/{chamber.lower()}/{jacket_number}", "hearing",
                         hearing_from_dict)
