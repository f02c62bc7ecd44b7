from __future__ import annotations

import re
from types import MappingProxyType
from typing import Any, Mapping

_HEADER_NOISE = re.compile(r"[\s_\-/().]+")


def header_key(header: Any) -> str:
    """`" Dst  Code "`, `"dst_code"`, `"DST-CODE"` all -> `"dstcode"`."""
    return _HEADER_NOISE.sub("", str(header).lower())


# Allowed input headers (after `header_key`), how they map to canonical keys
AZ_INPUT_ALIASES: Mapping[str, str] = MappingProxyType({
    # canonical
    "code": "code",
    "destination": "destination",
    "region": "region",
    "billingincrement": "billing_increment",
    "graceperiod": "grace_period",
    "effectivedate": "effective_date",
    "timeclass": "time_class",
    # header variants seen on carrier rate sheets
    "dstcode": "code",
    "dialcode": "code",
    "prefix": "code",
    "destinationcode": "code",
    "codearea": "code",
    "destinationname": "destination",
    "dstname": "destination",
    "zone": "destination",
    "location": "destination",
    "country": "region",
    "increment": "billing_increment",
    "billing": "billing_increment",
    "interval": "billing_increment",
    "grace": "grace_period",
    "effectivedatetime": "effective_date",
    "effective": "effective_date",
})


def adapt_row(
    raw: Mapping[str, Any],
    *,
    aliases: Mapping[str, str] = AZ_INPUT_ALIASES,
) -> tuple[dict[str, Any], dict[str, Any]]:
    """
    Map a raw sheet row onto canonical keys.

    Returns `(canonical, extras)`. Headers with no alias are not rejected: rate
    sheets routinely carry columns this pipeline does not use, so they are
    kept verbatim in `extras`. When two headers map to the same canonical key
    the first one in sheet order wins, the other lands in `extras`.
    """
    canonical: dict[str, Any] = {}
    extras: dict[str, Any] = {}

    for k, v in raw.items():
        if k is None:
            # csv.DictReader puts overflow cells under a `None` key
            extras["_overflow"] = v
            continue
        canon = aliases.get(header_key(k))
        if canon is None or canon in canonical:
            extras[str(k).strip()] = v
            continue
        canonical[canon] = v

    return canonical, extras
