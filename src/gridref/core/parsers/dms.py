"""
Degree, minute, second (DMS) text encoding and decoding.

Decoding accepts strings such as "40d26'47\"N", "-74:00:21.5",
"W74d0.36'" or "70:01:15W-0:0:30W". Components are separated by d, ', "
or : and only the last component may have a fractional part. A leading or
trailing hemisphere letter (N, S, E or W, either case) sets the sign and
marks the value as a latitude or longitude. Several terms may be added or
subtracted with internal + or - signs.

Common typographic variants of the degree, minute and second symbols,
Unicode minus and dash characters, and invisible or narrow spaces are
normalized before parsing.
"""

import logging
import math
from typing import Optional, Tuple, Union

from gridref.core import geomath
from gridref.core.config import settings
from gridref.core.errors import ParseError, ValidationError
from gridref.models.coordinates import (
    DecodedAngle,
    DMSComponent,
    HemisphereIndicator,
    LatLon,
)

logger = logging.getLogger(__name__)

HEMISPHERES = "SNWE"
SIGNS = "-+"
DIGITS = "0123456789"
DMS_INDICATORS = "D'\":"
COMPONENTS = ("degrees", "minutes", "seconds")

# Replacements applied before parsing, keyed by code point
_SYMBOL_TABLE = str.maketrans(
    {
        # degree
        "°": "d",  # degree sign
        "º": "d",  # masculine ordinal indicator
        "⁰": "d",  # superscript zero
        "˚": "d",  # ring above
        "∘": "d",  # ring operator
        "*": "d",  # GRiD symbol for degree
        # minute
        "′": "'",  # prime
        "‵": "'",  # reversed prime
        "´": "'",  # acute accent
        "‘": "'",  # left single quote
        "’": "'",  # right single quote
        "‛": "'",  # reversed-9 single quote
        "ʹ": "'",  # modifier letter prime
        "ˊ": "'",  # modifier letter acute accent
        "ˋ": "'",  # modifier letter grave accent
        "`": "'",  # grave accent
        # second
        "″": '"',  # double prime
        "‶": '"',  # reversed double prime
        "˝": '"',  # double acute accent
        "“": '"',  # left double quote
        "”": '"',  # right double quote
        "‟": '"',  # reversed-9 double quote
        "ʺ": '"',  # modifier letter double prime
        # plus
        "➕": "+",  # heavy plus
        "⁤": "+",  # invisible plus
        # minus
        "‐": "-",  # hyphen
        "‑": "-",  # non-breaking hyphen
        "–": "-",  # en dash
        "—": "-",  # em dash
        "−": "-",  # minus sign
        "➖": "-",  # heavy minus
        # ignored spaces
        " ": None,  # non-breaking space
        " ": None,  # figure space
        " ": None,  # thin space
        " ": None,  # hair space
        "​": None,  # zero width space
        " ": None,  # narrow no-break space
        "⁣": None,  # invisible separator
    }
)


def _lookup(alphabet: str, c: str) -> int:
    u = c.upper()
    return alphabet.find(u) if len(u) == 1 else -1


def normalize(dms: str) -> str:
    """Replace symbol variants with d ' \" + - and drop ignorable spaces."""
    return dms.translate(_SYMBOL_TABLE).replace("''", '"')


def _decode_piece(dmsa: str) -> DecodedAngle:
    # Parse one signed term; raises ParseError with the grammar violation
    sign = 1
    beg = 0
    end = len(dmsa)
    ind = HemisphereIndicator.NONE
    if end > beg:
        k = _lookup(HEMISPHERES, dmsa[beg])
        if k >= 0:
            ind = HemisphereIndicator.LONGITUDE if k // 2 else HemisphereIndicator.LATITUDE
            sign = 1 if k % 2 else -1
            beg += 1
    if end > beg:
        k = _lookup(HEMISPHERES, dmsa[end - 1])
        if k >= 0:
            if ind != HemisphereIndicator.NONE:
                if dmsa[beg - 1].upper() == dmsa[end - 1].upper():
                    raise ParseError(
                        f"Repeated hemisphere indicators {dmsa[beg - 1]} in "
                        f"{dmsa[beg - 1:end]}",
                        text=dmsa,
                        text_format="DMS",
                    )
                raise ParseError(
                    f"Contradictory hemisphere indicators {dmsa[beg - 1]} and "
                    f"{dmsa[end - 1]} in {dmsa[beg - 1:end]}",
                    text=dmsa,
                    text_format="DMS",
                )
            ind = HemisphereIndicator.LONGITUDE if k // 2 else HemisphereIndicator.LATITUDE
            sign = 1 if k % 2 else -1
            end -= 1
    if end > beg:
        k = _lookup(SIGNS, dmsa[beg])
        if k >= 0:
            sign *= 1 if k else -1
            beg += 1
    if end == beg:
        raise ParseError(f"Empty or incomplete DMS string {dmsa}", text=dmsa, text_format="DMS")

    body = dmsa[beg:end]
    ipieces = [0.0, 0.0, 0.0]
    fpieces = [0.0, 0.0, 0.0]
    npiece = 0
    icurrent = 0.0
    fcurrent = 0.0
    ncurrent = 0
    p = beg
    pointseen = False
    digcount = 0
    intcount = 0
    while p < end:
        x = dmsa[p]
        p += 1
        k = _lookup(DIGITS, x)
        if k >= 0:
            ncurrent += 1
            if digcount > 0:
                # Count of decimal digits
                digcount += 1
            else:
                icurrent = 10 * icurrent + k
                intcount += 1
            continue
        if x == ".":
            if pointseen:
                raise ParseError(
                    f"Multiple decimal points in {body}", text=dmsa, text_format="DMS"
                )
            pointseen = True
            digcount = 1
            continue
        k = _lookup(DMS_INDICATORS, x)
        if k >= 0:
            if k >= 3:
                if p == end:
                    raise ParseError(
                        f"Illegal for : to appear at the end of {body}",
                        text=dmsa,
                        text_format="DMS",
                    )
                k = npiece
            if k == npiece - 1:
                raise ParseError(
                    f"Repeated {COMPONENTS[k]} component in {body}",
                    text=dmsa,
                    text_format="DMS",
                )
            if k < npiece:
                raise ParseError(
                    f"{COMPONENTS[k]} component follows {COMPONENTS[npiece - 1]} "
                    f"component in {body}",
                    text=dmsa,
                    text_format="DMS",
                )
            if k > 2:
                raise ParseError(
                    f"Extra text following seconds in DMS string {body}",
                    text=dmsa,
                    text_format="DMS",
                )
            if ncurrent == 0:
                raise ParseError(
                    f"Missing numbers in {COMPONENTS[k]} component of {body}",
                    text=dmsa,
                    text_format="DMS",
                )
            if digcount > 0:
                fcurrent = float(dmsa[p - intcount - digcount - 1 : p - 1])
                icurrent = 0.0
            ipieces[k] = icurrent
            fpieces[k] = icurrent + fcurrent
            if p < end:
                npiece = k + 1
                icurrent = fcurrent = 0.0
                ncurrent = digcount = intcount = 0
            continue
        if x in SIGNS:
            raise ParseError(
                f"Internal sign in DMS string {body}", text=dmsa, text_format="DMS"
            )
        raise ParseError(
            f"Illegal character {x} in DMS string {body}", text=dmsa, text_format="DMS"
        )

    if _lookup(DMS_INDICATORS, dmsa[p - 1]) < 0:
        if npiece >= 3:
            raise ParseError(
                f"Extra text following seconds in DMS string {body}",
                text=dmsa,
                text_format="DMS",
            )
        if ncurrent == 0:
            raise ParseError(
                f"Missing numbers in trailing component of {body}",
                text=dmsa,
                text_format="DMS",
            )
        if digcount > 0:
            fcurrent = float(dmsa[p - intcount - digcount : p])
            icurrent = 0.0
        ipieces[npiece] = icurrent
        fpieces[npiece] = icurrent + fcurrent
    if pointseen and digcount == 0:
        raise ParseError(
            f"Decimal point in non-terminal component of {body}",
            text=dmsa,
            text_format="DMS",
        )
    # Note that we accept 59.999999... even if it rounds to 60.
    if ipieces[1] >= 60 or fpieces[1] > 60:
        raise ParseError(
            f"Minutes {fpieces[1]:g} not in range [0, 60)", text=dmsa, text_format="DMS"
        )
    if ipieces[2] >= 60 or fpieces[2] > 60:
        raise ParseError(
            f"Seconds {fpieces[2]:g} not in range [0, 60)", text=dmsa, text_format="DMS"
        )
    if fpieces[2] != 0:
        value = (60 * (60 * fpieces[0] + fpieces[1]) + fpieces[2]) / 3600
    elif fpieces[1] != 0:
        value = (60 * fpieces[0] + fpieces[1]) / 60
    else:
        value = fpieces[0]
    return DecodedAngle(sign * value, ind)


def _hemisphere_letter(dmsa: str) -> str:
    # Leading or trailing N/S/E/W of a term, "" if unmarked
    for c in (dmsa[:1], dmsa[-1:]):
        if c and _lookup(HEMISPHERES, c) >= 0:
            return c.upper()
    return ""


def _internal_decode(dmsa: str) -> DecodedAngle:
    try:
        return _decode_piece(dmsa)
    except ParseError as err:
        # Plain numbers the grammar rejects, e.g. "1e3", "inf" or "nan"
        try:
            val = float(dmsa)
        except ValueError:
            raise err from None
        if val == 0:
            raise
        return DecodedAngle(val, HemisphereIndicator.NONE)


def decode(dms: str) -> DecodedAngle:
    """
    Convert a DMS string to an angle.

    Args:
        dms: DMS string, e.g. "40d26'47\"N" or "70:01:15W+0:0:30W"

    Returns:
        DecodedAngle (angle in degrees, hemisphere indicator). The result
        is -0.0 for "-0" and +0.0 for "+0" or "0".

    Raises:
        ParseError: If the string is malformed or its terms carry
            incompatible hemisphere letters
    """
    dmsa = normalize(dms)
    beg = 0
    end = len(dmsa)
    while beg < end and dmsa[beg].isspace():
        beg += 1
    while beg < end and dmsa[end - 1].isspace():
        end -= 1

    # So "-0" returns -0.0
    v = -0.0
    i = 0
    ind1 = HemisphereIndicator.NONE
    hemi1 = ""
    p = beg
    while p < end:
        pa = p
        # Skip over an initial hemisphere letter (first term only)
        if i == 0 and _lookup(HEMISPHERES, dmsa[pa]) >= 0:
            pa += 1
        # Skip over the initial sign (checking for it in the first term)
        if i > 0 or (pa < end and _lookup(SIGNS, dmsa[pa]) >= 0):
            pa += 1
        pb = end
        for q in range(pa, end):
            if dmsa[q] in SIGNS:
                pb = q
                break
        angle, ind2 = _internal_decode(dmsa[p:pb])
        v += angle
        # Marked terms must all carry the same hemisphere letter
        hemi2 = _hemisphere_letter(dmsa[p:pb])
        if ind1 == HemisphereIndicator.NONE:
            ind1 = ind2
            hemi1 = hemi2
        elif not (ind2 == HemisphereIndicator.NONE or (ind1 == ind2 and hemi1 == hemi2)):
            raise ParseError(
                f"Incompatible hemisphere specifier in {dmsa[beg:pb]}",
                text=dms,
                text_format="DMS",
            )
        p = pb
        i += 1
    if i == 0:
        raise ParseError(
            f"Empty or incomplete DMS string {dmsa[beg:end]}", text=dms, text_format="DMS"
        )
    return DecodedAngle(v, ind1)


def decode_components(d: float, m: float = 0.0, s: float = 0.0) -> float:
    """Combine degrees, minutes and seconds into degrees."""
    return d + (m + s / 60) / 60


def decode_lat_lon(stra: str, strb: str, longfirst: bool = False) -> LatLon:
    """
    Decode a latitude and longitude pair.

    The hemisphere letters decide which string is the latitude. If
    neither has one, the order is latitude then longitude unless
    longfirst; if only one has one, the other is taken to be the other
    kind.

    Args:
        stra: First DMS string
        strb: Second DMS string
        longfirst: Treat unmarked input as longitude first

    Returns:
        LatLon (lat, lon) with lon reduced to (-180, 180]

    Raises:
        ParseError: If either string is malformed or both are the same kind
        ValidationError: If the latitude is not in [-90, 90]
    """
    a, ia = decode(stra)
    b, ib = decode(strb)
    latitude, longitude = HemisphereIndicator.LATITUDE, HemisphereIndicator.LONGITUDE
    if ia == HemisphereIndicator.NONE and ib == HemisphereIndicator.NONE:
        ia = longitude if longfirst else latitude
        ib = latitude if longfirst else longitude
    elif ia == HemisphereIndicator.NONE:
        ia = longitude if ib == latitude else latitude
    elif ib == HemisphereIndicator.NONE:
        ib = longitude if ia == latitude else latitude
    if ia == ib:
        kind = "latitudes" if ia == latitude else "longitudes"
        raise ParseError(
            f"Both {stra} and {strb} interpreted as {kind}",
            text=f"{stra} {strb}",
            text_format="DMS",
        )
    lat = a if ia == latitude else b
    lon = b if ia == latitude else a
    if abs(lat) > geomath.QD:
        raise ValidationError(
            f"Latitude {lat:g}d not in [-{geomath.QD:g}d, {geomath.QD:g}d]",
            field="lat",
            value=lat,
        )
    return LatLon(lat, geomath.ang_normalize(lon))


def decode_angle(angstr: str) -> float:
    """
    Decode an arc length, which must not carry a hemisphere letter.

    Raises:
        ParseError: If the string is malformed or has a hemisphere letter
    """
    ang, ind = decode(angstr)
    if ind != HemisphereIndicator.NONE:
        raise ParseError(
            f"Arc angle {angstr} includes a hemisphere, N/E/W/S",
            text=angstr,
            text_format="DMS",
        )
    return ang


def decode_azimuth(azistr: str) -> float:
    """
    Decode an azimuth, which may carry an E or W letter but not N or S.

    Returns:
        Azimuth in degrees reduced to (-180, 180]

    Raises:
        ParseError: If the string is malformed or has a latitude letter
    """
    azi, ind = decode(azistr)
    if ind == HemisphereIndicator.LATITUDE:
        raise ParseError(
            f"Azimuth {azistr} has a latitude hemisphere, N/S",
            text=azistr,
            text_format="DMS",
        )
    return geomath.ang_normalize(azi)


def encode(
    angle: float,
    trailing: Union[DMSComponent, int] = DMSComponent.SECOND,
    prec: int = 0,
    ind: Union[HemisphereIndicator, int] = HemisphereIndicator.NONE,
    dmssep: Optional[str] = None,
) -> str:
    """
    Convert an angle in degrees to a DMS string.

    The trailing component is rounded to prec decimal places, half to
    even, and carries into the leading components. With ind NONE a
    negative angle gets a leading "-" (including -0.0); with LATITUDE or
    LONGITUDE a hemisphere letter is appended and the degrees are
    zero-padded to 2 or 3 digits; AZIMUTH reduces the angle to [0, 360)
    and pads to 3 digits.

    Args:
        angle: Angle in degrees
        trailing: Trailing component, DEGREE, MINUTE or SECOND
        prec: Decimal places in the trailing component
        ind: Hemisphere indicator to apply
        dmssep: Separator to use instead of the d ' " unit letters

    Returns:
        DMS string; "nan", "inf" or "-inf" for non-finite input
    """
    if not math.isfinite(angle):
        return "-inf" if angle < 0 else ("inf" if angle > 0 else "nan")
    trailing = DMSComponent(trailing)
    ind = HemisphereIndicator(ind)

    # 15 - 2 * trailing = ceiling(log10(2^53/90/60^trailing)), which gives
    # full double precision for angles in [-90, 90]
    prec = max(0, min(15 + settings.extra_digits - 2 * trailing, prec))
    scale = 60 if trailing == DMSComponent.MINUTE else (3600 if trailing == DMSComponent.SECOND else 1)
    if ind == HemisphereIndicator.AZIMUTH:
        angle = geomath.ang_normalize(angle)
        # Only angles strictly less than 0 can become 360; -0 becomes +0
        if angle < 0:
            angle += geomath.TD
        else:
            angle = 0.0 + angle
    sign = -1 if geomath.signbit(angle) else 1
    angle *= sign

    # Break off the integer part to preserve precision for MINUTE and SECOND
    idegree = 0 if trailing == DMSComponent.DEGREE else math.floor(angle)
    fdegree = (angle - idegree) * scale
    s = f"{fdegree:.{prec}f}"
    minute = second = ""
    if trailing == DMSComponent.DEGREE:
        degree = s
    else:
        p = s.find(".")
        if p == 0:
            i = 0
        else:
            i = int(s if p < 0 else s[:p])
            s = "" if p < 0 else s[p:]
        # i is now in [0, 60] or [0, 3600]
        if trailing == DMSComponent.MINUTE:
            minute = f"{i % 60}{s}"
            i //= 60
            degree = str(i + idegree)
        else:
            second = f"{i % 60}{s}"
            i //= 60
            minute = str(i % 60)
            i //= 60
            degree = str(i + idegree)

    # Extra width for the decimal point
    if prec:
        prec += 1
    parts = []
    if ind == HemisphereIndicator.NONE and sign < 0:
        parts.append("-")
    width = 1 + min(int(ind), 2) if ind != HemisphereIndicator.NONE else 0
    d_sep = dmssep if dmssep else DMS_INDICATORS[0].lower()
    m_sep = dmssep if dmssep else DMS_INDICATORS[1].lower()
    if trailing == DMSComponent.DEGREE:
        parts.append(degree.rjust(width + prec if width else 0, "0"))
    elif trailing == DMSComponent.MINUTE:
        parts.append(degree.rjust(width, "0"))
        parts.append(d_sep)
        parts.append(minute.rjust(2 + prec, "0"))
        if not dmssep:
            parts.append(DMS_INDICATORS[1].lower())
    else:
        parts.append(degree.rjust(width, "0"))
        parts.append(d_sep)
        parts.append(minute.rjust(2, "0"))
        parts.append(m_sep)
        parts.append(second.rjust(2 + prec, "0"))
        if not dmssep:
            parts.append(DMS_INDICATORS[2].lower())
    if ind not in (HemisphereIndicator.NONE, HemisphereIndicator.AZIMUTH):
        parts.append(
            HEMISPHERES[(0 if ind == HemisphereIndicator.LATITUDE else 2) + (0 if sign < 0 else 1)]
        )
    return "".join(parts)


def encode_with_precision(
    angle: float,
    prec: int,
    ind: Union[HemisphereIndicator, int] = HemisphereIndicator.NONE,
    dmssep: Optional[str] = None,
) -> str:
    """
    Encode with a precision counting minutes and seconds as two digits each.

    prec 0 and 1 give degrees with that many decimals, 2 and 3 give
    minutes with prec - 2 decimals, and 4 or more give seconds with
    prec - 4 decimals. With ind NUMBER the angle is formatted as a plain
    number with prec decimals.
    """
    if ind == HemisphereIndicator.NUMBER:
        return f"{angle:.{max(0, prec)}f}"
    if prec < 2:
        return encode(angle, DMSComponent.DEGREE, prec, ind, dmssep)
    if prec < 4:
        return encode(angle, DMSComponent.MINUTE, prec - 2, ind, dmssep)
    return encode(angle, DMSComponent.SECOND, prec - 4, ind, dmssep)


def encode_deg_min(ang: float) -> Tuple[float, float]:
    """Split an angle into whole degrees and minutes, both with its sign."""
    d = float(int(ang))
    m = 60 * (ang - d)
    return d, m


def encode_deg_min_sec(ang: float) -> Tuple[float, float, float]:
    """Split an angle into whole degrees, whole minutes and seconds."""
    d = float(int(ang))
    ang = 60 * (ang - d)
    m = float(int(ang))
    s = 60 * (ang - m)
    return d, m, s
