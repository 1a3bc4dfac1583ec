"""
Carrier detection based on container / bill of lading / air waybill format
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ...models import ShipmentType, normalize_tracking_number

_CONTAINER_RE = re.compile(r"^[A-Z]{3}[UJZ]\d{7}$")
_OWNER_SERIAL_RE = re.compile(r"^[A-Z]{4}\d{7}$")
_AWB_RE = re.compile(r"^(\d{3})(\d{8})$")
_BOOKING_RE = re.compile(r"^[A-Z0-9]{6,25}$")

# Owner / SCAC prefixes of the main ocean carriers
CARRIER_PREFIXES = {
    "maersk": ("MAEU", "MSKU", "MRKU", "MRSU", "MCPU", "SEAU", "MAEI"),
    "msc": ("MSCU", "MEDU", "MSDU", "MSMU", "MSCI", "MEDI"),
    "cma-cgm": ("CMAU", "CGMU", "APZU", "ECMU", "CXDU", "CMDU"),
    "hapag-lloyd": ("HLCU", "HLXU", "HAMU", "UACU", "HPLU"),
    "one": ("ONEU", "ONEY", "ONEE"),
    "evergreen": ("EGLV", "EMCU", "EISU", "EGHU", "EVRU", "EVGU"),
    "cosco": ("COSU", "CBHU", "CCLU", "CSNU"),
    "oocl": ("OOLU", "OOCU"),
    "zim": ("ZIMU",),
    "yang-ming": ("YMLU",),
    "hmm": ("HMMU",),
    "blue-star": ("BMOU",),
}

# IATA airline prefixes (first three digits of an air waybill)
AIRLINE_PREFIXES = {
    "001": "united-cargo",
    "014": "american-airlines",
    "020": "lufthansa",
    "071": "ethiopian-airlines",
    "086": "qatar-airways",
    "176": "emirates",
}

NUMBER_TYPE_CONTAINER = "container"
NUMBER_TYPE_BL = "bl"
NUMBER_TYPE_AWB = "awb"
NUMBER_TYPE_BOOKING = "booking"
NUMBER_TYPE_UNKNOWN = "unknown"


@dataclass(frozen=True)
class TrackingNumberInfo:
    """What a tracking number looks like, inferred from its format alone."""
    clean_number: str
    number_type: str
    carrier: Optional[str]
    shipment_type: ShipmentType
    is_valid_format: bool
    tracking_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "cleanNumber": self.clean_number,
            "type": self.number_type,
            "shipmentType": self.shipment_type.value,
            "isValidFormat": self.is_valid_format,
        }
        if self.carrier:
            d["carrier"] = self.carrier
        if self.tracking_url:
            d["trackingUrl"] = self.tracking_url
        return d


def is_container_number(tracking_number: str) -> bool:
    """Check ISO 6346 format (owner code, category, serial) and check digit."""
    number = normalize_tracking_number(tracking_number)
    if not _CONTAINER_RE.match(number):
        return False
    return _check_digit(number[:10]) == int(number[10])


def _check_digit(code: str) -> int:
    total = 0
    for position, char in enumerate(code):
        total += _char_value(char) * (2 ** position)
    return total % 11 % 10


def _char_value(char: str) -> int:
    if char.isdigit():
        return int(char)
    # Letters map to 10..38 skipping multiples of 11
    value = 10
    for letter in "ABCDEFGHIJKLMNOPQRSTUVWXYZ":
        if value % 11 == 0:
            value += 1
        if letter == char:
            return value
        value += 1
    raise ValueError(f"Invalid container character: {char}")


def _ocean_carrier(number: str) -> Optional[str]:
    for carrier, prefixes in CARRIER_PREFIXES.items():
        if number.startswith(prefixes):
            return carrier
    return None


def _airline(number: str) -> Optional[str]:
    match = _AWB_RE.match(number)
    if match:
        return AIRLINE_PREFIXES.get(match.group(1))
    return None


def detect_carrier(tracking_number: str) -> Optional[str]:
    """
    Detect carrier from tracking number prefix.

    Args:
        tracking_number: Container, bill of lading or air waybill number

    Returns:
        Carrier code or None if unknown
    """
    number = normalize_tracking_number(tracking_number)

    carrier = _ocean_carrier(number) or _airline(number)
    if carrier:
        return carrier

    # Maersk bills of lading are 9 digits
    if number.isdigit() and len(number) == 9:
        return "maersk"

    return None


def detect_tracking_info(tracking_number: str) -> TrackingNumberInfo:
    """
    Classify a tracking number as air waybill, container, bill of lading or
    booking reference, and infer its carrier and transport mode.

    Checked in that order; the first format that matches wins. Anything
    that is not alphanumeric or is outside 6-25 characters is "unknown".
    """
    number = normalize_tracking_number(tracking_number)

    airline = _airline(number)
    if airline:
        return _info(number, NUMBER_TYPE_AWB, airline, ShipmentType.AIR)

    carrier = _ocean_carrier(number)
    if _OWNER_SERIAL_RE.match(number) and (carrier or is_container_number(number)):
        return _info(number, NUMBER_TYPE_CONTAINER, carrier, ShipmentType.OCEAN)

    if carrier and 8 <= len(number) <= 20:
        return _info(number, NUMBER_TYPE_BL, carrier, ShipmentType.OCEAN)

    if _BOOKING_RE.match(number):
        return _info(number, NUMBER_TYPE_BOOKING, detect_carrier(number), ShipmentType.UNKNOWN)

    return TrackingNumberInfo(
        clean_number=number,
        number_type=NUMBER_TYPE_UNKNOWN,
        carrier=None,
        shipment_type=ShipmentType.UNKNOWN,
        is_valid_format=False,
    )


def _info(number: str, number_type: str, carrier: Optional[str], mode: ShipmentType) -> TrackingNumberInfo:
    return TrackingNumberInfo(
        clean_number=number,
        number_type=number_type,
        carrier=carrier,
        shipment_type=mode,
        is_valid_format=True,
        tracking_url=get_tracking_url(carrier, number) if carrier else None,
    )


def infer_shipment_type(tracking_number: str) -> ShipmentType:
    """Transport mode implied by the number format; UNKNOWN when ambiguous."""
    return detect_tracking_info(tracking_number).shipment_type


def get_tracking_url(carrier: str, tracking_number: str) -> Optional[str]:
    """
    Get the carrier's public tracking page for a number.

    Args:
        carrier: Carrier code
        tracking_number: Tracking number

    Returns:
        Tracking URL or None
    """
    n = normalize_tracking_number(tracking_number)

    urls = {
        "maersk": f"https://www.maersk.com/tracking/{n}",
        "msc": f"https://www.msc.com/track-a-shipment?agencyPath=msc&searchType=container&searchNumber={n}",
        "cma-cgm": f"https://www.cma-cgm.com/ebusiness/tracking/search?SearchBy=Container&Reference={n}",
        "hapag-lloyd": f"https://www.hapag-lloyd.com/en/online-business/tracing/tracing-by-booking.html?blno={n}",
        "cosco": f"https://elines.coscoshipping.com/ebusiness/cargoTracking?trackingType=CONTAINER&number={n}",
        "evergreen": f"https://www.evergreen-line.com/static/jsp/cargo_tracking.jsp?cntr={n}",
        "oocl": f"https://www.oocl.com/eng/ourservices/eservices/cargotracking/?cntr={n}",
        "one": f"https://ecomm.one-line.com/one-ecom/manage-shipment/cargo-tracking?trakNoParam={n}",
        "zim": f"https://www.zim.com/tools/track-a-shipment?consnumber={n}",
        "yang-ming": f"https://www.yangming.com/e-service/Track_Trace/track_trace_cargo_tracking.aspx?container={n}",
        "hmm": f"https://www.hmm21.com/e-service/general/trackNTrace/TrackNTrace.do?container={n}",
        "blue-star": f"https://www.bluestarferries.com/en/cargo-tracking?container={n}",
        "ethiopian-airlines": f"https://www.ethiopianairlines.com/aa/trackyourshipment?awb={n}",
        "emirates": f"https://www.skychain.emirates.com/Tracking/Tracking.aspx?awb={n}",
        "american-airlines": f"https://www.aacargo.com/track/?awb={n}",
        "qatar-airways": f"https://www.qrcargo.com/track-shipment?awb={n}",
        "lufthansa": f"https://lufthansa-cargo.com/tracking?awb={n}",
        "united-cargo": f"https://www.unitedcargo.com/track?awb={n}",
    }

    return urls.get(carrier.lower() if carrier else "")
