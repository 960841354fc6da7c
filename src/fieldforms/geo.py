"""
Geo capture collaborator.

Writes a "lat, lon" string into a GPS field's answer, then, best
effort, a province name into the field's transient companion key
(`<fieldId>_province`). The province is a display aid and never part
of the submission.

Capture is the only suspending operation around a form. Other fields
stay editable while it is outstanding; there is no retry and no
cancellation, so a stalled or failed capture just leaves the answer
empty until the user asks again.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Protocol

import httpx

from fieldforms.config import FormsConfig
from fieldforms.errors import LocationError
from fieldforms.model import FieldType, transient_key_for
from fieldforms.session import FormSession

logger = logging.getLogger(__name__)


DRC_PROVINCES = [
    "Kinshasa", "Kongo-Central", "Kwango", "Kwilu", "Mai-Ndombe",
    "Kasaï", "Kasaï-Central", "Kasaï-Oriental", "Lomami", "Sankuru",
    "Maniema", "Sud-Kivu", "Nord-Kivu", "Ituri", "Haut-Uélé", "Tshopo",
    "Bas-Uélé", "Nord-Ubangi", "Mongala", "Sud-Ubangi", "Équateur",
    "Tshuapa", "Tanganyika", "Haut-Lomami", "Lualaba", "Haut-Katanga",
]

# Former and alternative names still returned by geocoders.
PROVINCE_ALIASES = {
    "Kongo central": "Kongo-Central",
    "Bas-Congo": "Kongo-Central",
    "Bandundu": "Kwilu",
    "Orientale": "Tshopo",
    "Katanga": "Haut-Katanga",
    "Kasaï-Occidental": "Kasaï-Central",
}

CITY_PROVINCES = {
    "kinshasa": "Kinshasa",
    "matadi": "Kongo-Central",
    "moanda": "Kongo-Central",
    "bandundu": "Kwilu",
    "kikwit": "Kwilu",
    "mbuji-mayi": "Kasaï-Oriental",
    "mbuji mayi": "Kasaï-Oriental",
    "kananga": "Kasaï-Central",
    "tshikapa": "Kasaï",
    "lubumbashi": "Haut-Katanga",
    "likasi": "Haut-Katanga",
    "kolwezi": "Lualaba",
    "bukavu": "Sud-Kivu",
    "goma": "Nord-Kivu",
    "kisangani": "Tshopo",
    "bunia": "Ituri",
    "kindu": "Maniema",
    "kalemie": "Tanganyika",
    "mbandaka": "Équateur",
    "gemena": "Sud-Ubangi",
    "gbadolite": "Nord-Ubangi",
    "isiro": "Haut-Uélé",
    "buta": "Bas-Uélé",
    "kabinda": "Lomami",
    "lodja": "Sankuru",
}

ADDRESS_KEYS = ("state", "region", "province", "county", "state_district", "administrative")

LOCATION_MESSAGES = {
    LocationError.UNSUPPORTED: "Géolocalisation non supportée",
    LocationError.PERMISSION_DENIED: "Permission GPS refusée.",
    LocationError.POSITION_UNAVAILABLE: "Position GPS indisponible.",
    LocationError.TIMEOUT: "Délai de capture GPS dépassé.",
}
UNEXPECTED_LOCATION_ERROR = "Erreur GPS inattendue."


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float
    accuracy: Optional[float] = None

    def is_valid(self) -> bool:
        if math.isnan(self.latitude) or math.isnan(self.longitude):
            return False
        # 0/0 is what broken receivers report
        return not (self.latitude == 0 or self.longitude == 0)


def format_coordinates(coords: Coordinates) -> str:
    return f"{coords.latitude:.6f}, {coords.longitude:.6f}"


@dataclass(frozen=True)
class LocationRequest:
    """Options handed to the location provider."""
    max_wait_seconds: float
    high_accuracy: bool = True
    max_age_seconds: float = 0.0

    @classmethod
    def from_config(cls, config: FormsConfig) -> "LocationRequest":
        return cls(
            max_wait_seconds=config.geolocation_max_wait_seconds,
            high_accuracy=config.high_accuracy,
            max_age_seconds=config.max_position_age_seconds,
        )


class LocationProvider(Protocol):
    async def get_position(self, request: LocationRequest) -> Coordinates:
        ...


class ReverseGeocoder(Protocol):
    async def locality(self, coords: Coordinates) -> Optional[str]:
        ...


class CaptureStatus(Enum):
    IDLE = "idle"
    CAPTURING = "capturing"
    CAPTURED = "captured"
    FAILED = "failed"


class LookupStatus(Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


def normalize_province_name(name: Optional[str]) -> Optional[str]:
    """Map a free-text region name to an official DRC province, or None."""
    if not name:
        return None
    text = name.strip()
    lowered = text.lower()

    for province in DRC_PROVINCES:
        if province.lower() == lowered:
            return province
    if text in PROVINCE_ALIASES:
        return PROVINCE_ALIASES[text]
    for province in DRC_PROVINCES:
        if province.lower() in lowered or lowered in province.lower():
            return province
    return None


def province_from_address(data: Mapping[str, Any]) -> Optional[str]:
    """
    Pick a province out of a Nominatim reverse-geocoding response.

    Tries, in order: standard address keys, the display name, known
    cities, any address value, then the first raw region value.
    """
    address = data.get("address")
    if not isinstance(address, Mapping):
        return None

    for key in ADDRESS_KEYS:
        value = address.get(key)
        if isinstance(value, str):
            province = normalize_province_name(value)
            if province:
                return province

    display_name = data.get("display_name")
    if isinstance(display_name, str):
        lowered = display_name.lower()
        for province in DRC_PROVINCES:
            if province.lower() in lowered:
                return province

    city = (address.get("city") or address.get("town") or address.get("village") or "").lower()
    if city:
        for name, province in CITY_PROVINCES.items():
            if name in city:
                return province

    for value in address.values():
        if isinstance(value, str):
            province = normalize_province_name(value)
            if province:
                return province

    for key in ("state", "region", "province", "county", "city"):
        value = address.get(key)
        if isinstance(value, str) and value:
            logger.warning("Returning unnormalized province %r", value)
            return value
    return None


class NominatimGeocoder:
    """
    Reverse geocoder backed by the Nominatim HTTP API.

    Requests are spaced by `min_interval` seconds, as the public
    service allows one request per second. Any failure yields None.
    """

    def __init__(self, config: Optional[FormsConfig] = None, client: Optional[httpx.AsyncClient] = None):
        config = config or FormsConfig()
        self.url = config.geocoder_url
        self.user_agent = config.geocoder_user_agent
        self.min_interval = config.geocoder_min_interval_seconds
        self.timeout = config.request_timeout_seconds
        self._client = client
        self._lock = asyncio.Lock()
        self._last_request = 0.0

    async def _throttle(self) -> None:
        wait = self.min_interval - (time.monotonic() - self._last_request)
        if wait > 0:
            await asyncio.sleep(wait)
        self._last_request = time.monotonic()

    async def _fetch(self, client: httpx.AsyncClient, coords: Coordinates) -> httpx.Response:
        params = {
            "format": "json",
            "lat": coords.latitude,
            "lon": coords.longitude,
            "zoom": 12,
            "addressdetails": 1,
            "accept-language": "fr",
        }
        headers = {"Accept-Language": "fr", "User-Agent": self.user_agent}
        return await client.get(self.url, params=params, headers=headers)

    async def locality(self, coords: Coordinates) -> Optional[str]:
        async with self._lock:
            await self._throttle()
            try:
                if self._client is not None:
                    response = await self._fetch(self._client, coords)
                else:
                    async with httpx.AsyncClient(timeout=self.timeout) as client:
                        response = await self._fetch(client, coords)
            except httpx.HTTPError as e:
                logger.warning("Reverse geocoding failed: %s", e)
                return None

        if not response.is_success:
            logger.warning("Reverse geocoding returned %s", response.status_code)
            return None
        try:
            data = response.json()
        except ValueError:
            logger.warning("Reverse geocoding returned invalid JSON")
            return None
        if not isinstance(data, Mapping):
            return None

        province = province_from_address(data)
        if province is None:
            logger.warning("No province found for %s", format_coordinates(coords))
        return province


class GeoCapture:
    """
    Drives location capture for the GPS fields of one FormSession.

    Status attributes mirror what a UI shows next to the field:
    `status`, `province_status` and a user-facing `error` message.
    """

    def __init__(
        self,
        session: FormSession,
        provider: Optional[LocationProvider],
        geocoder: Optional[ReverseGeocoder] = None,
        config: Optional[FormsConfig] = None,
    ):
        self.session = session
        self.provider = provider
        self.geocoder = geocoder
        self.request = LocationRequest.from_config(config or FormsConfig())
        self.status = CaptureStatus.IDLE
        self.province_status = LookupStatus.IDLE
        self.error: Optional[str] = None
        self.coordinates: Optional[Coordinates] = None
        self.province: Optional[str] = None

    def _fail(self, message: str) -> None:
        self.status = CaptureStatus.FAILED
        self.error = message
        self.province_status = LookupStatus.IDLE

    async def capture(self, field_id: str) -> Optional[str]:
        """
        Capture a position into `field_id`.

        Returns:
            The formatted coordinates, or None when capture failed.
            Failures only update `status`/`error`; they never raise.
        """
        fdef = self.session.template.get_field(field_id)
        if fdef is not None and fdef.type is not FieldType.GPS:
            logger.warning("Capturing a position into non-GPS field %s", field_id)

        if self.provider is None:
            self._fail(LOCATION_MESSAGES[LocationError.UNSUPPORTED])
            return None

        self.status = CaptureStatus.CAPTURING
        self.error = None
        self.province_status = LookupStatus.IDLE
        try:
            coords = await self.provider.get_position(self.request)
        except LocationError as e:
            logger.warning("Location capture failed for %s: %s", field_id, e)
            self._fail(LOCATION_MESSAGES.get(e.code, UNEXPECTED_LOCATION_ERROR))
            return None
        except (asyncio.TimeoutError, TimeoutError):
            logger.warning("Location capture timed out for %s", field_id)
            self._fail(LOCATION_MESSAGES[LocationError.TIMEOUT])
            return None
        except Exception:
            logger.exception("Location provider raised for %s", field_id)
            self._fail(UNEXPECTED_LOCATION_ERROR)
            return None

        if not coords.is_valid():
            self._fail("Coordonnées GPS invalides")
            return None

        value = format_coordinates(coords)
        self.coordinates = coords
        self.status = CaptureStatus.CAPTURED
        self.session.set_answer(field_id, value)
        logger.info("GPS captured for %s: %s", field_id, value)

        await self._lookup_province(field_id, coords)
        return value

    async def _lookup_province(self, field_id: str, coords: Coordinates) -> None:
        if self.geocoder is None:
            return
        self.province_status = LookupStatus.LOADING
        try:
            province = await self.geocoder.locality(coords)
        except Exception:
            # Locality is a display aid; a broken geocoder must not fail the capture.
            logger.exception("Reverse geocoder raised for %s", field_id)
            province = None
        if province:
            self.province = province
            self.province_status = LookupStatus.SUCCESS
            self.session.set_answer(transient_key_for(field_id), province)
        else:
            self.province = None
            self.province_status = LookupStatus.ERROR

    def status_snapshot(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "provinceStatus": self.province_status.value,
            "error": self.error,
            "province": self.province,
        }
