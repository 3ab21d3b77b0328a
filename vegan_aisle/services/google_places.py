"""Google Places and Geocoding lookups for stores and city pages."""

import logging

import httpx

from vegan_aisle.config import get_settings

logger = logging.getLogger(__name__)


class GooglePlacesService:
    """Service for Google Places autocomplete, place details and reverse geocoding."""

    BASE_URL = "https://maps.googleapis.com/maps/api"
    DETAIL_FIELDS = [
        "place_id",
        "name",
        "formatted_address",
        "geometry",
        "website",
        "formatted_phone_number",
        "address_components",
    ]

    def __init__(self) -> None:
        """Initialize the Google Places service."""
        settings = get_settings()
        self.api_key = settings.google_api_key
        self._configured = bool(self.api_key)

    @property
    def is_configured(self) -> bool:
        """Check if the Places API is configured."""
        return self._configured

    async def _get(self, path: str, params: dict) -> dict | None:
        """Call a Maps API endpoint. Errors are logged and yield None."""
        try:
            async with httpx.AsyncClient(timeout=10.0) as client:
                response = await client.get(
                    f"{self.BASE_URL}/{path}", params={**params, "key": self.api_key}
                )
                response.raise_for_status()
                return response.json()
        except httpx.HTTPError as e:
            logger.error(f"Google Maps {path} request failed: {type(e).__name__}")
            return None

    async def autocomplete(
        self,
        input_text: str,
        types: list[str] | None = None,
        location: tuple[float, float] | None = None,
        radius: int | None = None,
    ) -> list[dict]:
        """Suggest places matching partially typed text.

        Args:
            input_text: What the user typed (at least 2 characters)
            types: Place types to restrict to; defaults to establishments
            location: (lat, lng) to bias results towards
            radius: Bias radius in meters, used together with location

        Returns:
            List of predictions with place_id, description, main_text, secondary_text
        """
        if not self._configured:
            logger.warning("GOOGLE_API_KEY not configured, skipping Places autocomplete")
            return []
        if not input_text or len(input_text.strip()) < 2:
            return []

        params = {
            "input": input_text.strip(),
            "types": "|".join(types) if types else "establishment",
        }
        if location and radius:
            params["location"] = f"{location[0]},{location[1]}"
            params["radius"] = str(radius)

        data = await self._get("place/autocomplete/json", params)
        if data is None:
            return []

        status = data.get("status")
        if status == "ZERO_RESULTS":
            return []
        if status != "OK":
            logger.error(f"Google Places autocomplete returned {status}: {data.get('error_message')}")
            return []

        predictions = []
        for prediction in data.get("predictions", []):
            description = prediction.get("description", "")
            parts = description.split(",")
            formatting = prediction.get("structured_formatting") or {}
            predictions.append(
                {
                    "place_id": prediction["place_id"],
                    "description": description,
                    "main_text": formatting.get("main_text") or parts[0],
                    "secondary_text": formatting.get("secondary_text")
                    or ",".join(parts[1:]).strip(),
                }
            )
        return predictions

    async def place_details(self, place_id: str) -> dict | None:
        """Fetch and flatten the details of one place."""
        if not self._configured:
            logger.warning("GOOGLE_API_KEY not configured, skipping Places details")
            return None
        if not place_id or not place_id.strip():
            return None

        data = await self._get(
            "place/details/json",
            {"place_id": place_id.strip(), "fields": ",".join(self.DETAIL_FIELDS)},
        )
        if data is None:
            return None
        if data.get("status") != "OK" or not data.get("result"):
            logger.error(f"Google Places details returned {data.get('status')} for {place_id}")
            return None

        result = data["result"]
        location = (result.get("geometry") or {}).get("location") or {}
        return {
            "place_id": result.get("place_id", place_id),
            "name": result.get("name", ""),
            "formatted_address": result.get("formatted_address"),
            "website_url": result.get("website"),
            "phone_number": result.get("formatted_phone_number"),
            "latitude": location.get("lat"),
            "longitude": location.get("lng"),
            **parse_address_components(result.get("address_components")),
        }

    async def reverse_geocode(self, latitude: float, longitude: float) -> dict | None:
        """City and state for a coordinate pair.

        Returns None when the lookup itself fails, and ``{"city": None,
        "state": None}`` when Google has no address for the point.
        """
        if not self._configured:
            logger.warning("GOOGLE_API_KEY not configured, skipping reverse geocoding")
            return None

        data = await self._get("geocode/json", {"latlng": f"{latitude},{longitude}"})
        if data is None:
            return None
        if data.get("status") != "OK" or not data.get("results"):
            return {"city": None, "state": None}
        return parse_city_and_state(data["results"])


def parse_address_components(components: list[dict] | None) -> dict:
    """Pull street, city, state, zip and country out of Google address components."""
    parsed: dict[str, str] = {}
    for component in components or []:
        types = component.get("types", [])
        if "street_number" in types:
            parsed["address"] = component["long_name"]
        if "route" in types:
            street = parsed.get("address")
            parsed["address"] = f"{street} {component['long_name']}" if street else component["long_name"]
        if "locality" in types:
            parsed["city"] = component["long_name"]
        if "administrative_area_level_1" in types:
            parsed["state"] = component["short_name"]
        if "postal_code" in types:
            parsed["zip_code"] = component["long_name"]
        if "country" in types:
            parsed["country"] = component["short_name"]
    return parsed


CITY_TYPES = ("locality", "sublocality", "sublocality_level_1")
CITY_FALLBACK_TYPES = ("administrative_area_level_2", "neighborhood")


def parse_city_and_state(results: list[dict]) -> dict:
    """Most specific city and state across geocoding results.

    Falls back to the county or neighborhood when no result names a city.
    """
    city = state = None
    for result in results:
        for component in result.get("address_components", []):
            types = component.get("types", [])
            if city is None and any(t in types for t in CITY_TYPES):
                city = component["long_name"]
            if state is None and "administrative_area_level_1" in types:
                state = component["short_name"]
        if city and state:
            break

    if city is None:
        city = next(
            (
                component["long_name"]
                for result in results
                for component in result.get("address_components", [])
                if any(t in component.get("types", []) for t in CITY_FALLBACK_TYPES)
            ),
            None,
        )
    return {"city": city, "state": state}


def get_google_places_service() -> GooglePlacesService:
    """Get Google Places service instance."""
    return GooglePlacesService()
