"""Tests for the USGS feed fetcher and the geocoding providers."""

from __future__ import annotations

import pytest
import responses
from requests.exceptions import ConnectionError as RequestsConnectionError
from responses import matchers

from conftest import GEONAMES_URL, NOMINATIM_URL, USGS_BASE, nominatim_hit
from quake_search.errors import FeedFetchError, InvalidQueryError
from quake_search.fetchers.geocoding import resolve_place, search_geonames, search_nominatim
from quake_search.fetchers.usgs import feed_url, fetch_all
from quake_search.http import create_session
from quake_search.models import Found, NotFound

WEEK_URL = f"{USGS_BASE}all_week.geojson"
DAY_URL = f"{USGS_BASE}all_day.geojson"


class TestFeedUrl:
    @pytest.mark.parametrize("timeframe", ["hour", "day", "week", "month"])
    def test_each_timeframe_has_its_resource(self, timeframe):
        assert feed_url(timeframe) == f"{USGS_BASE}all_{timeframe}.geojson"

    def test_unknown_timeframe_rejected(self):
        with pytest.raises(InvalidQueryError):
            feed_url("year")


class TestFetchAll:
    @responses.activate
    def test_week_maps_every_feature(self, sample_feed):
        responses.add(responses.GET, WEEK_URL, json=sample_feed, status=200)

        result = fetch_all("week", session=create_session(retries=0))

        assert len(responses.calls) == 1
        assert responses.calls[0].request.url == WEEK_URL
        assert len(result) == len(sample_feed["features"])
        assert [eq.id for eq in result] == [f["id"] for f in sample_feed["features"]]

    @responses.activate
    def test_coordinates_swapped_to_lat_lon(self, sample_feed):
        responses.add(responses.GET, WEEK_URL, json=sample_feed, status=200)

        tokyo = fetch_all("week", session=create_session(retries=0))[0]

        assert tokyo.latitude == 35.62
        assert tokyo.longitude == 139.75
        assert tokyo.depth_km == 35.0
        assert tokyo.magnitude == 5.1
        assert tokyo.place == "10 km SE of Tokyo, Japan"
        assert tokyo.time_ms == 1760700000000
        assert tokyo.significance == 400
        assert tokyo.url.endswith("us7000abc1")
        assert tokyo.event_type == "earthquake"

    @responses.activate
    def test_null_magnitude_kept(self, sample_feed):
        responses.add(responses.GET, WEEK_URL, json=sample_feed, status=200)

        result = fetch_all("week", session=create_session(retries=0))
        anchorage = next(eq for eq in result if eq.id == "ak0000001")

        assert anchorage.magnitude is None

    @responses.activate
    def test_null_place_becomes_empty_string(self):
        responses.add(
            responses.GET,
            DAY_URL,
            json={
                "type": "FeatureCollection",
                "features": [
                    {
                        "id": "x1",
                        "properties": {"mag": 2.0, "place": None, "time": 1700000000000},
                        "geometry": {"coordinates": [10.0, 20.0, 5.0]},
                    }
                ],
            },
            status=200,
        )
        result = fetch_all("day", session=create_session(retries=0))
        assert result[0].place == ""

    @responses.activate
    def test_out_of_range_coordinates_dropped(self):
        responses.add(
            responses.GET,
            DAY_URL,
            json={
                "type": "FeatureCollection",
                "features": [
                    {
                        "id": "bad",
                        "properties": {"mag": 2.0, "place": "Nowhere", "time": 1700000000000},
                        "geometry": {"coordinates": [200.0, 95.0, 5.0]},
                    },
                    {
                        "id": "good",
                        "properties": {"mag": 2.0, "place": "Somewhere", "time": 1700000000000},
                        "geometry": {"coordinates": [10.0, 20.0, 5.0]},
                    },
                ],
            },
            status=200,
        )
        result = fetch_all("day", session=create_session(retries=0))
        assert [eq.id for eq in result] == ["good"]

    @responses.activate
    def test_empty_features_returns_empty(self):
        responses.add(
            responses.GET,
            DAY_URL,
            json={"type": "FeatureCollection", "features": []},
            status=200,
        )
        assert fetch_all("day", session=create_session(retries=0)) == []

    @responses.activate
    def test_http_500_raises_fetch_error(self):
        responses.add(responses.GET, DAY_URL, status=500)
        with pytest.raises(FeedFetchError, match="Failed to fetch earthquake data"):
            fetch_all("day", session=create_session(retries=0))

    @responses.activate
    def test_network_error_raises_fetch_error(self):
        responses.add(responses.GET, DAY_URL, body=RequestsConnectionError("refused"))
        with pytest.raises(FeedFetchError) as excinfo:
            fetch_all("day", session=create_session(retries=0))
        assert excinfo.value.timeframe == "day"
        assert isinstance(excinfo.value.__cause__, RequestsConnectionError)

    @responses.activate
    def test_malformed_json_raises_fetch_error(self):
        responses.add(responses.GET, DAY_URL, json={"unexpected": "format"}, status=200)
        with pytest.raises(FeedFetchError, match="malformed"):
            fetch_all("day", session=create_session(retries=0))

    @responses.activate
    def test_non_json_body_raises_fetch_error(self):
        responses.add(responses.GET, DAY_URL, body="<html>oops</html>", status=200)
        with pytest.raises(FeedFetchError):
            fetch_all("day", session=create_session(retries=0))

    @responses.activate
    def test_invalid_timeframe_makes_no_request(self):
        with pytest.raises(InvalidQueryError):
            fetch_all("decade")
        assert len(responses.calls) == 0


class TestNominatim:
    @responses.activate
    def test_hit_extracts_address_parts(self):
        responses.add(
            responses.GET,
            NOMINATIM_URL,
            json=nominatim_hit(
                lat="35.3606",
                lon="-117.6483",
                display_name="Ridgecrest, Kern County, California, United States",
                address={"town": "Ridgecrest", "state": "California", "country": "United States"},
            ),
            status=200,
        )
        loc = search_nominatim("Ridgecrest", create_session(retries=0), NOMINATIM_URL)

        assert loc is not None
        assert loc.latitude == pytest.approx(35.3606)
        assert loc.longitude == pytest.approx(-117.6483)
        assert loc.name == "Ridgecrest"
        assert loc.full_address.startswith("Ridgecrest, Kern County")
        assert loc.city == "Ridgecrest"
        assert loc.state == "California"
        assert loc.country == "United States"
        assert loc.provider == "nominatim"

    @responses.activate
    def test_request_parameters_and_user_agent(self):
        responses.add(
            responses.GET,
            NOMINATIM_URL,
            json=nominatim_hit(),
            status=200,
            match=[
                matchers.query_param_matcher(
                    {
                        "q": "Tokyo",
                        "format": "json",
                        "addressdetails": "1",
                        "limit": "1",
                        "accept-language": "en",
                    }
                )
            ],
        )
        session = create_session(retries=0, user_agent="quake-search-tests/1.0")
        loc = search_nominatim("Tokyo", session, NOMINATIM_URL)

        assert loc is not None
        assert responses.calls[0].request.headers["User-Agent"] == "quake-search-tests/1.0"

    @responses.activate
    def test_missing_address_defaults(self):
        responses.add(
            responses.GET,
            NOMINATIM_URL,
            json=nominatim_hit(display_name="Somewhere", address={}),
            status=200,
        )
        loc = search_nominatim("Somewhere", create_session(retries=0), NOMINATIM_URL)
        assert loc is not None
        assert loc.country == "Unknown"
        assert loc.state == ""
        assert loc.city == ""

    @responses.activate
    def test_province_used_when_no_state(self):
        responses.add(
            responses.GET,
            NOMINATIM_URL,
            json=nominatim_hit(address={"province": "Batangas", "country": "Philippines"}),
            status=200,
        )
        loc = search_nominatim("Taal", create_session(retries=0), NOMINATIM_URL)
        assert loc is not None
        assert loc.state == "Batangas"

    @responses.activate
    def test_empty_list_is_no_result(self):
        responses.add(responses.GET, NOMINATIM_URL, json=[], status=200)
        assert search_nominatim("Xyzzy", create_session(retries=0), NOMINATIM_URL) is None

    @responses.activate
    def test_http_error_is_no_result(self):
        responses.add(responses.GET, NOMINATIM_URL, status=403)
        assert search_nominatim("Tokyo", create_session(retries=0), NOMINATIM_URL) is None

    @responses.activate
    def test_network_error_is_no_result(self):
        responses.add(responses.GET, NOMINATIM_URL, body=RequestsConnectionError("down"))
        assert search_nominatim("Tokyo", create_session(retries=0), NOMINATIM_URL) is None


class TestGeoNames:
    @responses.activate
    def test_hit_synthesises_address(self):
        responses.add(
            responses.GET,
            GEONAMES_URL,
            json={
                "totalResultsCount": 1,
                "geonames": [
                    {
                        "lat": "14.6042",
                        "lng": "120.9822",
                        "name": "Manila",
                        "adminName1": "Metro Manila",
                        "countryName": "Philippines",
                    }
                ],
            },
            status=200,
            match=[
                matchers.query_param_matcher(
                    {"q": "Manila", "maxRows": "1", "username": "tester", "style": "full"}
                )
            ],
        )
        loc = search_geonames("Manila", create_session(retries=0), GEONAMES_URL, "tester")

        assert loc is not None
        assert loc.latitude == pytest.approx(14.6042)
        assert loc.longitude == pytest.approx(120.9822)
        assert loc.full_address == "Manila, Metro Manila, Philippines"
        assert loc.state == "Metro Manila"
        assert loc.city == "Manila"
        assert loc.type == "geonames"
        assert loc.importance == 0.5
        assert loc.provider == "geonames"

    @responses.activate
    def test_empty_rows_is_no_result(self):
        responses.add(
            responses.GET, GEONAMES_URL, json={"totalResultsCount": 0, "geonames": []}
        )
        assert search_geonames("Xyzzy", create_session(retries=0), GEONAMES_URL, "demo") is None

    @responses.activate
    def test_quota_status_is_no_result(self):
        responses.add(
            responses.GET,
            GEONAMES_URL,
            json={"status": {"message": "daily limit exceeded", "value": 18}},
            status=200,
        )
        assert search_geonames("Tokyo", create_session(retries=0), GEONAMES_URL, "demo") is None


class TestResolvePlace:
    @responses.activate
    def test_nominatim_hit_skips_geonames(self, config):
        responses.add(responses.GET, NOMINATIM_URL, json=nominatim_hit(), status=200)

        result = resolve_place("Tokyo", config=config)

        assert isinstance(result, Found)
        assert result.location.provider == "nominatim"
        assert len(responses.calls) == 1

    @responses.activate
    def test_falls_back_to_geonames(self, config):
        responses.add(responses.GET, NOMINATIM_URL, json=[], status=200)
        responses.add(
            responses.GET,
            GEONAMES_URL,
            json={
                "geonames": [
                    {"lat": "35.68", "lng": "139.69", "name": "Tokyo", "countryName": "Japan"}
                ]
            },
            status=200,
        )

        result = resolve_place("Tokyo", config=config)

        assert isinstance(result, Found)
        assert result.location.provider == "geonames"
        assert result.location.full_address == "Tokyo, , Japan"

    @responses.activate
    def test_provider_failures_are_silent(self, config):
        responses.add(responses.GET, NOMINATIM_URL, body=RequestsConnectionError("down"))
        responses.add(responses.GET, GEONAMES_URL, status=503)

        result = resolve_place("Xyzzyville123", config=config)

        assert isinstance(result, NotFound)
        assert result.query == "Xyzzyville123"
