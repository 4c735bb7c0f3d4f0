"""Tests for mailgun_export/client/urls.py."""

from datetime import date, datetime, timedelta, timezone

import pytest

from mailgun_export.client.urls import build_url, format_rfc2822, path_segment


class TestBuildUrl:
    """Tests for build_url()."""

    def test_no_params(self):
        """Base URL is returned unchanged."""
        assert build_url("https://x/v3/domains") == "https://x/v3/domains"
        assert build_url("https://x/v3/domains", {}) == "https://x/v3/domains"

    def test_none_values_dropped(self):
        """None values are skipped."""
        assert build_url("https://x/a", {"limit": 10, "tag": None}) == "https://x/a?limit=10"

    def test_all_none_gives_base(self):
        """Only None values: no query string."""
        assert build_url("https://x/a", {"tag": None}) == "https://x/a"

    def test_list_repeats_key(self):
        """Lists become repeated keys."""
        url = build_url("https://x/a", {"event": ["accepted", "delivered"]})
        assert url == "https://x/a?event=accepted&event=delivered"

    def test_booleans_lowercase(self):
        """Booleans are sent as true/false."""
        assert build_url("https://x/a", {"ascending": True}) == "https://x/a?ascending=true"
        assert build_url("https://x/a", {"ascending": False}) == "https://x/a?ascending=false"

    def test_existing_query_appended(self):
        """An existing query string is extended with &."""
        assert build_url("https://x/a?p=1", {"limit": 5}) == "https://x/a?p=1&limit=5"

    def test_values_encoded(self):
        """Special characters are URL-encoded."""
        url = build_url("https://x/a", {"begin": "Mon, 15 Jan 2024 00:00:00 GMT"})
        assert url == "https://x/a?begin=Mon%2C+15+Jan+2024+00%3A00%3A00+GMT"


class TestFormatRfc2822:
    """Tests for format_rfc2822()."""

    def test_none_passthrough(self):
        assert format_rfc2822(None) is None

    def test_date(self):
        """Dates are midnight UTC."""
        assert format_rfc2822(date(2024, 1, 15)) == "Mon, 15 Jan 2024 00:00:00 GMT"

    def test_iso_date_string(self):
        assert format_rfc2822("2024-01-15") == "Mon, 15 Jan 2024 00:00:00 GMT"

    def test_iso_datetime_with_z(self):
        """Trailing Z is read as UTC."""
        assert format_rfc2822("2024-01-15T10:30:00Z") == "Mon, 15 Jan 2024 10:30:00 GMT"

    def test_naive_datetime_is_utc(self):
        assert format_rfc2822(datetime(2024, 2, 29, 23, 59, 59)) == "Thu, 29 Feb 2024 23:59:59 GMT"

    def test_aware_datetime_converted(self):
        """Offsets are converted to UTC."""
        kst = timezone(timedelta(hours=9))
        value = datetime(2024, 1, 15, 9, 0, tzinfo=kst)
        assert format_rfc2822(value) == "Mon, 15 Jan 2024 00:00:00 GMT"

    def test_invalid_string(self):
        """Unparseable strings raise ValueError."""
        with pytest.raises(ValueError):
            format_rfc2822("yesterday")


class TestPathSegment:
    """Tests for path_segment()."""

    def test_domain_unchanged(self):
        assert path_segment("mg.example.com") == "mg.example.com"

    def test_list_address_keeps_at(self):
        assert path_segment("news@mg.example.com") == "news@mg.example.com"

    def test_slash_and_space_quoted(self):
        assert path_segment("a b/c") == "a%20b%2Fc"
