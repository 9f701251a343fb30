"""Unit tests for catalog parsing, loading and refresh."""

import pytest

import config
from chatbot.catalog import ClinicCatalog, load_catalog_file, parse_catalog, parse_record
from chatbot.errors import CatalogUnavailable, MalformedCatalogRecord


GOOD_LINE = (
    "Stacy Medical Center|BCC|FRONTLINE Provider/Occupational Industrial Clinic, "
    "Multi-Specialty|4580 Pacific Blvd|Vernon|Los Angeles|CA|90058|(323) 584-0779|"
    "-118.2248393|34.0019771"
)
OTHER_LINE = (
    "Cotten, Paul|BCC|Anesthesiology|2185 W Citracado Pkwy|Escondido|San Diego|CA|"
    "92025|(442) 281-1000, (858) 673-6100|-117.1218794|33.1218035"
)


class TestParseRecord:
    """Tests for single-record parsing."""

    def test_parses_all_fields(self):
        facility = parse_record(GOOD_LINE)
        assert facility.name == "Stacy Medical Center"
        assert facility.source == "BCC"
        assert facility.specialty.startswith("FRONTLINE Provider")
        assert facility.street == "4580 Pacific Blvd"
        assert facility.city == "Vernon"
        assert facility.county == "Los Angeles"
        assert facility.region == "CA"
        assert facility.postal_code == "90058"
        assert facility.phone == "(323) 584-0779"
        assert facility.longitude == -118.2248393
        assert facility.latitude == 34.0019771

    def test_multiple_phone_numbers_kept_verbatim(self):
        facility = parse_record(OTHER_LINE)
        assert facility.phone == "(442) 281-1000, (858) 673-6100"

    def test_wrong_field_count(self):
        with pytest.raises(MalformedCatalogRecord) as exc_info:
            parse_record("Only|three|fields", line_number=7)
        assert exc_info.value.line_number == 7
        assert "line 7" in str(exc_info.value)

    def test_non_numeric_coordinates(self):
        line = GOOD_LINE.replace("-118.2248393", "west")
        with pytest.raises(MalformedCatalogRecord):
            parse_record(line)

    def test_non_finite_coordinates(self):
        line = GOOD_LINE.replace("34.0019771", "nan")
        with pytest.raises(MalformedCatalogRecord):
            parse_record(line)

    def test_missing_name(self):
        with pytest.raises(MalformedCatalogRecord):
            parse_record("|" + GOOD_LINE.split("|", 1)[1])


class TestParseCatalog:
    def test_skips_malformed_records(self, capsys):
        text = "\n".join([GOOD_LINE, "broken|line", "", OTHER_LINE])
        facilities = parse_catalog(text)

        assert [f.name for f in facilities] == ["Stacy Medical Center", "Cotten, Paul"]
        assert "Skipping malformed record" in capsys.readouterr().out

    def test_accepts_crlf_line_endings(self):
        facilities = parse_catalog(GOOD_LINE + "\r\n" + OTHER_LINE + "\r\n")
        assert len(facilities) == 2

    def test_returns_immutable_tuple(self):
        assert isinstance(parse_catalog(GOOD_LINE), tuple)


class TestLoadCatalogFile:
    def test_loads_file(self, tmp_path):
        path = tmp_path / "clinics.txt"
        path.write_text(GOOD_LINE + "\n" + OTHER_LINE + "\n", encoding="utf-8")
        assert len(load_catalog_file(path)) == 2

    def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogUnavailable):
            load_catalog_file(tmp_path / "missing.txt")

    def test_file_without_valid_records(self, tmp_path):
        path = tmp_path / "clinics.txt"
        path.write_text("not|a|record\n", encoding="utf-8")
        with pytest.raises(CatalogUnavailable):
            load_catalog_file(path)

    def test_bundled_catalog_loads(self):
        facilities = load_catalog_file(config.CLINIC_CATALOG_PATH)
        assert len(facilities) == 47
        assert facilities[0].name == "Southern Calif Medical Group"


class TestClinicCatalog:
    """Tests for snapshot handling."""

    def test_refresh_swaps_snapshot(self, tmp_path):
        path = tmp_path / "clinics.txt"
        path.write_text(GOOD_LINE + "\n", encoding="utf-8")
        catalog = ClinicCatalog(path)
        before = catalog.snapshot()

        path.write_text(GOOD_LINE + "\n" + OTHER_LINE + "\n", encoding="utf-8")
        after = catalog.refresh()

        assert len(before) == 1
        assert len(after) == 2
        assert catalog.snapshot() is after
        assert len(catalog) == 2

    def test_failed_refresh_keeps_previous_snapshot(self, tmp_path):
        path = tmp_path / "clinics.txt"
        path.write_text(GOOD_LINE + "\n", encoding="utf-8")
        catalog = ClinicCatalog(path)
        before = catalog.snapshot()

        path.unlink()
        with pytest.raises(CatalogUnavailable):
            catalog.refresh()

        assert catalog.snapshot() is before

    def test_constructed_from_facilities(self, three_clinics):
        catalog = ClinicCatalog(path="unused.txt", facilities=list(three_clinics))
        assert catalog.snapshot() == three_clinics
