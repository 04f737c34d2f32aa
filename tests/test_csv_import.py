import pytest

from app.exceptions import CsvParseError, MissingUploadError
from app.services.csv_import import (
    CsvImporter,
    ImportResult,
    collapse_whitespace,
    iter_records,
    parse_count,
    parse_year,
    read_csv,
)


# ---------------------------------------------------------------------------
# Parsing and normalization
# ---------------------------------------------------------------------------

class TestReadCsv:

    def test_headers_are_case_insensitive_and_trimmed(self):
        df = read_csv(" MAKE , Model,YEAR ,Count\nToyota,Corolla,2020,1\n")
        assert list(df.columns) == ["make", "model", "year", "count"]

    def test_brand_is_a_synonym_for_make(self):
        records = list(iter_records(read_csv("Brand,model,year\nFiat,Panda,2019\n")))
        assert records[0].make == "Fiat"

    def test_explicit_make_wins_over_brand(self):
        records = list(iter_records(read_csv("brand,make,model,year\nStellantis,Fiat,Panda,2019\n")))
        assert records[0].make == "Fiat"

    def test_unknown_columns_are_ignored(self):
        df = read_csv("id,make,model,year,color\n1,Fiat,Panda,2019,red\n")
        assert list(df.columns) == ["make", "model", "year"]

    def test_bom_is_stripped_from_first_header(self):
        df = read_csv("\ufeffmake,model,year\nFiat,Panda,2019\n".encode("utf-8"))
        assert "make" in df.columns

    def test_values_stay_text(self):
        records = list(iter_records(read_csv("make,model,year,count\nFiat,500,02019,007\n")))
        assert records[0].model == "500"
        assert records[0].year == "02019"
        assert records[0].count == "007"

    def test_missing_columns_read_as_empty(self):
        records = list(iter_records(read_csv("make,model\nFiat,Panda\n")))
        assert records[0].year == ""
        assert records[0].count == ""

    def test_short_rows_are_padded(self):
        records = list(iter_records(read_csv("make,model,year,count\nFiat,Panda\n")))
        assert records[0].year == ""

    def test_quoted_fields_may_contain_commas(self):
        records = list(iter_records(read_csv('make,model,year\n"Mercedes, Benz",C,2020\n')))
        assert records[0].make == "Mercedes, Benz"

    def test_empty_document_is_a_parse_error(self):
        with pytest.raises(CsvParseError):
            read_csv("")

    def test_unterminated_quote_is_a_parse_error(self):
        with pytest.raises(CsvParseError):
            read_csv('make,model,year\n"Fiat,Panda,2019\n')

    def test_non_utf8_bytes_are_a_parse_error(self):
        with pytest.raises(CsvParseError):
            read_csv(b"make,model,year\n\xff\xfe,Panda,2019\n")


def test_collapse_whitespace():
    assert collapse_whitespace("  Land   Rover\t Defender ") == "Land Rover Defender"


@pytest.mark.parametrize("text, expected", [("5", 5), ("", 0), ("abc", 0), ("-3", 0), ("4.5", 0)])
def test_parse_count(text, expected):
    assert parse_count(text) == expected


def test_parse_count_rejects_values_too_large_to_store():
    assert parse_count("2147483647") == 2147483647
    with pytest.raises(ValueError):
        parse_count("2147483648")


@pytest.mark.parametrize("text", ["20x0", "99999999999999999999", "2147483648", "-2147483649"])
def test_parse_year_rejects_values_the_column_cannot_hold(text):
    with pytest.raises(ValueError):
        parse_year(text)


def test_parse_year():
    assert parse_year("2020") == 2020
    assert parse_year("-2147483648") == -2147483648


def test_summary_message_mentions_all_counters():
    message = ImportResult(imported=2, skipped=3, invalid=4).message
    assert "imported 2" in message
    assert "Skipped 3" in message
    assert "4 invalid" in message


# ---------------------------------------------------------------------------
# Merging into the database
# ---------------------------------------------------------------------------

class TestCsvImporter:

    def test_missing_content_is_rejected(self, db):
        with pytest.raises(MissingUploadError):
            CsvImporter(db).run(None)

    def test_imports_rows_with_counts(self, db, repository):
        result = CsvImporter(db).run("make,model,year,count\nToyota,Corolla,2020,5\nHonda,Civic,2019,\n")

        assert (result.imported, result.skipped, result.invalid) == (2, 0, 0)
        counts = {v.model: v.count for v in repository.list()}
        assert counts == {"Corolla": 5, "Civic": 0}

    def test_inner_whitespace_is_collapsed_before_insert(self, db, repository):
        CsvImporter(db).run("make,model,year\n  Land   Rover , Range  Rover ,2022\n")

        vehicle = repository.list()[0]
        assert vehicle.make == "Land Rover"
        assert vehicle.model == "Range Rover"

    def test_invalid_records_do_not_stop_the_import(self, db, repository):
        content = (
            "make,model,year\n"
            ",Corolla,2020\n"       # no make
            "Toyota,,2020\n"        # no model
            "Toyota,Yaris,20x0\n"   # year is not a number
            "Honda,Civic,2019\n"
        )

        result = CsvImporter(db).run(content)

        assert (result.imported, result.skipped, result.invalid) == (1, 0, 3)
        assert [v.model for v in repository.list()] == ["Civic"]

    def test_out_of_range_numbers_do_not_stop_the_import(self, db, repository):
        content = (
            "make,model,year,count\n"
            "Honda,Civic,99999999999999999999,1\n"
            "Fiat,Panda,2019,99999999999999999999\n"
            "Toyota,Corolla,2020,2\n"
        )

        result = CsvImporter(db).run(content)

        assert (result.imported, result.skipped, result.invalid) == (1, 0, 2)
        assert [(v.model, v.count) for v in repository.list()] == [("Corolla", 2)]

    def test_existing_non_ascii_name_with_different_case_is_skipped(self, db, repository):
        repository.create("Škoda", "Octavia", 2020)

        result = CsvImporter(db).run("make,model,year\nŠKODA,octavia,2020\nškoda,OCTAVIA,2020\n")

        assert (result.imported, result.skipped) == (0, 2)
        assert len(repository.list()) == 1

    def test_existing_row_with_different_case_is_skipped(self, db, repository):
        repository.create("Toyota", "Corolla", 2020)

        result = CsvImporter(db).run("make,model,year\nTOYOTA,corolla , 2020 \n")

        assert result.skipped == 1
        assert len(repository.list()) == 1

    def test_same_name_different_year_is_imported(self, db, repository):
        repository.create("Toyota", "Corolla", 2020)

        result = CsvImporter(db).run("make,model,year\nToyota,Corolla,2021\n")

        assert result.imported == 1

    def test_header_only_document_imports_nothing(self, db):
        result = CsvImporter(db).run("make,model,year,count\n")
        assert (result.imported, result.skipped, result.invalid) == (0, 0, 0)
