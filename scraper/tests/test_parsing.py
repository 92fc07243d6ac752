from parsing import (
    clean_text,
    extract_year,
    html_fragment_to_text,
    parse_integer,
    parse_number,
    unique_strings,
)


class TestCleanText:
    def test_collapses_whitespace(self):
        assert clean_text("  BMW \n\t X5  ") == "BMW X5"

    def test_non_breaking_space(self):
        assert clean_text("12\xa0500") == "12 500"

    def test_none(self):
        assert clean_text(None) == ""


class TestParseNumber:
    def test_space_thousands(self):
        assert parse_number("12 500 €") == 12500.0

    def test_plain_digits(self):
        assert parse_number("24900") == 24900.0

    def test_dot_decimal(self):
        assert parse_number("24448.98") == 24448.98

    def test_comma_decimal(self):
        assert parse_number("12,5") == 12.5

    def test_dutch_style(self):
        assert parse_number("1.815,50") == 1815.5

    def test_english_style(self):
        assert parse_number("1,815.50") == 1815.5

    def test_single_separator_three_digits_is_thousands(self):
        assert parse_number("4,284") == 4284.0
        assert parse_number("12.500") == 12500.0

    def test_repeated_separator(self):
        assert parse_number("1.234.567") == 1234567.0

    def test_negative(self):
        assert parse_number("-3,5") == -3.5

    def test_no_digits(self):
        assert parse_number("При запитване") is None

    def test_none(self):
        assert parse_number(None) is None

    def test_empty(self):
        assert parse_number("") is None

    def test_two_decimal_prices_reparse_stably(self):
        price = parse_number("24 448.98 лв.")
        assert parse_number(str(price)) == price

    def test_three_decimals_read_as_thousands(self):
        assert parse_number(str(1234.567)) == 1234567.0


class TestParseInteger:
    def test_mileage(self):
        assert parse_integer("135 000 км") == 135000

    def test_year(self):
        assert parse_integer("2018 г.") == 2018

    def test_leading_minus(self):
        assert parse_integer("-15 C") == -15

    def test_no_digits(self):
        assert parse_integer("няма данни") is None

    def test_none(self):
        assert parse_integer(None) is None


class TestExtractYear:
    def test_month_and_year(self):
        assert extract_year("май 2018 г.") == "2018"

    def test_ignores_non_year_numbers(self):
        assert extract_year("135000 км, 1995") == "1995"

    def test_no_year(self):
        assert extract_year("3000 куб.см") is None

    def test_none(self):
        assert extract_year(None) is None


class TestUniqueStrings:
    def test_keeps_first_seen_order(self):
        assert unique_strings(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]

    def test_drops_empty(self):
        assert unique_strings(["", None, "a"]) == ["a"]

    def test_exact_match_only(self):
        assert unique_strings(["http://x/a.jpg", "https://x/a.jpg"]) == ["http://x/a.jpg", "https://x/a.jpg"]


class TestHtmlFragmentToText:
    def test_br_and_tags(self):
        assert html_fragment_to_text("12 500 <b>€</b><br/>") == "12 500 €"

    def test_paragraph_breaks(self):
        assert html_fragment_to_text("<p>Първи</p><p>Втори</p>", paragraph_breaks=True) == "Първи Втори"

    def test_entities(self):
        assert html_fragment_to_text("12&nbsp;500 &euro;") == "12 500 €"

    def test_empty(self):
        assert html_fragment_to_text(None) == ""
