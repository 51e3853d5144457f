"""Tests for field validation checks."""

import pytest

from caixa.validation import (
    FieldError,
    canonical_month,
    collect,
    validate_amount,
    validate_amount_allow_zero,
    validate_cnpj,
    validate_day_of_month,
    validate_discount,
    validate_email,
    validate_free_text,
    validate_hex_color,
    validate_max_bytes,
    validate_max_length,
    validate_min_length,
    validate_month,
    validate_no_mongo_operators,
    validate_no_path_traversal,
    validate_no_script_tags,
    validate_no_sql_injection,
    validate_non_negative,
    validate_percentage,
    validate_positive_number,
    validate_quantity,
    validate_range,
    validate_required,
    validate_status,
    validate_text,
    validate_year,
)


class TestCollect:
    """Test aggregation of check outcomes."""

    def test_keeps_every_failure(self):
        """Should report all failing fields, not just the first."""
        result = collect(
            validate_amount(-1),
            validate_month("Foo"),
            validate_year(1999),
            validate_status("X"),
        )
        assert not result.is_valid
        assert [e.field for e in result.errors] == ["amount", "month", "year", "status"]

    def test_drops_none_and_flattens_iterables(self):
        """Should accept lists of outcomes such as per-item checks."""
        result = collect(None, [None, FieldError("items[0].quantity", "bad")])
        assert result.errors == (FieldError("items[0].quantity", "bad"),)

    def test_empty_is_valid(self):
        assert collect().is_valid

    def test_merge(self):
        merged = collect(FieldError("a", "x")).merge(collect(FieldError("b", "y")))
        assert [e.field for e in merged.errors] == ["a", "b"]


class TestGenericChecks:
    """Test the building-block checks at their boundaries."""

    @pytest.mark.parametrize("value, expected", [
        ("x" * 99, None),
        ("x" * 100, None),
        ("x" * 101, FieldError("name", "name deve ter no máximo 100 caracteres")),
        (None, None),
    ])
    def test_max_length(self, value, expected):
        assert validate_max_length(value, 100, "name") == expected

    @pytest.mark.parametrize("value, expected", [
        ("x" * 5, FieldError("password", "password deve ter no mínimo 6 caracteres")),
        ("x" * 6, None),
        ("x" * 7, None),
        (None, FieldError("password", "password deve ter no mínimo 6 caracteres")),
    ])
    def test_min_length(self, value, expected):
        assert validate_min_length(value, 6, "password") == expected

    @pytest.mark.parametrize("value, expected", [
        ("é" * 35 + "a", None),
        ("é" * 36, None),
        ("é" * 36 + "a", FieldError("password", "password deve ter no máximo 72 bytes")),
        ("a" * 72, None),
    ])
    def test_max_bytes_counts_encoded_length(self, value, expected):
        assert validate_max_bytes(value, 72, "password") == expected

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_required_rejects_blank(self, value):
        assert validate_required(value, "title") == FieldError("title", "title não pode ser vazio")

    @pytest.mark.parametrize("value", ["a", 0, " x "])
    def test_required_accepts_present_values(self, value):
        assert validate_required(value, "title") is None

    @pytest.mark.parametrize("value, expected", [
        (-0.01, FieldError("amount", "amount deve ser maior que zero")),
        (0, FieldError("amount", "amount deve ser maior que zero")),
        (0.01, None),
        (float("nan"), FieldError("amount", "amount deve ser maior que zero")),
    ])
    def test_positive_number(self, value, expected):
        assert validate_positive_number(value, "amount") == expected

    @pytest.mark.parametrize("value, expected", [
        (-0.01, FieldError("budget", "budget deve ser maior ou igual a zero")),
        (0, None),
        (0.01, None),
    ])
    def test_non_negative(self, value, expected):
        assert validate_non_negative(value, "budget") == expected

    @pytest.mark.parametrize("value, expected", [
        (0, FieldError("day", "day deve estar entre 1 e 31")),
        (1, None),
        (2, None),
        (30, None),
        (31, None),
        (32, FieldError("day", "day deve estar entre 1 e 31")),
    ])
    def test_range(self, value, expected):
        assert validate_range(value, 1, 31, "day") == expected

    @pytest.mark.parametrize("value, expected", [
        (-1, FieldError("discount", "discount deve estar entre 0 e 100")),
        (0, None),
        (99.99, None),
        (100, None),
        (100.01, FieldError("discount", "discount deve estar entre 0 e 100")),
    ])
    def test_percentage(self, value, expected):
        assert validate_percentage(value, "discount") == expected

    def test_domain_checks_reuse_generic_messages(self):
        assert validate_amount(0) == FieldError("amount", "amount deve ser maior que zero")
        assert validate_amount_allow_zero(-1) == FieldError("budget", "budget deve ser maior ou igual a zero")
        assert validate_discount(101, "PERCENT") == FieldError("discount", "discount deve estar entre 0 e 100")
        assert validate_day_of_month(0).message == "Dia do mês deve estar entre 1 e 31"


class TestAmounts:
    """Test money and quantity checks."""

    @pytest.mark.parametrize("value", [0.01, 1, 1500.5, 999_999_999.99])
    def test_valid_amounts(self, value):
        assert validate_amount(value) is None

    @pytest.mark.parametrize("value", [0, -5, 1_000_000_000, 10.123, float("nan"), float("inf"), None, "10"])
    def test_invalid_amounts(self, value):
        assert validate_amount(value) is not None

    def test_boolean_is_not_a_number(self):
        assert validate_amount(True) is not None

    def test_allow_zero(self):
        assert validate_amount_allow_zero(0) is None
        assert validate_amount_allow_zero(-0.01) is not None

    def test_quantity_allows_four_decimals(self):
        assert validate_quantity(1.2345) is None
        assert validate_quantity(1.23456) is not None
        assert validate_quantity(0) is not None

    def test_percent_discount_capped_at_100(self):
        assert validate_discount(100, "PERCENT") is None
        assert validate_discount(100.01, "PERCENT") is not None

    def test_value_discount_may_exceed_100(self):
        assert validate_discount(250, "VALUE") is None
        assert validate_discount(-1, "VALUE") is not None


class TestDomainFields:
    """Test month, year, status and format checks."""

    def test_portuguese_months(self):
        assert validate_month("Janeiro") is None
        assert validate_month("Março") is None
        assert validate_month("Acumulado") is None
        assert validate_month("January") is not None
        assert validate_month("") is not None

    def test_unaccented_march_is_accepted_and_canonicalized(self):
        assert validate_month("Marco") is None
        assert canonical_month("Marco") == "Março"
        assert canonical_month("Abril") == "Abril"

    def test_year_bounds(self):
        assert validate_year(2000) is None
        assert validate_year(2100) is None
        assert validate_year(1999) is not None
        assert validate_year(2101) is not None
        assert validate_year("2025") is not None

    def test_status_is_case_insensitive(self):
        assert validate_status("pago") is None
        assert validate_status("PENDENTE") is not None

    def test_hex_color(self):
        assert validate_hex_color("#FF5733") is None
        assert validate_hex_color("") is None
        assert validate_hex_color("red") is not None
        assert validate_hex_color("#FFF") is not None

    def test_day_of_month(self):
        assert validate_day_of_month(1) is None
        assert validate_day_of_month(31) is None
        assert validate_day_of_month(0) is not None
        assert validate_day_of_month(32) is not None

    def test_email(self):
        assert validate_email("user@example.com") is None
        assert validate_email("not-an-email") is not None
        assert validate_email(None).message == "Email não pode ser vazio"

    def test_cnpj_is_optional_but_needs_14_digits(self):
        assert validate_cnpj(None) is None
        assert validate_cnpj("11.222.333/0001-81") is None
        assert validate_cnpj("1122233300018") is not None


class TestInjectionGuards:
    """Test the free-text guards."""

    def test_script_tags(self):
        assert validate_no_script_tags("<script>alert(1)</script>", "f") is not None
        assert validate_no_script_tags('<img onerror="x">', "f") is not None
        assert validate_no_script_tags("javascript:alert(1)", "f") is not None
        assert validate_no_script_tags("Conta de luz", "f") is None

    def test_mongo_operators(self):
        assert validate_no_mongo_operators("$where", "f") is not None
        assert validate_no_mongo_operators('{"$gt": ""}', "f") is not None

    def test_currency_symbol_is_not_an_operator(self):
        assert validate_no_mongo_operators("R$ 100,00", "f") is None
        assert validate_no_mongo_operators("R$100", "f") is None

    def test_sql_injection(self):
        assert validate_no_sql_injection("'; DROP TABLE users; --", "f") is not None
        assert validate_no_sql_injection("x' OR 1=1", "f") is not None
        assert validate_no_sql_injection("a /* b */", "f") is not None
        assert validate_no_sql_injection("Aluguel; pago em dinheiro", "f") is None

    def test_path_traversal(self):
        assert validate_no_path_traversal("../etc/passwd", "f") is not None
        assert validate_no_path_traversal("%2E%2E/x", "f") is not None
        assert validate_no_path_traversal("docs/file.txt", "f") is None

    def test_free_text_reports_first_guard(self):
        error = validate_free_text("<script>SELECT</script>", "description")
        assert error.field == "description"
        assert error.message == "Conteúdo contém código não permitido"

    def test_text_required_and_length(self):
        assert validate_text("", "name", 10, required=True).message == "name não pode ser vazio"
        assert validate_text(None, "name", 10) is None
        assert validate_text("x" * 11, "name", 10) == FieldError("name", "name deve ter no máximo 10 caracteres")
        assert validate_text("x" * 10, "name", 10) is None
        assert validate_text("Padaria", "name", 10) is None
