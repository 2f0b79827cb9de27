"""
Tests for checklist label normalization and column classification.
"""
import pytest

from planta.services.checklist import (
    RESERVED_COLUMNS,
    classify_checklist_columns,
    coerce_flag,
    normalize_label,
)


class TestNormalizeLabel:
    @pytest.mark.parametrize(
        "label,expected",
        [
            ("Primer aplicado", "primer_aplicado"),
            ("Imprimación", "imprimacion"),
            ("Numeración grabada", "numeracion_grabada"),
            ("  Anclajes de suspensión  ", "anclajes_de_suspension"),
            ("Depósito / combustible (lleno)", "deposito_combustible_lleno"),
            ("--Ruedas___montadas--", "ruedas_montadas"),
            ("Prueba 2 de frenos", "prueba_2_de_frenos"),
            ("ÑANDÚ", "nandu"),
            ("Par 2,5 Nm", "par_2_5_nm"),
            ("Don’t skip", "don_t_skip"),
            ("Tornillos &amp; tuercas", "tornillos_amp_tuercas"),
        ],
    )
    def test_examples(self, label, expected):
        assert normalize_label(label) == expected

    @pytest.mark.parametrize(
        "label",
        ["Primer aplicado", "Capa de color", "  Señal   ÁMBAR!! ", "a-b_c d", "", "___"],
    )
    def test_idempotent(self, label):
        once = normalize_label(label)
        assert normalize_label(once) == once

    def test_only_separator_characters_normalize_to_empty(self):
        assert normalize_label("¡¿ ?!") == ""


class TestClassifyColumns:
    def test_reserved_columns_are_excluded_in_schema_order(self):
        columns = ["id", "vin", "lijado", "color", "paint_code", "barniz", "state", "start_time", "end_time"]
        assert classify_checklist_columns(columns) == ["lijado", "barniz"]

    def test_match_is_case_sensitive(self):
        assert classify_checklist_columns(["ID", "Color", "id"]) == ["ID", "Color"]

    def test_reserved_set(self):
        assert RESERVED_COLUMNS == {"id", "color", "paint_code", "vin", "start_time", "end_time", "state"}


class TestCoerceFlag:
    @pytest.mark.parametrize("value", [True, 1, 2, 0.5, "1", "true", "TRUE", " yes ", "on"])
    def test_truthy(self, value):
        assert coerce_flag(value) == 1

    @pytest.mark.parametrize("value", [False, 0, 0.0, "0", "false", "no", "off", "", "cualquiera", None, [], {}])
    def test_falsy(self, value):
        assert coerce_flag(value) == 0
