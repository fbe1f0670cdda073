"""Tests for settings parsing and domain enums."""

import pytest

from surtidores.config import (
    PROVINCE_TO_REGION,
    CommentReportReason,
    Settings,
    TimeOfDay,
)
from surtidores.services.stations import region_for_province


@pytest.mark.unit
class TestSettings:
    def test_cors_origins_from_comma_separated_string(self):
        s = Settings(CORS_ORIGINS="http://a.test, http://b.test")

        assert s.CORS_ORIGINS == ["http://a.test", "http://b.test"]

    def test_cors_origins_list_passthrough(self):
        s = Settings(CORS_ORIGINS=["http://a.test"])

        assert s.CORS_ORIGINS == ["http://a.test"]

    def test_default_validation_threshold(self):
        assert Settings().PRICE_VALIDATION_THRESHOLD == 3


@pytest.mark.unit
class TestTimeOfDay:
    def test_ambos_expands_to_both_schedules(self):
        assert TimeOfDay.ambos.expand() == [TimeOfDay.diurno, TimeOfDay.nocturno]

    @pytest.mark.parametrize("value", [TimeOfDay.diurno, TimeOfDay.nocturno])
    def test_single_schedule_expands_to_itself(self, value):
        assert value.expand() == [value]


@pytest.mark.unit
def test_every_report_reason_has_a_label():
    labels = {reason.label for reason in CommentReportReason}

    assert len(labels) == len(CommentReportReason)
    assert CommentReportReason.false_information.label == "Información falsa"


@pytest.mark.unit
class TestRegionForProvince:
    def test_known_province(self):
        assert region_for_province("Mendoza") == "Cuyo"

    def test_unknown_province_falls_back(self):
        assert region_for_province("Atlántida") == "Otra"

    def test_every_mapped_region_is_known(self):
        assert set(PROVINCE_TO_REGION.values()) == {
            "Metropolitana",
            "Centro",
            "Cuyo",
            "Norte",
            "Patagonia",
        }
