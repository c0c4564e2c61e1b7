"""
core/billing/models.py tests

Numeric helpers, draw variants and ledger (de)serialization
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from core.billing.errors import InvalidAmount, InvalidProjectData
from core.billing.models import (
    CompanyInfo,
    HoldbackReleaseDraw,
    ProgressDraw,
    ProjectLedger,
    draw_from_dict,
    parse_timestamp,
    percent_of,
    to_decimal,
    to_money,
)
from core.types import DrawKind


def _progress_draw(**overrides) -> ProgressDraw:
    values = dict(
        draw_number=1,
        invoice_number="J-2207-001",
        date=datetime(2025, 3, 20, 12, 0, tzinfo=timezone.utc),
        percent_complete=Decimal("50"),
        gross_amount=Decimal("5000.00"),
        holdback_amount=Decimal("500.00"),
        net_payable=Decimal("4500.00"),
        cumulative_invoiced=Decimal("5000.00"),
        cumulative_percent=Decimal("50"),
        remaining_to_bill=Decimal("5000.00"),
        holdback_percent=Decimal("10"),
    )
    values.update(overrides)
    return ProgressDraw(**values)


class TestNumericHelpers:
    """to_decimal / to_money / percent_of"""

    @pytest.mark.parametrize(
        "value, expected",
        [(10, Decimal("10")), (0.1, Decimal("0.1")), ("12.50", Decimal("12.50"))],
    )
    def test_to_decimal(self, value, expected: Decimal) -> None:
        """Numbers convert through their string form"""
        assert to_decimal(value) == expected

    @pytest.mark.parametrize("value", [True, "abc", "NaN", "Infinity", None])
    def test_to_decimal_rejects(self, value) -> None:
        """Booleans and non-finite values are not amounts"""
        with pytest.raises(InvalidAmount):
            to_decimal(value)

    def test_invalid_amount_is_value_error(self) -> None:
        """Callers can catch ValueError"""
        with pytest.raises(ValueError):
            to_decimal("abc")

    @pytest.mark.parametrize(
        "value, expected",
        [("0.005", "0.01"), ("2.675", "2.68"), ("-0.005", "-0.01"), (3, "3.00")],
    )
    def test_to_money_rounds_half_up(self, value, expected: str) -> None:
        """Cents with ROUND_HALF_UP"""
        assert str(to_money(value)) == expected

    def test_percent_of_zero_whole(self) -> None:
        """0 instead of division by zero"""
        assert percent_of(Decimal("100"), Decimal("0")) == Decimal("0")

    def test_percent_of(self) -> None:
        """Rounded to two places"""
        assert percent_of(Decimal("1"), Decimal("3")) == Decimal("33.33")


class TestParseTimestamp:
    """parse_timestamp()"""

    def test_zulu_suffix(self) -> None:
        """Browser style ...Z timestamps"""
        ts = parse_timestamp("2024-11-02T15:30:00.000Z")

        assert ts == datetime(2024, 11, 2, 15, 30, tzinfo=timezone.utc)

    def test_naive_is_utc(self) -> None:
        """Timestamps without offset are treated as UTC"""
        ts = parse_timestamp("2025-04-01T08:00:00")

        assert ts.tzinfo == timezone.utc

    def test_empty(self) -> None:
        """None and empty string mean no timestamp"""
        assert parse_timestamp(None) is None
        assert parse_timestamp("") is None

    def test_invalid(self) -> None:
        """Garbage fails as invalid data"""
        with pytest.raises(InvalidProjectData):
            parse_timestamp("yesterday")


class TestDrawVariants:
    """ProgressDraw / HoldbackReleaseDraw"""

    def test_progress_draw(self) -> None:
        """Kind tag and payment defaults"""
        draw = _progress_draw()

        assert draw.kind == DrawKind.PROGRESS
        assert draw.is_holdback_release is False
        assert draw.is_paid is False
        assert draw.paid_date is None

    def test_release_draw_derived_fields(self) -> None:
        """Release exposes the same fields as a progress draw"""
        draw = HoldbackReleaseDraw(
            draw_number=3,
            invoice_number="J-2207-RELEASE-003",
            date=datetime(2025, 6, 1, tzinfo=timezone.utc),
            release_amount=Decimal("1000.00"),
            cumulative_invoiced=Decimal("10000.00"),
            cumulative_percent=Decimal("100.00"),
            remaining_to_bill=Decimal("0.00"),
        )

        assert draw.kind == DrawKind.HOLDBACK_RELEASE
        assert draw.is_holdback_release is True
        assert draw.percent_complete is None
        assert draw.gross_amount == Decimal("0")
        assert draw.holdback_amount == Decimal("-1000.00")
        assert draw.net_payable == Decimal("1000.00")

    def test_mark_paid(self) -> None:
        """mark_paid sets flag and date"""
        draw = _progress_draw()
        paid = datetime(2025, 4, 1, tzinfo=timezone.utc)

        draw.mark_paid(paid)

        assert draw.is_paid is True
        assert draw.paid_date == paid

    def test_kind_is_not_an_init_argument(self) -> None:
        """The tag cannot be overridden"""
        with pytest.raises(TypeError):
            _progress_draw(kind=DrawKind.HOLDBACK_RELEASE)


class TestDrawFromDict:
    """draw_from_dict()"""

    def test_progress_round_trip(self) -> None:
        """to_dict output parses back to an equal draw"""
        draw = _progress_draw(notes="Framing", is_paid=True)

        assert draw_from_dict(draw.to_dict()) == draw

    def test_release_flagged_by_kind(self) -> None:
        """kind tag selects the release variant"""
        data = {
            "kind": "holdback_release",
            "draw_number": 2,
            "release_amount": "300",
            "net_payable": "300",
        }

        draw = draw_from_dict(data)

        assert isinstance(draw, HoldbackReleaseDraw)
        assert draw.release_amount == Decimal("300.00")

    def test_release_flagged_by_camel_case_flag(self) -> None:
        """isHoldbackRelease marks a browser release"""
        data = {
            "drawNumber": 2,
            "isHoldbackRelease": True,
            "percentComplete": None,
            "grossAmount": 0,
            "holdbackAmount": -300,
            "netPayable": 300,
        }

        draw = draw_from_dict(data)

        assert isinstance(draw, HoldbackReleaseDraw)
        assert draw.net_payable == Decimal("300.00")

    def test_holdback_percent_derived_from_amounts(self) -> None:
        """Draws without a rate get gross/holdback ratio"""
        data = {
            "drawNumber": 1,
            "percentComplete": 25,
            "grossAmount": 2000,
            "holdbackAmount": 100,
            "netPayable": 1900,
        }

        draw = draw_from_dict(data, Decimal("10"))

        assert draw.holdback_percent == Decimal("5")

    def test_holdback_percent_falls_back_to_default(self) -> None:
        """Zero gross cannot be used for the ratio"""
        data = {
            "drawNumber": 1,
            "percentComplete": 0,
            "grossAmount": 0,
            "holdbackAmount": 0,
            "netPayable": 0,
        }

        draw = draw_from_dict(data, Decimal("12"))

        assert draw.holdback_percent == Decimal("12")

    @pytest.mark.parametrize(
        "data",
        [
            "draw",
            {"percent_complete": 10},
            {"draw_number": "x", "gross_amount": 1},
            {"draw_number": 1, "percent_complete": 10, "gross_amount": "abc",
             "holdback_amount": 0, "net_payable": 0},
        ],
    )
    def test_invalid(self, data) -> None:
        """Malformed draws fail as invalid data"""
        with pytest.raises(InvalidProjectData):
            draw_from_dict(data)


class TestProjectLedger:
    """ProjectLedger"""

    def test_new_ledger(self) -> None:
        """Zeroed ledger is not initialized"""
        project = ProjectLedger(estimate_id="42")

        assert project.is_initialized is False
        assert project.percent_complete == Decimal("0")
        assert project.available_holdback == Decimal("0")
        assert project.next_draw_number == 1
        assert project.last_draw_date is None

    def test_negative_total_is_not_initialized(self) -> None:
        """Only a positive estimate total counts as initialized"""
        project = ProjectLedger(estimate_id="42", estimate_total=Decimal("-100.00"))

        assert project.is_initialized is False

    def test_derived_totals(self) -> None:
        """Totals derived from the stored fields"""
        project = ProjectLedger(
            estimate_id="177",
            estimate_total=Decimal("10000.00"),
            draws=[_progress_draw()],
            total_invoiced=Decimal("5000.00"),
            total_holdback=Decimal("500.00"),
            holdback_released=Decimal("200.00"),
        )

        assert project.percent_complete == Decimal("50.00")
        assert project.remaining_to_bill == Decimal("5000.00")
        assert project.available_holdback == Decimal("300.00")
        assert project.next_draw_number == 2
        assert project.find_draw(1) is project.draws[0]
        assert project.find_draw(2) is None

    def test_dict_round_trip(self) -> None:
        """to_dict/from_dict keep every field"""
        project = ProjectLedger(
            estimate_id="177",
            estimate_name="Clinic",
            client_name="Riverside Dental",
            customer_ref="J-2207",
            estimate_total=Decimal("10000.00"),
            draws=[_progress_draw()],
            total_invoiced=Decimal("5000.00"),
            total_holdback=Decimal("500.00"),
        )

        restored = ProjectLedger.from_dict(project.to_dict())

        assert restored == project

    def test_amounts_serialize_as_strings(self) -> None:
        """No floats in the serialized form"""
        data = ProjectLedger(estimate_id="1", estimate_total=Decimal("99.95")).to_dict()

        assert data["estimate_total"] == "99.95"
        assert data["total_invoiced"] == "0"

    @pytest.mark.parametrize(
        "data",
        [
            None,
            {},
            {"estimate_id": ""},
            {"estimate_id": "1", "estimate_total": "lots"},
            {"estimate_id": "1", "draws": {"1": {}}},
            {"estimate_id": "1", "estimate_total": "-10"},
            {"estimate_id": "1", "total_holdback": "20", "holdback_released": "500"},
        ],
    )
    def test_from_dict_invalid(self, data) -> None:
        """Malformed projects fail as invalid data"""
        with pytest.raises(InvalidProjectData):
            ProjectLedger.from_dict(data)


class TestCompanyInfo:
    """CompanyInfo"""

    def test_defaults(self) -> None:
        """Default company name"""
        company = CompanyInfo()

        assert company.name == "TAYLOR CONSTRUCTION"
        assert company.to_dict()["address"] == ""
