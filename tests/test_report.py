"""
Unit tests for report formatting and PDF export.
"""

from datetime import date
from decimal import Decimal

from framecount.core.pricing import DEFAULT_TIERS, PricingTier
from framecount.core.shots import build_shot
from framecount.report.formatting import format_currency, format_frame_range, report_filename
from framecount.report.pdf import ReportConfig, build_report_pdf, legend_rows, shot_rows


class TestFormatting:
    """Test currency and range formatting."""

    def test_currency_grouping(self):
        """Verify whole Rupiah with dot separators."""
        assert format_currency(Decimal("125000")) == "Rp 125.000"
        assert format_currency(Decimal("1234567")) == "Rp 1.234.567"
        assert format_currency(0) == "Rp 0"

    def test_currency_rounds_to_whole_units(self):
        """Verify fractional amounts round half up."""
        assert format_currency(Decimal("999.5")) == "Rp 1.000"
        assert format_currency(Decimal("999.4")) == "Rp 999"

    def test_frame_range(self):
        """Verify bounded and open-ended ranges."""
        assert format_frame_range(DEFAULT_TIERS[0]) == "0 - 100 frames"
        unbounded = PricingTier(min=201, max=100000, price=Decimal("1"), label="X")
        assert format_frame_range(unbounded) == "201 - ∞ frames"

    def test_report_filename(self):
        """Verify titles become lowercase dashed file names."""
        assert report_filename("Estimasi Biaya  Shot LOM") == "estimasi-biaya-shot-lom.pdf"
        assert report_filename("   ") == "report.pdf"


class TestReportRows:
    """Test table rows fed to the PDF."""

    def test_shot_rows_numbered(self):
        """Verify shot rows carry index, name, frames and price."""
        shots = [build_shot("a", 50, DEFAULT_TIERS), build_shot("b", 150, DEFAULT_TIERS)]
        assert shot_rows(shots) == [
            ["1", "A", "50", "Rp 125.000"],
            ["2", "B", "150", "Rp 150.000"],
        ]

    def test_legend_rows_match_tiers(self):
        """Verify the legend lists every tier in order."""
        assert legend_rows(DEFAULT_TIERS) == [
            ["Kategori 1", "0 - 100 frames", "Rp 125.000"],
            ["Kategori 2", "101 - 200 frames", "Rp 150.000"],
            ["Kategori 3", "201 - 999 frames", "Rp 225.000"],
        ]


class TestBuildReportPdf:
    """Test PDF generation."""

    def test_writes_pdf(self, tmp_path):
        """Verify a PDF document is written."""
        shots = [build_shot("SQ01_SC01_SH01", 49, DEFAULT_TIERS)]
        config = ReportConfig(title="Episode <1> & Co", author="Dewi", notes="Draft")
        output = build_report_pdf(
            shots, DEFAULT_TIERS, config, tmp_path / "out" / "report.pdf",
            report_date=date(2025, 12, 30),
        )
        assert output.exists()
        assert output.read_bytes().startswith(b"%PDF")

    def test_writes_empty_report(self, tmp_path):
        """Verify an estimate without shots still renders."""
        output = build_report_pdf([], DEFAULT_TIERS, ReportConfig(title="Empty"), tmp_path / "e.pdf")
        assert output.read_bytes().startswith(b"%PDF")

    def test_report_id_generated(self):
        """Verify a report id is generated when omitted."""
        config = ReportConfig(title="T")
        assert config.report_id.isdigit()
