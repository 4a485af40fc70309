"""Unit tests for season draft validation."""

from datetime import date, timedelta

import pytest

from app.models.media import MediaSlot, UploadedFile
from app.models.season_status import SeasonStatus
from app.services.season_validation import (
    find_upload_violation,
    validate_season_dates,
    validate_season_draft,
)
from tests.unit.helpers import make_draft, png


class TestValidateSeasonDates:
    """Tests for the cross-field date rules."""

    def test_consistent_dates_pass(self):
        assert validate_season_dates(make_draft()) == {}

    @pytest.mark.parametrize("offset", [0, 1, 30])
    def test_end_not_after_start(self, offset):
        start = date(2025, 3, 1)
        draft = make_draft(start_date=start, end_date=start - timedelta(days=offset))

        errors = validate_season_dates(draft)

        assert errors["end_date"] == "End date must be after start date"

    @pytest.mark.parametrize("offset", [0, 1, 45])
    def test_audition_deadline_not_before_start(self, offset):
        start = date(2025, 3, 1)
        draft = make_draft(audition_form_deadline=start + timedelta(days=offset))

        errors = validate_season_dates(draft)

        assert errors["audition_form_deadline"] == "Audition deadline must be before start date"

    def test_voting_end_after_season_end(self):
        draft = make_draft(voting_end_date=date(2025, 6, 2))

        errors = validate_season_dates(draft)

        assert errors["voting_end_date"] == (
            "Voting end date must be before or equal to season end date"
        )

    def test_voting_end_on_season_end_is_allowed(self):
        draft = make_draft(voting_end_date=date(2025, 6, 1))
        assert "voting_end_date" not in validate_season_dates(draft)

    def test_reports_every_violation_at_once(self):
        draft = make_draft(
            start_date=date(2025, 6, 1),
            end_date=date(2025, 5, 1),
            audition_form_deadline=date(2025, 7, 1),
            voting_end_date=date(2025, 5, 2),
        )

        errors = validate_season_dates(draft)

        assert set(errors) == {"end_date", "audition_form_deadline", "voting_end_date"}

    def test_missing_dates_are_skipped(self):
        draft = make_draft(audition_form_deadline=None, voting_end_date=None, start_date=None)
        assert validate_season_dates(draft) == {}

    def test_upcoming_deadline_after_end_scenario(self):
        """Deadline 2024-06-02 for a season running 2024-01-01..2024-06-01."""
        draft = make_draft(
            SeasonStatus.UPCOMING,
            start_date=date(2024, 1, 1),
            end_date=date(2024, 6, 1),
            audition_form_deadline=date(2024, 6, 2),
            voting_end_date=date(2024, 5, 1),
        )

        errors = validate_season_draft(draft, is_editing=False)

        assert "audition_form_deadline" in errors


class TestValidateSeasonDraft:
    """Tests for the full submit-time batch."""

    def test_valid_draft_passes(self):
        assert validate_season_draft(make_draft(), is_editing=False) == {}

    def test_missing_status(self):
        draft = make_draft(status=None)
        errors = validate_season_draft(draft, is_editing=False)
        assert errors["status"] == "Please select a status"

    def test_upcoming_requires_deadline_and_voting_end(self):
        draft = make_draft(audition_form_deadline=None, voting_end_date=None)

        errors = validate_season_draft(draft, is_editing=False)

        assert errors["audition_form_deadline"] == (
            "Audition form deadline is required for upcoming seasons"
        )
        assert errors["voting_end_date"] == "Voting end date is required for upcoming seasons"

    def test_ongoing_deadline_is_optional(self):
        draft = make_draft(SeasonStatus.ONGOING, audition_form_deadline=None)
        assert validate_season_draft(draft, is_editing=False) == {}

    def test_ended_needs_neither(self):
        draft = make_draft(SeasonStatus.ENDED, audition_form_deadline=None, voting_end_date=None)
        assert validate_season_draft(draft, is_editing=False) == {}

    @pytest.mark.parametrize("year", [1899, 2101])
    def test_year_out_of_range(self, year):
        errors = validate_season_draft(make_draft(year=year), is_editing=False)
        assert errors["year"] == "Year must be between 1900 and 2100"

    def test_blank_slug(self):
        errors = validate_season_draft(make_draft(slug="  "), is_editing=False)
        assert errors["slug"] == "Slug is required"

    def test_negative_price(self):
        errors = validate_season_draft(make_draft(price_per_vote=-1), is_editing=False)
        assert errors["price_per_vote"] == "Price per vote must be positive"

    @pytest.mark.parametrize("price", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_price(self, price):
        errors = validate_season_draft(make_draft(price_per_vote=price), is_editing=False)
        assert errors["price_per_vote"] == "Price per vote must be a number"

    def test_ended_ignores_non_finite_price(self):
        draft = make_draft(status=SeasonStatus.ENDED, price_per_vote=float("nan"))
        errors = validate_season_draft(draft, is_editing=False)
        assert "price_per_vote" not in errors

    def test_create_requires_uploaded_main_image(self):
        draft = make_draft(image=MediaSlot(existing="seasons/main.png"))
        errors = validate_season_draft(draft, is_editing=False)
        assert errors["image"] == "Main image is required"

    def test_edit_accepts_stored_main_image(self):
        draft = make_draft(image=MediaSlot(existing="seasons/main.png"))
        assert validate_season_draft(draft, is_editing=True) == {}

    def test_edit_rejects_removed_main_image(self):
        slot = MediaSlot(existing="seasons/main.png")
        slot.remove_existing()
        errors = validate_season_draft(make_draft(image=slot), is_editing=True)
        assert errors["image"] == "Main image is required"

    def test_upload_limits(self):
        draft = make_draft()
        draft.gallery.add(UploadedFile("notes.txt", b"hello", "text/plain"))

        errors = validate_season_draft(draft, is_editing=False)

        assert "uploads" in errors
        assert "notes.txt" in errors["uploads"]


class TestFindUploadViolation:
    """Tests for upload size and type limits."""

    def test_accepts_images_within_limit(self):
        assert find_upload_violation([png()], max_bytes=1024) is None

    def test_too_large(self):
        violation = find_upload_violation([png(content=b"x" * 2048)], max_bytes=1024)
        assert violation is not None
        assert violation.code == "LIMIT_FILE_SIZE"

    def test_wrong_type(self):
        upload = UploadedFile("doc.pdf", b"%PDF", "application/pdf")
        violation = find_upload_violation([upload])
        assert violation is not None
        assert violation.code == "INVALID_FILE_TYPE"
