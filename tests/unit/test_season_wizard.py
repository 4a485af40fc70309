"""Unit tests for the season wizard and the event seasons panel."""

from datetime import date

import httpx
import pytest

from app.models.media import SlotState
from app.models.season_status import SeasonStatus
from app.services.season_wizard import (
    EventSeasonsPanel,
    NotificationLevel,
    SeasonWizard,
    WizardError,
    WizardStep,
)
from tests.unit.fake_api import FakeAgencyApi, multipart_text_fields, season_json
from tests.unit.helpers import make_season_read, png


def _fill_details(wizard: SeasonWizard) -> None:
    wizard.update(
        start_date=date(2025, 3, 1),
        end_date=date(2025, 6, 1),
        audition_form_deadline=date(2025, 2, 1),
        voting_end_date=date(2025, 5, 30),
    )
    wizard.replace_image("image", png("main.png"))


async def _create_wizard(api: FakeAgencyApi, **kwargs) -> SeasonWizard:
    wizard = SeasonWizard(1, "Miss Nepal", client=api.client(), **kwargs)
    await wizard.open()
    return wizard


@pytest.mark.asyncio
class TestStepTransitions:
    """Tests for the select-status / details state machine."""

    async def test_create_starts_on_status_selection(self):
        wizard = await _create_wizard(FakeAgencyApi())
        assert wizard.step is WizardStep.SELECT_STATUS
        assert wizard.draft.status is None

    async def test_continue_without_status_stays_put(self):
        wizard = await _create_wizard(FakeAgencyApi())

        assert not wizard.continue_to_details()

        assert wizard.step is WizardStep.SELECT_STATUS
        assert wizard.errors == {"status": "Please select a status"}

    async def test_continue_with_status_derives_slug(self):
        wizard = await _create_wizard(FakeAgencyApi())
        wizard.draft.year = 2025
        wizard.select_status(SeasonStatus.UPCOMING)

        assert wizard.continue_to_details()

        assert wizard.step is WizardStep.SEASON_DETAILS
        assert wizard.draft.slug == "miss-nepal-2025"
        assert wizard.errors == {}

    async def test_selecting_status_clears_inline_error(self):
        wizard = await _create_wizard(FakeAgencyApi())
        wizard.continue_to_details()

        wizard.select_status("ongoing")

        assert "status" not in wizard.errors

    async def test_back_returns_to_status_selection(self):
        wizard = await _create_wizard(FakeAgencyApi())
        wizard.select_status(SeasonStatus.ONGOING)
        wizard.continue_to_details()

        wizard.back()

        assert wizard.step is WizardStep.SELECT_STATUS
        assert wizard.draft.status is SeasonStatus.ONGOING

    async def test_cancel_discards_edits(self):
        wizard = await _create_wizard(FakeAgencyApi())
        wizard.select_status(SeasonStatus.UPCOMING)
        wizard.continue_to_details()
        wizard.update(get_ticket_link="https://tickets.example.com")

        wizard.cancel()

        assert wizard.step is WizardStep.CLOSED
        assert wizard.draft.status is None
        assert wizard.draft.get_ticket_link == ""
        assert wizard.draft.event_id == 1

    async def test_switching_to_ended_forces_values(self):
        """Price 100 and notice ["A"] are reset the moment ENDED is chosen."""
        wizard = await _create_wizard(FakeAgencyApi())
        wizard.select_status(SeasonStatus.UPCOMING)
        wizard.continue_to_details()
        wizard.update(price_per_vote=100, notice=["A"])
        wizard.back()

        wizard.select_status(SeasonStatus.ENDED)

        assert wizard.draft.price_per_vote == 0
        assert wizard.draft.notice == []

    async def test_forced_fields_cannot_be_edited(self):
        wizard = await _create_wizard(FakeAgencyApi())
        wizard.select_status(SeasonStatus.ENDED)
        wizard.continue_to_details()

        with pytest.raises(WizardError):
            wizard.update(price_per_vote=5)

    async def test_missing_event_name_is_fetched(self):
        api = FakeAgencyApi()
        api.reply("GET", "/api/events/1", {"success": True, "data": {"id": 1, "name": "Mr Nepal"}})
        wizard = SeasonWizard(1, client=api.client())

        await wizard.open()
        wizard.draft.year = 2026
        wizard.select_status(SeasonStatus.UPCOMING)
        wizard.continue_to_details()

        assert wizard.draft.slug == "mr-nepal-2026"


@pytest.mark.asyncio
class TestSlug:
    """Tests for slug derivation while editing fields."""

    async def test_year_change_rederives(self):
        wizard = await _create_wizard(FakeAgencyApi())
        wizard.select_status(SeasonStatus.UPCOMING)
        wizard.continue_to_details()

        wizard.set_year(2030)

        assert wizard.draft.slug == "miss-nepal-2030"

    async def test_manual_slug_survives_year_change(self):
        wizard = await _create_wizard(FakeAgencyApi())
        wizard.select_status(SeasonStatus.UPCOMING)
        wizard.continue_to_details()
        wizard.set_slug("grand-finale")

        wizard.set_year(2030)
        wizard.set_event_name("Other Event")

        assert wizard.draft.slug == "grand-finale"

    async def test_clearing_manual_slug_restores_derivation(self):
        wizard = await _create_wizard(FakeAgencyApi())
        wizard.select_status(SeasonStatus.UPCOMING)
        wizard.continue_to_details()
        wizard.set_slug("grand-finale")

        wizard.set_slug("")

        assert wizard.draft.slug == f"miss-nepal-{wizard.draft.year}"


@pytest.mark.asyncio
class TestEditMode:
    """Tests for editing a stored season."""

    async def test_edit_skips_status_selection(self):
        wizard = SeasonWizard(1, "Miss Nepal", make_season_read(), client=FakeAgencyApi().client())
        await wizard.open()

        assert wizard.step is WizardStep.SEASON_DETAILS
        assert wizard.draft.slug == "miss-nepal-2025"

    async def test_status_locked_by_default(self):
        wizard = SeasonWizard(1, "Miss Nepal", make_season_read(), client=FakeAgencyApi().client())
        await wizard.open()

        with pytest.raises(WizardError):
            wizard.select_status(SeasonStatus.ENDED)
        with pytest.raises(WizardError):
            wizard.back()

    async def test_status_unlocked_applies_forced_values(self):
        wizard = SeasonWizard(
            1,
            "Miss Nepal",
            make_season_read(),
            client=FakeAgencyApi().client(),
            status_locked_on_edit=False,
        )
        await wizard.open()

        wizard.select_status(SeasonStatus.ENDED)

        assert wizard.draft.status is SeasonStatus.ENDED
        assert wizard.draft.notice == []

    async def test_remove_existing_image_sends_removal(self):
        api = FakeAgencyApi()
        api.reply("PATCH", "/api/season/7", {"success": True, "data": season_json()})
        wizard = SeasonWizard(1, "Miss Nepal", make_season_read(), client=api.client())
        await wizard.open()

        wizard.remove_image("title_image")
        assert wizard.draft.title_image.state is SlotState.REMOVED
        assert await wizard.submit()

        fields = multipart_text_fields(api.last("PATCH"))
        assert fields["remove_images"] == '["title_image"]'

    async def test_gallery_urls_round_trip(self):
        wizard = SeasonWizard(
            1,
            "Miss Nepal",
            make_season_read(),
            client=FakeAgencyApi().client(),
            media_base_url="https://cdn.example.com",
        )
        await wizard.open()

        urls = wizard.gallery_urls()
        wizard.remove_gallery_image(urls[0])

        assert urls[0] == "https://cdn.example.com/seasons/gallery/a.png"
        assert wizard.draft.gallery.retained_references() == ["seasons/gallery/b.png"]
        assert wizard.image_url("poster_image") is None


@pytest.mark.asyncio
class TestSubmit:
    """Tests for submission guards and outcomes."""

    async def test_validation_errors_never_reach_network(self):
        api = FakeAgencyApi()
        wizard = await _create_wizard(api)
        wizard.select_status(SeasonStatus.UPCOMING)
        wizard.continue_to_details()

        assert not await wizard.submit()

        assert api.requests == []
        assert "start_date" in wizard.errors
        assert wizard.notifications[-1].message == "Please fix the validation errors"
        assert wizard.step is WizardStep.SEASON_DETAILS

    @pytest.mark.parametrize("price", [float("nan"), float("inf")])
    async def test_non_finite_price_stays_open(self, price):
        api = FakeAgencyApi()
        wizard = await _create_wizard(api)
        wizard.select_status(SeasonStatus.UPCOMING)
        wizard.continue_to_details()
        _fill_details(wizard)
        wizard.update(price_per_vote=price)

        assert not await wizard.submit()

        assert api.requests == []
        assert wizard.errors["price_per_vote"] == "Price per vote must be a number"
        assert wizard.step is WizardStep.SEASON_DETAILS

    async def test_success_closes_and_calls_back(self):
        api = FakeAgencyApi()
        api.reply("POST", "/api/season", {"success": True, "data": season_json()}, 201)
        saved = []

        async def on_success(season):
            saved.append(season)

        wizard = await _create_wizard(api, on_success=on_success)
        wizard.draft.year = 2025
        wizard.select_status(SeasonStatus.UPCOMING)
        wizard.continue_to_details()
        _fill_details(wizard)

        assert await wizard.submit()

        assert wizard.step is WizardStep.CLOSED
        assert [s.id for s in saved] == [7]
        assert wizard.notifications[-1].level is NotificationLevel.SUCCESS
        assert wizard.notifications[-1].message == "Season created successfully!"
        assert multipart_text_fields(api.last("POST"))["slug_auto"] == "true"

    async def test_transport_error_shows_generic_toast(self):
        def boom(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        api = FakeAgencyApi()
        api.on("POST", "/api/season", boom)
        wizard = await _create_wizard(api)
        wizard.select_status(SeasonStatus.UPCOMING)
        wizard.continue_to_details()
        _fill_details(wizard)

        assert not await wizard.submit()

        assert wizard.notifications[-1].message == "Failed to create season"
        assert wizard.step is WizardStep.SEASON_DETAILS
        assert not wizard.submitting

    async def test_business_error_is_shown(self):
        api = FakeAgencyApi()
        api.reply(
            "POST",
            "/api/season",
            {"success": False, "code": "DUPLICATE_KEY", "key_value": {"slug": "x"}},
            409,
        )
        wizard = await _create_wizard(api)
        wizard.select_status(SeasonStatus.UPCOMING)
        wizard.continue_to_details()
        _fill_details(wizard)

        assert not await wizard.submit()

        assert wizard.notifications[-1].message == "A season with slug 'x' already exists"

    async def test_duplicate_submit_is_ignored(self):
        api = FakeAgencyApi()
        wizard = await _create_wizard(api)
        wizard.select_status(SeasonStatus.UPCOMING)
        wizard.continue_to_details()
        _fill_details(wizard)
        wizard.submitting = True

        assert not await wizard.submit()
        assert api.requests == []


@pytest.mark.asyncio
class TestEventSeasonsPanel:
    """Tests for the parent panel."""

    async def test_refresh_after_save(self):
        api = FakeAgencyApi()
        api.reply("GET", "/api/events/1/seasons", {"success": True, "data": [season_json()]})
        api.reply("POST", "/api/season", {"success": True, "data": season_json()}, 201)
        panel = EventSeasonsPanel(api.client(), 1, "Miss Nepal")

        wizard = await panel.open_create()
        wizard.select_status(SeasonStatus.UPCOMING)
        wizard.continue_to_details()
        _fill_details(wizard)
        await wizard.submit()

        assert [s.id for s in panel.seasons] == [7]

    async def test_open_edit_loads_season(self):
        api = FakeAgencyApi()
        api.reply("GET", "/api/season/7", {"success": True, "data": season_json()})
        panel = EventSeasonsPanel(api.client(), 1, "Miss Nepal")

        wizard = await panel.open_edit(7)

        assert wizard is not None
        assert wizard.is_editing
        assert wizard.draft.image.existing == "seasons/main.png"

    async def test_delete_failure_is_reported(self):
        api = FakeAgencyApi()
        api.reply("DELETE", "/api/season/7", {"success": False, "message": "Season not found"}, 404)
        panel = EventSeasonsPanel(api.client(), 1, "Miss Nepal")

        assert not await panel.delete(7)
        assert panel.notifications[-1].message == "Season not found"
