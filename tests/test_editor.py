import pytest

from cardstudio.core.exceptions import ActivationConflict, DesignValidationError, TransportFailure
from cardstudio.domain.schemas import CardDesign
from cardstudio.services.editor import EditorSession
from cardstudio.services.rendering import Surface
from conftest import BUSINESS_ID


def _new_session(service, organization_name="Blue Bottle"):
    session = EditorSession(service, BUSINESS_ID, organization_name=organization_name)
    session.set_field("name", "Autumn")
    session.set_field("description", "Coffee rewards")
    return session


def _existing_session(service, store, **overrides):
    record = store.seed(**overrides)
    return EditorSession(service, BUSINESS_ID, design=CardDesign.from_record(record))


def test_new_session_starts_from_defaults(service):
    session = EditorSession(service, BUSINESS_ID, organization_name="Blue Bottle")

    assert session.is_new
    assert session.form.organization_name == "Blue Bottle"
    assert session.form.total_stamps == 10
    assert session.preview_stamps == 3


def test_color_edits_are_normalized(service):
    session = _new_session(service)
    assert session.set_color("background_color", "#FF8800") == "rgb(255, 136, 0)"
    assert session.set_color("label_color", "nonsense") == "rgb(28, 28, 30)"

    with pytest.raises(KeyError):
        session.set_color("name", "#ffffff")


def test_stamp_stepper_stays_in_range(service):
    session = _new_session(service)
    session.set_field("total_stamps", 20)
    assert session.step_total_stamps(1) == 20

    session.set_field("total_stamps", 2)
    assert session.step_total_stamps(-1) == 2
    assert session.step_total_stamps(1) == 3


def test_preview_stamps_are_clamped(service):
    session = _new_session(service)
    assert session.set_preview_stamps(50) == 10
    assert session.set_preview_stamps(-1) == 0

    session.set_preview_stamps(8)
    session.set_field("total_stamps", 4)
    assert session.preview_stamps == 4


def test_add_field_respects_cap_and_generates_unique_keys(service):
    session = _new_session(service)

    added = [session.add_field("secondary_fields", label="L") for _ in range(3)]

    assert added[-1] is None
    assert len(session.form.secondary_fields) == 3
    keys = [f.key for f in session.form.secondary_fields]
    assert len(set(keys)) == 3
    assert keys[0] == "reward"


def test_new_keys_are_unique_across_lists(service):
    session = _new_session(service)
    first = session.add_field("auxiliary_fields")
    second = session.add_field("back_fields")
    assert first.key != second.key


def test_update_remove_and_move_fields(service):
    session = _new_session(service)
    session.add_field("back_fields", label="Hours", value="9-5")

    session.update_field("back_fields", 1, value="8-6")
    assert session.form.back_fields[1].value == "8-6"

    assert session.move_field("back_fields", 1, -1)
    assert [f.label for f in session.form.back_fields] == ["Hours", "Terms & Conditions"]
    assert not session.move_field("back_fields", 0, -1)

    session.remove_field("back_fields", 0)
    assert [f.label for f in session.form.back_fields] == ["Terms & Conditions"]


def test_save_new_design_creates_it(service, store):
    session = _new_session(service)
    design = session.save()

    assert not session.is_new
    assert session.design_id == design.id
    assert store.requests == ["create"]


def test_save_blocks_invalid_form(service, store):
    session = EditorSession(service, BUSINESS_ID)

    with pytest.raises(DesignValidationError):
        session.save()

    assert {e.field for e in session.errors} == {"name", "organization_name", "description"}
    assert session.error is not None
    assert store.requests == []


def test_save_existing_design_updates_it(service, store):
    session = _existing_session(service, store, is_active=True)
    session.set_color("stamp_filled_color", "#00ff00")

    session.save()

    assert store.records[session.design_id]["stamp_filled_color"] == "rgb(0, 255, 0)"
    assert session.refresh_passes is True
    assert session.is_active is True


def test_save_clears_optional_values(service, store):
    session = _existing_session(
        service,
        store,
        foreground_color="#000000",
        icon_color="rgb(255, 0, 0)",
        logo_url="https://cdn.example/logo.png",
    )
    session.set_field("foreground_color", None)
    session.set_field("icon_color", None)
    session.set_field("logo_url", None)

    session.save()

    stored = store.records[session.design_id]
    assert stored["foreground_color"] is None
    assert stored["icon_color"] is None
    assert stored["logo_url"] is None
    assert session.form.icon_color is None
    # Without an explicit foreground the preview goes back to auto-contrast text
    assert session.preview().palette.text == "rgba(255,255,255,1)"


def test_failed_save_keeps_local_edits(service, store):
    session = _existing_session(service, store)
    session.set_field("name", "Edited")
    store.fail_on.add("update")

    with pytest.raises(TransportFailure):
        session.save()

    assert session.form.name == "Edited"
    assert "Failed to update design" in session.error


def test_last_completed_response_is_displayed(service, store):
    session = _existing_session(service, store, name="Original")
    design = CardDesign.from_record(store.records[session.design_id])

    early = session.begin()
    late = session.begin()
    assert session.pending == 2

    session.complete(late, design.model_copy(update={"name": "Late"}))
    assert session.form.name == "Late"

    # The earlier request answers last, so its response is what the form shows
    session.complete(early, design.model_copy(update={"name": "Early"}))
    assert session.form.name == "Early"
    assert session.pending == 0


def test_activate_requires_a_saved_design(service):
    session = _new_session(service)
    with pytest.raises(ActivationConflict):
        session.activate()


def test_activate_updates_state_only_on_success(service, store):
    store.seed(is_active=True)
    session = _existing_session(service, store)

    store.fail_on.add("activate")
    with pytest.raises(TransportFailure):
        session.activate()
    assert session.is_active is False

    store.fail_on.clear()
    session.activate()
    assert session.is_active is True


def test_preview_uses_form_state(service):
    session = _new_session(service)
    session.set_field("total_stamps", 6)
    session.set_preview_stamps(2)

    model = session.preview(Surface.EDITOR)

    assert model.filled_stamps == 2
    assert model.total_stamps == 6
    assert model.display_name == "Blue Bottle"
