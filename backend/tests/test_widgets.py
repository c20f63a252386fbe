"""Portal widget settings tests."""
import pytest

from hoa_portal.core.errors import ServiceError
from hoa_portal.models.widget import PortalWidget
from hoa_portal.services.widgets import DEFAULT_ORDER, WIDGET_REGISTRY, WidgetService, merge_widgets


def test_defaults_follow_registry_order():
    states = merge_widgets([])

    assert [s.widget_type for s in states] == DEFAULT_ORDER
    assert all(s.is_default and s.is_enabled for s in states)
    assert WIDGET_REGISTRY["documents"].category == "homeowner"


def test_stored_rows_override_defaults_and_unknown_types_are_ignored():
    stored = [
        PortalWidget(widget_type="calendar", is_enabled=False, position=-1, settings={"view": "month"}),
        PortalWidget(widget_type="retired-widget", is_enabled=True, position=0, settings={}),
    ]

    states = merge_widgets(stored)

    assert states[0].widget_type == "calendar"
    assert states[0].is_enabled is False
    assert states[0].settings == {"view": "month"}
    assert "retired-widget" not in {s.widget_type for s in states}


def test_audience_filter():
    vendor_types = {s.widget_type for s in merge_widgets([], audience="vendor")}

    assert "invoices" in vendor_types
    assert "payments" not in vendor_types


async def test_toggle_and_update_my_widget(client, seed):
    toggled = await client.post("/v1/widgets/me/payments/toggle")
    payments = next(w for w in toggled.json() if w["widget_type"] == "payments")
    assert payments["is_enabled"] is False
    assert payments["is_default"] is False

    updated = await client.patch("/v1/widgets/me/payments", json={"settings": {"show_autopay": True}})
    payments = next(w for w in updated.json() if w["widget_type"] == "payments")
    assert payments["settings"] == {"show_autopay": True}
    assert payments["is_enabled"] is False

    listed = (await client.get("/v1/widgets/me")).json()
    assert next(w for w in listed if w["widget_type"] == "payments")["is_enabled"] is False


async def test_reorder_puts_listed_widgets_first(client, seed):
    response = await client.put("/v1/widgets/me/order", json={"widget_types": ["calendar", "documents"]})

    order = [w["widget_type"] for w in response.json()]
    assert order[:2] == ["calendar", "documents"]
    assert order[2:] == [t for t in DEFAULT_ORDER if t not in ("calendar", "documents")]


async def test_unknown_widget_type(client, seed):
    response = await client.post("/v1/widgets/me/weather/toggle")

    assert response.status_code == 404
    assert response.json() == {"error": "Unknown widget type: weather"}


async def test_association_layout_is_separate_from_user_layout(client, seed):
    url = f"/v1/widgets/associations/{seed.association.id}"
    await client.post(f"{url}/violations/toggle")

    association_widgets = (await client.get(url)).json()
    my_widgets = (await client.get("/v1/widgets/me")).json()

    assert next(w for w in association_widgets if w["widget_type"] == "violations")["is_enabled"] is False
    assert next(w for w in my_widgets if w["widget_type"] == "violations")["is_enabled"] is True


async def test_reorder_rejects_repeated_widgets(client, seed, db):
    response = await client.put("/v1/widgets/me/order", json={"widget_types": ["calendar", "calendar"]})

    assert response.status_code == 400
    assert "widget_types" in response.json()["error"]

    with pytest.raises(ServiceError) as exc:
        await WidgetService(db, user_id=seed.user.id).reorder(["payments", "calendar", "payments"])
    assert exc.value.status_code == 400
