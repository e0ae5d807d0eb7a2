"""Tests for the signed-in dashboard."""

import pytest

VALID_FORM = {
    "project_slug": "riverside",
    "title_th": "ห้องใหม่ริมน้ำ",
    "type": "rent",
    "price": "18000",
    "bedrooms": "1",
    "bathrooms": "1",
    "size_sqm": "30",
    "floor": "8",
    "status": "available",
}


def _text(response) -> str:
    return response.get_data(as_text=True)


class TestGating:
    @pytest.mark.parametrize(
        "method, path",
        [
            ("get", "/dashboard"),
            ("get", "/add-property"),
            ("post", "/add-property"),
            ("get", "/dashboard/properties/42/delete"),
            ("post", "/dashboard/properties/42/delete"),
        ],
    )
    def test_redirects_to_login(self, client, store, method, path) -> None:
        response = getattr(client, method)(path)

        assert response.status_code == 302
        assert response.headers["Location"].endswith("/login")
        assert not store.calls

    def test_expired_session_is_signed_out(self, client) -> None:
        with client.session_transaction() as sess:
            sess["auth_session"] = {
                "access_token": "old",
                "refresh_token": "r",
                "user_id": "u",
                "email": "agent@example.com",
                "expires_at": 1,
            }

        response = client.get("/dashboard")

        assert response.status_code == 302
        with client.session_transaction() as sess:
            assert "auth_session" not in sess


class TestDashboard:
    def test_lists_all_newest_first(self, signed_in_client, store) -> None:
        response = signed_in_client.get("/dashboard")

        body = _text(response)
        assert response.status_code == 200
        assert body.index("สตูดิโอ") < body.index("ห้องสวย") < body.index("ขายห้องวิวแม่น้ำ")
        assert "8,500,000" in body
        assert "unavailable" in body
        assert "Edit" in body

    def test_titles_link_to_canonical_paths(self, signed_in_client) -> None:
        body = _text(signed_in_client.get("/dashboard"))

        assert 'href="/projects/lumina/buy/riverside-suite-7"' in body
        assert 'href="/projects/riverside/rent/cozy-studio-9"' in body
        assert "room-7" not in body

    def test_requests_run_with_user_token(self, signed_in_client, store) -> None:
        signed_in_client.get("/dashboard")
        assert store.postgrest_tokens == ["token-agent"]

    def test_error_inline(self, signed_in_client, store) -> None:
        store.fail("properties", message="permission denied")
        assert "permission denied" in _text(signed_in_client.get("/dashboard"))


class TestDelete:
    def test_confirmation_page(self, signed_in_client, store) -> None:
        response = signed_in_client.get("/dashboard/properties/42/delete")

        assert response.status_code == 200
        assert "Are you sure you want to delete this property?" in _text(response)
        assert not store.ops("properties", "delete")

    def test_confirmed_delete_removes_listing(self, signed_in_client, store) -> None:
        response = signed_in_client.post(
            "/dashboard/properties/42/delete", data={"confirm": "yes"}
        )

        assert response.status_code == 302
        assert response.headers["Location"].endswith("/dashboard")
        assert ("properties", "eq", "id", 42) in store.ops("properties", "eq")

        body = _text(signed_in_client.get("/dashboard"))
        assert "Property deleted successfully." in body
        assert "ห้องสวย" not in body

    @pytest.mark.parametrize("data", [{"confirm": "no"}, {}])
    def test_declined_delete_makes_no_call(self, signed_in_client, store, data) -> None:
        response = signed_in_client.post("/dashboard/properties/42/delete", data=data)

        assert response.status_code == 302
        assert not store.calls
        assert 42 in [row["id"] for row in store.tables["properties"]]

    def test_delete_failure_is_flashed(self, signed_in_client, store) -> None:
        store.fail("properties", message="row is locked")

        signed_in_client.post("/dashboard/properties/42/delete", data={"confirm": "yes"})
        store.failures.clear()
        body = _text(signed_in_client.get("/dashboard"))

        assert "Error deleting property: row is locked" in body
        assert "ห้องสวย" in body

    def test_confirmation_for_unknown_listing(self, signed_in_client) -> None:
        response = signed_in_client.get("/dashboard/properties/999/delete", follow_redirects=True)
        assert "Listing not found." in _text(response)


class TestAddProperty:
    def test_form_lists_projects(self, signed_in_client) -> None:
        body = _text(signed_in_client.get("/add-property"))

        assert 'value="lumina"' in body
        assert 'value="riverside"' in body

    def test_missing_fields_block_submission(self, signed_in_client, store) -> None:
        form = {**VALID_FORM, "size_sqm": ""}

        response = signed_in_client.post("/add-property", data=form)

        assert response.status_code == 200
        assert "Please fill in all required fields." in _text(response)
        assert not store.ops("properties", "insert")

    def test_creates_listing(self, signed_in_client, store) -> None:
        response = signed_in_client.post("/add-property", data=VALID_FORM)

        assert response.status_code == 302
        assert response.headers["Location"].endswith("/dashboard")

        inserted = store.ops("properties", "insert")[0][2]
        assert inserted == {
            "title_th": "ห้องใหม่ริมน้ำ",
            "project_slug": "riverside",
            "type": "rent",
            "price": 18000.0,
            "bedrooms": 1,
            "bathrooms": 1,
            "size_sqm": 30.0,
            "floor": 8,
            "status": "available",
        }
        assert "ห้องใหม่ริมน้ำ" in _text(signed_in_client.get("/dashboard"))

    def test_insert_error_keeps_form(self, signed_in_client, store) -> None:
        store.fail("properties", message="duplicate key")

        response = signed_in_client.post("/add-property", data=VALID_FORM)

        body = _text(response)
        assert response.status_code == 200
        assert "duplicate key" in body
        assert 'value="ห้องใหม่ริมน้ำ"' in body

    def test_project_options_error(self, signed_in_client, store) -> None:
        store.fail("projects")
        body = _text(signed_in_client.get("/add-property"))
        assert "Could not load projects. Please try again later." in body
