import pytest

from update_center.utils.security import create_access_token, has_permission

ADMIN = "/api/v1/admin/app-versions"


def _create(client, headers, **overrides):
    body = {"platform": "android", "version": "1.2.0", "title": "v1.2.0", **overrides}
    return client.post(f"{ADMIN}/", json=body, headers=headers)


class TestAuth:
    def test_missing_token_is_unauthorized(self, client) -> None:
        response = client.get(f"{ADMIN}/")
        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_invalid_token_is_unauthorized(self, client) -> None:
        response = client.get(f"{ADMIN}/", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_viewer_can_read_but_not_write(self, client, viewer_headers) -> None:
        assert client.get(f"{ADMIN}/", headers=viewer_headers).status_code == 200
        assert _create(client, viewer_headers).status_code == 403

    def test_inactive_user_is_rejected(self, client) -> None:
        token = create_access_token({"sub": "gone", "is_admin": True, "is_active": False})
        response = client.get(f"{ADMIN}/", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 400

    @pytest.mark.parametrize(
        "user, expected",
        [
            ({"is_admin": True}, True),
            ({"permissions": ["*"]}, True),
            ({"permissions": ["app_versions:*"]}, True),
            ({"permissions": ["app_versions:view"]}, False),
            ({}, False),
        ],
    )
    def test_has_permission(self, user, expected) -> None:
        assert has_permission(user, "app_versions", "manage") is expected


class TestVersionEndpoints:
    def test_create_returns_draft(self, client, admin_headers) -> None:
        response = _create(client, admin_headers, metadata={"build": 7})

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "draft"
        assert body["version_code"] == 10200
        assert body["metadata"] == {"build": 7}
        assert body["packages"] == []

    def test_duplicate_is_conflict(self, client, admin_headers) -> None:
        _create(client, admin_headers)
        assert _create(client, admin_headers).status_code == 409

    def test_invalid_version_is_unprocessable(self, client, admin_headers) -> None:
        assert _create(client, admin_headers, version="1.2").status_code == 422
        assert _create(client, admin_headers, version="1.100.0").status_code == 422

    def test_full_lifecycle(self, client, admin_headers) -> None:
        version_id = _create(client, admin_headers).json()["id"]

        published = client.post(
            f"{ADMIN}/{version_id}/publish",
            json={"release_date": "2025-12-01T00:00:00Z"},
            headers=admin_headers,
        )
        assert published.status_code == 200
        assert published.json()["status"] == "published"
        assert published.json()["release_date"].startswith("2025-12-01")

        frozen = client.patch(f"{ADMIN}/{version_id}", json={"version": "1.3.0"}, headers=admin_headers)
        assert frozen.status_code == 400

        ramp = client.patch(
            f"{ADMIN}/{version_id}", json={"gray_release": True, "gray_percent": 40}, headers=admin_headers
        )
        assert ramp.status_code == 200
        assert ramp.json()["gray_percent"] == 40

        assert client.delete(f"{ADMIN}/{version_id}", headers=admin_headers).status_code == 400

        archived = client.post(f"{ADMIN}/{version_id}/archive", headers=admin_headers)
        assert archived.json()["status"] == "archived"
        assert client.post(f"{ADMIN}/{version_id}/publish", headers=admin_headers).status_code == 400

    def test_explicit_null_is_unprocessable(self, client, admin_headers) -> None:
        version_id = _create(client, admin_headers).json()["id"]

        draft = client.patch(f"{ADMIN}/{version_id}", json={"title": None}, headers=admin_headers)
        assert draft.status_code == 422

        client.post(f"{ADMIN}/{version_id}/publish", headers=admin_headers)
        published = client.patch(f"{ADMIN}/{version_id}", json={"update_type": None}, headers=admin_headers)
        assert published.status_code == 422

        body = client.get(f"{ADMIN}/{version_id}", headers=admin_headers).json()
        assert body["title"] == "v1.2.0"
        assert body["update_type"] == "optional"

    def test_get_and_delete_draft(self, client, admin_headers) -> None:
        version_id = _create(client, admin_headers).json()["id"]

        assert client.get(f"{ADMIN}/{version_id}", headers=admin_headers).json()["version"] == "1.2.0"
        assert client.delete(f"{ADMIN}/{version_id}", headers=admin_headers).status_code == 200
        assert client.get(f"{ADMIN}/{version_id}", headers=admin_headers).status_code == 404

    def test_list_and_stats(self, client, admin_headers) -> None:
        _create(client, admin_headers, version="1.0.0")
        _create(client, admin_headers, version="1.1.0", platform="ios")

        listing = client.get(f"{ADMIN}/", params={"platform": "ios"}, headers=admin_headers).json()
        assert listing["total"] == 1
        assert listing["list"][0]["version"] == "1.1.0"

        stats = client.get(f"{ADMIN}/stats", headers=admin_headers).json()
        assert stats["total"] == 2
        assert stats["draft"] == 2


class TestPackageEndpoints:
    def test_package_crud(self, client, admin_headers) -> None:
        version_id = _create(client, admin_headers).json()["id"]
        packages = f"{ADMIN}/{version_id}/packages"

        created = client.post(
            packages, json={"channel": "official", "download_url": "https://cdn/a.apk"}, headers=admin_headers
        )
        assert created.status_code == 201
        package_id = created.json()["id"]

        duplicate = client.post(
            packages, json={"channel": "official", "download_url": "https://cdn/b.apk"}, headers=admin_headers
        )
        assert duplicate.status_code == 409

        toggled = client.post(f"{packages}/{package_id}/toggle", headers=admin_headers)
        assert toggled.json()["enabled"] is False

        updated = client.patch(f"{packages}/{package_id}", json={"file_size": 512}, headers=admin_headers)
        assert updated.json()["file_size"] == 512

        listed = client.get(packages, headers=admin_headers).json()
        assert [pkg["channel"] for pkg in listed] == ["official"]

        assert client.delete(f"{packages}/{package_id}", headers=admin_headers).status_code == 200
        assert client.get(packages, headers=admin_headers).json() == []

    def test_package_explicit_null_is_unprocessable(self, client, admin_headers) -> None:
        version_id = _create(client, admin_headers).json()["id"]
        packages = f"{ADMIN}/{version_id}/packages"
        package_id = client.post(
            packages, json={"channel": "official", "download_url": "https://cdn/a.apk"}, headers=admin_headers
        ).json()["id"]

        response = client.patch(f"{packages}/{package_id}", json={"enabled": None}, headers=admin_headers)

        assert response.status_code == 422

    def test_packages_of_archived_version_are_read_only(self, client, admin_headers) -> None:
        version_id = _create(client, admin_headers).json()["id"]
        packages = f"{ADMIN}/{version_id}/packages"
        package_id = client.post(
            packages, json={"channel": "official", "download_url": "https://cdn/a.apk"}, headers=admin_headers
        ).json()["id"]
        client.post(f"{ADMIN}/{version_id}/publish", headers=admin_headers)
        client.post(f"{ADMIN}/{version_id}/archive", headers=admin_headers)

        assert client.post(f"{packages}/{package_id}/toggle", headers=admin_headers).status_code == 400
        assert client.patch(f"{packages}/{package_id}", json={"file_size": 1}, headers=admin_headers).status_code == 400
        assert client.delete(f"{packages}/{package_id}", headers=admin_headers).status_code == 400

    def test_store_package_defaults_url(self, client, admin_headers) -> None:
        version_id = _create(client, admin_headers, platform="ios").json()["id"]
        defaults = client.get(f"{ADMIN}/store-defaults", headers=admin_headers).json()

        created = client.post(f"{ADMIN}/{version_id}/packages", json={"channel": "app_store"}, headers=admin_headers)

        assert created.status_code == 201
        assert created.json()["download_url"] == defaults["app_store_url"]

    def test_download_package_without_url_is_unprocessable(self, client, admin_headers) -> None:
        version_id = _create(client, admin_headers).json()["id"]
        response = client.post(f"{ADMIN}/{version_id}/packages", json={"channel": "official"}, headers=admin_headers)
        assert response.status_code == 422

    def test_packages_of_unknown_version(self, client, admin_headers) -> None:
        assert client.get(f"{ADMIN}/missing/packages", headers=admin_headers).status_code == 404
