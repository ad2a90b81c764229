"""Tests for client identifier resolution."""
from unittest.mock import MagicMock

import pytest

from keycloak_mcp.core.keycloak import AmbiguousClientError, ClientNotFoundError, KeycloakAPIError
from keycloak_mcp.core.resolver import ClientRecord, ClientResolver, Found, NotFound

APP = {"id": "uuid-app", "clientId": "app"}
API = {"id": "uuid-api", "clientId": "api"}


@pytest.fixture()
def realms():
    service = MagicMock()
    service.find_client_by_id.return_value = None
    service.list_clients.return_value = [APP, API]
    return service


def test_canonical_id_uses_direct_lookup_only(realms):
    realms.find_client_by_id.return_value = APP

    record = ClientResolver(realms).resolve("demo", "uuid-app")

    assert record == ClientRecord(canonical_id="uuid-app", handle="app")
    realms.find_client_by_id.assert_called_once_with("demo", "uuid-app")
    realms.list_clients.assert_not_called()


def test_handle_falls_back_to_scan(realms):
    record = ClientResolver(realms).resolve("demo", "api")

    assert record == ClientRecord(canonical_id="uuid-api", handle="api")
    realms.list_clients.assert_called_once_with("demo")


def test_direct_lookup_error_falls_back_to_scan(realms):
    realms.find_client_by_id.side_effect = KeycloakAPIError(500, "boom", "/clients/app")

    assert ClientResolver(realms).lookup("demo", "app") == Found(ClientRecord("uuid-app", "app"))


def test_unknown_identifier_is_not_found(realms):
    resolver = ClientResolver(realms)

    assert resolver.lookup("demo", "unknown-id") == NotFound("unknown-id")
    with pytest.raises(ClientNotFoundError) as exc:
        resolver.resolve("demo", "unknown-id")
    assert str(exc.value) == "Client 'unknown-id' not found in realm 'demo'."


def test_match_is_case_sensitive(realms):
    assert isinstance(ClientResolver(realms).lookup("demo", "APP"), NotFound)


def test_client_without_id_is_not_usable(realms):
    realms.list_clients.return_value = [{"clientId": "broken"}]

    assert isinstance(ClientResolver(realms).lookup("demo", "broken"), NotFound)


def test_duplicate_handles_are_ambiguous(realms):
    realms.list_clients.return_value = [APP, {"id": "uuid-app-2", "clientId": "app"}]

    with pytest.raises(AmbiguousClientError, match="uuid-app, uuid-app-2"):
        ClientResolver(realms).resolve("demo", "app")


def test_listing_failure_propagates(realms):
    realms.list_clients.side_effect = KeycloakAPIError(403, "forbidden", "/clients")

    with pytest.raises(KeycloakAPIError):
        ClientResolver(realms).resolve("demo", "app")


def test_non_object_lookup_body_falls_back_to_scan(realms):
    realms.find_client_by_id.return_value = [{"id": "u1", "username": "alice"}]

    assert ClientResolver(realms).lookup("demo", "../users") == NotFound("../users")
    realms.list_clients.assert_called_once_with("demo")


def test_non_object_listing_entries_are_skipped(realms):
    realms.list_clients.return_value = ["app", None, API]

    assert ClientResolver(realms).lookup("demo", "api") == Found(ClientRecord("uuid-api", "api"))


@pytest.mark.parametrize("rep", [[], "app", None])
def test_from_representation_requires_object(rep):
    assert ClientRecord.from_representation(rep) is None
