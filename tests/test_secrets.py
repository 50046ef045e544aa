import pytest

from harborwright.core.config import CONFIG_REGISTRY_ENCRYPTION_COST_KEY, ConfigStore
from harborwright.core.errors import ConfigLookupError, ConfigValueError, DerivationError, HashingError
from harborwright.core.models import (
    HTPASSWD_FILE_NAME,
    SECRET_TYPE_HTPASSWD,
    SECRET_TYPE_SINGLE,
    SHARED_SECRET_KEY,
)
from harborwright.core.naming import normalize_name
from harborwright.secrets.derivation import (
    REGISTRY_AUTHENTICATION_USERNAME,
    get_encryption_cost,
    get_registry_authentication_secret,
    get_registry_http_secret,
)
from harborwright.secrets.policy import DEFAULT_BCRYPT_COST, verify_password


class BrokenStore(ConfigStore):
    """Store whose backend is unreachable."""

    def get_item_value_int(self, key):
        raise ConfigLookupError("backend unavailable", key=key)


def test_auth_secret_is_name_deterministic(ctx, harbor, config):
    """
    DETERMINISM TEST: same parent, same name and keys, different values.
    """
    first = get_registry_authentication_secret(ctx, harbor, config)
    second = get_registry_authentication_secret(ctx, harbor, config)

    assert first.name == second.name == normalize_name(ctx, "demo", "registry", "basicauth")
    assert first.namespace == "ns1"
    assert set(first.string_data) == set(second.string_data) == {HTPASSWD_FILE_NAME, SHARED_SECRET_KEY}
    assert first.string_data[SHARED_SECRET_KEY] != second.string_data[SHARED_SECRET_KEY]


def test_http_secret_is_name_deterministic(ctx, harbor):
    first = get_registry_http_secret(ctx, harbor)
    second = get_registry_http_secret(ctx, harbor)

    assert first.name == second.name == normalize_name(ctx, "demo", "registry", "http")
    assert set(first.string_data) == {SHARED_SECRET_KEY}
    assert first.string_data[SHARED_SECRET_KEY] != second.string_data[SHARED_SECRET_KEY]
    assert len(first.string_data[SHARED_SECRET_KEY]) == 128


def test_secret_classification(ctx, harbor, config):
    auth = get_registry_authentication_secret(ctx, harbor, config)
    http = get_registry_http_secret(ctx, harbor)

    assert auth.type == SECRET_TYPE_HTPASSWD
    assert auth.immutable is False
    assert http.type == SECRET_TYPE_SINGLE
    assert http.immutable is True


def test_htpasswd_verifies_co_stored_password(ctx, harbor, config):
    """The htpasswd hash must verify against the plaintext stored next to it."""
    secret = get_registry_authentication_secret(ctx, harbor, config)
    user, hashed = secret.string_data[HTPASSWD_FILE_NAME].split(":", 1)

    assert user == REGISTRY_AUTHENTICATION_USERNAME
    assert hashed.startswith("$2a$04$")
    assert verify_password(secret.string_data[SHARED_SECRET_KEY], hashed)


def test_missing_cost_uses_default(ctx, harbor):
    """CONFIG TEST: 'not found' falls back to the default bcrypt cost."""
    store = ConfigStore()
    assert get_encryption_cost(store) == DEFAULT_BCRYPT_COST

    secret = get_registry_authentication_secret(ctx, harbor, store)
    hashed = secret.string_data[HTPASSWD_FILE_NAME].split(":", 1)[1]
    assert hashed.startswith(f"$2a${DEFAULT_BCRYPT_COST:02d}$")


def test_cost_lookup_failure_is_fatal(ctx, harbor):
    """CONFIG TEST: any other lookup failure aborts, no secret is produced."""
    with pytest.raises(DerivationError) as excinfo:
        get_registry_authentication_secret(ctx, harbor, BrokenStore())

    assert excinfo.value.stages == ["cannot get encryption cost"]
    assert excinfo.value.caused_by(ConfigLookupError)


def test_non_integer_cost_is_fatal(ctx, harbor):
    store = ConfigStore({CONFIG_REGISTRY_ENCRYPTION_COST_KEY: "high"})
    with pytest.raises(DerivationError) as excinfo:
        get_registry_authentication_secret(ctx, harbor, store)
    assert excinfo.value.caused_by(ConfigValueError)


def test_out_of_range_cost_is_fatal(ctx, harbor):
    store = ConfigStore({CONFIG_REGISTRY_ENCRYPTION_COST_KEY: 99})
    with pytest.raises(DerivationError) as excinfo:
        get_registry_authentication_secret(ctx, harbor, store)

    assert excinfo.value.stages == ["cannot encrypt password"]
    assert excinfo.value.caused_by(HashingError)
    assert excinfo.value.root_cause.cost == 99


def test_secret_repr_hides_values(ctx, harbor, config):
    secret = get_registry_authentication_secret(ctx, harbor, config)
    assert secret.string_data[SHARED_SECRET_KEY] not in repr(secret)
