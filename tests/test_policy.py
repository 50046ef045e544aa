import pytest

from harborwright.core.errors import GenerationError, HashingError
from harborwright.secrets.policy import (
    DIGITS,
    REGISTRY_AUTH_PASSWORD,
    REGISTRY_HTTP_SECRET,
    SYMBOLS,
    PasswordPolicy,
    generate,
    generate_password,
    hash_password,
    verify_password,
)


def _count(value, alphabet):
    return sum(1 for c in value if c in alphabet)


@pytest.mark.parametrize("policy, length, digits, symbols", [
    (REGISTRY_AUTH_PASSWORD, 32, 10, 10),
    (REGISTRY_HTTP_SECRET, 128, 16, 48),
])
def test_policy_shape(policy, length, digits, symbols):
    """
    POLICY TEST: generated values have the exact length and at least
    the requested number of digits and symbols.
    """
    for _ in range(20):
        value = generate_password(policy)
        assert len(value) == length
        assert _count(value, DIGITS) >= digits
        assert _count(value, SYMBOLS) >= symbols


def test_generate_by_name():
    assert len(generate("registry-auth-password")) == 32
    assert len(generate("registry-http-secret")) == 128


def test_unknown_policy_name():
    with pytest.raises(GenerationError):
        generate("no-such-policy")


def test_values_are_fresh():
    values = {generate_password(REGISTRY_HTTP_SECRET) for _ in range(10)}
    assert len(values) == 10


@pytest.mark.parametrize("policy", [
    PasswordPolicy(name="too-many", length=8, num_digits=5, num_symbols=5),
    PasswordPolicy(name="empty", length=0, num_digits=0, num_symbols=0),
    PasswordPolicy(name="negative", length=8, num_digits=-1, num_symbols=0),
    PasswordPolicy(name="no-repeat-digits", length=20, num_digits=11, num_symbols=0, allow_repeat=False),
])
def test_impossible_policy_fails(policy):
    """Impossible combinations must fail instead of producing a weaker value."""
    with pytest.raises(GenerationError):
        generate_password(policy)


def test_no_upper_and_no_repeat():
    policy = PasswordPolicy(name="strict", length=20, num_digits=5, num_symbols=5,
                            no_upper=True, allow_repeat=False)
    value = generate_password(policy)
    assert len(value) == 20
    assert len(set(value)) == 20
    assert not any(c.isupper() for c in value)


def test_hash_verifies_against_plaintext():
    password = generate_password(REGISTRY_AUTH_PASSWORD)
    hashed = hash_password(password, 4)

    assert hashed.startswith("$2a$04$")
    assert verify_password(password, hashed)
    assert not verify_password(password + "x", hashed)


@pytest.mark.parametrize("cost", [3, 32, -1, "12", True])
def test_invalid_cost_fails(cost):
    """HASH TEST: out-of-range cost surfaces the offending value."""
    with pytest.raises(HashingError) as excinfo:
        hash_password("secret", cost)
    assert excinfo.value.cost == cost
