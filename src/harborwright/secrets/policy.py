#!/usr/bin/env python3
"""
HARBORWRIGHT SECRET POLICY - Credential Generation
--------------------------------------------------
Generates random passwords under a named policy (length, digit count,
symbol count) and hashes login passwords with bcrypt.

Two policies are in use:

- REGISTRY_AUTH_PASSWORD: the registry's basic-auth password. Hashed
  before being written to the htpasswd file; the plaintext is kept next
  to it for client provisioning.
- REGISTRY_HTTP_SECRET: the machine-to-machine secret shared by registry
  replicas. Never checked by a login path, so it is stored as is, and it
  is much longer since it is the only protection of that channel.

Randomness comes from the `secrets` module (OS CSPRNG). A policy that
cannot be satisfied, or a bcrypt cost outside [4, 31], is an error: there
is no fallback to a weaker credential.

Author: Harborwright Team
Date: 2026-10-19
"""

import logging
import secrets
import string
from dataclasses import dataclass
from typing import List

import bcrypt

from harborwright.core.errors import GenerationError, HashingError

logger = logging.getLogger("harborwright.secrets")

LOWER_LETTERS = string.ascii_lowercase
UPPER_LETTERS = string.ascii_uppercase
DIGITS = string.digits
SYMBOLS = "~!@#$%^&*()_+`-={}|[]\\:\"<>?,./"

# Standard bcrypt work factor of the original operator runtime
DEFAULT_BCRYPT_COST = 10
MIN_BCRYPT_COST = 4
MAX_BCRYPT_COST = 31

# Apache htpasswd and docker distribution expect the 2a variant
BCRYPT_PREFIX = b"2a"


@dataclass(frozen=True)
class PasswordPolicy:
    name: str
    length: int
    num_digits: int
    num_symbols: int
    no_upper: bool = False
    allow_repeat: bool = True


REGISTRY_AUTH_PASSWORD = PasswordPolicy(
    name="registry-auth-password", length=32, num_digits=10, num_symbols=10,
)

REGISTRY_HTTP_SECRET = PasswordPolicy(
    name="registry-http-secret", length=128, num_digits=16, num_symbols=48,
)

POLICIES = {p.name: p for p in (REGISTRY_AUTH_PASSWORD, REGISTRY_HTTP_SECRET)}


def _random_insert(chars: List[str], value: str):
    chars.insert(secrets.randbelow(len(chars) + 1), value)


def _pick(alphabet: str, used: List[str], allow_repeat: bool) -> str:
    candidates = alphabet if allow_repeat else [c for c in alphabet if c not in used]
    if not candidates:
        raise GenerationError("character set exhausted")
    return secrets.choice(candidates)


def generate_password(policy: PasswordPolicy) -> str:
    """
    Returns a password of exactly `policy.length` characters holding exactly
    `num_digits` digits and `num_symbols` symbols, the rest being letters.
    """
    if policy.length <= 0:
        raise GenerationError(f"{policy.name}: length must be positive")
    if policy.num_digits < 0 or policy.num_symbols < 0:
        raise GenerationError(f"{policy.name}: digit and symbol counts must not be negative")
    if policy.num_digits + policy.num_symbols > policy.length:
        raise GenerationError(f"{policy.name}: digits and symbols exceed total length")

    letters = LOWER_LETTERS if policy.no_upper else LOWER_LETTERS + UPPER_LETTERS
    if not policy.allow_repeat:
        if policy.num_digits > len(DIGITS):
            raise GenerationError(f"{policy.name}: not enough digits to avoid repeats")
        if policy.num_symbols > len(SYMBOLS):
            raise GenerationError(f"{policy.name}: not enough symbols to avoid repeats")
        if policy.length - policy.num_digits - policy.num_symbols > len(letters):
            raise GenerationError(f"{policy.name}: not enough letters to avoid repeats")

    result: List[str] = []
    try:
        for _ in range(policy.length - policy.num_digits - policy.num_symbols):
            result.append(_pick(letters, result, policy.allow_repeat))
        for _ in range(policy.num_digits):
            _random_insert(result, _pick(DIGITS, result, policy.allow_repeat))
        for _ in range(policy.num_symbols):
            _random_insert(result, _pick(SYMBOLS, result, policy.allow_repeat))
    except (NotImplementedError, OSError) as e:
        # no usable OS randomness source
        raise GenerationError(f"{policy.name}: entropy source unavailable: {e}") from e

    return "".join(result)


def generate(policy_name: str) -> str:
    """Generates a value under one of the named POLICIES."""
    try:
        policy = POLICIES[policy_name]
    except KeyError:
        raise GenerationError(f"unknown password policy '{policy_name}'") from None
    return generate_password(policy)


def hash_password(password: str, cost: int) -> str:
    """bcrypt hash of `password` with work factor `cost`."""
    if isinstance(cost, bool) or not isinstance(cost, int):
        raise HashingError(f"invalid bcrypt cost {cost!r}", cost=cost)
    if not MIN_BCRYPT_COST <= cost <= MAX_BCRYPT_COST:
        raise HashingError(
            f"bcrypt cost {cost} outside supported range [{MIN_BCRYPT_COST}, {MAX_BCRYPT_COST}]",
            cost=cost,
        )

    try:
        salt = bcrypt.gensalt(rounds=cost, prefix=BCRYPT_PREFIX)
        hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    except ValueError as e:
        raise HashingError(f"bcrypt rejected cost {cost}: {e}", cost=cost) from e

    logger.debug(f"Hashed password with bcrypt cost {cost}")
    return hashed.decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False
