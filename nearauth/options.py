"""Verification options: one optional constraint per validated token field."""

from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from .errors import ConfigError
from .nonce import NONCE_LENGTH


@dataclass(frozen=True)
class Exact:
    """Field must equal *value*."""

    value: Any


@dataclass(frozen=True)
class Predicate:
    """Field must make *fn* return a truthy value."""

    fn: Callable[[Any], bool]


Check = Optional[Union[Exact, Predicate]]


def _axis(
    name: str, expected: Any, validator: Optional[Callable[[Any], bool]]
) -> Check:
    if expected is not None and validator is not None:
        raise ConfigError(
            f"expected_{name} and validate_{name} are mutually exclusive"
        )
    if validator is not None:
        if not callable(validator):
            raise ConfigError(f"validate_{name} must be callable")
        return Predicate(validator)
    if expected is not None:
        return Exact(expected)
    return None


@dataclass(frozen=True)
class VerifyOptions:
    """Constraints applied by :func:`nearauth.verify.verify`.

    Each axis is ``None`` (no constraint), :class:`Exact` or
    :class:`Predicate`. ``nonce_max_age`` (milliseconds) applies to the
    default freshness check and is ignored when the nonce axis is set;
    ``None`` means the configured default.
    """

    nonce: Check = None
    recipient: Check = None
    state: Check = None
    message: Check = None
    nonce_max_age: Optional[int] = None
    require_full_access_key: bool = True

    def __post_init__(self) -> None:
        for name in ("nonce", "recipient", "state", "message"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, (Exact, Predicate)):
                raise ConfigError(
                    f"{name} must be Exact, Predicate or None, got {type(value).__name__}"
                )
        if isinstance(self.nonce, Exact):
            value = self.nonce.value
            if not isinstance(value, (bytes, bytearray)) or len(value) != NONCE_LENGTH:
                raise ConfigError(
                    f"exact nonce must be {NONCE_LENGTH} bytes, "
                    f"got {type(value).__name__} {value!r}"
                )
        if self.nonce is not None and self.nonce_max_age is not None:
            raise ConfigError("nonce_max_age cannot be combined with a nonce check")
        if self.nonce_max_age is not None and self.nonce_max_age < 0:
            raise ConfigError("nonce_max_age must not be negative")

    @classmethod
    def build(
        cls,
        *,
        expected_recipient: Optional[str] = None,
        validate_recipient: Optional[Callable[[str], bool]] = None,
        expected_state: Optional[str] = None,
        validate_state: Optional[Callable[[Optional[str]], bool]] = None,
        expected_message: Optional[str] = None,
        validate_message: Optional[Callable[[str], bool]] = None,
        validate_nonce: Optional[Callable[[bytes], bool]] = None,
        nonce_max_age: Optional[int] = None,
        require_full_access_key: bool = True,
    ) -> "VerifyOptions":
        """Build options from flat keyword arguments.

        Raises:
            ConfigError: If an exact value and a validator are both given
                for the same field, or ``validate_nonce`` is combined with
                ``nonce_max_age``.
        """
        if validate_nonce is not None and nonce_max_age is not None:
            raise ConfigError(
                "validate_nonce and nonce_max_age are mutually exclusive"
            )
        return cls(
            nonce=_axis("nonce", None, validate_nonce),
            recipient=_axis("recipient", expected_recipient, validate_recipient),
            state=_axis("state", expected_state, validate_state),
            message=_axis("message", expected_message, validate_message),
            nonce_max_age=nonce_max_age,
            require_full_access_key=require_full_access_key,
        )
