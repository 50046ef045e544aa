#!/usr/bin/env python3
"""
HARBORWRIGHT ERRORS - Failure Taxonomy
--------------------------------------
Every failure raised while deriving the registry configuration belongs to
one of the categories below. Stages wrap the failure of the stage beneath
them in a DerivationError, so the full path of a failed reconciliation can
be read back from the exception chain.

Author: Harborwright Team
Date: 2026-10-19
"""

from typing import List, Optional


class HarborwrightError(Exception):
    """Root of every error raised by harborwright."""


class GenerationError(HarborwrightError):
    """The password generator cannot satisfy the requested policy."""


class HashingError(HarborwrightError):
    """The adaptive hash refused the configured cost."""

    def __init__(self, message: str, cost: Optional[int] = None):
        super().__init__(message)
        self.cost = cost


class ConfigLookupError(HarborwrightError):
    """Any failure reading a tunable value from the ConfigStore."""

    def __init__(self, message: str, key: str = ""):
        super().__init__(message)
        self.key = key


class ItemNotFoundError(ConfigLookupError):
    """The key is absent. Callers may substitute a documented default."""


class ConfigValueError(ConfigLookupError):
    """The key is present but its value has the wrong type."""


class ResolutionError(HarborwrightError):
    """A descriptor carried by the parent specification cannot be resolved."""


class GraphRegistrationError(HarborwrightError):
    """The resource graph refused to register a node."""


class ContextCancelledError(GraphRegistrationError):
    """The reconciliation context was cancelled or ran past its deadline."""


class SpecLoadError(HarborwrightError):
    """The parent specification document is malformed."""


class DerivationError(HarborwrightError):
    """
    A stage-tagged failure.

    `stage` is a short label ("cannot get secret", "redis", ...) and `cause`
    the error of the stage beneath. Rendered as "<stage>: <cause>", the same
    way the labels nest in the exception chain.
    """

    def __init__(self, stage: str, cause: BaseException):
        super().__init__(f"{stage}: {cause}")
        self.stage = stage
        self.cause = cause
        self.__cause__ = cause

    @property
    def stages(self) -> List[str]:
        """Stage labels from the outermost to the innermost."""
        labels = []
        err: Optional[BaseException] = self
        while isinstance(err, DerivationError):
            labels.append(err.stage)
            err = err.cause
        return labels

    @property
    def root_cause(self) -> BaseException:
        err: BaseException = self
        while isinstance(err, DerivationError):
            err = err.cause
        return err

    def caused_by(self, error_type: type) -> bool:
        """True when the innermost failure is an instance of `error_type`."""
        return isinstance(self.root_cause, error_type)
