"""Pint-backed unit conversion backend with a custom-unit registry."""

from __future__ import annotations

import logging
from functools import lru_cache
from tokenize import TokenError

from pint import UnitRegistry
from pint.errors import DefinitionSyntaxError, DimensionalityError, PintError, UndefinedUnitError

from .errors import DimensionMismatchError, MalformedUnitError, UnitConversionError, UnitNotFoundError

logger = logging.getLogger(__name__)


def build_registry() -> UnitRegistry:
    return UnitRegistry(autoconvert_offset_to_baseunit=True)


class PintUnitBackend:
    """Conversion capability used by the scaling engine.

    Custom unit tokens are defined the first time they are registered,
    micro placeholders as a millionth of their suffix unit and anything
    else as a new base unit with its own dimension. The list of registered
    tokens only ever grows.
    """

    def __init__(self, registry: UnitRegistry | None = None) -> None:
        self.registry = registry if registry is not None else build_registry()
        self._custom_units: list[str] = []

    @property
    def custom_units(self) -> tuple[str, ...]:
        return tuple(self._custom_units)

    def _is_defined(self, token: str) -> bool:
        try:
            return token in self.registry
        except (PintError, TokenError, SyntaxError, ValueError):
            return False

    def register_custom_unit(self, token: str, *, micro_of: str | None = None) -> None:
        """Define ``token`` as a unit unless it is already known.

        With ``micro_of`` naming a known unit, ``token`` is defined as one
        millionth of it; otherwise it becomes a base unit of its own.
        """

        if token in self._custom_units:
            return
        if not self._is_defined(token):
            if micro_of and self._is_defined(micro_of):
                definition = f"{token} = 1e-6 * {micro_of}"
            else:
                definition = f"{token} = [{token}]"
            try:
                self.registry.define(definition)
            except (PintError, ValueError) as exc:
                raise MalformedUnitError(
                    f"Custom unit '{token}' could not be registered: {exc}",
                    original=(token, token),
                    processed=(token, token),
                ) from exc
            logger.debug("registered custom unit %s", token)
        self._custom_units.append(token)

    def ratio(self, source: str, target: str) -> float:
        """Return the factor converting a quantity in ``source`` to ``target``."""

        pair = (source, target)
        try:
            converted = self.registry.Quantity(1, source).to(target)
        except UndefinedUnitError as exc:
            raise UnitNotFoundError(str(exc), original=pair, processed=pair) from exc
        except DimensionalityError as exc:
            raise DimensionMismatchError(str(exc), original=pair, processed=pair) from exc
        except (DefinitionSyntaxError, TokenError, SyntaxError) as exc:
            raise MalformedUnitError(str(exc), original=pair, processed=pair) from exc
        except (PintError, AttributeError, TypeError, ValueError) as exc:
            raise UnitConversionError(str(exc), original=pair, processed=pair) from exc
        return float(converted.magnitude)


@lru_cache(maxsize=1)
def get_backend() -> PintUnitBackend:
    """Return the process-wide backend instance."""

    return PintUnitBackend()


__all__ = ["PintUnitBackend", "build_registry", "get_backend"]
