import logging
from collections.abc import Mapping
from enum import Enum

from attrs import field, frozen

from piperef.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ENABLE_API_FIELDS_KEY = "enable-api-fields"
ENABLE_PARAM_ENUM_KEY = "enable-param-enum"
ENABLE_CEL_IN_WHEN_EXPRESSION_KEY = "enable-cel-in-whenexpression"

KNOWN_KEYS = frozenset(
    {ENABLE_API_FIELDS_KEY, ENABLE_PARAM_ENUM_KEY, ENABLE_CEL_IN_WHEN_EXPRESSION_KEY}
)


class ApiFields(Enum):
    """API stability tier gating which spec fields are accepted."""

    ALPHA = "alpha"
    BETA = "beta"
    STABLE = "stable"

    @property
    def permissiveness(self) -> int:
        # alpha accepts everything, stable the least
        return {ApiFields.STABLE: 0, ApiFields.BETA: 1, ApiFields.ALPHA: 2}[self]


def _parse_bool(key: str, raw: str) -> bool:
    value = str(raw).strip().lower()
    if value in ("true", "1", "yes"):
        return True
    if value in ("false", "0", "no", ""):
        return False
    raise ConfigurationError(key, raw, "expected true or false")


@frozen
class FeatureFlags:
    """Immutable feature gate configuration passed explicitly to every validation call.

    Responsibilities:
      - Decide whether a construct tied to an API tier is permitted.
      - Carry opt-in flags for parameter enums and CEL when-expressions.

    Notes:
      - Defaults mirror a fresh cluster: the beta tier with both opt-in flags off.
      - Instances are hashable and safe to share across concurrent validations.
    """

    enable_api_fields: ApiFields = field(default=ApiFields.BETA, converter=ApiFields)
    enable_param_enum: bool = False
    enable_cel_in_when_expression: bool = False

    @classmethod
    def alpha(cls, **overrides) -> "FeatureFlags":
        return cls(enable_api_fields=ApiFields.ALPHA, **overrides)

    @classmethod
    def beta(cls, **overrides) -> "FeatureFlags":
        return cls(enable_api_fields=ApiFields.BETA, **overrides)

    @classmethod
    def stable(cls, **overrides) -> "FeatureFlags":
        return cls(enable_api_fields=ApiFields.STABLE, **overrides)

    @classmethod
    def from_config_map(cls, data: Mapping[str, str] | None = None) -> "FeatureFlags":
        """Build flags from the ``data`` section of a feature-flags ConfigMap.

        Params:
            data: Mapping of configuration keys to their string values.

        Returns:
            Parsed `FeatureFlags`; missing keys keep their defaults.

        Raises:
            ConfigurationError: If a known key carries an invalid value.
        """
        data = dict(data or {})
        for key in sorted(set(data) - KNOWN_KEYS):
            logger.warning("Ignoring unrecognized feature flag %r", key)

        kwargs = {}
        if ENABLE_API_FIELDS_KEY in data:
            raw = str(data[ENABLE_API_FIELDS_KEY]).strip().lower()
            try:
                kwargs["enable_api_fields"] = ApiFields(raw)
            except ValueError:
                raise ConfigurationError(
                    ENABLE_API_FIELDS_KEY,
                    data[ENABLE_API_FIELDS_KEY],
                    "expected one of alpha, beta, stable",
                ) from None
        if ENABLE_PARAM_ENUM_KEY in data:
            kwargs["enable_param_enum"] = _parse_bool(
                ENABLE_PARAM_ENUM_KEY, data[ENABLE_PARAM_ENUM_KEY]
            )
        if ENABLE_CEL_IN_WHEN_EXPRESSION_KEY in data:
            kwargs["enable_cel_in_when_expression"] = _parse_bool(
                ENABLE_CEL_IN_WHEN_EXPRESSION_KEY,
                data[ENABLE_CEL_IN_WHEN_EXPRESSION_KEY],
            )
        return cls(**kwargs)

    def allows(self, required: ApiFields) -> bool:
        """Check whether a construct requiring ``required`` is permitted.

        Params:
            required: Least permissive tier that still accepts the construct.

        Returns:
            True when the configured tier is at least as permissive as ``required``.
        """
        return self.enable_api_fields.permissiveness >= required.permissiveness


DEFAULT_FEATURE_FLAGS = FeatureFlags()
