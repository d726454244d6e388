"""
envedit/factory.py
Build typed config objects from a validated .env document.

Each constructor parameter is matched to the upper-cased env key of the
same name:

    @dataclass
    class AppConfig:
        app_name: str
        db_port: int
        debug: bool = False

    cfg = build_config(AppConfig, schema, doc)
"""

from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Any, Type, TypeVar

from envedit.errors import SchemaError
from envedit.schema import EnvSchema

if TYPE_CHECKING:
    from envedit.document import EnvDocument

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SKIPPED_KINDS = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


def build_config(cls: Type[T], schema: EnvSchema, document: "EnvDocument") -> T:
    """Validate *document* against *schema* and construct *cls* from it.

    Parameters with a default may be absent from the validated data;
    any other missing key, or a failing constructor, raises SchemaError.
    """
    data = schema.validate(document)

    try:
        signature = inspect.signature(cls)
    except (TypeError, ValueError):
        raise SchemaError(f"{cls.__name__} has no inspectable constructor")

    kwargs: dict[str, Any] = {}
    for name, param in signature.parameters.items():
        if param.kind in _SKIPPED_KINDS:
            continue
        env_key = name.upper()
        if env_key in data:
            kwargs[name] = data[env_key]
        elif param.default is inspect.Parameter.empty:
            raise SchemaError(
                f"Missing env key '{env_key}' required by constructor of {cls.__name__}",
                key=env_key)

    try:
        instance = cls(**kwargs)
    except Exception as e:
        raise SchemaError(f"Failed to construct '{cls.__name__}': {e}") from e
    logger.debug("Built %s from %d env keys", cls.__name__, len(kwargs))
    return instance
