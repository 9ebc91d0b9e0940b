"""Typed views over identity data, keyed by connector and identity type.

The provider core keeps identity data as opaque ``RawData``. Code that
understands a given connector registers a class here and calls
``interpret`` to materialize the payload on demand::

    @register_identity_data("github", "oauth2")
    @dataclass
    class GithubOAuth2:
        client_id: str
        client_secret: str

        @classmethod
        def from_dict(cls, data):
            return cls(data["client_id"], data["client_secret"])
"""
from __future__ import annotations

from typing import Any, Callable, Dict, Tuple, Type

from .exceptions import DecodeError, ValidationError
from .models import Identity

_REGISTRY: Dict[Tuple[str, str], Type[Any]] = {}


def register_identity_data(connector: str, identity_type: str) -> Callable[[Type[Any]], Type[Any]]:
    """Class decorator registering a typed representation.

    The class must provide a ``from_dict`` classmethod.
    """

    def decorator(cls: Type[Any]) -> Type[Any]:
        if not hasattr(cls, "from_dict"):
            raise TypeError(f"{cls.__name__} must define from_dict")
        _REGISTRY[(connector, identity_type)] = cls
        return cls

    return decorator


def unregister_identity_data(connector: str, identity_type: str) -> None:
    _REGISTRY.pop((connector, identity_type), None)


def interpret(identity: Identity) -> Any:
    """Decode an identity's data with the class registered for its connector and type.

    Raises:
        ValidationError: If nothing is registered for the connector/type
        DecodeError: If the data is not valid JSON or does not fit the class
    """
    cls = _REGISTRY.get((identity.connector, identity.type))
    if cls is None:
        raise ValidationError(
            f"no identity data representation for {identity.connector}/{identity.type}"
        )
    value = identity.data.decode()
    try:
        return cls.from_dict(value)
    except (KeyError, TypeError, ValueError) as e:
        raise DecodeError(
            f"cannot decode {identity.connector}/{identity.type} identity data: {e}"
        ) from e
