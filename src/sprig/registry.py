"""Registration and introspection of component descriptors."""

import dataclasses
import inspect
import logging
from typing import (
    Annotated,
    Any,
    Callable,
    Iterator,
    Optional,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from sprig.config import unwrap_optional
from sprig.domain import (
    ComponentDescriptor,
    DependencySpec,
    InjectionPoints,
    InjectionTarget,
    Scope,
    SetterSpec,
    ValueSpec,
)
from sprig.errors import ContainerError, NoSuchComponentError
from sprig.markers import AUTOWIRED_MARKER, Autowired, Value, component_metadata

__all__ = [
    "DescriptorRegistry",
    "describe",
    "inferred_name",
    "injection_points_of",
]

logger = logging.getLogger(__name__)


class DescriptorRegistry:
    """Component descriptors keyed by logical name, in registration order.

    Registration happens from a single thread while the container starts up.
    After that the registry is only read, which is safe from any thread.
    """

    def __init__(self):
        self._descriptors: dict[str, ComponentDescriptor] = {}

    def register(self, name: str, descriptor: ComponentDescriptor):
        """Register a descriptor, replacing any existing one with the same name.

        A replaced name keeps its original position in :meth:`names`.
        """
        if descriptor.name != name:
            descriptor = dataclasses.replace(descriptor, name=name)
        if name in self._descriptors:
            logger.info(
                "Replacing component definition '%s' with %s",
                name,
                descriptor.component_type.__qualname__,
            )
        self._descriptors[name] = descriptor

    def get(self, name: str) -> ComponentDescriptor:
        """Return the descriptor registered under ``name``.

        Raises:
            NoSuchComponentError: If nothing is registered under ``name``.
        """
        try:
            return self._descriptors[name]
        except KeyError:
            raise NoSuchComponentError(name) from None

    def names(self) -> list[str]:
        """Registered names, in registration order."""
        return list(self._descriptors)

    def descriptors(self) -> Iterator[tuple[str, ComponentDescriptor]]:
        """Iterate over ``(name, descriptor)`` pairs in registration order.

        The pairs are copied first, so registering while iterating is safe.
        """
        return iter(list(self._descriptors.items()))

    def contains(self, name: str) -> bool:
        return name in self._descriptors

    def __contains__(self, name: object) -> bool:
        return name in self._descriptors

    def __len__(self) -> int:
        return len(self._descriptors)


def inferred_name(target: type) -> str:
    """Derive a component name from the class name, lower-casing its first letter.

    Example:
        >>> inferred_name(UserServiceImpl)  # Returns "userServiceImpl"
    """
    class_name = target.__name__
    return class_name[:1].lower() + class_name[1:]


def describe(
    component_type: Any,
    name: Optional[str] = None,
    scope: Union[str, Scope, None] = None,
    lazy: Optional[bool] = None,
) -> ComponentDescriptor:
    """Build a :class:`ComponentDescriptor` for a class.

    Explicit arguments win over whatever ``@component``, ``@scope`` and ``@lazy``
    declared on the class, which in turn win over the defaults (inferred name,
    singleton scope, eager initialization).

    Args:
        component_type: The class to describe.
        name: Optional logical name.
        scope: Optional scope, as a ``Scope`` or a scope string.
        lazy: Optional lazy-initialization flag.

    Returns:
        The descriptor, with its injection points already introspected.

    Raises:
        ContainerError: If ``component_type`` is not a class, the scope is unknown,
            or an injection point is not annotated.
    """
    if not inspect.isclass(component_type):
        raise ContainerError(f"{component_type!r} is not a class")

    metadata = component_metadata(component_type)
    return ComponentDescriptor(
        name or metadata.get("name") or inferred_name(component_type),
        component_type,
        Scope.parse(scope if scope is not None else metadata.get("scope", Scope.SINGLETON)),
        bool(lazy if lazy is not None else metadata.get("lazy", False)),
        injection_points_of(component_type),
    )


def injection_points_of(component_type: type) -> InjectionPoints:
    """Introspect a class's autowired constructor, fields, values and setters."""
    constructor = component_type.__init__
    constructor_marker = getattr(constructor, AUTOWIRED_MARKER, None)

    fields, values = _get_fields(component_type)
    return InjectionPoints(
        constructor=(
            _get_parameters(constructor, InjectionTarget.CONSTRUCTOR, True)
            if constructor_marker is not None
            else None
        ),
        fields=fields,
        values=values,
        setters=_get_setters(component_type),
    )


def _type_hints(target: Any) -> dict[str, Any]:
    try:
        return get_type_hints(target, include_extras=True)
    except (NameError, TypeError) as e:
        raise ContainerError(f"Cannot resolve type hints of {target!r}: {e}") from e


def _get_fields(component_type: type) -> tuple[list[DependencySpec], list[ValueSpec]]:
    fields: list[DependencySpec] = []
    values: list[ValueSpec] = []

    # get_type_hints walks the MRO, so annotations of base classes are included.
    for attribute, annotation in _type_hints(component_type).items():
        if get_origin(annotation) is not Annotated:
            continue
        base_type, *metadata = get_args(annotation)
        marker = next((m for m in metadata if isinstance(m, (Autowired, Value))), None)
        if isinstance(marker, Autowired):
            fields.append(
                DependencySpec(
                    InjectionTarget.FIELD,
                    attribute,
                    unwrap_optional(base_type),
                    marker.name,
                    marker.required,
                )
            )
        elif isinstance(marker, Value):
            values.append(ValueSpec(attribute, base_type, marker.expression))

    return fields, values


def _get_setters(component_type: type) -> list[SetterSpec]:
    methods: dict[str, Callable] = {}
    for klass in reversed(component_type.__mro__):
        for attribute, member in vars(klass).items():
            if inspect.isfunction(member) and attribute != "__init__":
                methods[attribute] = member

    setters = []
    for method_name, method in methods.items():
        marker = getattr(method, AUTOWIRED_MARKER, None)
        if marker is None:
            continue
        setters.append(
            SetterSpec(
                method_name,
                _get_parameters(method, InjectionTarget.SETTER, marker.required),
                marker.required,
            )
        )
    return setters


def _get_parameters(
    func: Callable, target: InjectionTarget, required: bool
) -> list[DependencySpec]:
    """Turn every parameter after ``self`` into a :class:`DependencySpec`.

    ``Annotated[T, "name"]`` or ``Annotated[T, Autowired(name="name")]`` adds a
    name hint; ``*args`` and ``**kwargs`` are ignored.
    """
    hints = _type_hints(func)
    parameters = list(inspect.signature(func).parameters.values())[1:]

    return [
        _make_dependency(func, target, parameter.name, hints.get(parameter.name), required)
        for parameter in parameters
        if parameter.kind not in (parameter.VAR_POSITIONAL, parameter.VAR_KEYWORD)
    ]


def _make_dependency(
    func: Callable, target: InjectionTarget, name: str, annotation: Any, required: bool
) -> DependencySpec:
    if annotation is None:
        raise ContainerError(
            f"Dependency '{name}' of {func.__qualname__} is not annotated"
        )

    if get_origin(annotation) is Annotated:
        base_type, *metadata = get_args(annotation)
        marker = next((m for m in metadata if isinstance(m, Autowired)), None)
        if marker is not None:
            required = required and marker.required
        name_hint = next(
            (
                m if isinstance(m, str) else m.name
                for m in metadata
                if isinstance(m, str) or (isinstance(m, Autowired) and m.name)
            ),
            None,
        )
        return DependencySpec(target, name, unwrap_optional(base_type), name_hint, required)

    return DependencySpec(target, name, unwrap_optional(annotation), None, required)
