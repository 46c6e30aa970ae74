"""Sprig inversion-of-control container.

Sprig discovers component classes, builds them in dependency order, injects
their collaborators and hands out managed instances by name or by type. It is
modelled on Spring's bean factory: components are singletons or prototypes,
eager or lazy, and are wired through autowired constructors, fields and
setters.

Key Features:
    - Constructor, field and setter injection driven by standard type hints
    - Singleton and prototype scopes, eager or lazy initialization
    - Configuration values from ``${key:default}`` placeholders
    - Circular dependency detection
    - Thread-safe singleton construction after startup

Basic Usage:
    >>> from typing import Annotated
    >>> from sprig.builders import run
    >>> from sprig.markers import Autowired, Value, component
    >>>
    >>> @component
    ... class UserService:
    ...     pass
    >>>
    >>> @component("orderService")
    ... class OrderService:
    ...     users: Annotated[UserService, Autowired()]
    ...     prefix: Annotated[str, Value("${order.prefix:ORD}")]
    >>>
    >>> container = run(UserService, OrderService)
    >>> container["orderService"].prefix
    'ORD'

The framework consists of several core modules:
    - markers: Declarative component, injection and value markers
    - registry: Descriptor registry and class introspection
    - cache: Thread-safe singleton instance cache
    - resolver: Lookup by name and type, cycle detection
    - injector: Component instantiation, population and initialization
    - container: The public container facade
    - builders: High-level container start-up
    - scanner: Discovery of component classes in packages
    - config: Placeholder resolution and value coercion
    - domain: Core domain models (ComponentDescriptor, DependencySpec, Scope)
    - errors: Framework-specific exceptions
"""
