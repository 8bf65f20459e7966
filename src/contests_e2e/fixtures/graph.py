"""
Fixture Graph

Explicit dependency graph of test fixtures. Fixtures are registered with
their declared dependencies; a request for a set of names instantiates the
transitive closure in dependency order, once per test context, and tears it
down in exact reverse order.

Cycles are rejected when a fixture is registered, so a misconfigured graph
fails before any browser is launched.
"""

from __future__ import annotations

import inspect
from collections.abc import AsyncGenerator, Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

import structlog

from contests_e2e.core.exceptions import (
    CyclicDependencyError,
    DuplicateFixtureError,
    FixtureSetupError,
    TeardownError,
    UnknownFixtureError,
)

log = structlog.get_logger(__name__)

Dependencies = Mapping[str, Any]
SetupFn = Callable[[Dependencies], Any]
TeardownFn = Callable[[Any], Any]


@dataclass(frozen=True)
class FixtureDefinition:
    """A named fixture.

    Attributes:
        name: Unique fixture name.
        setup: Called with a read-only mapping of the declared dependencies.
            May return a value, a coroutine, or be an async generator that
            yields the value once and runs its teardown after the yield.
        depends_on: Names of the fixtures ``setup`` needs.
        teardown: Optional callable receiving the instance.
    """

    name: str
    setup: SetupFn
    depends_on: tuple[str, ...] = ()
    teardown: TeardownFn | None = None


@dataclass
class _Instance:
    name: str
    value: Any
    finalizer: Callable[[], Awaitable[None]] | None


@dataclass
class TestContext:
    """Per-test storage of fixture instances.

    Never shared between tests. Insertion order is creation order.
    """

    __test__ = False  # not a pytest test class

    test_id: str
    _instances: dict[str, _Instance] = field(default_factory=dict)

    def __contains__(self, name: object) -> bool:
        return name in self._instances

    def __len__(self) -> int:
        return len(self._instances)

    def get(self, name: str) -> Any:
        return self._instances[name].value

    @property
    def created(self) -> list[str]:
        """Fixture names in creation order."""
        return list(self._instances)


class FixtureGraph:
    """Registry and resolver for fixtures.

    Example:
        graph = FixtureGraph()
        graph.define("session", start_session, teardown=close_session)
        graph.define("login", do_login, depends_on=["session"])
        context = TestContext("test_join_contest")
        values = await graph.resolve(["login"], context)
        ...
        await graph.teardown(context)
    """

    def __init__(self, definitions: Iterable[FixtureDefinition] = ()) -> None:
        self._definitions: dict[str, FixtureDefinition] = {}
        for definition in definitions:
            self.register(definition)

    def __contains__(self, name: object) -> bool:
        return name in self._definitions

    @property
    def names(self) -> list[str]:
        return list(self._definitions)

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def define(
        self,
        name: str,
        setup: SetupFn,
        depends_on: Iterable[str] = (),
        teardown: TeardownFn | None = None,
    ) -> FixtureDefinition:
        definition = FixtureDefinition(name, setup, tuple(depends_on), teardown)
        self.register(definition)
        return definition

    def fixture(
        self, name: str | None = None, depends_on: Iterable[str] = ()
    ) -> Callable[[SetupFn], SetupFn]:
        """Decorator form of ``define``; the name defaults to the function name."""

        def decorator(fn: SetupFn) -> SetupFn:
            self.define(name or fn.__name__, fn, depends_on)
            return fn

        return decorator

    def register(self, definition: FixtureDefinition) -> None:
        """Add a definition.

        Raises:
            DuplicateFixtureError: If the name is already registered.
            CyclicDependencyError: If the new edges close a cycle. The graph
                is left unchanged.
        """
        if definition.name in self._definitions:
            raise DuplicateFixtureError(definition.name)

        cycle = self._find_cycle(definition)
        if cycle:
            raise CyclicDependencyError(cycle)

        self._definitions[definition.name] = definition
        log.debug("fixture_registered", fixture=definition.name, depends_on=definition.depends_on)

    def validate(self) -> None:
        """Check that every declared dependency has a definition.

        Raises:
            UnknownFixtureError: For the first dangling dependency found.
        """
        for definition in self._definitions.values():
            for dependency in definition.depends_on:
                if dependency not in self._definitions:
                    raise UnknownFixtureError(dependency, required_by=definition.name)

    def _find_cycle(self, candidate: FixtureDefinition) -> list[str] | None:
        """Path of a cycle through ``candidate``, or None."""

        def edges(name: str) -> tuple[str, ...]:
            if name == candidate.name:
                return candidate.depends_on
            definition = self._definitions.get(name)
            return definition.depends_on if definition else ()

        path: list[str] = [candidate.name]
        visited: set[str] = set()

        def visit(name: str) -> list[str] | None:
            for dependency in edges(name):
                if dependency == candidate.name:
                    return [*path, candidate.name]
                if dependency in visited:
                    continue
                visited.add(dependency)
                path.append(dependency)
                found = visit(dependency)
                if found:
                    return found
                path.pop()
            return None

        return visit(candidate.name)

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    def order(self, names: Iterable[str]) -> list[str]:
        """Creation order for the transitive closure of ``names``.

        Depth-first post-order: request order first, then declaration order
        of dependencies.

        Raises:
            UnknownFixtureError: If a requested or depended-upon name is undefined.
        """
        ordered: list[str] = []
        seen: set[str] = set()

        def visit(name: str, required_by: str | None) -> None:
            if name in seen:
                return
            definition = self._definitions.get(name)
            if definition is None:
                raise UnknownFixtureError(name, required_by=required_by)
            seen.add(name)
            for dependency in definition.depends_on:
                visit(dependency, name)
            ordered.append(name)

        for name in names:
            visit(name, None)
        return ordered

    async def resolve(self, names: Iterable[str], context: TestContext) -> dict[str, Any]:
        """Instantiate ``names`` and their dependencies into ``context``.

        Each fixture is created at most once per context; instances already in
        the context are reused.

        Returns:
            Requested name → instance.

        Raises:
            UnknownFixtureError: Before any setup runs.
            FixtureSetupError: If a setup raised. Instances created before it
                remain in the context for teardown.
        """
        requested = list(names)
        for name in self.order(requested):
            if name not in context:
                await self._instantiate(self._definitions[name], context)
        return {name: context.get(name) for name in requested}

    async def _instantiate(self, definition: FixtureDefinition, context: TestContext) -> None:
        dependencies = MappingProxyType(
            {dependency: context.get(dependency) for dependency in definition.depends_on}
        )
        log.debug("fixture_setup", fixture=definition.name, test_id=context.test_id)

        try:
            value, finalizer = await self._run_setup(definition, dependencies)
        except Exception as e:
            log.error(
                "fixture_setup_failed",
                fixture=definition.name,
                test_id=context.test_id,
                error=str(e),
            )
            raise FixtureSetupError(definition.name, e) from e

        context._instances[definition.name] = _Instance(definition.name, value, finalizer)

    @staticmethod
    async def _run_setup(
        definition: FixtureDefinition, dependencies: Dependencies
    ) -> tuple[Any, Callable[[], Awaitable[None]] | None]:
        result = definition.setup(dependencies)

        if inspect.isasyncgen(result):
            generator: AsyncGenerator[Any, None] = result
            value = await generator.__anext__()

            async def finish() -> None:
                try:
                    await generator.__anext__()
                except StopAsyncIteration:
                    return
                raise RuntimeError(f"Fixture '{definition.name}' yielded more than once")

            return value, finish

        if inspect.isawaitable(result):
            result = await result

        if definition.teardown is None:
            return result, None

        teardown = definition.teardown

        async def finalize() -> None:
            outcome = teardown(result)
            if inspect.isawaitable(outcome):
                await outcome

        return result, finalize

    # -------------------------------------------------------------------------
    # Teardown
    # -------------------------------------------------------------------------

    async def teardown(self, context: TestContext) -> None:
        """Tear down every instance in reverse creation order.

        All teardowns run even if some fail. The context is empty afterwards.

        Raises:
            TeardownError: Listing every failed teardown.
        """
        failures: list[tuple[str, BaseException]] = []

        for instance in reversed(list(context._instances.values())):
            if instance.finalizer is None:
                continue
            try:
                await instance.finalizer()
                log.debug("fixture_teardown", fixture=instance.name, test_id=context.test_id)
            except Exception as e:
                log.error(
                    "fixture_teardown_failed",
                    fixture=instance.name,
                    test_id=context.test_id,
                    error=str(e),
                )
                failures.append((instance.name, e))

        context._instances.clear()
        if failures:
            raise TeardownError(failures)


class FixtureScope:
    """Async context manager binding a graph to one test context.

    Teardown runs on exit. A teardown failure is raised when the body
    succeeded; when the body raised, it is logged and attached as a note to
    the body's exception instead.

    Example:
        async with FixtureScope(graph, "test_login") as scope:
            page = await scope.get("authenticated_page")
    """

    def __init__(self, graph: FixtureGraph, test_id: str) -> None:
        self.graph = graph
        self.context = TestContext(test_id)

    async def __aenter__(self) -> FixtureScope:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        try:
            await self.graph.teardown(self.context)
        except TeardownError as teardown_error:
            if exc is None:
                raise
            log.error(
                "teardown_failed_after_test_error",
                test_id=self.context.test_id,
                test_error=str(exc),
                teardown_error=str(teardown_error),
            )
            exc.add_note(f"Additionally, fixture teardown failed: {teardown_error}")
        return False

    async def resolve(self, *names: str) -> dict[str, Any]:
        return await self.graph.resolve(names, self.context)

    async def get(self, name: str) -> Any:
        values = await self.graph.resolve([name], self.context)
        return values[name]
