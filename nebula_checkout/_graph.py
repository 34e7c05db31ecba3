"""
Graph runner — sugar over nodnod.

    from nebula_checkout import _graph as G

    @G.node
    class FetchClaim:
        @classmethod
        async def __compose__(cls, spec: ClaimSpec) -> "FetchClaim":
            ...

    node = await G.run(FinalNode).inject(spec)

The target's dependencies are auto-discovered from __compose__ type hints.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, cast
from collections.abc import Callable, Coroutine

from nodnod import Scope, Value, EventLoopAgent, Node
from nodnod import scalar_node as node


# ═══════════════════════════════════════════════════════════════════════════════
# Run — Fluent awaitable builder
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(slots=True)
class Run[T]:
    """
    Fluent runner for a node.

    Injected values are keyed by their runtime type, so a node asking for
    `spec: ClaimSpec` receives the ClaimSpec passed to .inject().
    """

    _target: type[T]
    _injections: tuple[tuple[type[Any], Any], ...]

    def inject(self, value: object) -> Run[T]:
        value_type = cast(type[Any], type(value))
        return Run(
            _target=self._target,
            _injections=(*self._injections, (value_type, value)),
        )

    def __await__(self) -> Any:
        return self._execute().__await__()

    async def _execute(self) -> T:
        all_nodes: set[type[Node[Any, Any]]] = {
            cast(type[Node[Any, Any]], self._target)
        }
        agent = EventLoopAgent.build(all_nodes)

        scope = Scope(detail="run")
        async with scope:
            for typ, value in self._injections:
                scope.push(Value(typ, value))

            run_method = cast(
                Callable[[Scope, dict[type[Any], Scope]], Coroutine[Any, Any, None]],
                getattr(agent, "run"),
            )
            await run_method(scope, {})

            result = scope.get(self._target)
            if result is None:
                raise KeyError(f"{self._target.__name__} not resolved")
            return cast(T, result.value)


def run[T](target: type[T]) -> Run[T]:
    """Run a node with auto-discovery."""
    return Run(_target=target, _injections=())


__all__ = ("node", "Run", "run")
