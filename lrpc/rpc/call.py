"""The Call abstraction: one RPC invocation, independent of transport.

Handlers only ever see a Call. They read the method name, look at the
context for cancellation or transport details, and decode their arguments
into whatever type they expect:

    async def add(call: Call) -> int:
        args = call.unmarshal_args(AddArgs)
        return args.a + args.b

DirectCall invokes a handler in-process, without any transport:

    result = await mux.serve(DirectCall("add", AddArgs(a=1, b=2)))
"""

from __future__ import annotations

from typing import Any, Protocol, TypeVar, overload, runtime_checkable

from pydantic import ConfigDict, TypeAdapter, ValidationError
from pydantic.errors import PydanticSchemaGenerationError

from lrpc.core.context import Context
from lrpc.core.errors import DecodeError, NotAssignableError

T = TypeVar("T")


@runtime_checkable
class Call(Protocol):
    """An RPC call currently being processed."""

    @property
    def context(self) -> Context:
        """Context of the call. The same instance on every access."""
        ...

    @property
    def method(self) -> str:
        """Name of the method being called. The same value on every access."""
        ...

    def unmarshal_args(self, target: Any = Any) -> Any:
        """Decode the call's arguments into an instance of target.

        Must be called at most once per call.

        Raises:
            DecodeError: If the arguments can't be converted to target, or
                if they were already consumed.
        """
        ...


class ArgsOnce:
    """Mixin enforcing that a call's arguments are consumed only once."""

    _args_consumed: bool = False

    def _consume_args(self) -> None:
        if self._args_consumed:
            raise DecodeError("call arguments were already unmarshalled")
        self._args_consumed = True


class DirectCall(ArgsOnce):
    """Call implementation used to invoke a Handler directly.

    Args:
        method: Method name the handler sees.
        args: Already-typed arguments, handed to unmarshal_args unchanged.
        context: Context for the call. When None a fresh background context
            is created and reused for the lifetime of this call.
    """

    def __init__(self, method: str, args: Any = None, context: Context | None = None) -> None:
        self._method = method
        self._args = args
        self._context = context if context is not None else Context.background()

    def __repr__(self) -> str:
        return f"DirectCall(method={self._method!r}, args={self._args!r})"

    @property
    def context(self) -> Context:
        return self._context

    @property
    def method(self) -> str:
        return self._method

    @property
    def args(self) -> Any:
        return self._args

    @overload
    def unmarshal_args(self, target: type[T]) -> T: ...

    @overload
    def unmarshal_args(self, target: Any = Any) -> Any: ...

    def unmarshal_args(self, target: Any = Any) -> Any:
        """Return the stored arguments if they are assignable to target.

        The check is strict: nothing is coerced, so a str is never accepted
        where an int is requested. With target=Any the stored object itself
        is returned.

        Raises:
            NotAssignableError: If the stored arguments don't fit target.
            DecodeError: If the arguments were already consumed.
        """
        self._consume_args()
        if target is Any:
            return self._args
        try:
            adapter = type_adapter(target)
        except PydanticSchemaGenerationError as e:
            raise NotAssignableError(self._args, target) from e
        try:
            return adapter.validate_python(self._args, strict=True)
        except ValidationError as e:
            raise NotAssignableError(self._args, target) from e


def describe_validation_error(error: ValidationError) -> str:
    """Flatten a pydantic ValidationError into one line."""
    parts = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail["loc"])
        parts.append(f"{location}: {detail['msg']}" if location else detail["msg"])
    return "; ".join(parts)


def type_adapter(target: Any) -> TypeAdapter[Any]:
    """Build a TypeAdapter for target, accepting plain classes.

    A class pydantic has no schema for (neither a model nor a dataclass) is
    validated with an isinstance check.

    Raises:
        PydanticSchemaGenerationError: If no schema can be built even then.
    """
    try:
        return TypeAdapter(target)
    except PydanticSchemaGenerationError:
        return TypeAdapter(target, config=ConfigDict(arbitrary_types_allowed=True))
