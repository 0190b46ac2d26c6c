import asyncio
import inspect
from typing import Any, Awaitable, Callable, TypeVar

T = TypeVar("T")


def get_running_loop() -> asyncio.AbstractEventLoop | None:
    """Return the running event loop, if any."""
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


def synchronize(afunc: Callable[..., Awaitable[T]], *args, **kwargs) -> T:
    """Run async function in synchronous context.

    Outside of an event loop this is `asyncio.run`.
    Inside a running loop (i.e., Jupyter), the loop is patched with nest_asyncio so it can be re-entered.
    """
    loop = get_running_loop()
    if loop is None:
        return asyncio.run(afunc(*args, **kwargs))

    import nest_asyncio

    nest_asyncio.apply(loop)
    return loop.run_until_complete(afunc(*args, **kwargs))


async def maybe_await(value: Any) -> Any:
    """Await value if it is awaitable, otherwise return it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value
