"""
Small callables used as continuation and stop predicates.

Every predicate here accepts and ignores arbitrary arguments, so the same
object can serve as a stop condition, an ``on_success`` or an ``on_fail``
callback.
"""

from typing import Any, Callable


def always_true(*args: Any, **kwargs: Any) -> bool:
    return True


def always_false(*args: Any, **kwargs: Any) -> bool:
    return False


def do_nothing(*args: Any, **kwargs: Any) -> None:
    return None


class NotFunctor:
    """Negate the result of the wrapped predicate."""

    def __init__(self, functor: Callable[..., Any]):
        self.functor = functor

    def __call__(self, *args: Any, **kwargs: Any) -> bool:
        return not self.functor(*args, **kwargs)


class AndFunctor:
    """
    Short-circuit conjunction of two predicates called with the same arguments.

    The right predicate is not called when the left one is falsy, which
    matters for stateful predicates such as count limits.
    """

    def __init__(self, left: Callable[..., Any], right: Callable[..., Any]):
        self.left = left
        self.right = right

    def __call__(self, *args: Any, **kwargs: Any) -> bool:
        return bool(self.left(*args, **kwargs)) and bool(self.right(*args, **kwargs))


class OrFunctor:
    """Short-circuit disjunction of two predicates."""

    def __init__(self, left: Callable[..., Any], right: Callable[..., Any]):
        self.left = left
        self.right = right

    def __call__(self, *args: Any, **kwargs: Any) -> bool:
        return bool(self.left(*args, **kwargs)) or bool(self.right(*args, **kwargs))
