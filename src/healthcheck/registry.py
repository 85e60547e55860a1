"""Health check registry, resolves check declarations and runs them.

A ``HealthCheck`` holds an ordered list of checks. Each declaration passed
to ``register`` is resolved once into a ``CheckRecord``:

  - a function or other callable is called directly
  - an object, or a class with a classmethod ``check``, has ``check`` called
  - a method name is looked up on whoever called ``register``
  - a mapping names ``check`` (and optionally ``invocant``); every other
    key is passed to the check as a keyword argument
  - a list becomes a nested ``HealthCheck``

``check`` runs the checks selected by tags and summarizes the results;
``run`` returns the same report unsummarized.
"""

from __future__ import annotations

import functools
import inspect
import logging
import sys
import time
import types
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from healthcheck.config import settings
from healthcheck.diagnostic import normalize_return, summarize
from healthcheck.errors import (
    MissingCheckError,
    NoChecksRegisteredError,
    NotAnInstanceError,
    UnresolvedCheckError,
    UnsupportedCheckError,
)
from healthcheck.status import Status

logger = logging.getLogger(__name__)

DEFAULT_METHOD = "check"


# ── Helpers ──────────────────────────────────────────────────────────────────


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def _as_tags(value: Any) -> tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(value)


def _name(obj: Any) -> str:
    if inspect.ismodule(obj):
        return obj.__name__
    if inspect.isclass(obj) or inspect.isroutine(obj):
        return getattr(obj, "__qualname__", obj.__name__)
    return repr(obj)


def can(invocant: Any, method: str) -> bool:
    """Whether ``invocant.method(**params)`` can be called.

    Classes only qualify through a classmethod or staticmethod, an instance
    method would be missing its ``self``.
    """
    if not callable(getattr(invocant, method, None)):
        return False
    if inspect.isclass(invocant):
        try:
            raw = inspect.getattr_static(invocant, method)
        except AttributeError:
            return True
        return isinstance(raw, (classmethod, staticmethod))
    return True


def _caller_candidates() -> list[Any]:
    """``self`` and module of the nearest frame outside the registry."""
    frame = inspect.currentframe()
    try:
        while frame is not None and (
            frame.f_globals.get("__name__") == __name__
            or isinstance(frame.f_locals.get("self"), HealthCheck)
        ):
            frame = frame.f_back
        if frame is None:
            return []
        candidates = []
        if "self" in frame.f_locals:
            candidates.append(frame.f_locals["self"])
        module = sys.modules.get(frame.f_globals.get("__name__", ""))
        if module is not None:
            candidates.append(module)
        return candidates
    finally:
        del frame


def _split_tags(tags: Any) -> tuple[set[str], set[str]]:
    """Split requested tags into (wanted, unwanted) using the negation prefix."""
    prefix = settings.negation_prefix
    wanted: set[str] = set()
    unwanted: set[str] = set()
    for tag in _as_tags(tags):
        if prefix and tag.startswith(prefix):
            unwanted.add(tag[len(prefix):])
        else:
            wanted.add(tag)
    return wanted, unwanted


class _instance_only:
    """Method that raises NotAnInstanceError when looked up on the class."""

    def __init__(self, func: Callable[..., Any]) -> None:
        self.func = func
        functools.update_wrapper(self, func)

    def __get__(self, obj: Any, objtype: type | None = None) -> Callable[..., Any]:
        if obj is None:
            func = self.func

            def unbound(*args: Any, **kwargs: Any) -> Any:
                if args and objtype is not None and isinstance(args[0], objtype):
                    return func(*args, **kwargs)
                raise NotAnInstanceError(f"{func.__name__} cannot be called on the class")

            return unbound
        return types.MethodType(self.func, obj)


# ── Check records ────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class CheckRecord:
    """A registered check resolved to something that can be called.

    ``check`` is either a function, or the name of a method on ``invocant``.
    """

    check: Callable[..., Any] | str
    invocant: Any = None
    tags: tuple[str, ...] = ()
    extra_params: Mapping[str, Any] = field(default_factory=lambda: types.MappingProxyType({}))

    def effective_tags(self, default: Sequence[str] = ()) -> tuple[str, ...]:
        """Own tags, else the invocant's ``tags``, else ``default``."""
        if self.tags:
            return self.tags
        if self.invocant is not None:
            accessor = getattr(self.invocant, "tags", None)
            if callable(accessor):
                accessor = accessor() if can(self.invocant, "tags") else None
            if _is_sequence(accessor) and accessor:
                return tuple(accessor)
        return tuple(default)

    def describe(self) -> str:
        if self.invocant is None:
            return _name(self.check)
        method = self.check if isinstance(self.check, str) else _name(self.check)
        return f"{_name(self.invocant)}.{method}"

    def __call__(self, **params: Any) -> Any:
        merged = {**self.extra_params, **params}
        if isinstance(self.invocant, HealthCheck) and self.check == DEFAULT_METHOD:
            # The outermost registry summarizes the whole tree once.
            return self.invocant.run(**merged)
        if isinstance(self.check, str):
            return getattr(self.invocant, self.check)(**merged)
        if self.invocant is not None:
            return self.check(self.invocant, **merged)
        return self.check(**merged)


# ── Registry ─────────────────────────────────────────────────────────────────


class HealthCheck:
    """Registry of checks that runs them and summarizes their results.

    ``tags`` is the default tag set for checks that have none of their own.
    Every other keyword (id, label, ...) is copied into the result::

        checker = HealthCheck(
            id="main_checker",
            label="Main Health Check",
            tags=["fast", "cheap"],
            checks=[lambda **p: {"id": "coderef", "status": "OK"}, "my_check"],
        )
        checker.check(tags=["fast"])
    """

    def __init__(self, checks: Any = None, **attributes: Any) -> None:
        self._attributes = attributes
        self._checks: list[CheckRecord] = []
        if checks:
            self.register(checks)

    def __repr__(self) -> str:
        args = ", ".join(f"{k}={v!r}" for k, v in self._attributes.items() if k != "tags")
        return f"{type(self).__name__}({args})"

    @property
    def tags(self) -> list[str]:
        return list(_as_tags(self._attributes.get("tags")))

    @property
    def attributes(self) -> dict[str, Any]:
        return dict(self._attributes)

    @property
    def checks(self) -> tuple[CheckRecord, ...]:
        return tuple(self._checks)

    @_instance_only
    def register(self, *checks: Any) -> HealthCheck:
        """Resolve and append check declarations, returning ``self``.

        A single list argument is the same as passing its items.
        """
        if len(checks) == 1 and _is_sequence(checks[0]):
            checks = tuple(checks[0])

        for declaration in checks:
            record = self._resolve(declaration)
            self._checks.append(record)
            logger.debug("Registered check %s", record.describe())
        return self

    def _resolve(self, declaration: Any) -> CheckRecord:
        if isinstance(declaration, Mapping):
            declared = dict(declaration)
        elif _is_sequence(declaration):
            declared = {"check": type(self)().register(declaration)}
        else:
            declared = {"check": declaration}

        check = declared.pop("check", None)
        invocant = declared.pop("invocant", None)
        if not check:
            raise MissingCheckError("check parameter required")

        if isinstance(check, str):
            if invocant is None:
                invocant = self._resolve_caller(check)
        elif invocant is None and callable(getattr(check, DEFAULT_METHOD, None)):
            invocant, check = check, DEFAULT_METHOD
        elif inspect.isclass(check) or not callable(check):
            raise UnsupportedCheckError(f"'{_name(check)}' cannot '{DEFAULT_METHOD}'")

        if isinstance(check, str) and not can(invocant, check):
            raise UnsupportedCheckError(f"'{_name(invocant)}' cannot '{check}'")

        return CheckRecord(
            check=check,
            invocant=invocant,
            tags=_as_tags(declared.get("tags")),
            extra_params=types.MappingProxyType(declared),
        )

    @staticmethod
    def _resolve_caller(method: str) -> Any:
        for candidate in _caller_candidates():
            if can(candidate, method):
                return candidate
        raise UnresolvedCheckError(f"Can't determine what to do with '{method}'")

    def should_run(self, record: CheckRecord, **params: Any) -> bool:
        """Whether ``record`` is selected by the ``tags`` in ``params``.

        With no positive tags every check runs. A tag starting with the
        negation prefix (``!slow``) excludes checks carrying that tag.
        """
        wanted, unwanted = _split_tags(params.get("tags"))
        if not wanted and not unwanted:
            return True
        have = set(record.effective_tags(self.tags))
        if have & unwanted:
            return False
        return not wanted or bool(have & wanted)

    @_instance_only
    def check(self, **params: Any) -> dict[str, Any]:
        """Run the selected checks and return the summarized result.

        ``params`` are passed to every check, overriding same-named keys
        from its declaration. With a single registered check its result is
        merged into the registry attributes instead of nested in ``results``.
        """
        return summarize(self.run(**params))

    @_instance_only
    def run(self, **params: Any) -> dict[str, Any]:
        """Run the selected checks and return the report before summarizing."""
        if not self._checks:
            raise NoChecksRegisteredError("No registered checks")

        runtime = params.get("runtime", settings.runtime)
        t0 = time.perf_counter()

        eligible = [r for r in self._checks if self.should_run(r, **params)]
        logger.info(
            "Running %d of %d checks for %r", len(eligible), len(self._checks), self,
        )

        results = []
        for record in eligible:
            result = self._invoke(record, params, runtime)
            if result is not None:
                results.append(result)

        report = dict(self._attributes)
        if len(self._checks) == 1:
            if results:
                report.update(results[0])
        else:
            report["results"] = results

        if runtime:
            report["runtime"] = round(time.perf_counter() - t0, 3)
        return report

    def _invoke(
        self, record: CheckRecord, params: dict[str, Any], runtime: bool,
    ) -> dict[str, Any] | None:
        t0 = time.perf_counter()
        try:
            returned = record(**params)
        except Exception as e:
            if not settings.catch_exceptions:
                raise
            logger.exception("Health check %s raised", record.describe())
            returned = {"status": Status.CRITICAL.value, "info": f"{type(e).__name__}: {e}"}

        elapsed = round(time.perf_counter() - t0, 3)
        logger.debug("Check %s finished in %.3fs", record.describe(), elapsed)

        result = normalize_return(returned, record.describe())
        if result is not None and runtime:
            result["runtime"] = elapsed
        return result
