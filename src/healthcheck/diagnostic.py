"""Result summarizer and the Diagnostic base class.

``summarize`` validates a result tree in place and rolls child statuses
up to their parents. Problems are reported as warnings, never raised:
a malformed result degrades to UNKNOWN instead of failing the run.
"""

from __future__ import annotations

import logging
import re
import time
import warnings
from collections.abc import Mapping, MutableMapping, Sequence
from typing import Any

from healthcheck.config import settings
from healthcheck.errors import InvalidReturnShape, ValidationWarning
from healthcheck.status import Status, worst

logger = logging.getLogger(__name__)

ID_PATTERN = re.compile(r"[a-z0-9_]+")

# ISO-8601 subset: YYYY, YYYY[-]MM, YYYY[-]MM[-]DD with an optional
# [T ]HH[:]MM[:]SS[.fff]. The separators in the time follow the date.
ISO8601_TIMESTAMP = re.compile(
    r"""
    (?:
        [0-9]{4}(?P<hyphen>-)?
        (?:1[0-2]|0[1-9])(?(hyphen)-)
        (?:3[01]|0[1-9]|[12][0-9])
        (?:
            [T ]
            (?:2[0-3]|[01][0-9])(?(hyphen):)
            [0-5][0-9](?(hyphen):)
            [0-5][0-9]
            (?:\.[0-9]+)?
        )?
    |   [0-9]{4}-?(?:1[0-2]|0[1-9])
    |   [0-9]{4}
    )
    """,
    re.VERBOSE,
)


# ── Validators ───────────────────────────────────────────────────────────────


def is_valid_id(value: Any) -> bool:
    return isinstance(value, str) and ID_PATTERN.fullmatch(value) is not None


def is_valid_timestamp(value: Any) -> bool:
    return isinstance(value, str) and ISO8601_TIMESTAMP.fullmatch(value) is not None


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def _warn(message: str, category: type[Warning] = ValidationWarning) -> None:
    warnings.warn(message, category, stacklevel=3)


# ── Return normalization ─────────────────────────────────────────────────────


def normalize_return(value: Any, source: str) -> dict[str, Any] | None:
    """Turn what a check returned into a fresh result dict.

    A mapping is copied. An even-length sequence is read as alternating
    keys and values. Anything else warns and returns None.
    """
    if isinstance(value, Mapping):
        return _copy_tree(value)
    if _is_sequence(value) and len(value) % 2 == 0:
        try:
            return _copy_tree(dict(zip(value[0::2], value[1::2])))
        except TypeError:
            pass  # unhashable key
    _warn(f"Invalid return from {source} ({value!r})", InvalidReturnShape)
    return None


def _copy_tree(result: Mapping[str, Any]) -> dict[str, Any]:
    """Copy a result and its nested results so summarizing can't touch the check's data."""
    copied = dict(result)
    children = copied.get("results")
    if _is_sequence(children):
        copied["results"] = [
            _copy_tree(child) if isinstance(child, Mapping) else child
            for child in children
        ]
    return copied


# ── Summarizer ───────────────────────────────────────────────────────────────


def summarize(result: MutableMapping[str, Any], display_id: Any = None) -> MutableMapping[str, Any]:
    """Validate ``result`` and its nested results in place and return it.

    Warns when validation fails on:

    status
        Must be one of OK, WARNING, CRITICAL or UNKNOWN. Any case and the
        codes 0-3 are accepted and normalized. A node without a status
        takes the most severe status of its children.
    results
        Must be a list. A single nested result is merged into its parent.
    id
        Lowercase ascii letters, digits and underscores only.
    timestamp
        An ISO-8601 timestamp, see ``ISO8601_TIMESTAMP``.

    The status is always set afterwards, UNKNOWN if nothing better was found.
    """
    _summarize(result, display_id)
    return result


def _summarize(result: MutableMapping[str, Any], display_id: Any = None) -> bool:
    """Summarize one node, returning whether its status came from real data."""
    if display_id is None:
        display_id = result.get("id")
        if display_id is None:
            display_id = 0

    children = _collapse(result, display_id)

    own = Status.parse(result.get("status"))
    if own is not None:
        result["status"] = own.value

    rolled: list[Status] = []
    unrated = False
    for index, child in enumerate(children):
        if not isinstance(child, MutableMapping):
            _warn(f"Result {display_id} has invalid result '{child}'")
            continue
        child_id = child.get("id")
        child_display = f"{display_id}-{index if child_id is None else child_id}"
        if _summarize(child, child_display):
            rolled.append(Status(child["status"]))
        else:
            unrated = True

    derived = own is not None
    if result.get("status") in (None, ""):
        inherited = worst(rolled)
        if inherited is not None:
            result["status"] = inherited.value
            derived = True
        elif unrated:
            # Children that had nothing to say are the only signal left.
            result["status"] = Status.UNKNOWN.value

    _validate_field(result, "id", display_id, is_valid_id)
    _validate_field(result, "timestamp", display_id, is_valid_timestamp)
    _validate_status(result, display_id)
    return derived


def _collapse(result: MutableMapping[str, Any], display_id: Any) -> list[Any]:
    """Merge single nested results into ``result`` and return the children left."""
    while "results" in result:
        results = result["results"]
        if not _is_sequence(results):
            problem = "undefined results" if results is None else f"invalid results '{results}'"
            _warn(f"Result {display_id} has {problem}")
            return []
        if len(results) != 1:
            return list(results)

        (child,) = results
        if not isinstance(child, Mapping):
            _warn(f"Result {display_id} has invalid result '{child}'")
            return []
        del result["results"]
        result.update(child)
    return []


def _validate_field(result: Mapping[str, Any], key: str, display_id: Any, valid: Any) -> None:
    if key not in result:
        return
    value = result[key]
    if value is None:
        _warn(f"Result {display_id} has an undefined {key}")
    elif not valid(value):
        _warn(f"Result {display_id} has an invalid {key} '{value}'")


def _validate_status(result: MutableMapping[str, Any], display_id: Any) -> None:
    if "status" not in result:
        _warn(f"Result {display_id} does not have a status")
    elif result["status"] is None:
        _warn(f"Result {display_id} has undefined status")
    elif Status.parse(result["status"]) is None:
        _warn(f"Result {display_id} has invalid status '{result['status']}'")

    status = result.get("status")
    if status is None or status == "":
        result["status"] = Status.UNKNOWN.value
    elif Status.parse(status) is None and settings.coerce_invalid_status:
        result["status"] = Status.UNKNOWN.value


# ── Diagnostic base class ────────────────────────────────────────────────────


class Diagnostic:
    """Base class for writing a single health check.

    Subclasses implement ``run``; ``check`` calls it, overlays the result on
    the instance attributes (id, label, tags...) and passes it through
    ``summarize``::

        class DiskSpace(Diagnostic):
            def run(self, **params):
                return {"status": "OK", "info": "42% used"}

        DiskSpace(id="disk_space").check()

    Exceptions raised by ``run`` become a CRITICAL result carrying the
    exception text in ``info``.
    """

    def __init__(self, **attributes: Any) -> None:
        self._attributes = attributes

    def __repr__(self) -> str:
        args = ", ".join(f"{k}={v!r}" for k, v in self._attributes.items() if k != "tags")
        return f"{type(self).__name__}({args})"

    @property
    def tags(self) -> list[str]:
        """Default tags for this check, used by a runner when filtering."""
        return list(self._attributes.get("tags") or [])

    @property
    def attributes(self) -> dict[str, Any]:
        return dict(self._attributes)

    def run(self, **params: Any) -> Any:
        """Body of the check, returns a result mapping."""
        raise NotImplementedError

    def check(self, **params: Any) -> MutableMapping[str, Any]:
        if type(self).run is Diagnostic.run:
            raise NotImplementedError(f"{type(self).__name__} does not implement a 'run' method")

        source = f"{type(self).__name__}.run"
        runtime = params.get("runtime", settings.runtime)
        t0 = time.perf_counter()
        try:
            returned = self.run(**params)
        except Exception as e:
            if not settings.catch_exceptions:
                raise
            logger.exception("Diagnostic %s raised", source)
            returned = {"status": Status.CRITICAL.value, "info": f"{type(e).__name__}: {e}"}

        result = normalize_return(returned, source)
        if result is None:
            result = {"status": Status.UNKNOWN.value}

        report = {**self._attributes, **result}
        if runtime:
            report["runtime"] = round(time.perf_counter() - t0, 3)
        return summarize(report)
