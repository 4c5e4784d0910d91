"""Operation-scoped options bags and the options callers pass to API operations.

Architecture:
    Every API operation builds a fresh options bag of its own type
    (GetOptions, ListOptions, ...) and applies the options given by the caller
    to it. An option supports an operation by implementing the matching
    apply_to_<operation>() method; AnyOption supports all of them.

    Besides the built-in knobs, every bag offers a set-once key/value store
    (get/set) for options defined by specific resource bindings, and a store
    for environment path segment overrides.

Design Decisions:
    - Duck-typed apply methods: options declare support per operation without
      a shared base class
    - Set-once keys: a second set() without overwrite raises, preventing two
      options from silently fighting over the same key
    - Output via return value: List returns the PageInfo iterator instead of
      writing through an out-parameter; Paged(info=False) only configures paging

See Also:
    - API: Applies default and per-call options
    - ObjectChannel: Configures ListOptions for channel-based listing
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .enums import Operation
from .exceptions import KeyAlreadySetError, KeyNotSetError, OptionNotSupportedError

if TYPE_CHECKING:
    from ..runtime.object_channel import ObjectChannel
    from .context import OperationContext


@dataclass
class Options:
    """Options common to all operations."""

    _additional: dict[str, Any] = field(default_factory=dict, repr=False)
    _environments: dict[str, str] = field(default_factory=dict, repr=False)

    def get(self, key: str) -> Any:
        """Retrieve a custom value, raising KeyNotSetError if unset."""
        try:
            return self._additional[key]
        except KeyError:
            raise KeyNotSetError(key) from None

    def set(self, key: str, value: Any, overwrite: bool = False) -> None:
        """Store a custom value; keys should be prefixed with the name of the API."""
        if key in self._additional and not overwrite:
            raise KeyAlreadySetError(key)
        self._additional[key] = value

    def get_environment(self, key: str) -> str:
        try:
            return self._environments[key]
        except KeyError:
            raise KeyNotSetError(key) from None

    def set_environment(self, key: str, value: str, overwrite: bool = False) -> None:
        if key in self._environments and not overwrite:
            raise KeyAlreadySetError(key)
        self._environments[key] = value


@dataclass
class GetOptions(Options):
    """Options valid for Get operations."""


@dataclass
class CreateOptions(Options):
    """Options valid for Create operations."""

    auto_tags: list[str] | None = None


@dataclass
class UpdateOptions(Options):
    """Options valid for Update operations."""


@dataclass
class DestroyOptions(Options):
    """Options valid for Destroy operations."""


@dataclass
class ListOptions(Options):
    """Options valid for List operations.

    Attributes:
        object_channel: Channel to deliver the listed objects through
        paged: Whether the listing is paged
        page: Page to start with (1-based)
        entries_per_page: Requested page size
        page_info: Whether list() returns the PageInfo iterator
        full_objects: Whether every object is retrieved with an additional Get
    """

    object_channel: ObjectChannel | None = None
    paged: bool = False
    page: int = 0
    entries_per_page: int = 0
    page_info: bool = False
    full_objects: bool = False


_APPLY_METHODS = {
    Operation.GET: "apply_to_get",
    Operation.CREATE: "apply_to_create",
    Operation.UPDATE: "apply_to_update",
    Operation.DESTROY: "apply_to_destroy",
    Operation.LIST: "apply_to_list",
}


def apply_options(
    options: Options,
    operation: Operation,
    defaults: Iterable[Any],
    opts: Iterable[Any],
) -> None:
    """Apply default options supporting the operation, then the per-call options.

    Default options not supporting the operation are skipped; per-call options
    not supporting it raise OptionNotSupportedError.
    """
    method = _APPLY_METHODS[operation]

    for opt in defaults:
        apply = getattr(opt, method, None)
        if apply is not None:
            apply(options)

    for opt in opts:
        apply = getattr(opt, method, None)
        if apply is None:
            raise OptionNotSupportedError(
                f"{type(opt).__name__} cannot be used with {operation} operations"
            )
        apply(options)


class AnyOption:
    """Option usable with any operation, applying a function to the options bag."""

    def __init__(self, fn: Callable[[Options], None]) -> None:
        self._fn = fn

    def apply_to_get(self, options: GetOptions) -> None:
        self._fn(options)

    def apply_to_create(self, options: CreateOptions) -> None:
        self._fn(options)

    def apply_to_update(self, options: UpdateOptions) -> None:
        self._fn(options)

    def apply_to_destroy(self, options: DestroyOptions) -> None:
        self._fn(options)

    def apply_to_list(self, options: ListOptions) -> None:
        self._fn(options)


@dataclass(frozen=True)
class Paged:
    """List objects page by page instead of all at once.

    With info=True (the default) list() returns the PageInfo iterator. With
    info=False only the paging is configured, which is how the page size of an
    ObjectChannel listing is changed.
    """

    page: int
    limit: int
    info: bool = True

    def apply_to_list(self, options: ListOptions) -> None:
        options.paged = True
        options.page = self.page
        options.entries_per_page = self.limit
        options.page_info = self.info


@dataclass(frozen=True)
class AsObjectChannel:
    """Deliver the listed objects through the given ObjectChannel.

    Read the channel until it is closed or close it explicitly, otherwise the
    background task listing the objects is leaked.
    """

    channel: ObjectChannel

    def apply_to_list(self, options: ListOptions) -> None:
        options.object_channel = self.channel


@dataclass(frozen=True)
class FullObjects:
    """Get every listed object before handing it out.

    Most list endpoints return only a subset of the object data. This makes one
    additional call per object, use with care.
    """

    full_objects: bool = True

    def apply_to_list(self, options: ListOptions) -> None:
        options.full_objects = self.full_objects


class AutoTag:
    """Tag created objects with the given tags."""

    def __init__(self, *tags: str) -> None:
        self.tags = list(tags)

    def apply_to_create(self, options: CreateOptions) -> None:
        options.auto_tags = list(self.tags)


def _environment_key(api_group: str) -> str:
    return f"environment/{api_group}"


def EnvironmentOption(  # noqa: N802
    api_group: str, env_path_segment: str, override: bool = False
) -> AnyOption:
    """Configure an alternative environment path segment for an API group."""

    def apply(options: Options) -> None:
        options.set_environment(_environment_key(api_group), env_path_segment, override)

    return AnyOption(apply)


def get_environment_path_segment(ctx: OperationContext, api_group: str, default: str) -> str:
    """Environment path segment configured for the API group, or the default."""
    try:
        return ctx.options.get_environment(_environment_key(api_group))
    except KeyNotSetError:
        return default
