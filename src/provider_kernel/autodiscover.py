# provider_kernel/autodiscover.py
"""
Provider auto-discovery
──────────────────────────────────────────────
1. find_source_files()  → files under the roots matching the glob patterns
2. snapshot the registry
3. activate each file in sorted order (import it so its registrations run)
4. snapshot again and diff → what the files added

Usage:
    result = auto_register(["app"], ["**/*.registry.py"], strict=True)
    for line in result.describe():
        print(line)
──────────────────────────────────────────────
"""
from __future__ import annotations

import fnmatch
import hashlib
import importlib.util
import logging
import os
import re
import sys
import weakref
from dataclasses import dataclass, field
from pathlib import Path
from types import ModuleType
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Union

from provider_kernel.config.base_settings import DEFAULT_PATTERNS, DiscoverySettings
from provider_kernel.di.context import get_container, use_container
from provider_kernel.di.errors import ActivationError, NoFilesFoundError
from provider_kernel.di.formatting import describe_registration, format_token
from provider_kernel.di.introspection import diff_snapshots, snapshot_registry
from provider_kernel.di.providers import Registration
from provider_kernel.di.registry import Container
from provider_kernel.di.tokens import Token

__all__ = [
    "DEFAULT_PATTERNS",
    "Activator",
    "DiscoveryRequest",
    "DiscoveryResult",
    "ModuleActivator",
    "find_source_files",
    "discover",
    "auto_register",
    "discover_from_settings",
]

logger = logging.getLogger("provider_kernel.autodiscover")

PathLike = Union[str, "os.PathLike[str]"]
Activator = Callable[[str], None]


# ──────────────────────────────────────────────
# Source locator
# ──────────────────────────────────────────────
def _normalize_pattern(pattern: str) -> str:
    pattern = pattern.replace("\\", "/")
    while pattern.startswith("./"):
        pattern = pattern[2:]
    return pattern


def _matches_file_root(name: str, pattern: str) -> bool:
    # a file root is its own only candidate; leading `**/` spans zero directories
    parts = [p for p in pattern.split("/") if p not in ("", ".")]
    while parts and parts[0] == "**":
        parts.pop(0)
    return len(parts) == 1 and fnmatch.fnmatchcase(name, parts[0])


def _glob_files(base: Path, pattern: str) -> Iterable[Path]:
    for path in base.glob(pattern):
        if path.is_file():
            yield path


def find_source_files(roots: Sequence[PathLike], patterns: Sequence[str]) -> List[str]:
    """
    Absolute paths of files under `roots` whose root-relative path matches a pattern.
    Roots that are missing or cannot be read are skipped. Result is deduplicated and sorted.
    """
    patterns = [_normalize_pattern(p) for p in patterns]
    found = set()
    for root in roots:
        try:
            base = Path(root).expanduser().absolute()
            is_file, is_dir = base.is_file(), base.is_dir()
        except (OSError, RuntimeError, ValueError) as e:
            logger.warning("⚠️ [kernel] Skipping unreadable discovery root %s: %s", root, e)
            continue
        if is_file:
            if any(_matches_file_root(base.name, p) for p in patterns):
                found.add(str(base))
            continue
        if not is_dir:
            logger.debug("[kernel] Discovery root %s does not exist, skipping", base)
            continue
        for pattern in patterns:
            try:
                found.update(str(path) for path in _glob_files(base, pattern))
            except (OSError, RuntimeError, ValueError, NotImplementedError) as e:
                logger.warning("⚠️ [kernel] Skipping pattern %r under %s: %s", pattern, base, e)
    return sorted(found)


# ──────────────────────────────────────────────
# Activation
# ──────────────────────────────────────────────
def _module_name_for(path: str) -> str:
    # unique per file so two `user.registry.py` files never share a module
    digest = hashlib.sha1(path.encode("utf-8")).hexdigest()[:12]
    stem = re.sub(r"\W", "_", Path(path).name.split(".")[0]) or "module"
    return f"pk_autoload_{stem}_{digest}"


def _load_module(path: str) -> ModuleType:
    modname = _module_name_for(path)
    spec = importlib.util.spec_from_file_location(modname, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"No Python loader for {path}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[modname] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(modname, None)
        raise
    return module


# registry → {path: module}. A file is executed at most once per registry.
_ACTIVATED: "weakref.WeakKeyDictionary[Any, Dict[str, ModuleType]]" = weakref.WeakKeyDictionary()


class ModuleActivator:
    """
    Default activator: import a file so its module-level registrations run.

    While the file executes, `registry` is bound as the current container so
    `@registry([...])` and `register(...)` write into it. Re-activating a file
    into the same registry is a no-op, like a cached import.
    """

    def __init__(self, registry: Any):
        self.registry = registry
        try:
            self.modules = _ACTIVATED.setdefault(registry, {})
        except TypeError:  # not weak-referenceable
            self.modules = {}

    def __call__(self, path: str) -> None:
        if path in self.modules:
            logger.debug("[kernel] %s already activated, skipping", path)
            return
        if isinstance(self.registry, Container):
            with use_container(self.registry):
                module = _load_module(path)
        else:
            module = _load_module(path)
        self.modules[path] = module


# ──────────────────────────────────────────────
# Orchestrator
# ──────────────────────────────────────────────
@dataclass(frozen=True)
class DiscoveryRequest:
    roots: Sequence[PathLike]
    patterns: Sequence[str] = tuple(DEFAULT_PATTERNS)
    strict: bool = False
    registry: Optional[Any] = None  # defaults to the current container


@dataclass(frozen=True)
class DiscoveryResult:
    files: List[str] = field(default_factory=list)
    added: Dict[Token, List[Registration]] = field(default_factory=dict)

    @property
    def added_count(self) -> int:
        return sum(len(regs) for regs in self.added.values())

    def registrations(self) -> List[Registration]:
        return [reg for regs in self.added.values() for reg in regs]

    def describe(self) -> List[str]:
        return [describe_registration(reg) for reg in self.registrations()]


def discover(request: DiscoveryRequest, activator: Optional[Activator] = None) -> DiscoveryResult:
    """
    Locate, activate and diff. Raises NoFilesFoundError (strict, nothing matched)
    or ActivationError (a file failed to load; earlier files stay registered).
    """
    registry = request.registry if request.registry is not None else get_container()
    roots = [str(r) for r in request.roots]
    patterns = list(request.patterns)

    files = find_source_files(roots, patterns)
    logger.info("🔍 [kernel] Discovery: %d file(s) in %s matching %s", len(files), roots, patterns)
    if not files and request.strict:
        raise NoFilesFoundError(roots, patterns)

    activate = activator or ModuleActivator(registry)
    before = snapshot_registry(registry)
    for path in files:
        logger.debug("📦 [kernel] Activating %s", path)
        try:
            activate(path)
        except Exception as e:
            logger.error("❌ [kernel] Activation failed for %s: %s", path, e)
            raise ActivationError(path, e) from e
    after = snapshot_registry(registry)

    added = diff_snapshots(before, after)
    result = DiscoveryResult(files, added)
    for reg in result.registrations():
        logger.debug("   ↳ %s", describe_registration(reg))
    logger.info(
        "✅ [kernel] Discovery complete: %d new registration(s) across %d token(s)%s",
        result.added_count,
        len(added),
        f" → {[format_token(t) for t in added]}" if added else "",
    )
    return result


def auto_register(
    roots: Sequence[PathLike],
    patterns: Sequence[str] = tuple(DEFAULT_PATTERNS),
    *,
    strict: bool = False,
    registry: Optional[Any] = None,
    activator: Optional[Activator] = None,
) -> DiscoveryResult:
    """Keyword form of discover()."""
    return discover(DiscoveryRequest(roots, patterns, strict, registry), activator)


def discover_from_settings(
    settings: Optional[DiscoverySettings] = None,
    registry: Optional[Any] = None,
    activator: Optional[Activator] = None,
) -> DiscoveryResult:
    settings = settings or DiscoverySettings()
    return auto_register(
        settings.roots,
        settings.patterns,
        strict=settings.strict,
        registry=registry,
        activator=activator,
    )
