# SPDX-License-Identifier: MIT
"""The vcvars environment resolver.

Runs vcvarsall.bat in a cmd.exe child process (at most once per
resolver) and makes available the environment that process ended up
with.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from enum import Enum
from pathlib import Path

from vcvars.configure.config import VcvarsConfig
from vcvars.configure.platform import get_platform
from vcvars.core.cache import CACHE_DIR_NAME, CacheStore, FileCacheStore, VarCache
from vcvars.core.envdump import EnvironmentMap, parse_environment_dump
from vcvars.core.errors import VarNotFoundError
from vcvars.toolchains.msvc import (
    ArchSelector,
    ToolchainLocation,
    find_installation,
    run_vcvarsall,
)

logger = logging.getLogger(__name__)


class ResolverState(Enum):
    """Build state of a resolver's environment map."""

    UNBUILT = "unbuilt"
    BUILDING = "building"
    BUILT = "built"
    FAILED = "failed"


class Vcvars:
    """Environment resolver for the MSVC toolchain.

    The first query runs vswhere.exe and vcvarsall.bat; all later queries
    on the same instance are answered from memory. A failed run is not
    remembered: the next query starts over.

    Prefer get_cached() in build steps, since each build step is a new
    process and would otherwise pay for vcvarsall.bat every time.

    Example:
        vcvars = Vcvars(target_arch="x86_64", out_dir=build_dir)
        include = vcvars.get_cached("INCLUDE")
        include_dirs = include.split(os.pathsep)

    Attributes:
        config: Inputs of this resolver.
    """

    def __init__(
        self,
        *,
        target_arch: str | None = None,
        out_dir: Path | str | None = None,
        vswhere_args: Sequence[str] | None = None,
        prefer_x86_host_tools: bool = False,
        environ: Mapping[str, str] | None = None,
        host_arch: str | None = None,
        cache_store: CacheStore | None = None,
    ) -> None:
        """Create a resolver. Nothing is run until the first query.

        Args:
            target_arch: Target architecture; defaults to VCVARS_TARGET_ARCH.
            out_dir: Existing directory for the disk cache; defaults to
                VCVARS_OUT_DIR. Only needed by get_cached().
            vswhere_args: Arguments passed to vswhere.exe instead of
                ``-latest``, e.g. ``["-version", "[15.0,16.0)"]``.
            prefer_x86_host_tools: On an x86_64 host, select the x86-hosted
                compilers (``x86_x64``) instead of the x64-hosted ones
                (``x64``).
            environ: Environment to read inputs from; defaults to os.environ.
            host_arch: Host architecture; defaults to the interpreter's.
            cache_store: Storage for get_cached(); defaults to files in
                ``<out_dir>/vcvars-cache``.
        """
        self.config = VcvarsConfig.create(
            target_arch=target_arch,
            out_dir=out_dir,
            vswhere_args=vswhere_args,
            prefer_x86_host_tools=prefer_x86_host_tools,
            environ=environ,
        )
        self._host_arch = host_arch
        self._cache_store = cache_store
        self._env_map: EnvironmentMap | None = None
        self._state = ResolverState.UNBUILT

    @property
    def state(self) -> ResolverState:
        return self._state

    def get(self, name: str) -> str:
        """Return the value of ``name`` in the vcvars environment.

        The lookup ignores case.

        Raises:
            VcvarsError: If vcvarsall.bat can't be run, or the variable
                isn't set (VarNotFoundError).
        """
        env_map = self._ensure_env_map()
        try:
            return env_map[name.upper()]
        except KeyError:
            raise VarNotFoundError(name) from None

    def get_cached(self, name: str) -> str:
        """Return the value of ``name``, using the disk cache.

        Reads ``<out_dir>/vcvars-cache/<name>.txt`` if it exists. Otherwise
        resolves the variable with get() and writes the cache file.

        Distinct names that sanitize to the same filename share a cache
        file and will return wrong values.

        Raises:
            ValueError: If out_dir is unset or not an existing directory.
            VcvarsError: As get(), or CacheFailedError for cache I/O.
        """
        return VarCache(self._store()).get(name, self.get)

    def environment(self) -> EnvironmentMap:
        """Return the whole vcvars environment as a read-only mapping."""
        return self._ensure_env_map()

    def _store(self) -> CacheStore:
        if self._cache_store is not None:
            return self._cache_store
        # The out dir is looked up on every call, like the other inputs.
        return FileCacheStore(self.config.require_out_dir() / CACHE_DIR_NAME)

    def _ensure_env_map(self) -> EnvironmentMap:
        if self._env_map is not None:
            return self._env_map
        if self._state is ResolverState.BUILDING:
            raise RuntimeError("vcvars environment is already being built")

        self._state = ResolverState.BUILDING
        try:
            self._env_map = self._make_env_map()
        finally:
            if self._env_map is None:
                self._state = ResolverState.FAILED
            else:
                self._state = ResolverState.BUILT
        return self._env_map

    def _make_env_map(self) -> EnvironmentMap:
        # Select the architecture first so an unsupported pair fails
        # before anything is spawned.
        host = self._host_arch or get_platform().arch
        target = self.config.require_target_arch()
        selector = ArchSelector(prefer_x86_host_tools=self.config.prefer_x86_host_tools)
        arch_arg = selector.select(host, target)

        location = ToolchainLocation.from_config(self.config)
        installation = find_installation(location, self.config.vswhere_args)
        location = location.with_installation(installation)

        output = run_vcvarsall(location, arch_arg)
        env_map = parse_environment_dump(output)
        logger.debug("Parsed %d variables from vcvarsall.bat", len(env_map))
        return env_map

    def __repr__(self) -> str:
        return f"Vcvars(target_arch={self.config.target_arch!r}, state={self._state.value})"
