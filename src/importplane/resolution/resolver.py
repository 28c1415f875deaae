"""Module path resolver.

Maps a dotted module name plus the requesting file to the files that back
it, and maps files back to the names they would be imported under.
"""

from __future__ import annotations

import os
from pathlib import Path

import structlog

from importplane.config.constants import INIT_STEM, SOURCE_EXTENSIONS, STUBS_SUFFIX
from importplane.config.models import ExecutionEnvironment, ResolverConfig
from importplane.resolution.filesystem import FileSystemView
from importplane.resolution.models import (
    AutoImportInfo,
    ImportCategory,
    ImportResult,
    ImportType,
    ModuleImportInfo,
    ModuleName,
    SearchRoot,
    SearchRootKind,
)
from importplane.resolution.py_typed import get_py_typed_info
from importplane.resolution.strategies import (
    DEFAULT_STRATEGIES,
    ResolveContext,
    Strategy,
    first_success,
    resolve_relative,
    typeshed_third_party_roots,
)

logger = structlog.get_logger()


class ImportResolver:
    """Resolves imports against the search roots of a ``ResolverConfig``.

    Holds no per-request state; the ``FileSystemView`` cache is the only
    thing that outlives a call and is invalidated by its owner.
    """

    def __init__(
        self,
        config: ResolverConfig,
        fs: FileSystemView | None = None,
        strategies: tuple[Strategy, ...] = DEFAULT_STRATEGIES,
    ) -> None:
        self._config = config
        self._fs = fs or FileSystemView(config.case_sensitive, probe=config.project_root)
        self._chain = first_success(strategies)

    @property
    def config(self) -> ResolverConfig:
        return self._config

    @property
    def fs(self) -> FileSystemView:
        return self._fs

    def _context(self, source_file: Path | None, env: ExecutionEnvironment | None) -> ResolveContext:
        if env is None:
            env = (
                self._config.find_execution_environment(source_file, self._fs.is_under)
                if source_file is not None
                else self._config.default_execution_environment()
            )
        return ResolveContext(fs=self._fs, config=self._config, env=env, source_file=source_file)

    # -------------------------------------------------------------------------
    # Name -> files
    # -------------------------------------------------------------------------

    def resolve_import(
        self,
        source_file: Path | None,
        module_name: ModuleName | str,
        env: ExecutionEnvironment | None = None,
    ) -> ImportResult:
        """Resolve *module_name* as imported from *source_file*.

        Not found is a value (``is_import_found=False``), never an exception.
        """
        module = ModuleName.parse(module_name) if isinstance(module_name, str) else module_name
        ctx = self._context(source_file, env)

        if module.is_relative:
            result = resolve_relative(module, ctx)
        elif not module.name_parts:
            result = ImportResult.not_found(str(module), "empty module name")
        else:
            result = self._chain(module, ctx) or ImportResult.not_found(
                str(module), *ctx.trace.notes
            )
            if not result.is_import_found and not result.import_failure_info:
                result = ImportResult.not_found(str(module), *ctx.trace.notes)

        if result.is_import_found:
            logger.debug(
                "import_resolved",
                module=str(module),
                path=str(result.resolved_path) if result.resolved_path else None,
                import_type=result.import_type.name,
                is_stub=result.is_stub_file,
                namespace=result.is_namespace_package,
            )
        else:
            logger.debug("import_unresolved", module=str(module), notes=list(result.import_failure_info))
        return result

    def get_import_roots(self, env: ExecutionEnvironment | None = None) -> list[SearchRoot]:
        """All search roots, in priority order. Never yields an empty path."""
        env = env or self._config.default_execution_environment()
        cfg = self._config
        fs = self._fs
        roots: list[SearchRoot] = []
        if env.root is not None:
            roots.append(SearchRoot(SearchRootKind.USER_SOURCE, env.root))
        roots.extend(SearchRoot(SearchRootKind.EXTRA_PATH, p) for p in env.extra_paths)
        if cfg.stub_path is not None:
            roots.append(SearchRoot(SearchRootKind.STUB_OVERRIDE, cfg.stub_path))

        stub_pkg_parents = [cfg.stub_path] if cfg.stub_path is not None else []
        stub_pkg_parents.extend(cfg.library_paths)
        for parent in stub_pkg_parents:
            for name in fs.list_dir(parent):
                if name.endswith(STUBS_SUFFIX) and fs.is_dir(parent / name):
                    roots.append(SearchRoot(SearchRootKind.THIRD_PARTY_STUB_PKG, parent / name))

        for base, kind in (
            (cfg.typeshed_path, SearchRootKind.USER_TYPESHED),
            (cfg.typeshed_fallback_path, SearchRootKind.BUNDLED_TYPESHED_FALLBACK),
        ):
            if base is None:
                continue
            stdlib = base / "stdlib"
            if fs.is_dir(stdlib):
                roots.append(SearchRoot(kind, stdlib, is_stdlib=True))
            roots.extend(SearchRoot(kind, p) for p in typeshed_third_party_roots(fs, base))

        roots.extend(SearchRoot(SearchRootKind.LIBRARY, p) for p in cfg.library_paths)
        return [r for r in roots if str(r.path)]

    # -------------------------------------------------------------------------
    # File -> name
    # -------------------------------------------------------------------------

    def get_module_name_for_import(
        self,
        file: Path,
        env: ExecutionEnvironment | None = None,
        *,
        detect_py_typed: bool = True,
    ) -> ModuleImportInfo:
        """Name *file* would be imported under, from the most specific root containing it."""
        fs = self._fs
        best: SearchRoot | None = None
        best_len = -1
        for root in self.get_import_roots(env):
            base = root.module_base
            if not fs.is_under(file, base) or fs.path_key(file) == fs.path_key(base):
                continue
            length = len(fs.path_key(base))
            if length > best_len:
                best, best_len = root, length
        if best is None:
            return ModuleImportInfo(module_name=None)

        base = best.module_base
        parts = list(Path(os.path.relpath(file, base)).parts)
        stem, ext = os.path.splitext(parts[-1])
        if ext in SOURCE_EXTENSIONS:
            parts[-1] = stem
        if parts and parts[-1] == INIT_STEM:
            parts.pop()
        top_level = parts[0] if parts else None
        if parts and parts[0].endswith(STUBS_SUFFIX):
            parts[0] = parts[0][: -len(STUBS_SUFFIX)]
        module_name = ".".join(parts) if parts and all(p.isidentifier() for p in parts) else None

        in_typings = self._config.stub_path is not None and (
            best.kind == SearchRootKind.STUB_OVERRIDE
            or (
                best.kind == SearchRootKind.THIRD_PARTY_STUB_PKG
                and fs.path_key(base) == fs.path_key(self._config.stub_path)
            )
        )
        if in_typings:
            import_type = ImportType.LOCAL
        elif best.kind in (SearchRootKind.USER_SOURCE, SearchRootKind.EXTRA_PATH):
            import_type = ImportType.LOCAL
        elif best.is_stdlib:
            import_type = ImportType.STDLIB
        else:
            import_type = ImportType.THIRD_PARTY

        py_typed = False
        if detect_py_typed and best.kind == SearchRootKind.LIBRARY and top_level is not None:
            info = get_py_typed_info(fs, base / top_level)
            py_typed = info is not None and not info.is_partial_stub_package

        return ModuleImportInfo(
            module_name=module_name,
            import_type=import_type,
            is_third_party_py_typed_present=py_typed,
            is_local_typings_file=in_typings,
            search_root=best,
        )

    def get_auto_import_info(self, source_file: Path, target_file: Path) -> AutoImportInfo | None:
        """Module name and category for importing *target_file* into *source_file*."""
        env = self._config.find_execution_environment(source_file, self._fs.is_under)
        info = self.get_module_name_for_import(target_file, env)
        if info.module_name:
            return AutoImportInfo(module_name=info.module_name, category=info.category)
        relative = self.get_relative_module_name(source_file, target_file, source_is_file=True)
        if relative is None:
            return None
        return AutoImportInfo(module_name=relative, category=ImportCategory.LOCAL)

    def get_relative_module_name(
        self,
        source: Path,
        target: Path,
        *,
        ignore_folder_structure: bool = False,
        source_is_file: bool | None = None,
    ) -> str | None:
        """Relative dotted name of *target* as seen from *source*.

        None when *target* lives in the stub override or a typeshed root;
        those are always imported absolutely.
        """
        fs = self._fs
        cfg = self._config
        for absolute_only in (cfg.stub_path, cfg.typeshed_path, cfg.typeshed_fallback_path):
            if absolute_only is not None and fs.is_under(target, absolute_only):
                return None

        if source_is_file is None:
            source_is_file = fs.is_file(source)
        src_dir = source.parent if source_is_file else source

        symbol_name: str | None = None
        dest_dir = target
        if source_is_file:
            dest_dir = target.parent
            stem = target.name.split(".", 1)[0]
            if stem != INIT_STEM:
                symbol_name = stem
            elif ignore_folder_structure:
                symbol_name = dest_dir.name
                dest_dir = dest_dir.parent

        relative = os.path.relpath(dest_dir, src_dir)
        components = [] if relative == os.curdir else relative.split(os.sep)

        text = "."
        for i, component in enumerate(components):
            text += "." if component == os.pardir else component
            if component != os.pardir and i != len(components) - 1:
                text += "."
        if symbol_name:
            text = text + symbol_name if text.endswith(".") else f"{text}.{symbol_name}"
        return text
