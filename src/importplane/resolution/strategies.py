"""Resolution strategies.

Each strategy is a pure function ``(module_name, ctx) -> ImportResult | None``.
``None`` means "no opinion"; any returned result stops the chain built by
``first_success``, except namespace-package results, which are held back
until no later strategy produces a concrete module.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace
from pathlib import Path

import structlog

from importplane.config.constants import (
    INIT_STEM,
    SOURCE_EXTENSION,
    STUB_EXTENSION,
    STUBS_SUFFIX,
    TYPESHED_STDLIB_DIR,
    TYPESHED_STUBS_DIR,
)
from importplane.config.models import ExecutionEnvironment, ResolverConfig
from importplane.resolution.filesystem import FileSystemView
from importplane.resolution.models import (
    ImplicitImport,
    ImportResult,
    ImportType,
    ModuleName,
    ResolutionTrace,
)
from importplane.resolution.py_typed import get_py_typed_info

logger = structlog.get_logger()


@dataclass(frozen=True, slots=True)
class ResolveContext:
    """Everything a strategy may look at for one resolution."""

    fs: FileSystemView
    config: ResolverConfig
    env: ExecutionEnvironment
    source_file: Path | None = None
    trace: ResolutionTrace = field(default_factory=ResolutionTrace)

    @property
    def local_roots(self) -> list[Path]:
        roots = [self.env.root] if self.env.root is not None else []
        return roots + list(self.env.extra_paths)

    @property
    def typeshed_bases(self) -> list[Path]:
        return [p for p in (self.config.typeshed_path, self.config.typeshed_fallback_path) if p]

    def is_in_library_like_root(self, path: Path) -> bool:
        """True for files under a library, typeshed or stub-override root."""
        roots = [*self.config.library_paths, *self.typeshed_bases]
        if self.config.stub_path is not None:
            roots.append(self.config.stub_path)
        return any(self.fs.is_under(path, r) for r in roots)


Strategy = Callable[[ModuleName, ResolveContext], "ImportResult | None"]


# =============================================================================
# Path-finder walk
# =============================================================================


@dataclass(frozen=True, slots=True)
class _Walk:
    resolved: tuple[Path | None, ...]
    package_dirs: tuple[Path, ...]  # directories backing a package/namespace result
    origin: Path | None = None

    @property
    def is_namespace(self) -> bool:
        return not self.resolved or self.resolved[-1] is None


def find_module_file(fs: FileSystemView, base: Path, *, allow_py: bool = True) -> Path | None:
    """``base.pyi`` or ``base.py``, stub first."""
    stub = base.with_name(base.name + STUB_EXTENSION)
    if fs.is_file(stub):
        return stub
    if allow_py:
        source = base.with_name(base.name + SOURCE_EXTENSION)
        if fs.is_file(source):
            return source
    return None


def walk_path_finder(
    fs: FileSystemView,
    roots: Sequence[Path],
    parts: Sequence[str],
    *,
    allow_py: bool = True,
) -> _Walk | None:
    """Resolve *parts* across *roots* the way Python's PathFinder does.

    Per part, the first root supplying a regular package or a module wins
    and narrows the search to it; otherwise every root supplying a plain
    directory contributes a namespace portion.
    """
    dirs = [r for r in roots if fs.is_dir(r)]
    if not dirs or not parts:
        return None
    resolved: list[Path | None] = []
    origin: Path | None = None
    for i, part in enumerate(parts):
        is_last = i == len(parts) - 1
        winner: tuple[Path | None, Path] | None = None
        portions: list[Path] = []
        for d in dirs:
            candidate = d / part
            candidate_is_dir = fs.is_dir(candidate)
            if candidate_is_dir:
                init = find_module_file(fs, candidate / INIT_STEM, allow_py=allow_py)
                if init is not None:
                    winner = (candidate, init)
                    break
            module_file = find_module_file(fs, candidate, allow_py=allow_py)
            if module_file is not None:
                winner = (None, module_file)
                break
            if candidate_is_dir:
                portions.append(candidate)
        if winner is not None:
            package_dir, file = winner
            if origin is None:
                origin = (package_dir or file).parent
            resolved.append(file)
            if package_dir is None:
                if not is_last:
                    return None
                return _Walk(tuple(resolved), (), origin)
            dirs = [package_dir]
            continue
        if not portions:
            return None
        if origin is None:
            origin = portions[0].parent
        resolved.append(None)
        dirs = portions
    return _Walk(tuple(resolved), tuple(dirs), origin)


def find_implicit_imports(fs: FileSystemView, dirs: Sequence[Path]) -> tuple[ImplicitImport, ...]:
    """Submodules and subpackages of a package, first directory wins."""
    found: dict[str, ImplicitImport] = {}
    for d in dirs:
        here: dict[str, ImplicitImport] = {}
        for name in fs.list_dir(d):
            path = d / name
            if fs.is_file(path):
                stem, ext = os.path.splitext(name)
                if ext not in (SOURCE_EXTENSION, STUB_EXTENSION):
                    continue
                if stem == INIT_STEM or not stem.isidentifier():
                    continue
                is_stub = ext == STUB_EXTENSION
                if stem not in here or is_stub:
                    here[stem] = ImplicitImport(stem, path, is_stub)
            elif name.isidentifier() and fs.is_dir(path):
                init = find_module_file(fs, path / INIT_STEM)
                if init is not None and name not in here:
                    here[name] = ImplicitImport(name, init, init.suffix == STUB_EXTENSION)
        for name, imp in here.items():
            found.setdefault(name, imp)
    return tuple(sorted(found.values(), key=lambda imp: imp.name))


def _result_from_walk(
    fs: FileSystemView,
    module: ModuleName,
    walk: _Walk,
    **kwargs: object,
) -> ImportResult:
    last = walk.resolved[-1] if walk.resolved else None
    return ImportResult(
        import_name=str(module),
        is_import_found=True,
        is_namespace_package=last is None,
        is_stub_file=last is not None and last.suffix == STUB_EXTENSION,
        resolved_paths=walk.resolved,
        search_path=walk.origin,
        implicit_imports=find_implicit_imports(fs, walk.package_dirs),
        **kwargs,  # type: ignore[arg-type]
    )


# =============================================================================
# Relative imports
# =============================================================================


def resolve_relative(module: ModuleName, ctx: ResolveContext) -> ImportResult:
    """Resolve a leading-dot import against the requesting file's directory."""
    name = str(module)
    if ctx.source_file is None:
        return ImportResult.not_found(name, "relative import without a requesting file")
    base = ctx.source_file.parent
    for _ in range(module.leading_dots - 1):
        base = base.parent
    fs = ctx.fs

    if not module.name_parts:
        init = find_module_file(fs, base / INIT_STEM)
        if init is None and not fs.is_dir(base):
            return ImportResult.not_found(name, f"directory {base} does not exist")
        return ImportResult(
            import_name=name,
            is_import_found=True,
            is_relative=True,
            is_namespace_package=init is None,
            is_stub_file=init is not None and init.suffix == STUB_EXTENSION,
            resolved_paths=(init,),
            search_path=base,
            implicit_imports=find_implicit_imports(fs, [base]),
        )

    walk = walk_path_finder(fs, [base], module.name_parts)
    if walk is None:
        return replace(
            ImportResult.not_found(name, f"not found relative to {base}"),
            is_relative=True,
        )
    return _result_from_walk(fs, module, walk, is_relative=True)


# =============================================================================
# Strategies, in chain order
# =============================================================================


def side_by_side(module: ModuleName, ctx: ResolveContext) -> ImportResult | None:
    """Look next to the requesting file, then in its ancestors up to the project root."""
    src = ctx.source_file
    if src is None or ctx.is_in_library_like_root(src):
        return None
    fs = ctx.fs
    directory = src.parent
    candidates = [directory]
    root = ctx.env.root
    if root is not None and fs.is_under(directory, root):
        current = directory
        while fs.path_key(current) != fs.path_key(root) and current.parent != current:
            current = current.parent
            candidates.append(current)
    for d in candidates:
        walk = walk_path_finder(fs, [d], module.name_parts)
        if walk is not None and not walk.is_namespace:
            return _result_from_walk(fs, module, walk, import_type=ImportType.LOCAL)
    ctx.trace.add(f"side-by-side: not found from {directory}")
    return None


def local_roots(module: ModuleName, ctx: ResolveContext) -> ImportResult | None:
    """Project root and extra paths, with namespace portions merged across them."""
    walk = walk_path_finder(ctx.fs, ctx.local_roots, module.name_parts)
    if walk is None:
        ctx.trace.add("local roots: not found")
        return None
    return _result_from_walk(ctx.fs, module, walk, import_type=ImportType.LOCAL)


def stub_override(module: ModuleName, ctx: ResolveContext) -> ImportResult | None:
    """An exact, non-namespace match in the stub override directory."""
    stub_path = ctx.config.stub_path
    if stub_path is None:
        return None
    walk = walk_path_finder(ctx.fs, [stub_path], module.name_parts)
    if walk is None or walk.is_namespace:
        return None
    return _result_from_walk(
        ctx.fs,
        module,
        walk,
        import_type=ImportType.LOCAL,
        is_local_typings_file=True,
    )


def _overlay_find(fs: FileSystemView, stub_base: Path, real_base: Path) -> tuple[Path, Path | None] | None:
    """Find a module file in a partial-stub overlay.

    Returns (reported path, backing stub file). A stub-package ``.pyi`` is
    reported at its mirrored location inside the real package.
    """
    stub_file = stub_base.with_name(stub_base.name + STUB_EXTENSION)
    if fs.is_file(stub_file):
        return real_base.with_name(real_base.name + STUB_EXTENSION), stub_file
    real_file = find_module_file(fs, real_base)
    if real_file is not None:
        return real_file, None
    return None


def _overlay_implicit_imports(fs: FileSystemView, stub_dir: Path, real_dir: Path) -> tuple[ImplicitImport, ...]:
    merged = {imp.name: imp for imp in find_implicit_imports(fs, [real_dir])}
    for imp in find_implicit_imports(fs, [stub_dir]):
        mirrored = real_dir / imp.path.relative_to(stub_dir)
        merged[imp.name] = ImplicitImport(imp.name, mirrored, imp.is_stub_file)
    return tuple(sorted(merged.values(), key=lambda imp: imp.name))


def _resolve_partial_overlay(
    module: ModuleName,
    ctx: ResolveContext,
    stub_dir: Path,
    real_dir: Path,
) -> ImportResult | None:
    fs = ctx.fs
    parts = module.name_parts
    resolved: list[Path | None] = []
    backing: list[Path] = []

    init = _overlay_find(fs, stub_dir / INIT_STEM, real_dir / INIT_STEM)
    if init is None:
        resolved.append(None)
    else:
        resolved.append(init[0])
        if init[1] is not None:
            backing.append(init[1])

    stub_cur, real_cur = stub_dir, real_dir
    is_package = True
    for i, part in enumerate(parts[1:], start=1):
        is_last = i == len(parts) - 1
        stub_next, real_next = stub_cur / part, real_cur / part
        next_is_dir = fs.is_dir(stub_next) or fs.is_dir(real_next)
        if next_is_dir:
            found = _overlay_find(fs, stub_next / INIT_STEM, real_next / INIT_STEM)
            if found is not None:
                resolved.append(found[0])
                if found[1] is not None:
                    backing.append(found[1])
                stub_cur, real_cur = stub_next, real_next
                continue
        found = _overlay_find(fs, stub_cur / part, real_cur / part)
        if found is not None:
            if not is_last:
                return None
            resolved.append(found[0])
            if found[1] is not None:
                backing.append(found[1])
            is_package = False
            break
        if not next_is_dir:
            ctx.trace.add(f"partial stub package {stub_dir}: {part} absent from stub and package")
            return None
        resolved.append(None)
        stub_cur, real_cur = stub_next, real_next

    last = resolved[-1]
    real_typed = get_py_typed_info(fs, real_dir)
    return ImportResult(
        import_name=str(module),
        is_import_found=True,
        is_namespace_package=last is None,
        is_stub_file=last is not None and last.suffix == STUB_EXTENSION,
        import_type=ImportType.THIRD_PARTY,
        resolved_paths=tuple(resolved),
        search_path=real_dir.parent,
        is_stub_package=True,
        is_py_typed_present=real_typed is not None and not real_typed.is_partial_stub_package,
        partial_stub_paths=tuple(backing),
        implicit_imports=_overlay_implicit_imports(fs, stub_cur, real_cur) if is_package else (),
    )


def _find_real_package(ctx: ResolveContext, stub_root: Path, package: str) -> Path | None:
    for root in [stub_root, *ctx.config.library_paths]:
        candidate = root / package
        if ctx.fs.is_dir(candidate):
            return candidate
    return None


def stub_packages(module: ModuleName, ctx: ResolveContext) -> ImportResult | None:
    """``<pkg>-stubs`` directories in the stub override path and library roots."""
    fs = ctx.fs
    parts = module.name_parts
    if not parts:
        return None
    stub_roots: list[Path] = []
    if ctx.config.stub_path is not None:
        stub_roots.append(ctx.config.stub_path)
    stub_roots.extend(p for p in ctx.config.library_paths if p not in stub_roots)

    for root in stub_roots:
        stub_dir = root / f"{parts[0]}{STUBS_SUFFIX}"
        if not fs.is_dir(stub_dir):
            continue
        in_typings = ctx.config.stub_path is not None and root == ctx.config.stub_path
        typed = get_py_typed_info(fs, stub_dir)

        if typed is not None and typed.is_partial_stub_package:
            real_dir = _find_real_package(ctx, root, parts[0])
            if real_dir is None:
                logger.debug("partial_stub_package_ignored", stub_dir=str(stub_dir))
                ctx.trace.add(f"partial stub package {stub_dir} has no installed package")
                continue
            result = _resolve_partial_overlay(module, ctx, stub_dir, real_dir)
            if result is not None:
                return result
            continue

        init = fs.is_file(stub_dir / f"{INIT_STEM}{STUB_EXTENSION}")
        kind_kwargs: dict[str, object] = {
            "import_type": ImportType.LOCAL if in_typings else ImportType.THIRD_PARTY,
            "is_local_typings_file": in_typings,
            "is_stub_package": True,
        }
        if init:
            init_path = stub_dir / f"{INIT_STEM}{STUB_EXTENSION}"
            if len(parts) == 1:
                walk = _Walk((init_path,), (stub_dir,), root)
                return _result_from_walk(fs, module, walk, **kind_kwargs)
            inner = walk_path_finder(fs, [stub_dir], parts[1:], allow_py=False)
            if inner is None:
                return replace(
                    ImportResult.not_found(str(module), f"full stub package {stub_dir} lacks {module}"),
                    is_stub_package=True,
                )
            walk = _Walk((init_path, *inner.resolved), inner.package_dirs, root)
            return _result_from_walk(fs, module, walk, **kind_kwargs)

        # Namespace stub directory: contributes names it has, falls through otherwise.
        if len(parts) == 1:
            continue
        inner = walk_path_finder(fs, [stub_dir], parts[1:], allow_py=False)
        if inner is None or inner.is_namespace:
            continue
        walk = _Walk((None, *inner.resolved), inner.package_dirs, root)
        return _result_from_walk(fs, module, walk, **kind_kwargs)
    return None


def typeshed_third_party_roots(fs: FileSystemView, typeshed: Path) -> list[Path]:
    """Every ``stubs/<dist>`` directory of a typeshed checkout."""
    stubs = typeshed / TYPESHED_STUBS_DIR
    return [stubs / name for name in fs.list_dir(stubs) if fs.is_dir(stubs / name)]


def resolve_library(module: ModuleName, ctx: ResolveContext) -> ImportResult | None:
    fs = ctx.fs
    if not module.name_parts:
        return None
    roots = ctx.config.library_paths
    walk = walk_path_finder(fs, roots, module.name_parts)
    if walk is None:
        return None
    typed = None
    for root in roots:
        package_dir = root / module.name_parts[0]
        if fs.is_dir(package_dir):
            typed = get_py_typed_info(fs, package_dir)
            break
    return _result_from_walk(
        fs,
        module,
        walk,
        import_type=ImportType.THIRD_PARTY,
        is_py_typed_present=typed is not None and not typed.is_partial_stub_package,
    )


def _make_typeshed_strategy(get_base: Callable[[ResolverConfig], Path | None], label: str) -> Strategy:
    def strategy(module: ModuleName, ctx: ResolveContext) -> ImportResult | None:
        base = get_base(ctx.config)
        if base is None:
            return None
        fs = ctx.fs
        walk = walk_path_finder(fs, [base / TYPESHED_STDLIB_DIR], module.name_parts, allow_py=False)
        if walk is not None and not walk.is_namespace:
            return _result_from_walk(
                fs,
                module,
                walk,
                import_type=ImportType.STDLIB,
                is_stdlib_typeshed_file=True,
            )

        for dist_root in typeshed_third_party_roots(fs, base):
            walk = walk_path_finder(fs, [dist_root], module.name_parts, allow_py=False)
            if walk is None or walk.is_namespace:
                continue
            library = resolve_library(module, ctx)
            if library is not None and library.is_py_typed_present:
                ctx.trace.add(f"{label}: skipped stub for py.typed package {module}")
                return None
            stub_file = walk.resolved[-1]
            if library is not None and not library.is_namespace_package:
                return replace(
                    library,
                    is_stub_file=True,
                    is_third_party_typeshed_file=True,
                    resolved_paths=(*library.resolved_paths, stub_file),
                )
            return _result_from_walk(
                fs,
                module,
                walk,
                import_type=ImportType.THIRD_PARTY,
                is_third_party_typeshed_file=True,
            )
        return None

    strategy.__name__ = f"{label.replace(' ', '_')}_typeshed"
    return strategy


user_typeshed = _make_typeshed_strategy(lambda c: c.typeshed_path, "user")
bundled_typeshed = _make_typeshed_strategy(lambda c: c.typeshed_fallback_path, "bundled")


def library(module: ModuleName, ctx: ResolveContext) -> ImportResult | None:
    """Installed packages; a py.typed package is authoritative."""
    result = resolve_library(module, ctx)
    if result is None:
        ctx.trace.add("library roots: not found")
    return result


DEFAULT_STRATEGIES: tuple[Strategy, ...] = (
    side_by_side,
    local_roots,
    stub_override,
    stub_packages,
    user_typeshed,
    bundled_typeshed,
    library,
)


def first_success(strategies: Sequence[Strategy]) -> Strategy:
    """Combine strategies; the first concrete result wins."""

    def chain(module: ModuleName, ctx: ResolveContext) -> ImportResult | None:
        namespace_fallback: ImportResult | None = None
        for strategy in strategies:
            result = strategy(module, ctx)
            if result is None:
                continue
            if result.is_import_found and result.is_namespace_package:
                if namespace_fallback is None:
                    namespace_fallback = result
                continue
            if not result.is_import_found and namespace_fallback is not None:
                return namespace_fallback
            return result
        return namespace_fallback

    return chain
