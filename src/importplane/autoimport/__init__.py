"""Auto-import: candidate search and import statement synthesis."""

from importplane.autoimport.engine import AutoImporter, is_pattern_in_symbol
from importplane.autoimport.indexer import SourceFileProvider, build_module_symbols_map
from importplane.autoimport.models import (
    AutoImportOptions,
    AutoImportResult,
    ImportGroup,
    ImportNameInfo,
    ImportNameWithModuleInfo,
    ImportStatement,
    ImportStatements,
    ModuleNameInfo,
    ModuleSymbolMap,
    ModuleSymbolTable,
    SymbolKind,
    TextEditsResult,
)
from importplane.autoimport.ops import Workspace, discover_source_files
from importplane.autoimport.ordering import (
    compare_import_names,
    get_import_group,
    get_import_group_from_auto_import_info,
)
from importplane.autoimport.statements import get_top_level_imports
from importplane.autoimport.synthesizer import (
    get_text_edits_for_auto_import_by_file_path,
    get_text_edits_for_insertion,
    get_text_edits_for_insertions,
    get_text_edits_for_symbol_addition,
)

__all__ = [
    # Facade
    "Workspace",
    "discover_source_files",
    # Search
    "AutoImporter",
    "AutoImportOptions",
    "AutoImportResult",
    "SourceFileProvider",
    "build_module_symbols_map",
    "is_pattern_in_symbol",
    "ModuleSymbolMap",
    "ModuleSymbolTable",
    "SymbolKind",
    # Existing imports
    "ImportStatement",
    "ImportStatements",
    "get_top_level_imports",
    # Synthesis
    "ImportGroup",
    "ImportNameInfo",
    "ImportNameWithModuleInfo",
    "ModuleNameInfo",
    "TextEditsResult",
    "compare_import_names",
    "get_import_group",
    "get_import_group_from_auto_import_info",
    "get_text_edits_for_auto_import_by_file_path",
    "get_text_edits_for_insertion",
    "get_text_edits_for_insertions",
    "get_text_edits_for_symbol_addition",
]
