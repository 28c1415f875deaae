"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages.
"""

import sys
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local importplane package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of importplane modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("importplane"):
        del sys.modules[module_name]


@pytest.fixture
def make_files(tmp_path: Path):
    """Factory writing ``{relative_path: content}`` under a root (default tmp_path).

    Paths ending in ``/`` create empty directories. Returns the root.
    """

    def _make(files: dict[str, str], root: Path | None = None) -> Path:
        base = root or tmp_path
        for rel, content in files.items():
            path = base / rel
            if rel.endswith("/"):
                path.mkdir(parents=True, exist_ok=True)
                continue
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        return base

    return _make
