"""
Unit tests for Qt module discovery.
"""

import pytest

from qtkit.core.exceptions import ManifestParseError
from qtkit.qt.modules import (
    DiscoveryResult,
    GitModulesStrategy,
    ModuleDiscovery,
    QtProjectStrategy,
)


MANIFEST = """[submodule "qtbase"]
\tpath = qtbase
\turl = ../qtbase.git
[submodule "qtnetwork"]
\tpath = qtnetwork
\turl = ../qtnetwork.git
\tqt = false
[submodule "qtwidgets"]
\tpath = qtwidgets
\turl = ../qtwidgets.git
"""

QT_PRO = """TEMPLATE = subdirs

CONFIG += prepare_docs qt_docs_targets testcase_targets

addModule(qtbase)
addModule(qtxmlpatterns, qtbase)
addModule(qtdeclarative, qtbase, qtxmlpatterns)
addModule(qtwebkit, qtdeclarative qtlocation, qtsensors, qtwebchannel)
# addModule(qtcommented)
    addModule(qtindented)
"""


class TestGitModulesStrategy:
    """Test .gitmodules parsing."""

    def test_missing_manifest_returns_none(self, tmp_path):
        """Test None signals that the format does not apply."""
        assert GitModulesStrategy().discover(tmp_path) is None

    def test_excludes_modules_flagged_false(self, tmp_path):
        """Test entries with qt = false are dropped."""
        (tmp_path / ".gitmodules").write_text(MANIFEST)

        assert GitModulesStrategy().discover(tmp_path) == {"base", "widgets"}

    def test_ignores_sections_without_qt_prefix(self, tmp_path):
        """Test sections not named submodule "qt..." are ignored."""
        (tmp_path / ".gitmodules").write_text(
            '[submodule "qtbase"]\n\tpath = qtbase\n'
            '[submodule "gnuwin32"]\n\tpath = gnuwin32\n'
            "[core]\n\tbare = false\n"
        )

        assert GitModulesStrategy().discover(tmp_path) == {"base"}

    def test_other_flags_are_kept(self, tmp_path):
        """Test only an explicit false excludes a module."""
        (tmp_path / ".gitmodules").write_text(
            '[submodule "qtbase"]\n\tqt = true\n'
            '[submodule "qtsvg"]\n\tstatus = preview\n'
        )

        assert GitModulesStrategy().discover(tmp_path) == {"base", "svg"}

    def test_empty_manifest(self, tmp_path):
        """Test an empty manifest yields an empty set, not None."""
        (tmp_path / ".gitmodules").write_text("")

        assert GitModulesStrategy().discover(tmp_path) == set()

    def test_key_before_first_section(self, tmp_path):
        """Test a malformed manifest raises ManifestParseError naming the tree."""
        (tmp_path / ".gitmodules").write_text("path = qtbase\n[submodule \"qtbase\"]\n")

        with pytest.raises(ManifestParseError) as exc_info:
            GitModulesStrategy().discover(tmp_path)

        assert exc_info.value.source_dir == tmp_path
        assert str(tmp_path) in str(exc_info.value)
        assert exc_info.value.exit_code == 2


class TestQtProjectStrategy:
    """Test qt.pro parsing."""

    def test_missing_manifest_returns_none(self, tmp_path):
        assert QtProjectStrategy().discover(tmp_path) is None

    def test_extracts_add_module_calls(self, tmp_path):
        """Test module names come from addModule() lines."""
        (tmp_path / "qt.pro").write_text(QT_PRO)

        assert QtProjectStrategy().discover(tmp_path) == {
            "base",
            "xmlpatterns",
            "declarative",
            "webkit",
        }


class TestModuleDiscovery:
    """Test discovery across strategies and the directory filter."""

    def test_filters_by_directory(self, qt_5_12, qt_tree_factory):
        """Test entries without a directory are dropped."""
        qt_tree_factory(qt_5_12.path, modules=["base"], gitmodules=MANIFEST)

        assert ModuleDiscovery().discover(qt_5_12) == {"base"}

    def test_widgets_present_when_directory_exists(self, qt_5_12, qt_tree_factory):
        """Test entries with a directory are reported."""
        qt_tree_factory(qt_5_12.path, modules=["base", "widgets"], gitmodules=MANIFEST)

        assert ModuleDiscovery().discover(qt_5_12) == {"base", "widgets"}

    def test_flagged_false_excluded_even_with_directory(self, qt_5_12, qt_tree_factory):
        """Test a qt = false module stays excluded when its directory exists."""
        qt_tree_factory(
            qt_5_12.path, modules=["base", "network", "widgets"], gitmodules=MANIFEST
        )

        assert ModuleDiscovery().discover(qt_5_12) == {"base", "widgets"}

    def test_falls_back_to_qt_pro(self, qt_5_9, qt_tree_factory):
        """Test trees without .gitmodules are read from qt.pro."""
        tree = qt_tree_factory(
            qt_5_9.path, modules=["base", "declarative"], gitmodules=None
        )
        (tree / "qt.pro").write_text(QT_PRO)

        result = ModuleDiscovery().inspect(qt_5_9)

        assert result.source == "qt.pro"
        assert result.modules == frozenset({"base", "declarative"})

    def test_gitmodules_preferred_over_qt_pro(self, qt_5_12, qt_tree_factory):
        """Test the first strategy that finds a manifest wins."""
        tree = qt_tree_factory(
            qt_5_12.path, modules=["base", "declarative", "widgets"], gitmodules=MANIFEST
        )
        (tree / "qt.pro").write_text(QT_PRO)

        result = ModuleDiscovery().inspect(qt_5_12)

        assert result.source == ".gitmodules"
        assert result.modules == frozenset({"base", "widgets"})

    def test_no_manifest(self, qt_5_12, qt_tree_factory):
        """Test a tree without manifest is reported distinctly but yields no modules."""
        qt_tree_factory(qt_5_12.path, modules=["base"], gitmodules=None)

        result = ModuleDiscovery().inspect(qt_5_12)

        assert result == DiscoveryResult(modules=frozenset(), source=None)
        assert result.found_manifest is False
        assert ModuleDiscovery().discover(qt_5_12) == set()

    def test_custom_strategy_order(self, qt_5_12, qt_tree_factory):
        """Test strategies are tried in the given order."""
        tree = qt_tree_factory(
            qt_5_12.path, modules=["base", "declarative"], gitmodules=MANIFEST
        )
        (tree / "qt.pro").write_text(QT_PRO)

        discovery = ModuleDiscovery([QtProjectStrategy(), GitModulesStrategy()])

        assert discovery.inspect(qt_5_12).source == "qt.pro"

    @pytest.mark.parametrize("strategies", [[], ()])
    def test_no_strategies(self, qt_5_12, qt_tree_factory, strategies):
        """Test discovery without strategies finds nothing."""
        qt_tree_factory(qt_5_12.path)

        assert ModuleDiscovery(strategies).inspect(qt_5_12).found_manifest is False

    def test_malformed_manifest_names_tree(self, qt_5_12, qt_tree_factory):
        """Test discovery reports the tree whose manifest is broken."""
        qt_tree_factory(qt_5_12.path, gitmodules="qt = false\n")

        with pytest.raises(ManifestParseError, match="qt-everywhere-src-5.12.3"):
            ModuleDiscovery().inspect(qt_5_12)
