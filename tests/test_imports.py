"""Import tests for active_users package.

Verifies that all modules and public API can be imported without errors.
"""


def test_package_has_version():
    from active_users import __version__
    assert isinstance(__version__, str)
    assert len(__version__) > 0


def test_top_level_imports():
    from active_users import AggregationEngine
    from active_users import ActivityLedger
    from active_users import IdentityFilter
    from active_users import TimeWindow
    from active_users import AuthLogSource
    from active_users import DirectoryTreeSource
    assert callable(AggregationEngine)
    assert callable(TimeWindow.parse)


def test_cli_entry_point():
    from active_users.cli import main
    assert main.name == "main"


def test_sources_share_interface():
    from active_users.sources import ActivitySource, AuthLogSource, DirectoryTreeSource
    assert issubclass(AuthLogSource, ActivitySource)
    assert issubclass(DirectoryTreeSource, ActivitySource)
