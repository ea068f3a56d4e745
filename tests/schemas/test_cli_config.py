from rfi_tracker.schemas.cli import CLIConfig
from rfi_tracker.schemas.param import ParamConfig
from rfi_tracker.schemas.resolve import resolve_config
from rfi_tracker.schemas.user import UserConfig


def test_empty_cli_has_no_overrides():
    assert CLIConfig().to_internal_overrides() == {}


def test_cli_overrides_structure():
    cli = CLIConfig(backend="earthengine", ee_project="p", base_dir="/out",
                    dispatch_mode="inline", log_level="WARNING")
    assert cli.to_internal_overrides() == {
        "base_dir": "/out",
        "archive": {"backend": "earthengine", "ee_project": "p"},
        "dispatcher": {"mode": "inline"},
        "logging": {"level": "WARNING"},
    }


def test_cli_overrides_do_not_mutate_user():
    user = UserConfig.model_validate({"DATA_DIR": "/data/a", "BASE_DIR": "/tmp"})
    cli = CLIConfig.model_validate({"data_dir": "/data/b"})

    internal = resolve_config(ParamConfig(), user, cli)

    assert internal.archive.data_dir == "/data/b"
    assert internal.base_dir == "/tmp"
    assert user.data_dir == "/data/a"
