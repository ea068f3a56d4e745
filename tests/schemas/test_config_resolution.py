"""Test config resolution and validation with Pydantic."""

import pytest
from pydantic import ValidationError

from rfi_tracker.schemas import ParamConfig, UserConfig, CLIConfig, InternalConfig
from rfi_tracker.schemas.resolve import resolve_config, deep_merge


class TestConfigResolution:
    """Test resolve_config() precedence and merging."""

    def test_resolve_config_all_defaults(self):
        """Resolving with no user/CLI overrides uses all ParamConfig defaults."""
        config = resolve_config(ParamConfig(), None, None)

        assert isinstance(config, InternalConfig)
        assert config.archive.backend == "memory"
        assert config.archive.polarizations == ("VH", "VV")
        assert config.extraction.sample_radius == 500.0
        assert config.controller.default_granularity == "Month"
        assert config.controller.default_opacity == 1.0
        assert config.controller.anchor_lag_days == 7

    def test_visualization_contract_defaults(self):
        """Display stretches and layer opacity match the hosted tracker."""
        vis = resolve_config(ParamConfig()).visualization

        assert vis.daily_min == (-25.0, -20.0, -25.0)
        assert vis.daily_max == (0.0, 10.0, 0.0)
        assert vis.composite_min == (-25.0, -20.0, -25.0)
        assert vis.composite_max == (-10.0, 0.0, -10.0)
        assert vis.layer_opacity == 0.8

    def test_user_config_overrides_param_config(self):
        """UserConfig values override ParamConfig defaults."""
        config = resolve_config(ParamConfig(), UserConfig(sample_radius=250), None)
        assert config.extraction.sample_radius == 250.0

    def test_cli_overrides_user(self):
        user = UserConfig(backend="memory", data_dir="/data/a")
        cli = CLIConfig(data_dir="/data/b")

        config = resolve_config(ParamConfig(), user, cli)

        assert config.archive.data_dir == "/data/b"
        assert user.data_dir == "/data/a"

    def test_dict_inputs_accepted(self):
        config = resolve_config({}, {"DISPATCH_MODE": "inline"}, {"log_level": "DEBUG"})
        assert config.dispatcher.mode == "inline"
        assert config.logging.level == "DEBUG"

    def test_nested_user_overrides(self):
        user = UserConfig(
            controller={"default_zoom": 5, "default_granularity": "year"},
            visualization={"dpi": 300},
        )
        config = resolve_config(ParamConfig(), user)

        assert config.controller.default_zoom == 5
        assert config.controller.default_granularity == "Year"
        assert config.visualization.dpi == 300
        assert config.controller.default_lon == ParamConfig().controller.default_lon

    def test_merged_values_revalidated(self):
        """Overrides go through the same range checks as the defaults."""
        with pytest.raises(ValidationError):
            resolve_config(ParamConfig(), UserConfig(default_opacity=1.5))

        with pytest.raises(ValidationError):
            resolve_config(ParamConfig(), UserConfig(sample_radius=0))

    def test_internal_config_is_frozen(self, internal_config):
        with pytest.raises(ValidationError):
            internal_config.base_dir = "/tmp"

    def test_internal_config_rejects_extra(self, internal_config):
        data = internal_config.model_dump()
        data["unexpected"] = 1
        with pytest.raises(ValidationError):
            InternalConfig.model_validate(data)


class TestParamValidation:

    def test_stretch_order_enforced(self):
        with pytest.raises(ValidationError, match="stretch min must be below max"):
            ParamConfig(visualization={"composite_max": (-30.0, 0.0, -10.0)})

    def test_polarizations_normalized(self):
        param = ParamConfig(archive={"polarizations": "vh, vv"})
        assert param.archive.polarizations == ("VH", "VV")

    def test_unknown_backend_rejected(self):
        with pytest.raises(ValidationError):
            ParamConfig(archive={"backend": "s3"})

    def test_extra_fields_rejected(self):
        with pytest.raises(ValidationError):
            ParamConfig(unknown_section={})


def test_deep_merge_nested():
    base = {"a": 1, "b": {"c": 2, "d": 3}}
    assert deep_merge(base, {"b": {"d": 4}}, {"e": 5}) == {"a": 1, "b": {"c": 2, "d": 4}, "e": 5}
    assert base == {"a": 1, "b": {"c": 2, "d": 3}}
