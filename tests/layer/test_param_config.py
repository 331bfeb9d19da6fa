# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for ParamConfig: multiplier defaults and shared-parameter dimension checks.
"""

import pytest
from pydantic import ValidationError

from lamina.blob.heap import HeapBlob
from lamina.config.exceptions import ConfigError
from lamina.layer.config import DimCheckMode, ParamConfig
from lamina.layer.exceptions import LayerConfigError, ParamShareError


class TestParamConfigDefaults:
    def test_defaults(self) -> None:
        param = ParamConfig()
        assert param.name == ""
        assert param.share_mode is DimCheckMode.STRICT
        assert param.lr_mult is None
        assert param.decay_mult is None
        assert not param.is_shared

    def test_unset_multipliers_are_one(self) -> None:
        param = ParamConfig()
        assert param.effective_lr_mult == 1.0
        assert param.effective_decay_mult == 1.0

    @pytest.mark.parametrize("value", [0.0, 0.5, 2.0, -1.0])
    def test_configured_multipliers_are_returned(self, value: float) -> None:
        param = ParamConfig(lr_mult=value, decay_mult=value)
        assert param.effective_lr_mult == value
        assert param.effective_decay_mult == value

    def test_named_param_is_shared(self) -> None:
        assert ParamConfig(name="conv_w").is_shared

    def test_share_mode_from_string(self) -> None:
        param = ParamConfig.model_validate({"name": "w", "share_mode": "permissive"})
        assert param.share_mode is DimCheckMode.PERMISSIVE

    def test_is_frozen(self) -> None:
        param = ParamConfig(name="w")
        with pytest.raises(ValidationError):
            param.name = "other"  # type: ignore[misc]

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ParamConfig(name="w", momentum=0.9)  # type: ignore[call-arg]


class TestStrictDimensionCheck:
    def test_equal_shapes_pass(self) -> None:
        param = ParamConfig(name="w", share_mode=DimCheckMode.STRICT)
        result = param.check_dimensions(
            HeapBlob((3, 4)), HeapBlob((3, 4)), "w", "owner", "sharer"
        )
        assert result is None

    def test_same_count_different_shape_fails(self) -> None:
        param = ParamConfig(name="w", share_mode=DimCheckMode.STRICT)
        with pytest.raises(ParamShareError) as excinfo:
            param.check_dimensions(
                HeapBlob((2, 6)), HeapBlob((3, 4)), "w", "owner_layer", "sharing_layer"
            )
        message = str(excinfo.value)
        assert "shape mismatch" in message
        assert "'w'" in message
        assert "owner_layer" in message
        assert "sharing_layer" in message
        assert "3 4 (12)" in message
        assert "2 6 (12)" in message

    def test_different_rank_fails(self) -> None:
        param = ParamConfig(name="w")
        with pytest.raises(ParamShareError):
            param.check_dimensions(HeapBlob((12,)), HeapBlob((3, 4)), "w", "a", "b")


class TestPermissiveDimensionCheck:
    def test_same_count_different_shape_passes(self) -> None:
        param = ParamConfig(name="w", share_mode=DimCheckMode.PERMISSIVE)
        param.check_dimensions(HeapBlob((2, 6)), HeapBlob((3, 4)), "w", "a", "b")
        param.check_dimensions(HeapBlob((12,)), HeapBlob((3, 4)), "w", "a", "b")

    def test_count_mismatch_fails(self) -> None:
        param = ParamConfig(name="w", share_mode=DimCheckMode.PERMISSIVE)
        with pytest.raises(ParamShareError) as excinfo:
            param.check_dimensions(
                HeapBlob((2, 5)), HeapBlob((3, 4)), "w", "owner_layer", "sharing_layer"
            )
        message = str(excinfo.value)
        assert "count mismatch" in message
        assert "owner_layer" in message
        assert "sharing_layer" in message
        assert "(10)" in message
        assert "(12)" in message

    def test_share_error_is_a_config_error(self) -> None:
        param = ParamConfig(name="w", share_mode=DimCheckMode.PERMISSIVE)
        with pytest.raises(LayerConfigError):
            param.check_dimensions(HeapBlob((1,)), HeapBlob((2,)), "w", "a", "b")
        with pytest.raises(ConfigError):
            param.check_dimensions(HeapBlob((1,)), HeapBlob((2,)), "w", "a", "b")

    def test_check_does_not_modify_blobs(self) -> None:
        param = ParamConfig(name="w", share_mode=DimCheckMode.PERMISSIVE)
        one, two = HeapBlob((2, 6)), HeapBlob((3, 4))
        param.check_dimensions(one, two, "w", "a", "b")
        assert one.shape() == [2, 6]
        assert two.shape() == [3, 4]
