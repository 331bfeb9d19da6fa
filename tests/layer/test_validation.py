# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for build-time wiring checks: arity, mask derivation, and aliasing.
"""

from collections.abc import Sequence

import pytest

from lamina.blob.heap import HeapBlob
from lamina.blob.shared import SharedBlob
from lamina.layer.config import LayerConfig, LayerType
from lamina.layer.core import Layer
from lamina.layer.exceptions import (
    ArityError,
    BlobAliasError,
    PropagateDownError,
)
from lamina.layer.interfaces import Worker
from lamina.layer.validation import (
    check_alias,
    required_top_count,
    resolve_propagate_down,
    validate_wiring,
)


class _ConfigurableWorker(Worker):
    def __init__(
        self,
        exact_bottoms: int = 0,
        exact_tops: int = 0,
        min_tops: int = 0,
        auto_tops: bool = False,
        no_force: Sequence[int] = (),
    ) -> None:
        self._exact_bottoms = exact_bottoms
        self._exact_tops = exact_tops
        self._min_tops = min_tops
        self._auto_tops = auto_tops
        self._no_force = set(no_force)

    def forward_cpu(self, bottom: Sequence[HeapBlob], top: Sequence[HeapBlob]) -> None:
        pass

    def backward_cpu(
        self,
        top: Sequence[HeapBlob],
        propagate_down: Sequence[bool],
        bottom: Sequence[HeapBlob],
    ) -> None:
        pass

    def auto_top_blobs(self) -> bool:
        return self._auto_tops

    def min_top_blobs(self) -> int:
        return self._min_tops

    def exact_num_top_blobs(self) -> int:
        return self._exact_tops

    def exact_num_bottom_blobs(self) -> int:
        return self._exact_bottoms

    def allow_force_backward(self, bottom_id: int) -> bool:
        return bottom_id not in self._no_force


def _layer(
    worker: Worker,
    n_bottoms: int = 1,
    n_tops: int = 1,
    propagate_down: tuple[bool, ...] = (),
) -> Layer:
    config = LayerConfig(
        name="wired",
        layer_type=LayerType.SIGMOID,
        bottoms=tuple(f"b{i}" for i in range(n_bottoms)),
        tops=tuple(f"t{i}" for i in range(n_tops)),
        propagate_down=propagate_down,
    )
    return Layer(config, worker)


class TestValidateWiring:
    def test_unconstrained_worker_accepts_anything(self) -> None:
        validate_wiring(_layer(_ConfigurableWorker()), 0, 0)
        validate_wiring(_layer(_ConfigurableWorker()), 5, 7)

    def test_exact_bottoms_enforced(self) -> None:
        layer = _layer(_ConfigurableWorker(exact_bottoms=2), n_bottoms=2)
        validate_wiring(layer, 2, 1)
        with pytest.raises(ArityError, match="2 bottom"):
            validate_wiring(layer, 1, 1)

    def test_exact_tops_enforced(self) -> None:
        layer = _layer(_ConfigurableWorker(exact_tops=1))
        with pytest.raises(ArityError, match="1 top"):
            validate_wiring(layer, 1, 2)

    def test_min_tops_enforced(self) -> None:
        layer = _layer(_ConfigurableWorker(min_tops=2))
        validate_wiring(layer, 1, 3)
        with pytest.raises(ArityError, match="at least 2"):
            validate_wiring(layer, 1, 1)

    def test_bad_propagate_down_rejected(self) -> None:
        layer = _layer(_ConfigurableWorker(), n_bottoms=3, propagate_down=(True, True))
        with pytest.raises(PropagateDownError):
            validate_wiring(layer, 3, 1)

    def test_mask_matching_bottoms_accepted(self) -> None:
        layer = _layer(_ConfigurableWorker(), n_bottoms=2, propagate_down=(True, False))
        validate_wiring(layer, 2, 1)


class TestRequiredTopCount:
    def test_declared_count_without_auto_tops(self) -> None:
        layer = _layer(_ConfigurableWorker(exact_tops=3), n_tops=1)
        assert required_top_count(layer) == 1

    def test_auto_tops_raise_to_exact(self) -> None:
        layer = _layer(_ConfigurableWorker(exact_tops=3, auto_tops=True), n_tops=1)
        assert required_top_count(layer) == 3

    def test_auto_tops_raise_to_minimum(self) -> None:
        layer = _layer(_ConfigurableWorker(min_tops=2, auto_tops=True), n_tops=0)
        assert required_top_count(layer) == 2

    def test_auto_tops_never_shrink_declared(self) -> None:
        layer = _layer(_ConfigurableWorker(min_tops=1, auto_tops=True), n_tops=4)
        assert required_top_count(layer) == 4


class TestResolvePropagateDown:
    def test_explicit_mask_wins(self) -> None:
        layer = _layer(_ConfigurableWorker(), n_bottoms=2, propagate_down=(False, True))
        assert resolve_propagate_down(layer, [True, False], force_backward=True) == [False, True]

    def test_need_grad_without_force(self) -> None:
        layer = _layer(_ConfigurableWorker(), n_bottoms=3)
        assert resolve_propagate_down(layer, [True, False, False]) == [True, False, False]

    def test_force_backward_honored_where_allowed(self) -> None:
        layer = _layer(_ConfigurableWorker(no_force=[1]), n_bottoms=3)
        mask = resolve_propagate_down(layer, [False, False, False], force_backward=True)
        assert mask == [True, False, True]

    def test_need_grad_length_mismatch(self) -> None:
        layer = _layer(_ConfigurableWorker(), n_bottoms=2)
        with pytest.raises(PropagateDownError):
            resolve_propagate_down(layer, [True])

    def test_malformed_config_mask(self) -> None:
        layer = _layer(_ConfigurableWorker(), n_bottoms=2, propagate_down=(True,))
        with pytest.raises(PropagateDownError):
            resolve_propagate_down(layer, [True, True])


class TestCheckAlias:
    def test_distinct_blobs_pass(self) -> None:
        check_alias("l", [SharedBlob.new((1,))], [SharedBlob.new((1,))])

    def test_repeated_reads_pass(self) -> None:
        blob = SharedBlob.new((1,))
        check_alias("l", [blob, blob], [SharedBlob.new((1,))])

    def test_read_and_write_same_blob_fails(self) -> None:
        blob = SharedBlob.new((1,), name="x")
        with pytest.raises(BlobAliasError, match="in-place"):
            check_alias("l", [blob], [blob])

    def test_double_write_fails(self) -> None:
        blob = SharedBlob.new((1,), name="x")
        with pytest.raises(BlobAliasError, match="more than once"):
            check_alias("l", [], [blob, blob])
