import numpy as np
import pytest

from models.errors import InvalidImage, InvalidParameter, ThresholdError
from models.image import Image
from models.threshold_policy import LocalWeighting, ThresholdPolicy, ThresholdType
from services.threshold_engine import ThresholdEngine

engine = ThresholdEngine()

ALL_POLICIES = [
    ThresholdPolicy.binary(100),
    ThresholdPolicy.binary_inv(100),
    ThresholdPolicy.trunc(100),
    ThresholdPolicy.tozero(100),
    ThresholdPolicy.tozero_inv(100),
    ThresholdPolicy.adaptive(LocalWeighting.MEAN, 5, 2),
    ThresholdPolicy.adaptive(LocalWeighting.GAUSSIAN, 5, 2),
    ThresholdPolicy.otsu(),
]


# ─── Dispatch ──────────────────────────────────────────────────────
@pytest.mark.parametrize("policy", ALL_POLICIES, ids=lambda p: p.kind.value)
def test_output_keeps_shape_and_leaves_input_untouched(random_image, policy):
    before = random_image.pixels.copy()
    out = engine.apply(random_image, policy)

    assert isinstance(out, Image)
    assert out is not random_image
    assert out.pixels.shape == random_image.pixels.shape
    assert out.pixels.dtype == np.uint8
    np.testing.assert_array_equal(random_image.pixels, before)


def test_output_image_is_read_only(random_image):
    out = engine.apply(random_image, ThresholdPolicy.binary(50))
    with pytest.raises(ValueError):
        out.pixels[0, 0] = 1


def test_fixed_policy_reports_its_threshold(gradient_image):
    result = engine.run(gradient_image, ThresholdPolicy.trunc(90))
    assert result.threshold == 90
    assert result.variance is None
    assert result.image.pixels.max() == 90


def test_adaptive_policy_has_no_global_threshold(gradient_image):
    result = engine.run(gradient_image, ThresholdPolicy.adaptive(LocalWeighting.MEAN, 3, 0))
    assert result.threshold is None


def test_otsu_binarizes_with_selected_threshold(bimodal_image):
    result = engine.run(bimodal_image, ThresholdPolicy.otsu(max_value=200))
    assert result.threshold == 10
    assert result.variance > 0
    assert (result.image.pixels[:, :20] == 0).all()
    assert (result.image.pixels[:, 20:] == 200).all()


def test_otsu_on_uniform_image(uniform_image):
    result = engine.run(uniform_image, ThresholdPolicy.otsu())
    assert result.threshold == 0
    assert result.variance == 0.0
    # 77 > 0, so the whole image is foreground
    assert (result.image.pixels == 255).all()


def test_trailing_single_channel_axis_is_accepted():
    pixels = np.full((4, 5, 1), 200, dtype=np.uint8)
    out = engine.apply(Image(pixels), ThresholdPolicy.binary(100))
    assert out.pixels.shape == (4, 5)
    assert (out.pixels == 255).all()


def test_string_kind_is_normalized():
    policy = ThresholdPolicy(kind="tozero_inv", threshold=10)
    assert policy.kind is ThresholdType.TOZERO_INV
    assert policy.is_global


# ─── Round trips ───────────────────────────────────────────────────
@pytest.mark.parametrize("factory", [ThresholdPolicy.binary, ThresholdPolicy.binary_inv])
def test_binary_output_is_binary(gradient_image, factory):
    out = engine.apply(gradient_image, factory(127))
    assert set(np.unique(out.pixels).tolist()) == {0, 255}


def test_binary_is_idempotent(random_image):
    once = engine.apply(random_image, ThresholdPolicy.binary(127))
    twice = engine.apply(once, ThresholdPolicy.binary(127))
    np.testing.assert_array_equal(once.pixels, twice.pixels)


@pytest.mark.parametrize("factory", [ThresholdPolicy.trunc, ThresholdPolicy.tozero])
def test_value_preserving_variants_are_not_binarization(gradient_image, factory):
    t = 100
    assert t < gradient_image.pixels.max()
    once = engine.apply(gradient_image, factory(t))

    # changes the image, keeps intermediate levels
    assert not np.array_equal(once.pixels, gradient_image.pixels)
    assert len(np.unique(once.pixels)) > 2

    # binarizing first loses the levels these variants keep
    via_binary = engine.apply(engine.apply(gradient_image, ThresholdPolicy.binary(t)), factory(t))
    assert not np.array_equal(via_binary.pixels, once.pixels)

    # same cutoff again is a fixed point
    twice = engine.apply(once, factory(t))
    np.testing.assert_array_equal(twice.pixels, once.pixels)


# ─── Validation ────────────────────────────────────────────────────
@pytest.mark.parametrize("pixels", [
    np.zeros((0, 0), dtype=np.uint8),
    np.zeros((0, 5), dtype=np.uint8),
    np.zeros((4, 4, 3), dtype=np.uint8),
    np.zeros((4, 4, 4), dtype=np.uint8),
    np.zeros(16, dtype=np.uint8),
    np.zeros((4, 4), dtype=np.float32),
    np.zeros((4, 4), dtype=np.uint16),
])
def test_rejects_invalid_images(pixels):
    with pytest.raises(InvalidImage):
        engine.apply(Image(pixels), ThresholdPolicy.binary())


def test_rejects_missing_image():
    with pytest.raises(InvalidImage):
        engine.apply(None, ThresholdPolicy.binary())


@pytest.mark.parametrize("policy", [
    ThresholdPolicy.binary(-1),
    ThresholdPolicy.binary(256),
    ThresholdPolicy.binary(200, max_value=150),
    ThresholdPolicy.trunc(100, max_value=300),
    ThresholdPolicy.tozero(100, max_value=-1),
    ThresholdPolicy.binary(12.5),
    ThresholdPolicy.binary(True),
    ThresholdPolicy.adaptive(LocalWeighting.MEAN, block_size=1),
    ThresholdPolicy.adaptive(LocalWeighting.MEAN, block_size=4),
    ThresholdPolicy.adaptive(LocalWeighting.GAUSSIAN, block_size=2),
    ThresholdPolicy.adaptive(LocalWeighting.MEAN, block_size=5, offset=1.5),
    ThresholdPolicy.otsu(max_value=256),
], ids=repr)
def test_rejects_out_of_domain_parameters(uniform_image, policy):
    with pytest.raises(InvalidParameter):
        engine.apply(uniform_image, policy)


def test_rejects_unknown_policy_type():
    with pytest.raises(InvalidParameter):
        ThresholdPolicy(kind="hysteresis")
    with pytest.raises(InvalidParameter):
        ThresholdPolicy.adaptive("median")


def test_rejects_non_policy(uniform_image):
    with pytest.raises(InvalidParameter):
        engine.apply(uniform_image, "binary")


def test_boundary_values_are_accepted(gradient_image):
    assert (engine.apply(gradient_image, ThresholdPolicy.binary(0, 0)).pixels == 0).all()
    out = engine.apply(gradient_image, ThresholdPolicy.binary(255)).pixels
    assert (out == 0).all()


def test_errors_are_value_errors():
    assert issubclass(InvalidImage, ThresholdError)
    assert issubclass(InvalidParameter, ValueError)
