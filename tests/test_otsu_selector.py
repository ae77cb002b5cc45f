import numpy as np
import pytest

from services.otsu_selector import OtsuSelector

selector = OtsuSelector()


def test_histogram_counts_every_level(gradient_image):
    hist = selector.histogram(gradient_image.pixels)
    assert hist.shape == (256,)
    assert (hist == 16).all()


def test_bimodal_threshold_separates_modes(bimodal_image):
    threshold, variance = selector.select_threshold(bimodal_image.pixels)
    # Every split in [10, 239] scores the same; the smallest one wins
    assert 10 <= threshold < 240
    assert threshold == 10
    assert variance == pytest.approx(0.25 * (240 - 10) ** 2)


def test_uniform_image_selects_zero(uniform_image):
    threshold, variance = selector.select_threshold(uniform_image.pixels)
    assert threshold == 0
    assert variance == 0.0


def test_variance_is_zero_when_a_class_is_empty(bimodal_image):
    variance = selector.between_class_variance(bimodal_image.pixels)
    assert (variance[:10] == 0).all()
    assert (variance[240:] == 0).all()


def test_unbalanced_classes_pick_gap_between_clusters():
    rng = np.random.default_rng(7)
    dark = rng.integers(20, 41, size=900)
    bright = rng.integers(180, 201, size=100)
    pixels = np.concatenate([dark, bright]).astype(np.uint8).reshape(25, 40)

    threshold, _ = selector.select_threshold(pixels)
    assert dark.max() <= threshold < bright.min()


def test_matches_brute_force_definition(random_image):
    pixels = random_image.pixels.astype(np.float64).ravel()
    best_t, best_var = 0, -1.0
    for t in range(256):
        c0 = pixels[pixels <= t]
        c1 = pixels[pixels > t]
        if c0.size == 0 or c1.size == 0:
            var = 0.0
        else:
            w0 = c0.size / pixels.size
            w1 = c1.size / pixels.size
            var = w0 * w1 * (c0.mean() - c1.mean()) ** 2
        if var > best_var + 1e-9:
            best_t, best_var = t, var

    threshold, variance = selector.select_threshold(random_image.pixels)
    assert threshold == best_t
    assert variance == pytest.approx(best_var)
