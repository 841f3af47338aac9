import numpy as np
import pytest

from chromacut.pipeline.stages.s3_morphology import clean_alpha, dilate, erode


def _block(size, top, left, h, w, value=255):
    alpha = np.zeros((size, size), dtype=np.uint8)
    alpha[top : top + h, left : left + w] = value
    return alpha


def test_erode_clears_window_around_transparent_pixel():
    alpha = np.full((5, 5), 255, dtype=np.uint8)
    alpha[2, 2] = 0

    out = erode(alpha)

    expected = np.full((5, 5), 255, dtype=np.uint8)
    expected[1:4, 1:4] = 0
    assert np.array_equal(out, expected)


def test_erode_treats_image_border_as_missing():
    alpha = np.full((4, 4), 255, dtype=np.uint8)
    assert np.array_equal(erode(alpha), alpha)


def test_erode_keeps_feathered_values_away_from_holes():
    alpha = np.full((5, 5), 255, dtype=np.uint8)
    alpha[2, 2] = 120
    assert erode(alpha)[2, 2] == 120


def test_dilate_grows_single_pixel():
    alpha = np.zeros((5, 5), dtype=np.uint8)
    alpha[2, 2] = 200

    out = dilate(alpha)

    assert np.array_equal(out, _block(5, 1, 1, 3, 3, 200))


def test_dilate_at_corner_ignores_out_of_bounds():
    alpha = np.zeros((4, 4), dtype=np.uint8)
    alpha[0, 0] = 255
    assert np.array_equal(dilate(alpha), _block(4, 0, 0, 2, 2))


def test_dilate_takes_neighborhood_maximum():
    alpha = np.array([[10, 0, 0], [0, 0, 0], [0, 0, 90]], dtype=np.uint8)
    out = dilate(alpha)
    assert out.tolist() == [[10, 10, 0], [10, 90, 90], [0, 90, 90]]


@pytest.mark.parametrize("seed", [0, 1, 2])
def test_erosion_never_increases_and_dilation_never_decreases(seed):
    rng = np.random.default_rng(seed)
    alpha = rng.integers(0, 256, size=(24, 31), dtype=np.uint8)
    alpha[rng.random(alpha.shape) < 0.1] = 0

    assert (erode(alpha) <= alpha).all()
    assert (dilate(alpha) >= alpha).all()


def test_passes_do_not_modify_input(logger):
    alpha = _block(8, 2, 2, 4, 4)
    before = alpha.copy()
    erode(alpha)
    dilate(alpha)
    clean_alpha(alpha, logger)
    assert np.array_equal(alpha, before)


def test_clean_alpha_restores_large_block(logger):
    alpha = _block(12, 3, 3, 6, 6)
    assert np.array_equal(clean_alpha(alpha, logger), alpha)


@pytest.mark.parametrize("block", [1, 2, 3, 4])
def test_clean_alpha_removes_small_blocks(logger, block):
    alpha = _block(12, 4, 4, block, block)
    assert not clean_alpha(alpha, logger).any()


def test_clean_alpha_keeps_thick_shape_with_pinhole(logger):
    alpha = _block(15, 2, 2, 11, 11)
    alpha[7, 7] = 0

    # Erosion widens the hole to 5x5, the two dilations shrink it back
    assert np.array_equal(clean_alpha(alpha, logger), alpha)


def test_clean_alpha_logs_pass_counts(logger):
    clean_alpha(_block(12, 3, 3, 6, 6), logger)

    entry = logger.current_image["stages"][-1]
    assert entry["stage"] == "s3_morphology"
    assert entry["visible_pixels_per_pass"] == [16, 4, 16, 36]
