import base64
from io import BytesIO

import numpy as np
import pytest
from PIL import Image

from chromacut.pipeline import DecodeFailure
from chromacut.pipeline.codec import (
    clean_base64,
    decode_image,
    encode_png,
    load_image,
    save_image,
    to_data_url,
)
from conftest import keyed_scene, png_bytes


def _rgb_png(color=(12, 34, 56), size=(5, 4)) -> bytes:
    buf = BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


def test_clean_base64():
    assert clean_base64("data:image/png;base64,AAAA") == "AAAA"
    assert clean_base64("AAAA") == "AAAA"


def test_decode_rgb_png_adds_opaque_alpha():
    img = decode_image(_rgb_png())

    assert (img.width, img.height) == (5, 4)
    assert img.pixels[0, 0].tolist() == [12, 34, 56, 255]


@pytest.mark.parametrize("wrap", [base64.b64encode, lambda b: b"data:image/png;base64," + base64.b64encode(b)])
def test_decode_text_payloads(wrap):
    text = wrap(_rgb_png()).decode("ascii")
    assert decode_image(text).pixels[0, 0].tolist() == [12, 34, 56, 255]


@pytest.mark.parametrize("payload", [b"", b"GIF89a not really", "not base64 at all!", "QUJD"])
def test_decode_failures(payload):
    with pytest.raises(DecodeFailure) as exc:
        decode_image(payload)
    assert exc.value.stage == "decode"


def test_png_keeps_alpha():
    image = keyed_scene(size=6, block=2)
    image.pixels[0, 0, 3] = 0
    image.pixels[0, 1, 3] = 128

    decoded = decode_image(encode_png(image))

    assert np.array_equal(decoded.pixels, image.pixels)


def test_data_url():
    url = to_data_url(keyed_scene(size=4, block=2))
    assert url.startswith("data:image/png;base64,")
    assert decode_image(url).width == 4


def test_save_and_load(tmp_path):
    path = save_image(keyed_scene(size=4, block=2), tmp_path / "x.png")
    assert load_image(path).height == 4

    with pytest.raises(FileNotFoundError):
        load_image(tmp_path / "missing.png")


def test_load_corrupt_file(tmp_path):
    path = tmp_path / "bad.png"
    path.write_bytes(png_bytes(keyed_scene())[:20])

    with pytest.raises(DecodeFailure):
        load_image(path)
