"""Single-image and directory pipelines with a recording map writer."""
import numpy as np
import pytest
from PIL import Image

from conftest import save_rgba
from img2map.classify import build_classifier
from img2map.convert import (
    convert_directory,
    convert_image,
    default_output_path,
    list_images,
)
from img2map.errors import DirectoryError, ImageDecodeError, TemplateError, WriteError


def test_default_output_path(tmp_path):
    assert default_output_path(tmp_path / "level.png") == tmp_path / "level.map"
    assert default_output_path(tmp_path / "a.b.jpeg") == tmp_path / "a.b.map"


def test_convert_image_exact_scenario(tmp_path, writer, scenario_pixels, red_hookable):
    src = save_rgba(tmp_path / "level.png", scenario_pixels)
    result = convert_image(src, build_classifier(red_hookable), writer=writer)

    out = tmp_path / "level.map"
    assert result.output_path == out
    assert out.exists()
    assert writer.written[out].tolist() == [[1, 0], [0, 0]]
    assert result.source_size == (2, 2)
    assert result.grid_size == (2, 2)
    assert result.unique_colors == 2
    assert result.usage == [(0, 3), (1, 1)]


def test_convert_image_explicit_output(tmp_path, writer, scenario_pixels, red_hookable):
    src = save_rgba(tmp_path / "level.png", scenario_pixels)
    out = tmp_path / "maps" / "custom.map"
    out.parent.mkdir()
    result = convert_image(src, build_classifier(red_hookable), output_path=out, writer=writer)
    assert result.output_path == out
    assert list(writer.written) == [out]


def test_convert_image_tile_size(tmp_path, writer, red_hookable):
    img = np.zeros((9, 13, 4), dtype=np.uint8)
    img[:4, :4] = (255, 0, 0, 255)
    src = save_rgba(tmp_path / "big.png", img)
    result = convert_image(
        src, build_classifier(red_hookable), tile_size=4, writer=writer
    )
    assert result.source_size == (13, 9)
    assert result.grid_size == (3, 2)
    grid = writer.written[result.output_path]
    assert grid.shape == (2, 3)
    assert grid.tolist() == [[1, 0, 0], [0, 0, 0]]


def test_convert_twice_is_identical(tmp_path, writer, red_hookable_clear_freeze):
    rng = np.random.default_rng(11)
    src = save_rgba(tmp_path / "noise.png", rng.integers(0, 256, size=(12, 8, 4)))
    classifier = build_classifier(red_hookable_clear_freeze, "nearest")
    a = convert_image(src, classifier, output_path=tmp_path / "a.map", writer=writer)
    b = convert_image(src, classifier, output_path=tmp_path / "b.map", writer=writer)
    assert a.grid.tobytes() == b.grid.tobytes()
    assert (tmp_path / "a.map").read_bytes() == (tmp_path / "b.map").read_bytes()


def test_convert_image_bad_input(tmp_path, writer, red_hookable):
    bad = tmp_path / "bad.png"
    bad.write_bytes(b"\x89PNG broken")
    with pytest.raises(ImageDecodeError):
        convert_image(bad, build_classifier(red_hookable), writer=writer)
    assert writer.written == {}


def _populate(directory, scenario_pixels):
    directory.mkdir(exist_ok=True)
    save_rgba(directory / "b.png", scenario_pixels)
    save_rgba(directory / "a.png", scenario_pixels)
    (directory / "c.png").write_bytes(b"corrupt")
    (directory / "notes.txt").write_text("ignore me")
    return directory


def test_list_images_sorted(tmp_path, scenario_pixels):
    d = _populate(tmp_path / "in", scenario_pixels)
    assert [p.name for p in list_images(d)] == ["a.png", "b.png", "c.png"]


def test_list_images_missing_dir(tmp_path):
    with pytest.raises(DirectoryError):
        list_images(tmp_path / "nope")


@pytest.mark.parametrize("jobs", [1, 3])
def test_directory_skips_corrupt_and_continues(tmp_path, writer, scenario_pixels, red_hookable, jobs):
    d = _populate(tmp_path / "in", scenario_pixels)
    out = tmp_path / "out" / "nested"
    seen, failed = [], []
    report = convert_directory(
        d,
        build_classifier(red_hookable),
        output_dir=out,
        jobs=jobs,
        writer=writer,
        on_result=lambda r: seen.append(r.input_path.name),
        on_failure=lambda f: failed.append(f.path.name),
    )
    assert out.is_dir()
    assert seen == ["a.png", "b.png"]
    assert failed == ["c.png"]
    assert not report.ok
    assert isinstance(report.failed[0].error, ImageDecodeError)
    assert sorted(p.name for p in writer.written) == ["a.map", "b.map"]
    for grid in writer.written.values():
        assert grid.tolist() == [[1, 0], [0, 0]]


def test_directory_defaults_to_input_dir(tmp_path, writer, scenario_pixels, red_hookable):
    d = tmp_path / "in"
    d.mkdir()
    save_rgba(d / "only.png", scenario_pixels)
    report = convert_directory(d, build_classifier(red_hookable), writer=writer)
    assert report.ok
    assert report.output_dir == d
    assert (d / "only.map").exists()


def test_directory_write_error_is_per_file(tmp_path, scenario_pixels, red_hookable):
    d = tmp_path / "in"
    d.mkdir()
    save_rgba(d / "a.png", scenario_pixels)
    save_rgba(d / "b.png", scenario_pixels)

    def flaky(grid, path):
        if path.name == "a.map":
            raise WriteError("disk full")
        path.write_bytes(b"ok")
        return path

    report = convert_directory(d, build_classifier(red_hookable), writer=flaky)
    assert [r.input_path.name for r in report.converted] == ["b.png"]
    assert [f.path.name for f in report.failed] == ["a.png"]


@pytest.mark.parametrize("jobs", [1, 2])
def test_directory_template_error_aborts(tmp_path, scenario_pixels, red_hookable, jobs):
    d = _populate(tmp_path / "in", scenario_pixels)

    def broken(grid, path):
        raise TemplateError("template unusable")

    with pytest.raises(TemplateError):
        convert_directory(d, build_classifier(red_hookable), writer=broken, jobs=jobs)


def test_directory_output_not_creatable(tmp_path, writer, scenario_pixels, red_hookable):
    d = _populate(tmp_path / "in", scenario_pixels)
    blocker = tmp_path / "file"
    blocker.write_text("x")
    with pytest.raises(DirectoryError):
        convert_directory(d, build_classifier(red_hookable), output_dir=blocker, writer=writer)


def test_directory_same_stem_is_not_overwritten(tmp_path, writer, scenario_pixels, red_hookable):
    d = tmp_path / "in"
    d.mkdir()
    save_rgba(d / "a.png", scenario_pixels)
    Image.fromarray(np.zeros((2, 2, 3), dtype=np.uint8)).save(d / "a.jpg")
    save_rgba(d / "b.png", scenario_pixels)

    report = convert_directory(d, build_classifier(red_hookable), writer=writer)
    assert [r.input_path.name for r in report.converted] == ["a.jpg", "b.png"]
    assert [f.path.name for f in report.failed] == ["a.png"]
    assert isinstance(report.failed[0].error, WriteError)
    assert "a.jpg" in str(report.failed[0].error)
    assert writer.written[d / "a.map"].tolist() == [[0, 0], [0, 0]]
