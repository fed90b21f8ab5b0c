"""Tests for the font catalog."""

from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen
from fontTools.ttLib import TTCollection, TTFont

from typmark.world.fonts import FontCatalog, FontFace


def _build_font(path, family, style="Regular"):
    fb = FontBuilder(1000, isTTF=True)
    fb.setupGlyphOrder([".notdef"])
    fb.setupCharacterMap({})
    fb.setupGlyf({".notdef": TTGlyphPen(None).glyph()})
    fb.setupHorizontalMetrics({".notdef": (500, 0)})
    fb.setupHorizontalHeader(ascent=800, descent=-200)
    fb.setupNameTable({"familyName": family, "styleName": style})
    fb.setupOS2()
    fb.setupPost()
    fb.save(str(path))
    return path


class TestFontCatalog:
    def test_empty(self):
        catalog = FontCatalog()
        assert len(catalog) == 0
        assert catalog.font(0) is None
        assert catalog.directories == []

    def test_loads_faces(self, tmp_path):
        _build_font(tmp_path / "a.ttf", "Alpha")
        (tmp_path / "nested").mkdir()
        _build_font(tmp_path / "nested" / "b.ttf", "Beta", "Bold")
        catalog = FontCatalog.from_directories([tmp_path])
        assert len(catalog) == 2
        assert catalog.families() == ["Alpha", "Beta"]
        assert {face.style for face in catalog} == {"Regular", "Bold"}

    def test_directories(self, tmp_path):
        (tmp_path / "sub").mkdir()
        _build_font(tmp_path / "sub" / "a.ttf", "Alpha")
        catalog = FontCatalog.from_directories([tmp_path])
        assert catalog.directories == [tmp_path / "sub"]

    def test_collection_yields_one_face_per_font(self, tmp_path):
        a = _build_font(tmp_path / "a.ttf", "Alpha")
        b = _build_font(tmp_path / "b.ttf", "Beta")
        collection = TTCollection()
        collection.fonts = [TTFont(a), TTFont(b)]
        out = tmp_path / "fonts" / "pair.ttc"
        out.parent.mkdir()
        collection.save(str(out))

        catalog = FontCatalog.from_directories([out.parent])
        assert [(f.index, f.family) for f in catalog] == [(0, "Alpha"), (1, "Beta")]

    def test_skips_unreadable(self, tmp_path, caplog):
        (tmp_path / "broken.ttf").write_bytes(b"not a font")
        _build_font(tmp_path / "ok.ttf", "Okay")
        catalog = FontCatalog.from_directories([tmp_path])
        assert catalog.families() == ["Okay"]
        assert "Skipping unreadable font" in caplog.text

    def test_skips_missing_directory(self, tmp_path):
        catalog = FontCatalog.from_directories([tmp_path / "nope"])
        assert len(catalog) == 0

    def test_ignores_other_files(self, tmp_path):
        (tmp_path / "readme.txt").write_text("hello")
        assert len(FontCatalog.from_directories([tmp_path])) == 0

    def test_font_lookup(self, tmp_path):
        face = FontFace(path=tmp_path / "x.ttf", index=0, family="X")
        catalog = FontCatalog([face])
        assert catalog.font(0) == face
        assert catalog.font(1) is None
        assert catalog.font(-1) is None
