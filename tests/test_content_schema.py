"""Content blob validation: per-field bounds, URL kinds, auto-hide sections."""

import datetime as dt

import pytest

from herald.content.validator import (
    apply_auto_hide,
    should_show_section,
    validate_media_url,
    validate_profile_content,
)
from herald.content.schemas import ProfileContent


def _bio(n: int) -> dict:
    return {"original": "x" * n}


class TestBioBounds:
    def test_forty_characters_fails(self, make_content):
        result = validate_profile_content(make_content(bio=_bio(40)))
        assert result.ok is False
        assert result.errors["bio.original"] == "Bio must be at least 50 characters"

    def test_exactly_fifty_passes(self, make_content):
        assert validate_profile_content(make_content(bio=_bio(50))).ok

    def test_exactly_two_thousand_passes(self, make_content):
        assert validate_profile_content(make_content(bio=_bio(2000))).ok

    def test_two_thousand_one_fails(self, make_content):
        result = validate_profile_content(make_content(bio=_bio(2001)))
        assert result.ok is False
        assert "bio.original" in result.errors

    def test_polished_bio_may_exceed_original_cap(self, make_content):
        bio = {"original": "y" * 60, "ai_polished": "z" * 3000}
        assert validate_profile_content(make_content(bio=bio)).ok


class TestTimelineYear:
    def _with_year(self, make_content, year):
        entry = {"year": year, "event": "Founded the lab", "significance": "First open research lab in the region."}
        return make_content(timeline=[entry])

    def test_1799_fails(self, make_content):
        result = validate_profile_content(self._with_year(make_content, 1799))
        assert result.ok is False
        assert "timeline.0.year" in result.errors

    def test_1800_passes(self, make_content):
        assert validate_profile_content(self._with_year(make_content, 1800)).ok

    def test_current_year_passes(self, make_content):
        assert validate_profile_content(self._with_year(make_content, dt.date.today().year)).ok

    def test_next_year_fails(self, make_content):
        assert not validate_profile_content(self._with_year(make_content, dt.date.today().year + 1)).ok

    def test_numeric_string_is_rejected(self, make_content):
        result = validate_profile_content(self._with_year(make_content, "1900"))
        assert result.ok is False
        assert "timeline.0.year" in result.errors


class TestShape:
    def test_minimal_content_passes(self):
        result = validate_profile_content({"name": "Al", "bio": _bio(50)})
        assert result.ok
        assert result.content.name == "Al"

    def test_missing_name_reports_field(self):
        result = validate_profile_content({"bio": _bio(60)})
        assert result.errors["name"] == "Name is required"

    def test_non_object_is_rejected_without_raising(self):
        result = validate_profile_content(["not", "an", "object"])
        assert result.ok is False
        assert "__root__" in result.errors

    def test_unknown_keys_are_rejected(self, make_content):
        result = validate_profile_content(make_content(favouriteColour="blue"))
        assert result.ok is False
        assert "favouriteColour" in result.errors

    def test_lower_tier_may_carry_higher_tier_sections(self, make_content):
        tribute = {"text": "A generous mentor and friend.", "author": "Sam"}
        assert validate_profile_content(make_content(tributes=[tribute])).ok

    def test_hero_image_must_be_an_image(self, make_content):
        result = validate_profile_content(make_content(heroImage="https://example.com/page.html"))
        assert result.errors["heroImage"] == "Must be a valid image URL"

    def test_hero_video_accepts_embed(self, make_content):
        assert validate_profile_content(make_content(heroVideo="https://www.youtube.com/embed/abc123")).ok

    def test_link_type_is_closed(self, make_content):
        links = [{"title": "Blog", "url": "https://jane.example.com/blog", "type": "myspace"}]
        assert not validate_profile_content(make_content(links=links)).ok

    def test_gallery_item_bounds(self, make_content):
        item = {"url": "https://cdn.example.com/a.png", "order": -1}
        result = validate_profile_content(make_content(gallery=[item]))
        assert "gallery.0.order" in result.errors

    def test_blob_keeps_camel_case_keys(self, make_content):
        blob = validate_profile_content(make_content()).content.to_blob()
        assert blob["heroImage"] == "https://cdn.example.com/jane.jpg"
        assert "hero_image" not in blob


class TestAutoHide:
    def test_empty_configured_section_is_hidden(self, make_content):
        data = make_content(timeline=[], sections={"timeline": {"visible": True, "auto_hide_if_empty": True}})
        result = validate_profile_content(data)
        assert result.content.sections.timeline.visible is False

    def test_missing_array_counts_as_empty(self, make_content):
        data = make_content(sections={"tributes": {"visible": True, "auto_hide_if_empty": True}})
        assert validate_profile_content(data).content.sections.tributes.visible is False

    def test_populated_section_stays_visible(self, make_content):
        data = make_content(sections={"achievements": {"visible": True, "auto_hide_if_empty": True}})
        assert validate_profile_content(data).content.sections.achievements.visible is True

    def test_flag_off_keeps_empty_section_visible(self, make_content):
        data = make_content(gallery=[], sections={"gallery": {"visible": True, "auto_hide_if_empty": False}})
        assert validate_profile_content(data).content.sections.gallery.visible is True

    def test_unconfigured_sections_untouched(self, make_content):
        content = validate_profile_content(make_content(milestones=[])).content
        assert content.sections.milestones is None

    def test_idempotent(self, make_content):
        data = make_content(timeline=[], sections={"timeline": {}})
        content = validate_profile_content(data).content
        again = apply_auto_hide(ProfileContent.model_validate(content.to_blob()))
        assert again.to_blob() == content.to_blob()


class TestRenderingPredicates:
    def test_explicitly_hidden(self):
        assert should_show_section("achievements", [{"title": "t"}], {"achievements": {"visible": False}}) is False

    def test_empty_items(self):
        assert should_show_section("timeline", [], {}) is False

    def test_populated(self):
        assert should_show_section("timeline", [{"year": 1900}], None) is True

    @pytest.mark.parametrize(
        "url,kind,expected",
        [
            ("https://cdn.example.com/a.webp", "image", True),
            ("https://res.cloudinary.com/demo/upload/sample", "image", True),
            ("ftp://cdn.example.com/a.png", "image", False),
            ("https://cdn.example.com/clip.mp4", "video", True),
            ("https://player.vimeo.com/video/42", "video", True),
            ("https://cdn.example.com/a.png", "video", False),
        ],
    )
    def test_media_url_kinds(self, url, kind, expected):
        assert validate_media_url(url, kind) is expected

    def test_unknown_media_kind_raises(self):
        with pytest.raises(ValueError):
            validate_media_url("https://cdn.example.com/a.png", "audio")
