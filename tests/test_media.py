import pytest

from herald.content.media import add_media, remove_media, reorder_media, set_featured, stamp_created, stamp_updated


def _gallery(n: int):
    return [{"url": f"https://cdn.example.com/{i}.jpg", "order": i, "featured": False} for i in range(n)]


class TestReorder:
    def test_moves_item_and_renumbers_all(self):
        out = reorder_media(_gallery(4), 0, 2)
        assert [m["url"].rsplit("/", 1)[1] for m in out] == ["1.jpg", "2.jpg", "0.jpg", "3.jpg"]
        assert [m["order"] for m in out] == [0, 1, 2, 3]

    def test_input_is_not_mutated(self):
        items = _gallery(3)
        reorder_media(items, 2, 0)
        assert [m["order"] for m in items] == [0, 1, 2]

    def test_sorts_by_existing_order_first(self):
        items = list(reversed(_gallery(3)))
        out = reorder_media(items, 0, 0)
        assert [m["url"] for m in out] == [m["url"] for m in _gallery(3)]

    def test_out_of_range_raises(self):
        with pytest.raises(IndexError):
            reorder_media(_gallery(2), 0, 5)


class TestEditing:
    def test_add_appends_with_next_order(self):
        out = add_media(_gallery(2), "https://cdn.example.com/new.jpg", caption="New")
        assert out[-1]["order"] == 2
        assert out[-1]["created_at"] == out[-1]["updated_at"]

    def test_remove_renumbers(self):
        out = remove_media(_gallery(3), 0)
        assert [m["order"] for m in out] == [0, 1]

    def test_single_featured(self):
        items = [dict(m, featured=True) for m in _gallery(3)]
        out = set_featured(items, 1)
        assert [m["featured"] for m in out] == [False, True, False]


class TestStamps:
    def test_created_keeps_existing(self):
        entry = stamp_created({"title": "x", "created_at": "2020-01-01T00:00:00+00:00"})
        assert entry["created_at"] == "2020-01-01T00:00:00+00:00"
        assert entry["updated_at"] != entry["created_at"]

    def test_updated_refreshes(self):
        entry = stamp_updated({"updated_at": "2020-01-01T00:00:00+00:00"})
        assert entry["updated_at"] > "2020-01-01T00:00:00+00:00"
