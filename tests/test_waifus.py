from aki.waifus import FALLBACK_WAIFU_TAG, WaifuPool, load_waifu_tags, pick_waifu_tag


def test_load_skips_blanks_and_comments(tmp_path):
    path = tmp_path / "waifus.txt"
    path.write_text("# characters\nhatsune_miku\n\n  rem_(re:zero)  \n# end\n", encoding="utf-8")

    assert load_waifu_tags(path) == ["hatsune_miku", "rem_(re:zero)"]


def test_missing_file_gives_empty_list(tmp_path):
    assert load_waifu_tags(tmp_path / "nope.txt") == []


def test_pick_falls_back_when_empty():
    assert pick_waifu_tag([]) == FALLBACK_WAIFU_TAG
    assert pick_waifu_tag(["a", "b"], choice=lambda tags: tags[-1]) == "b"


def test_pool_load(tmp_path):
    path = tmp_path / "waifus.txt"
    path.write_text("saber\n", encoding="utf-8")

    pool = WaifuPool()
    assert pool.load(path) == 1
    assert pool.pick() == "saber"


def test_bundled_list_loads():
    from aki.config import WAIFUS_FILE
    from pathlib import Path

    path = Path(__file__).resolve().parent.parent / WAIFUS_FILE
    assert len(load_waifu_tags(path)) > 0
