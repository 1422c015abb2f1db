import json
import logging

import pytest

from city_layout_gen import config as cfg
from city_layout_gen.cli import main
from city_layout_gen.context import GenerationContext, StageOrderError
from city_layout_gen.districts.models import registry_from_config
from city_layout_gen.utils import colors
from city_layout_gen.utils.parallel import run_process_map, split_range
from city_layout_gen.utils.seeds import derive_seed


def _boom(value):
    if value == 2:
        raise ValueError("two")
    return value * 10


def test_load_config_merges_over_defaults(tmp_path):
    path = tmp_path / "conf.json"
    path.write_text(json.dumps({"seed": 5, "voronoi": {"size": 64}}), encoding="utf-8")

    conf = cfg.load_config(path)

    assert conf["seed"] == 5
    assert conf["voronoi"]["size"] == 64
    assert conf["voronoi"]["distortion_points"] == cfg.default_config()["voronoi"]["distortion_points"]


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        cfg.load_config(tmp_path / "nope.json")


def test_default_types_build_a_registry():
    registry = registry_from_config(cfg.default_config()["districts"]["types"])
    downtown = registry.by_name("downtown")
    commercial = registry.by_name("commercial")

    assert len(registry) == 5
    assert registry.relation(downtown.id, commercial.id).attraction == 8
    assert registry.relation(commercial.id, registry.by_name("park").id).attraction == 0
    assert registry.min_total <= cfg.default_config()["districts"]["number_of_districts"] <= registry.max_total


def test_registry_rejects_unknown_relation_and_bad_counts():
    with pytest.raises(ValueError):
        registry_from_config([{"name": "a", "relations": {"ghost": {"attraction": 1}}}])
    with pytest.raises(ValueError):
        registry_from_config([{"name": "a", "min": 3, "max": 2}])
    with pytest.raises(ValueError):
        registry_from_config([{"name": "a", "relations": {"a": {"attraction": 11}}}])


def test_black_district_colour_is_nudged():
    registry = registry_from_config([{"name": "a", "color": [0, 0, 0]}, {"name": "b", "color": "#102030"}])
    assert registry.by_name("a").color == (26, 26, 26)
    assert registry.by_name("b").color == (16, 32, 48)
    assert colors.district_color(None, 1) == colors.DEFAULT_DISTRICT_PALETTE[1]


def test_context_ids_and_issues(caplog):
    ctx = GenerationContext(seed=3)
    assert [ctx.next_id(), ctx.next_id(), ctx.next_id()] == [0, 1, 2]
    assert GenerationContext(seed=3).next_id() == 0

    with caplog.at_level(logging.WARNING):
        ctx.report("lots", "something odd", count=2)
    assert ctx.issues_for("lots")[0].details == {"count": 2}
    assert "something odd" in caplog.text

    assert ctx.rng("a").random() == GenerationContext(seed=3).rng("a").random()
    assert derive_seed(3, "a") != derive_seed(3, "b")
    assert derive_seed(3, "roads", "secondary") == derive_seed(3, "roads", "secondary")
    assert derive_seed(3, "roads", "secondary") != derive_seed(3, "roads")
    assert 0 <= derive_seed(-8, "x") < 2 ** 32


def test_stage_order_is_enforced():
    ctx = GenerationContext()
    with pytest.raises(StageOrderError):
        ctx.require("districts", "partition")
    ctx.mark_initialized("districts")
    ctx.require("districts", "partition")
    assert ctx.is_initialized("districts")
    assert not GenerationContext().is_initialized("districts")


def test_split_range_covers_everything():
    assert split_range(10, 3) == [(0, 4), (4, 7), (7, 10)]
    assert split_range(2, 5) == [(0, 1), (1, 2)]
    assert split_range(0, 4) == []


def test_run_process_map_inline_keeps_order_and_errors():
    results = run_process_map(_boom, [(1,), (2,), (3,)], max_workers=1, return_exceptions=True)
    assert results[0] == 10 and results[2] == 30
    assert isinstance(results[1], ValueError)
    with pytest.raises(ValueError):
        run_process_map(_boom, [(2,)], max_workers=1)


def test_cli_dump_config(tmp_path):
    target = tmp_path / "dumped.json"
    assert main(["--dump-config", str(target), "--seed", "42"]) == 0
    assert json.loads(target.read_text(encoding="utf-8"))["seed"] == 42


def test_cli_runs_small_config(small_conf, tmp_path):
    path = tmp_path / "small.json"
    cfg.save_config(small_conf, path)
    assert main(["--config", str(path), "--no-export", "--workers", "1"]) == 0
