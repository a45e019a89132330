import json
import logging

import pytest

from smoothlm import (
    AdditiveSmoothedModel, DiscountedBackoffModel, LMConfig, SmoothingMethod,
    create_model, load_config
)


def test_defaults():
    config = LMConfig().validate()

    assert config.method == SmoothingMethod.DISCOUNT
    assert config.discount == 0.75
    assert config.lam == 0.01
    assert config.gram is None


def test_scoring_orders_follow_gram(discount_model, additive_model):
    config = LMConfig(smoothing="additive", gram=1)

    assert config.scoring_order(additive_model) == 1
    assert config.scoring_orders(additive_model) == [1]
    assert config.scoring_order(discount_model) is None
    assert config.scoring_orders(discount_model) == [2]


def test_scoring_orders_default_to_every_order(additive_model):
    config = LMConfig(smoothing="additive")

    assert config.scoring_order(additive_model) is None
    assert config.scoring_orders(additive_model) == [1, 2, 3]


@pytest.mark.parametrize("kwargs", [
    {"smoothing": "kneser_ney"},
    {"discount": 1.0},
    {"lam": 0},
    {"gram": 4},
    {"gram": 0},
    {"vocab_threshold": 0},
    {"log_level": "LOUD"},
])
def test_invalid_settings(kwargs):
    with pytest.raises(ValueError):
        LMConfig(**kwargs).validate()


def test_from_json(tmp_path, caplog):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"smoothing": "additive", "lam": 0.1, "colour": "blue"}))

    with caplog.at_level(logging.WARNING):
        config = LMConfig.from_json(str(path))

    assert config.method == SmoothingMethod.ADDITIVE
    assert config.lam == 0.1
    assert "colour" in caplog.text


def test_save_round_trip(tmp_path):
    path = str(tmp_path / "config.json")
    LMConfig(smoothing="additive", gram=2).save(path)

    assert LMConfig.from_json(path) == LMConfig(smoothing="additive", gram=2)


def test_load_config_overrides_skip_none(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"discount": 0.5}))

    config = load_config(str(path), discount=None, encoding="utf-16")

    assert config.discount == 0.5
    assert config.encoding == "utf-16"


def test_create_model():
    assert isinstance(create_model(LMConfig(discount=0.2)), DiscountedBackoffModel)

    model = create_model(LMConfig(smoothing="additive", lam=0.5), {"x"})
    assert isinstance(model, AdditiveSmoothedModel)
    assert model.lam == 0.5
    assert "x" in model.vocabulary
