import math

import pytest

from mlconnect.outputconn import (
    F1Result,
    NoOutputConn,
    OutputConnectorBadParamError,
    SupResult,
    SupervisedOutput,
    acc,
    auc,
    auc_score,
    comp_gini,
    comp_gini_normalized,
    gini,
    linspace,
    mcll,
    measure,
    mf1,
)


def make_batch(preds, targets, **extra):
    ad = {"batch_size": len(preds)}
    for i, (p, t) in enumerate(zip(preds, targets)):
        ad[str(i)] = {"pred": p, "target": t}
    ad.update(extra)
    return ad


def test_sup_result_orders_and_keeps_first_duplicate():
    res = SupResult("img")
    res.add_cat(0.2, "dog")
    res.add_cat(0.7, "cat")
    res.add_cat(0.2, "bird")
    assert res.ranked() == [(0.7, "cat"), (0.2, "dog")]


def test_add_result_updates_loss_and_ignores_unknown_uri():
    out = SupervisedOutput()
    out.add_result("a", 0.5)
    out.add_result("a", 0.8)
    out.add_cat("b", 0.9, "x")
    assert len(out.results) == 1
    assert out.results[0].loss == 0.8
    assert out.results[0].cats == {}


def test_init_reads_best():
    out = SupervisedOutput()
    out.init({"parameters": {"output": {"best": 3}}})
    assert out.best == 3


def test_best_cats_keeps_top_categories():
    out = SupervisedOutput(best=2)
    out.add_result("a", 0.0)
    for prob, cat in [(0.1, "c1"), (0.6, "c2"), (0.3, "c3")]:
        out.add_cat("a", prob, cat)
    kept = out.best_cats({})
    assert kept.results[0].ranked() == [(0.6, "c2"), (0.3, "c3")]
    single = out.best_cats({"best": 1})
    assert single.results[0].ranked() == [(0.6, "c2")]
    assert out.results[0].cats == {0.1: "c1", 0.6: "c2", 0.3: "c3"}


def test_to_ad_structure_and_loss():
    out = SupervisedOutput()
    out.add_result("a", 0.0)
    out.add_cat("a", 0.9, "cat")
    out.add_result("b", 0.25)
    ad = {}
    out.to_ad(ad)
    preds = ad["predictions"]
    assert preds[0] == {"classes": [{"cat": "cat", "prob": 0.9}], "uri": "a"}
    assert preds[1]["loss"] == 0.25
    assert preds[1]["uri"] == "b"


def test_to_str_format():
    out = SupervisedOutput()
    out.add_result("a", 0.0)
    out.add_cat("a", 0.9, "cat")
    text = out.to_str()
    assert text == "-------------\na\naccuracy=0.900000 -- cat=cat\n"


def test_no_output_conn_init_leaves_input():
    ad = {"parameters": {"output": {"best": 4}}}
    NoOutputConn().init(ad)
    assert ad == {"parameters": {"output": {"best": 4}}}


def test_acc_perfect_and_half():
    perfect = make_batch([[0.9, 0.1], [0.2, 0.8]], [0, 1])
    assert acc(perfect) == 1.0
    half = make_batch([[0.9, 0.1], [0.9, 0.1]], [0, 1])
    assert acc(half) == 0.5


def test_mf1_perfect():
    ad = make_batch([[0.9, 0.1], [0.2, 0.8]], [0, 1], nclasses=2)
    result = mf1(ad)
    assert isinstance(result, F1Result)
    assert result.f1 == pytest.approx(1.0)
    assert result.precision == pytest.approx(1.0)
    assert result.recall == pytest.approx(1.0)
    assert result.accuracy == 1.0
    assert result.conf_diag == pytest.approx([1.0, 1.0])


def test_mf1_negative_target_raises():
    ad = make_batch([[0.9, 0.1]], [-1], nclasses=2)
    with pytest.raises(OutputConnectorBadParamError):
        mf1(ad)


def test_auc_score_cases():
    assert auc_score([0.1, 0.9], [0, 1]) == 1.0
    assert auc_score([0.9, 0.1], [0, 1]) == 0.0
    assert auc_score([0.3, 0.4], [1, 1]) == 1.0


def test_auc_from_batch_uses_second_prediction():
    ad = make_batch([[0.9, 0.1], [0.1, 0.9]], [0, 1])
    assert auc(ad) == 1.0


def test_mcll():
    ad = make_batch([[math.exp(-2), 1 - math.exp(-2)]], [0])
    assert mcll(ad) == pytest.approx(2.0)
    certain = make_batch([[0.0, 1.0]], [1])
    assert mcll(certain) == 0.0


def test_linspace():
    values = linspace(0.0, 1.0, 5)
    assert len(values) == 5
    assert values[0] == 0.0 and values[-1] == 1.0
    assert values == sorted(values)
    assert linspace(2.0, 3.0, 1) == [3.0]
    with pytest.raises(ValueError):
        linspace(0.0, 1.0, 0)


def test_gini_normalized_perfect_ranking():
    a = [1.0, 2.0, 3.0, 4.0]
    assert comp_gini_normalized(a, a) == pytest.approx(1.0)
    assert comp_gini(a, list(reversed(a))) == pytest.approx(-comp_gini(a, a))


def test_gini_regression():
    ad = make_batch([[1.0], [2.0], [3.0], [4.0]], [1.0, 2.0, 3.0, 4.0])
    assert gini(ad, True) == pytest.approx(1.0)


def test_measure_collects_requested():
    ad_res = make_batch(
        [[0.9, 0.1], [0.2, 0.8]], [0, 1], nclasses=2, loss=0.3, iteration=7
    )
    meas = measure(ad_res, {"measure": ["acc", "f1", "cmdiag", "auc"]})
    assert meas["acc"] == 1.0
    assert meas["auc"] == 1.0
    assert meas["accp"] == 1.0
    assert meas["cmdiag"] == pytest.approx([1.0, 1.0])
    assert meas["loss"] == 0.3
    assert meas["iteration"] == 7.0
    assert "train_loss" not in meas
    assert "mcll" not in meas