"""Output connectors: supervised results and evaluation measures."""

from __future__ import annotations

import math
from array import array
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any


class OutputConnectorBadParamError(Exception):
    """Raised when an output connector is given bad parameters or data."""


class OutputConnectorInternalError(Exception):
    """Raised on an internal failure of an output connector."""


class OutputConnectorStrategy:
    """Common base of output connectors."""

    def init(self, ad: dict[str, Any]) -> None:
        """Initialise the connector from the ``parameters/output`` object.

        The base connector takes no parameters.
        """
        return None


class NoOutputConn(OutputConnectorStrategy):
    """Output connector that produces nothing."""


@dataclass
class SupResult:
    """Predicted categories and their probabilities for one input."""

    label: str
    loss: float = 0.0
    cats: dict[float, str] = field(default_factory=dict)

    def add_cat(self, prob: float, cat: str) -> None:
        """Record *cat* with probability *prob*; a known probability is kept."""
        self.cats.setdefault(prob, cat)

    def ranked(self) -> list[tuple[float, str]]:
        """Return ``(prob, cat)`` pairs by decreasing probability."""
        return sorted(self.cats.items(), key=lambda item: item[0], reverse=True)


class SupervisedOutput(OutputConnectorStrategy):
    """Collects per-input supervised results and renders them."""

    def __init__(self, best: int = 1) -> None:
        self.best = best
        self.results: list[SupResult] = []
        self._index: dict[str, int] = {}

    def init(self, ad: dict[str, Any]) -> None:
        """Read the ``best`` option from ``parameters/output``."""
        ad_out = ad.get("parameters", {}).get("output", {})
        if "best" in ad_out:
            self.best = int(ad_out["best"])

    def add_result(self, uri: str, loss: float) -> None:
        """Add a result for *uri*, or update its loss if already known."""
        pos = self._index.get(uri)
        if pos is None:
            self._index[uri] = len(self.results)
            self.results.append(SupResult(uri, loss))
        else:
            self.results[pos].loss = loss

    def add_cat(self, uri: str, prob: float, cat: str) -> None:
        """Add a predicted category to the result for *uri*, if known."""
        pos = self._index.get(uri)
        if pos is not None:
            self.results[pos].add_cat(prob, cat)

    def best_cats(self, ad_out: dict[str, Any]) -> SupervisedOutput:
        """Return a new output keeping only the best categories per result."""
        best = int(ad_out.get("best", self.best))
        kept = SupervisedOutput(self.best)
        for result in self.results:
            top = result.ranked()[: max(best, 0)]
            kept._index.setdefault(result.label, len(kept.results))
            kept.results.append(SupResult(result.label, result.loss, dict(top)))
        return kept

    def to_str(self) -> str:
        """Render the results as readable text."""
        lines: list[str] = []
        for uri, pos in self._index.items():
            lines.append("-------------")
            lines.append(uri)
            for prob, cat in self.results[pos].ranked():
                lines.append(f"accuracy={prob:f} -- cat={cat}")
        return "".join(line + "\n" for line in lines)

    def to_ad(self, out: dict[str, Any]) -> None:
        """Store the results in *out* under ``predictions``."""
        predictions = []
        for result in self.results:
            pred: dict[str, Any] = {
                "classes": [{"cat": cat, "prob": prob} for prob, cat in result.ranked()]
            }
            if result.loss > 0.0:
                pred["loss"] = result.loss
            pred["uri"] = result.label
            predictions.append(pred)
        out["predictions"] = predictions


@dataclass(frozen=True)
class F1Result:
    """F1 score with its precision, recall, accuracy and per-class diagonal."""

    f1: float
    precision: float
    recall: float
    accuracy: float
    conf_diag: list[float]


def _divide(num: float, den: float) -> float:
    if den:
        return num / den
    if num:
        return math.copysign(math.inf, num)
    return math.nan


def _argmax(values: Sequence[float]) -> int:
    return max(range(len(values)), key=values.__getitem__)


def _batch(ad: dict[str, Any]) -> list[dict[str, Any]]:
    return [ad[str(i)] for i in range(int(ad["batch_size"]))]


def measure(ad_res: dict[str, Any], ad_out: dict[str, Any]) -> dict[str, Any]:
    """Compute the measures requested in *ad_out* from the results *ad_res*."""
    meas: dict[str, Any] = {}
    regression = "regression" in ad_res
    if "measure" in ad_out:
        requested = list(ad_out["measure"])
        if "auc" in requested:
            meas["auc"] = auc(ad_res)
        if "acc" in requested:
            meas["acc"] = acc(ad_res)
        if "f1" in requested:
            result = mf1(ad_res)
            meas["f1"] = result.f1
            meas["precision"] = result.precision
            meas["recall"] = result.recall
            meas["accp"] = result.accuracy
            if "cmdiag" in requested:
                meas["cmdiag"] = list(result.conf_diag)
        if "mcll" in requested:
            meas["mcll"] = mcll(ad_res)
        if "gini" in requested:
            meas["gini"] = gini(ad_res, regression)
    for key in ("loss", "train_loss", "iteration"):
        if key in ad_res:
            meas[key] = float(ad_res[key])
    return meas


def acc(ad: dict[str, Any]) -> float:
    """Share of items whose best prediction matches the target."""
    items = _batch(ad)
    hits = sum(1 for item in items if _argmax(item["pred"]) == float(item["target"]))
    return _divide(hits, len(items))


def mf1(ad: dict[str, Any]) -> F1Result:
    """Macro-averaged F1 score from the confusion matrix of the batch."""
    nclasses = int(ad["nclasses"])
    conf = [[0.0] * nclasses for _ in range(nclasses)]
    for item in _batch(ad):
        target = float(item["target"])
        if target < 0:
            raise OutputConnectorBadParamError(
                "negative supervised discrete target (e.g. wrong use of label_offset ?"
            )
        conf[_argmax(item["pred"])][int(target)] += 1.0
    eps = 1e-8
    diag = [conf[i][i] for i in range(nclasses)]
    col_sums = [sum(row[j] for row in conf) for j in range(nclasses)]
    row_sums = [sum(row) for row in conf]
    total = sum(row_sums)
    accuracy = _divide(sum(diag), total)
    per_col = [d / (c + eps) for d, c in zip(diag, col_sums)]
    per_row = [d / (r + eps) for d, r in zip(diag, row_sums)]
    precision = _divide(sum(per_col), nclasses)
    recall = _divide(sum(per_row), nclasses)
    f1 = _divide(2.0 * precision * recall, precision + recall)
    return F1Result(f1, precision, recall, accuracy, per_col)


def auc(ad: dict[str, Any]) -> float:
    """Area under the ROC curve of a binary classification batch."""
    items = _batch(ad)
    return auc_score(
        [item["pred"][1] for item in items],
        [float(item["target"]) for item in items],
    )


def auc_score(pred: Sequence[float], targets: Sequence[float]) -> float:
    """Area under the ROC curve for scores *pred* and 0/1 *targets*."""
    scores = array("f", pred)
    pairs = sorted(
        ((scores[i], int(targets[i])) for i in range(len(scores))),
        key=lambda pair: pair[0],
    )
    count = len(pairs)
    ones = sum(answer for _, answer in pairs)
    if ones == 0 or ones == count:
        return 1.0
    true_pos = tp0 = ones
    accum = tn = 0
    threshold = pairs[0][0]
    for prediction, answer in pairs:
        if prediction != threshold:
            threshold = prediction
            accum += tn * (true_pos + tp0)
            tp0 = true_pos
            tn = 0
        tn += 1 - answer
        true_pos -= answer
    accum += tn * (true_pos + tp0)
    return accum / float(2 * ones * (count - ones))


def mcll(ad: dict[str, Any]) -> float:
    """Multi-class logarithmic loss of the batch."""
    items = _batch(ad)
    total = -sum(math.log(item["pred"][int(float(item["target"]))]) for item in items)
    return _divide(total, len(items))


def linspace(start: float, end: float, num: float) -> list[float]:
    """Return *num* evenly spaced values from *start* to *end*, inclusive."""
    steps = int(num - 1)
    if steps < 0:
        raise ValueError("linspace needs at least one value")
    if steps == 0:
        return [end]
    delta = (end - start) / (num - 1)
    return [start + delta * i for i in range(steps)] + [end]


def comp_gini(a: Sequence[float], p: Sequence[float]) -> float:
    """Gini coefficient of actual values *a* ranked by predictions *p*."""
    ranked = sorted(zip(a, p), key=lambda pair: pair[1], reverse=True)
    total = sum(a)
    size = len(a)
    acc_pop = acc_loss = gini_sum = 0.0
    for actual, _ in ranked:
        acc_loss += actual / total
        acc_pop += 1.0 / size
        gini_sum += acc_loss - acc_pop
    return gini_sum / size


def comp_gini_normalized(a: Sequence[float], p: Sequence[float]) -> float:
    """Gini coefficient of *p* normalised by that of a perfect ranking."""
    return comp_gini(a, p) / comp_gini(a, a)


def gini(ad: dict[str, Any], regression: bool) -> float:
    """Normalised Gini coefficient of the batch."""
    items = _batch(ad)
    actual = [float(item["target"]) for item in items]
    predicted = [0.0] * len(items)
    for i, item in enumerate(items):
        if regression:
            predicted[i] = float(item["pred"][0])
        else:
            actual[i] = float(_argmax(item["pred"]))
    return comp_gini_normalized(actual, predicted)