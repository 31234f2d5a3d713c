"""Text input connector: bag-of-words parsing of documents and corpora."""

from __future__ import annotations

import logging
import math
import random
import re
from dataclasses import dataclass, field
from typing import Any

from mlconnect import fileops
from mlconnect.inputconn import (
    InputConnectorBadParamError,
    InputConnectorStrategy,
    read_element,
)

logger = logging.getLogger(__name__)

_SEPARATORS = "\n\t\f\r ,.;:`'!?)(-|><^·&\"\\/{}#$–=+"
_SPLIT_RE = re.compile("[" + re.escape(_SEPARATORS) + "]+")
_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")


def tokenize(content: str) -> list[str]:
    """Lower-case *content* and split it into words on punctuation and blanks."""
    return [word for word in _SPLIT_RE.split(content.lower()) if word]


def _as_text(content: str | bytes) -> str:
    if isinstance(content, bytes):
        return content.decode("utf-8", errors="replace")
    return content


def _leading_int(text: str) -> int:
    match = _LEADING_INT_RE.match(text)
    return int(match.group(1)) if match else 0


def _read_text_file(fname: str) -> str:
    try:
        with open(fname, encoding="utf-8", errors="replace") as handle:
            return handle.read()
    except OSError as err:
        raise InputConnectorBadParamError(f"cannot open file {fname}") from err


@dataclass
class Word:
    """Vocabulary entry: position and corpus statistics of a word."""

    pos: int = -1
    total_count: int = 1
    total_docs: int = 1


@dataclass
class TxtBowEntry:
    """Bag-of-words representation of one document."""

    target: float = -1.0
    v: dict[str, float] = field(default_factory=dict)

    def add_word(self, word: str, value: float, count: bool) -> None:
        """Add *word* with *value*; a known word adds up only when *count*."""
        if word in self.v:
            if count:
                self.v[word] += value
        else:
            self.v[word] = value

    def has_word(self, word: str) -> bool:
        return word in self.v


class DDTxt:
    """Reader feeding text from files, memory or directories to a connector."""

    def __init__(self, conn: TxtInputFileConn | None = None) -> None:
        self.conn = conn

    def read_file(self, fname: str) -> bool:
        """Parse the content of the text file *fname*."""
        if self.conn is None:
            return False
        self.conn.parse_content(_read_text_file(fname))
        return True

    def read_mem(self, content: str | bytes) -> bool:
        """Parse *content* as a document without a target."""
        if self.conn is None:
            return False
        self.conn.parse_content(_as_text(content))
        return True

    def read_dir(self, dir: str) -> bool:
        """Parse a corpus directory, one sub-directory per class when training."""
        conn = self.conn
        if conn is None:
            return False

        try:
            subdirs = sorted(fileops.list_directory(dir, False, True))
        except OSError as err:
            raise InputConnectorBadParamError(
                f"failed reading text subdirectories in data directory {dir}"
            ) from err
        logger.debug("list subdirs size=%d", len(subdirs))

        labeled: list[tuple[str, int]] = []
        corresp: dict[int, str] = {}
        if conn.train:
            for cl, subdir in enumerate(subdirs):
                try:
                    files = sorted(fileops.list_directory(subdir, True, False))
                except OSError as err:
                    raise InputConnectorBadParamError(
                        f"failed reading image data sub-directory {subdir}"
                    ) from err
                parts = fileops.split(subdir, "/")
                corresp[cl] = parts[-1] if parts else subdir
                labeled.extend((fname, cl) for fname in files)
        else:
            try:
                files = sorted(fileops.list_directory(dir, True, False))
            except OSError:
                files = []
            labeled.extend((fname, 0) for fname in files)

        if conn.shuffle:
            random.shuffle(labeled)

        for fname, cl in labeled:
            conn.parse_content(_read_text_file(fname), cl)

        conn._prune_corpus()

        if conn.train:
            path = f"{conn.model_repo}/{conn.correspname}"
            try:
                with open(path, "w", encoding="utf-8") as handle:
                    for cl, name in corresp.items():
                        handle.write(f"{cl} {name}\n")
            except OSError as err:
                raise InputConnectorBadParamError(
                    f"failed writing class correspondence file {path}"
                ) from err

        logger.info("vocabulary size=%d", len(conn.vocab))
        return True


class TxtInputFileConn(InputConnectorStrategy):
    """Input connector turning text documents into bag-of-words entries."""

    def __init__(self) -> None:
        super().__init__()
        self.iterator = "document"
        self.tokenizer = "bow"
        self.shuffle = False
        self.test_split = 0.0
        self.count = True
        self.tfidf = False
        self.min_count = 5
        self.min_word_length = 5
        self.vocab: dict[str, Word] = {}
        self.vocabfname = "vocab.dat"
        self.model_repo = ""
        self.correspname = "corresp.txt"
        self.txt: list[TxtBowEntry] = []
        self.test_txt: list[TxtBowEntry] = []

    def init(self, ad: dict[str, Any]) -> None:
        """Initialise from the ``parameters/input`` object."""
        self.fillup_parameters(ad)

    def fillup_parameters(self, ad_input: dict[str, Any]) -> None:
        """Read the optional text parameters present in *ad_input*."""
        if "shuffle" in ad_input:
            self.shuffle = bool(ad_input["shuffle"])
        if "test_split" in ad_input:
            self.test_split = float(ad_input["test_split"])
        if "count" in ad_input:
            self.count = bool(ad_input["count"])
        if "tfidf" in ad_input:
            self.tfidf = bool(ad_input["tfidf"])
        if "min_count" in ad_input:
            self.min_count = int(ad_input["min_count"])
        if "min_word_length" in ad_input:
            self.min_word_length = int(ad_input["min_word_length"])

    def feature_size(self) -> int:
        """Number of words in the vocabulary."""
        return len(self.vocab)

    def batch_size(self) -> int:
        return len(self.txt)

    def test_batch_size(self) -> int:
        return len(self.test_txt)

    def transform(self, ad: dict[str, Any]) -> None:
        """Read every document of *ad*, maintain the vocabulary and split."""
        self.get_data(ad)
        params = ad.get("parameters")
        if isinstance(params, dict) and "input" in params:
            self.fillup_parameters(params["input"])
        if "model_repo" in ad:
            self.model_repo = str(ad["model_repo"])

        if not self.train and not self.vocab:
            self.deserialize_vocab()

        for uri in self.uris:
            if not read_element(uri, DDTxt(self)):
                raise InputConnectorBadParamError(f"no data for text in {uri}")

        if self.train:
            self.serialize_vocab()

        if self.train and self.test_split > 0:
            split_size = math.floor(len(self.txt) * (1.0 - self.test_split))
            self.test_txt.extend(self.txt[split_size:])
            del self.txt[split_size:]
            logger.info(
                "data split test size=%d / remaining data size=%d",
                len(self.test_txt),
                len(self.txt),
            )
            logger.info("vocab size=%d", len(self.vocab))

        if not self.txt:
            raise InputConnectorBadParamError("no text could be found")

    def parse_content(self, content: str | bytes, target: float = -1) -> None:
        """Tokenise *content* into a new bag-of-words entry, updating the vocabulary."""
        entry = TxtBowEntry(float(target))
        for word in tokenize(_as_text(content)):
            if len(word) < self.min_word_length:
                continue
            known = self.vocab.get(word)
            if known is None:
                if self.train:
                    self.vocab[word] = Word(len(self.vocab))
            elif self.train:
                known.total_count += 1
                if not entry.has_word(word):
                    known.total_docs += 1
            entry.add_word(word, 1.0, self.count)
        self.txt.append(entry)

    def _prune_corpus(self) -> None:
        """Drop rare words, renumber the vocabulary and apply TF/IDF if asked."""
        initial_size = len(self.vocab)
        self.vocab = {
            word: stats
            for word, stats in self.vocab.items()
            if stats.total_count >= self.min_count
        }
        pruned = initial_size != len(self.vocab)
        if pruned:
            for pos, stats in enumerate(self.vocab.values()):
                stats.pos = pos

        if not (pruned or self.tfidf):
            return
        ndocs = len(self.txt)
        for entry in self.txt:
            kept: dict[str, float] = {}
            for word, value in entry.v.items():
                stats = self.vocab.get(word)
                if stats is None:
                    continue
                if self.tfidf:
                    value = math.log(1.0 + value / stats.total_count) * math.log(
                        ndocs / stats.total_docs + 1.0
                    )
                kept[word] = value
            entry.v = kept

    @property
    def _vocab_path(self) -> str:
        return f"{self.model_repo}/{self.vocabfname}"

    def serialize_vocab(self) -> None:
        """Write the vocabulary as ``word,pos`` lines into the model repository."""
        path = self._vocab_path
        try:
            with open(path, "w", encoding="utf-8") as handle:
                for word, stats in self.vocab.items():
                    handle.write(f"{word},{stats.pos}\n")
        except OSError as err:
            raise InputConnectorBadParamError(
                f"failed opening vocabulary file {path}"
            ) from err

    def deserialize_vocab(self) -> None:
        """Load the vocabulary written by :meth:`serialize_vocab`."""
        path = self._vocab_path
        if not fileops.file_exists(path):
            raise InputConnectorBadParamError(f"cannot find vocabulary file {path}")
        try:
            with open(path, encoding="utf-8") as handle:
                lines = handle.read().splitlines()
        except OSError as err:
            raise InputConnectorBadParamError(
                f"failed opening vocabulary file {path}"
            ) from err
        for line in lines:
            tokens = fileops.split(line, ",")
            if len(tokens) < 2:
                raise InputConnectorBadParamError(
                    f"malformed line in vocabulary file {path}: {line!r}"
                )
            self.vocab.setdefault(tokens[0], Word(_leading_int(tokens[1])))
        logger.info("loaded vocabulary of size=%d", len(self.vocab))