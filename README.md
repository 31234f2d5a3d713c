# mlconnect

Building blocks for a machine learning service: reading input data
(images and text), turning model output into API-style responses, and
computing evaluation measures.

## Install

    pip install .

For the test suite:

    pip install ".[test]"
    pytest

## Modules

### `mlconnect.fileops`

File-system and string helpers:

- `file_exists(fname)`, `is_directory(fname)`, `file_last_modif(fname)`
  (modification time in whole seconds).
- `list_directory(repo, files, dirs)` returns a set of `repo/name` paths:
  regular files and links when `files` is true, directories and links not
  starting with a dot when `dirs` is true.
- `clear_directory(repo)` removes everything in `repo`, emptying and
  removing first-level sub-directories; `remove_directory_files(repo,
  extensions)` removes entries whose name contains one of `extensions`
  (all entries when it is empty). Both return the paths that could not be
  removed.
- `copy_file(fin, fout)`, `remove_file(repo, f)`.
- `split(s, delim)` splits and drops empty items; `iequals(a, b)` compares
  without regard to case.

### `mlconnect.httpclient`

`get_call(url, http_method)` and `post_call(url, content, http_method,
content_type)` return an `HttpResponse` with `status`, the raw `body` and a
decoded `text`. HTTP error statuses are returned, not raised.

### `mlconnect.inputconn`

- `InputConnectorStrategy`, the base of input connectors, with `train`,
  `uris`, `get_data(ad)` (takes the mandatory `data` list of URIs) and
  `response_params(out)`.
- `read_element(uri, reader)` downloads `http://`, `https://` and `file://`
  URIs and passes the bytes to `reader.read_mem`; directories go to
  `read_dir`, existing files to `read_file`, and anything else is taken as
  the content itself. It returns whether data could be read.
- Errors: `InputConnectorBadParamError`, `InputConnectorInternalError`.

### `mlconnect.imginput`

`ImgInputFileConn` reads images through `DDImg` (colour, or grayscale when
`bw` is set), resizes them to `width` x `height` (227 x 227 by default),
can shuffle them and move the last `test_split` share into `test_images`.
Options are read by `init` / `fillup_parameters` and may be overridden by
`parameters.input` in the object given to `transform`. `feature_size()` is
`width * height`, times 3 for colour.

### `mlconnect.txtinput`

`TxtInputFileConn` builds bag-of-words entries (`TxtBowEntry`) from text
given in memory, in files, or in a directory with one sub-directory per
class when `train` is set. Words come from `tokenize` (lower-cased, split
on blanks and punctuation) and shorter words than `min_word_length` are
skipped. Options: `shuffle`, `test_split`, `count`, `tfidf`, `min_count`,
`min_word_length`.

After reading a directory, words seen fewer than `min_count` times are
dropped and, with `tfidf`, values are TF/IDF weighted. In training the
vocabulary is written to `vocab.dat` (`word,pos` lines) and the class
numbers to `corresp.txt`, both in `model_repo`; out of training, an empty
vocabulary is loaded from `vocab.dat`.

### `mlconnect.outputconn`

- `SupervisedOutput` collects results per URI (`add_result`, `add_cat`),
  keeps the best categories in a new output (`best_cats`), and renders
  them as text (`to_str`) or under `predictions` in a dict (`to_ad`).
  `NoOutputConn` produces nothing.
- Measures over a batch dict (`batch_size`, and per index `"0"`, `"1"`, ...
  an item with `pred` and `target`): `acc`, `mf1` (returns an `F1Result`),
  `auc`, `mcll`, `gini`; plus `auc_score`, `comp_gini`,
  `comp_gini_normalized` and `linspace`.
- `measure(ad_res, ad_out)` returns a dict of the measures named in
  `ad_out["measure"]` (`auc`, `acc`, `f1` with `cmdiag`, `mcll`, `gini`),
  together with `loss`, `train_loss` and `iteration` when present.

## Example

    from mlconnect.outputconn import auc_score, measure

    auc_score([0.1, 0.4, 0.35, 0.8], [0, 0, 1, 1])

    results = {
        "batch_size": 2,
        "nclasses": 2,
        "0": {"pred": [0.9, 0.1], "target": 0},
        "1": {"pred": [0.2, 0.8], "target": 1},
    }
    print(measure(results, {"measure": ["acc", "f1"]}))

Text input from a directory with one sub-directory per class (the model
directory must exist):

    from mlconnect.txtinput import TxtInputFileConn

    conn = TxtInputFileConn()
    conn.train = True
    conn.init({"min_count": 1, "min_word_length": 3, "tfidf": True})
    conn.transform({"data": ["corpus"], "model_repo": "model"})
    print(conn.feature_size(), conn.batch_size())

## What it does not do

The package prepares inputs and evaluates outputs only. It contains no
model library and no training or prediction engine, no runner for
background training jobs, and no server or command-line program.