import os

import numpy as np
import pytest

from wid3py import WeightedID3Classifier

FEATURES = ['Outlook', 'Temperature', 'Humidity', 'Wind']
PLAY_TENNIS = [
    ['Sunny', 'Hot', 'High', 'Weak', 'No'],
    ['Sunny', 'Hot', 'High', 'Strong', 'No'],
    ['Overcast', 'Hot', 'High', 'Weak', 'Yes'],
    ['Rain', 'Mild', 'High', 'Weak', 'Yes'],
    ['Rain', 'Cool', 'Normal', 'Weak', 'Yes'],
    ['Rain', 'Cool', 'Normal', 'Strong', 'No'],
    ['Overcast', 'Cool', 'Normal', 'Strong', 'Yes'],
    ['Sunny', 'Mild', 'High', 'Weak', 'No'],
    ['Sunny', 'Cool', 'Normal', 'Weak', 'Yes'],
    ['Rain', 'Mild', 'Normal', 'Weak', 'Yes'],
    ['Sunny', 'Mild', 'Normal', 'Strong', 'Yes'],
    ['Overcast', 'Mild', 'High', 'Strong', 'Yes'],
    ['Overcast', 'Hot', 'Normal', 'Weak', 'Yes'],
    ['Rain', 'Mild', 'High', 'Strong', 'No'],
]

EXPECTED_TEXT = (
    "\nOutlook = Overcast: Yes"
    "\nOutlook = Rain"
    "\n|  Wind = Strong: No"
    "\n|  Wind = Weak: Yes"
    "\nOutlook = Sunny"
    "\n|  Humidity = High: No"
    "\n|  Humidity = Normal: Yes"
)


def _fitted(**kwargs):
    X = np.array([r[:4] for r in PLAY_TENNIS], dtype=object)
    y = np.array([r[4] for r in PLAY_TENNIS])
    return WeightedID3Classifier(feature_names=FEATURES, class_name='Play', **kwargs).fit(X, y), X


def test_text_rendering():
    clf, _ = _fitted()
    assert clf.export_text() == EXPECTED_TEXT
    assert str(clf) == "Weighted ID3\n\n" + EXPECTED_TEXT


def test_text_rendering_of_empty_leaf():
    X = np.array([['Sunny'], ['Rainy']], dtype=object)
    clf = WeightedID3Classifier(feature_names=['Weather'], categories=[['Sunny', 'Rainy', 'Snowy']])
    clf.fit(X, ['Play', 'Stay'])
    assert clf.export_text() == "\nWeather = Sunny: Play\nWeather = Rainy: Stay\nWeather = Snowy: null"


def test_renderers_are_repeatable():
    clf, _ = _fitted()
    assert clf.export_text() == clf.export_text()
    assert clf.export_source() == clf.export_source()
    assert clf.export_rules() == clf.export_rules()


def test_print_tree(capsys):
    clf, _ = _fitted()
    clf.print_tree()
    assert "|  Wind = Weak: Yes" in capsys.readouterr().out


def test_graph_description():
    pytest.importorskip("graphviz")
    clf, _ = _fitted()
    src = clf.graph()
    assert src.startswith("digraph ID3Tree {")
    assert src == clf.graph()
    # one entry per node, named after the construction-time ids
    for node_id in range(8):
        assert f"N{node_id} [" in src
    assert "N0 -> N1" in src and "N0 -> N2" in src and "N0 -> N5" in src
    assert "N2 -> N3" in src and "N5 -> N7" in src
    assert 'label="= Overcast"' in src
    assert "label=Outlook" in src
    assert "shape=box" in src


def test_classifier_graphviz_export(tmp_path):
    pytest.importorskip("graphviz")
    clf, _ = _fitted()
    assert clf.export_graphviz() == clf.graph()
    out_path = clf.export_graphviz(str(tmp_path / "play_tree"), format="dot")
    assert out_path.endswith('.dot')
    assert os.path.exists(out_path)
    with open(out_path) as fh:
        assert "digraph ID3Tree" in fh.read()


def test_source_rendering_runs():
    clf, X = _fitted()
    src = clf.export_source()
    namespace = {}
    exec(compile(src, "<wid3py>", "exec"), namespace)
    classify = namespace["classify"]
    classes = list(clf.classes_)
    for row, pred in zip(X, clf.predict(X)):
        assert classes[classify(list(row))] == pred


def test_source_rendering_guards():
    clf, _ = _fitted()
    namespace = {}
    exec(clf.export_source(function_name="decide"), namespace)
    decide = namespace["decide"]
    with pytest.raises(ValueError, match="not allowed"):
        decide(['Foggy', 'Hot', 'High', 'Weak'])
    with pytest.raises(ValueError, match="Null values"):
        decide([None, 'Hot', 'High', 'Weak'])
    with pytest.raises(ValueError):
        clf.export_source(function_name="not an identifier")


def test_source_rendering_layout():
    clf, _ = _fitted()
    src = clf.export_source()
    # one procedure per node, numbered in pre-order
    assert [f"def node{k}(i):" in src for k in range(8)] == [True] * 8
    assert "def node8(" not in src
    assert "    return 1  # Yes" in src
    assert "    _check_missing(i, 0)" in src
    assert "    if i[0] == 'Overcast':" in src
    assert "    elif i[3] == 'Weak':" in src


def test_source_rendering_of_empty_leaf():
    X = np.array([['Sunny'], ['Rainy']], dtype=object)
    clf = WeightedID3Classifier(feature_names=['Weather'], categories=[['Sunny', 'Rainy', 'Snowy']])
    clf.fit(X, ['Play', 'Stay'])
    namespace = {}
    exec(clf.export_source(), namespace)
    assert namespace["classify"](['Snowy']) is None
    assert namespace["classify"](['Rainy']) == 1


def test_source_rendering_of_numpy_domains():
    X = np.array([['a'], ['b'], ['a']], dtype=object)
    clf = WeightedID3Classifier(feature_names=['Letter'], categories=[np.array(['a', 'b', 'c'])],
                                classes=np.array(['P', 'N']))
    clf.fit(X, ['P', 'N', 'P'])
    src = clf.export_source()
    assert "np." not in src
    namespace = {}
    exec(src, namespace)
    assert namespace["classify"](['a']) == 0
    assert namespace["classify"](['b']) == 1
    assert namespace["classify"](['c']) is None
