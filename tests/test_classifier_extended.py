import numpy as np
import pytest
from sklearn.base import clone
from sklearn.exceptions import NotFittedError

from wid3py import (
    CapabilityError,
    MissingValueError,
    UnseenCategoryError,
    WeightContractError,
    WeightedID3Classifier,
)

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


def _play_tennis():
    """Return Quinlan's PlayTennis data as an object array and labels."""
    X = np.array([r[:4] for r in PLAY_TENNIS], dtype=object)
    y = np.array([r[4] for r in PLAY_TENNIS])
    return X, y


def _weather():
    X = np.array([['Sunny'], ['Sunny'], ['Rainy'], ['Rainy']], dtype=object)
    y = np.array(['Play', 'Play', 'Stay', 'Stay'])
    return X, y


def test_weather_scenario():
    X, y = _weather()
    clf = WeightedID3Classifier(feature_names=['Weather'], weight_estimator={'Weather': 1.0})
    clf.fit(X, y)
    assert clf.tree_.attribute.name == 'Weather'
    assert clf.classify_instance(['Sunny']) == 'Play'
    assert clf.classify_instance(['Rainy']) == 'Stay'
    assert list(clf.classes_) == ['Play', 'Stay']
    assert np.allclose(clf.distribution_for_instance(['Sunny']), [1.0, 0.0])


@pytest.mark.parametrize("weight_estimator", ["oner", "uniform"])
def test_play_tennis_tree(weight_estimator):
    X, y = _play_tennis()
    clf = WeightedID3Classifier(feature_names=FEATURES, weight_estimator=weight_estimator).fit(X, y)
    root = clf.tree_
    assert root.attribute.name == 'Outlook'
    overcast, rain, sunny = root.children
    assert overcast.is_leaf
    assert rain.attribute.name == 'Wind'
    assert sunny.attribute.name == 'Humidity'
    # every training instance reaches a pure leaf
    assert clf.score(X, y) == 1.0


def test_oner_weights_recorded():
    X, y = _play_tennis()
    clf = WeightedID3Classifier(feature_names=FEATURES).fit(X, y)
    assert clf.attribute_weights_['Outlook'] == pytest.approx(10 / 14)
    assert set(clf.attribute_weights_) == set(FEATURES)
    assert clf.n_features_in_ == 4
    assert clf.feature_names_ == FEATURES


def test_classifier_proba_sums_to_one():
    X, y = _play_tennis()
    clf = WeightedID3Classifier(feature_names=FEATURES).fit(X, y)
    proba = clf.predict_proba(X)
    assert proba.shape == (len(X), 2)
    assert np.allclose(proba.sum(axis=1), 1.0)
    assert np.array_equal(clf.classes_[proba.argmax(axis=1)], clf.predict(X))


def test_predict_rule_and_export_rules():
    X, y = _play_tennis()
    clf = WeightedID3Classifier(feature_names=FEATURES).fit(X, y)
    rules = clf.predict_rule(X[:1])
    assert rules == ['Outlook = Sunny AND Humidity = High']
    tree_rules = clf.export_rules()
    assert len(tree_rules) == 5
    assert 'Outlook = Overcast => Yes' in tree_rules
    assert all('=>' in r for r in tree_rules)


def test_declared_but_unseen_value_predicts_none():
    X, y = _weather()
    clf = WeightedID3Classifier(feature_names=['Weather'], categories=[['Sunny', 'Rainy', 'Snowy']])
    clf.fit(X, y)
    assert clf.classify_instance(['Snowy']) is None
    pred = clf.predict([['Sunny'], ['Snowy']])
    assert pred.dtype == object
    assert list(pred) == ['Play', None]
    assert np.array_equal(clf.predict_proba([['Snowy']]), [[0.0, 0.0]])


def test_unseen_category_raises_by_default():
    X, y = _weather()
    clf = WeightedID3Classifier(feature_names=['Weather']).fit(X, y)
    with pytest.raises(UnseenCategoryError):
        clf.predict([['Foggy']])


def test_unseen_category_parent_fallback():
    X, y = _play_tennis()
    clf = WeightedID3Classifier(feature_names=FEATURES, handle_unknown="parent").fit(X, y)
    # stops at the Wind node below Outlook = Rain (3 Yes, 2 No)
    assert clf.classify_instance(['Rain', 'Mild', 'High', 'Gale']) == 'Yes'
    assert np.allclose(clf.distribution_for_instance(['Rain', 'Mild', 'High', 'Gale']), [0.4, 0.6])
    # unseen values of untested attributes are never looked at
    assert clf.classify_instance(['Overcast', 'Tepid', 'Dry', 'Gale']) == 'Yes'


def test_missing_values_at_prediction():
    X, y = _play_tennis()
    clf = WeightedID3Classifier(feature_names=FEATURES).fit(X, y)
    with pytest.raises(MissingValueError):
        clf.classify_instance(['Sunny', None, 'High', 'Weak'])
    with pytest.raises(MissingValueError):
        clf.predict_proba([['Sunny', 'Hot', float('nan'), 'Weak']])
    # the tree is untouched by the failed calls
    assert clf.predict(X[:1])[0] == 'No'


def test_missing_class_values_are_dropped():
    X, y = _weather()
    y = np.array(['Play', None, 'Stay', 'Stay'], dtype=object)
    clf = WeightedID3Classifier(feature_names=['Weather']).fit(X, y)
    assert clf.classify_instance(['Sunny']) == 'Play'


def test_capability_errors_abort_fit():
    X, y = _weather()
    clf = WeightedID3Classifier().fit(X, y)
    assert hasattr(clf, 'tree_')
    with pytest.raises(CapabilityError):
        clf.fit(np.array([[1.5], [2.5], [3.5], [4.5]]), y)
    # no tree from the earlier fit survives a failed build
    assert not hasattr(clf, 'tree_')
    with pytest.raises(CapabilityError):
        WeightedID3Classifier().fit(np.array([['Sunny'], [None], ['Rainy'], ['Rainy']], dtype=object), y)


def test_weight_contract_errors_abort_fit():
    X, y = _play_tennis()
    with pytest.raises(WeightContractError):
        WeightedID3Classifier(feature_names=FEATURES, weight_estimator={'Outlook': 1.0}).fit(X, y)
    bad = {'Outlook': 1.0, 'Temperature': 1.0, 'Humidity': 0.0, 'Wind': 1.0}
    clf = WeightedID3Classifier(feature_names=FEATURES, weight_estimator=bad)
    with pytest.raises(WeightContractError):
        clf.fit(X, y)
    assert not hasattr(clf, 'tree_')


def test_classifier_not_fitted_raises():
    clf = WeightedID3Classifier()
    with pytest.raises(NotFittedError):
        clf.predict([['Sunny']])
    with pytest.raises(ValueError):
        clf.predict_rule([['Sunny']])
    with pytest.raises(ValueError):
        clf.export_source()
    assert str(clf) == "Weighted ID3: No model built yet."


def test_invalid_handle_unknown():
    X, y = _weather()
    with pytest.raises(ValueError):
        WeightedID3Classifier(handle_unknown="ignore").fit(X, y)


def test_predict_requires_2d_input():
    X, y = _weather()
    clf = WeightedID3Classifier().fit(X, y)
    with pytest.raises(ValueError):
        clf.predict(['Sunny'])


def test_clone_and_params():
    clf = WeightedID3Classifier(weight_estimator="uniform", handle_unknown="parent", n_jobs=2)
    params = clf.get_params()
    assert params['weight_estimator'] == "uniform"
    assert params['handle_unknown'] == "parent"
    other = clone(clf)
    assert other.get_params() == params


def test_threaded_fit_matches_sequential():
    X, y = _play_tennis()
    seq = WeightedID3Classifier(feature_names=FEATURES).fit(X, y)
    par = WeightedID3Classifier(feature_names=FEATURES, n_jobs=2).fit(X, y)
    assert seq.export_text() == par.export_text()


def test_refit_gives_identical_tree():
    X, y = _play_tennis()
    clf = WeightedID3Classifier(feature_names=FEATURES)
    first = clf.fit(X, y).export_text()
    second = clf.fit(X, y).export_text()
    assert first == second


def test_estimator_object_is_used():
    class Constant:
        def estimate(self, dataset):
            return {a.name: 2.0 for a in dataset.attributes}

    X, y = _weather()
    clf = WeightedID3Classifier(weight_estimator=Constant()).fit(X, y)
    assert clf.attribute_weights_ == {'f0': 2.0}
