import logging
import pandas as pd
from time import perf_counter
from wid3py import WeightedID3Classifier

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

df = pd.DataFrame(
    [
        ["Sunny", "Hot", "High", "Weak", "No"],
        ["Sunny", "Hot", "High", "Strong", "No"],
        ["Overcast", "Hot", "High", "Weak", "Yes"],
        ["Rain", "Mild", "High", "Weak", "Yes"],
        ["Rain", "Cool", "Normal", "Weak", "Yes"],
        ["Rain", "Cool", "Normal", "Strong", "No"],
        ["Overcast", "Cool", "Normal", "Strong", "Yes"],
        ["Sunny", "Mild", "High", "Weak", "No"],
        ["Sunny", "Cool", "Normal", "Weak", "Yes"],
        ["Rain", "Mild", "Normal", "Weak", "Yes"],
        ["Sunny", "Mild", "Normal", "Strong", "Yes"],
        ["Overcast", "Mild", "High", "Strong", "Yes"],
        ["Overcast", "Hot", "Normal", "Weak", "Yes"],
        ["Rain", "Mild", "High", "Strong", "No"],
    ],
    columns=["outlook", "temperature", "humidity", "wind", "play"],
)
feats = ["outlook", "temperature", "humidity", "wind"]

# the class attribute is the last column
X = df[feats]
y = df["play"].values

clf = WeightedID3Classifier(weight_estimator="oner", class_name="play", verbose=1)

t0 = perf_counter(); clf.fit(X, y); print(f"fit: {perf_counter()-t0:.3f} s")
print("weights:", clf.attribute_weights_)
clf.print_tree()
for rule in clf.export_rules():
    print(rule)
print(clf.export_source())
try:
    clf.export_graphviz("play_tennis_tree", format="dot")
except RuntimeError as e:
    print(f"Skipping Graphviz export: {e}")
